from foodbridge.errors import ValidationError
from foodbridge.services.maps_service import geocode_place
from foodbridge.utils.haversine import distance_km


SORT_KEYS = ("expiry", "quantity", "distance")


def resolve_center(lat=None, lng=None, location_query=None):
	"""A (lat, lng) center from explicit coordinates or a place name."""
	if lat not in (None, "") and lng not in (None, ""):
		try:
			return (float(lat), float(lng)), None
		except (TypeError, ValueError):
			raise ValidationError("Latitude and longitude must be numbers.") from None

	if location_query:
		geo = geocode_place(location_query)
		if not geo:
			return None, None
		return (geo["lat"], geo["lon"]), geo

	return None, None


def query_listings(rows, center=None, radius_km=None, sort_by=None):
	"""Filter listings by distance and order them.

	Returns ``(listing, distance_km)`` pairs; the distance is None when no
	center is given or the listing has no coordinates. With a radius, only
	listings within it are kept. Sorting is stable, so ties keep input order.
	"""
	if sort_by and sort_by not in SORT_KEYS:
		raise ValidationError(f"Sort must be one of: {', '.join(SORT_KEYS)}.")
	if radius_km is not None and center is None:
		raise ValidationError("A location is required to search within a radius.")
	if sort_by == "distance" and center is None:
		raise ValidationError("A location is required to sort by distance.")

	matched = []
	for row in rows:
		distance = None
		if center is not None and row.has_location:
			distance = distance_km(center, (row.latitude, row.longitude))

		if radius_km is not None and (distance is None or distance > radius_km):
			continue
		matched.append((row, distance))

	if sort_by == "expiry":
		matched.sort(key=lambda item: item[0].expiry_time)
	elif sort_by == "quantity":
		matched.sort(key=lambda item: item[0].quantity, reverse=True)
	elif sort_by == "distance":
		matched.sort(key=lambda item: (item[1] is None, item[1] or 0.0))

	return matched
