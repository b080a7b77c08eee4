from functools import lru_cache

import requests
from flask import current_app

from foodbridge.utils.haversine import distance_km


NOMINATIM_BASE = "https://nominatim.openstreetmap.org"
OSRM_BASE = "https://router.project-osrm.org"
USER_AGENT = "foodbridge/1.0"
REQUEST_TIMEOUT = 12
URBAN_SPEED_KMH = 25


def _get_json(url, params):
	try:
		response = requests.get(url, params=params, headers={"User-Agent": USER_AGENT}, timeout=REQUEST_TIMEOUT)
		response.raise_for_status()
		return response.json()
	except (requests.RequestException, ValueError) as exc:
		current_app.logger.warning("Mapping service call to %s failed: %s", url, exc)
		return None


def _search(query, limit):
	return _get_json(
		f"{NOMINATIM_BASE}/search",
		{
			"q": query,
			"format": "json",
			"addressdetails": 1,
			"limit": limit,
			"countrycodes": "in",
		},
	) or []


@lru_cache(maxsize=256)
def geocode_place(location_query: str):
	query = (location_query or "").strip()
	if not query:
		return None

	items = _search(query, 1)
	if not items:
		return None

	item = items[0]
	return {
		"display_name": item.get("display_name") or query,
		"lat": float(item.get("lat")),
		"lon": float(item.get("lon")),
	}


def reverse_geocode(lat: float, lon: float) -> str:
	payload = _get_json(f"{NOMINATIM_BASE}/reverse", {"lat": lat, "lon": lon, "format": "json"})
	if not payload or not payload.get("display_name"):
		return "Address not found"
	return payload["display_name"]


def suggest_places(partial_query: str, limit: int = 6):
	query = (partial_query or "").strip()
	if not query:
		return []

	seen = set()
	unique = []
	for row in _search(query, max(1, min(limit, 10))):
		label = row.get("display_name")
		if not label or label.lower() in seen:
			continue
		seen.add(label.lower())
		unique.append(label)

	return unique[:limit]


def _route(origin, destination):
	"""OSRM driving route between two (lat, lng) points, or None."""
	coordinates = f"{origin[1]},{origin[0]};{destination[1]},{destination[0]}"
	payload = _get_json(f"{OSRM_BASE}/route/v1/driving/{coordinates}", {"overview": "false"})
	if not payload or payload.get("code") != "Ok" or not payload.get("routes"):
		return None
	return payload["routes"][0]


def route_distance_km(origin, destination) -> float:
	route = _route(origin, destination)
	if route and route.get("distance") is not None:
		return route["distance"] / 1000

	current_app.logger.warning("Falling back to haversine distance for %s -> %s", origin, destination)
	return distance_km(origin, destination)


def estimate_eta_minutes(origin, destination) -> int:
	route = _route(origin, destination)
	if route and route.get("duration") is not None:
		return round(route["duration"] / 60)

	distance = distance_km(origin, destination)
	return round(distance / URBAN_SPEED_KMH * 60)
