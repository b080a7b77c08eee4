"""Great-circle distances on a spherical Earth."""
from math import atan2, cos, radians, sin, sqrt


EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
	phi1, phi2 = radians(lat1), radians(lat2)
	half_chord = (
		sin((phi2 - phi1) / 2) ** 2
		+ cos(phi1) * cos(phi2) * sin(radians(lon2 - lon1) / 2) ** 2
	)
	# rounding can push the chord a hair past 1 for antipodal points
	half_chord = min(1.0, half_chord)
	return 2 * EARTH_RADIUS_KM * atan2(sqrt(half_chord), sqrt(1 - half_chord))


def distance_km(origin, destination) -> float:
	"""Distance between two ``(lat, lng)`` points."""
	return haversine_km(origin[0], origin[1], destination[0], destination[1])
