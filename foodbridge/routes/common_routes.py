from flask import Blueprint, current_app, jsonify, request
from flask_wtf.csrf import generate_csrf

from foodbridge.errors import ValidationError
from foodbridge.services.maps_service import estimate_eta_minutes, geocode_place, route_distance_km, suggest_places


common = Blueprint("common", __name__)


def _point(prefix):
    try:
        return float(request.args[f"{prefix}_lat"]), float(request.args[f"{prefix}_lng"])
    except (KeyError, ValueError):
        raise ValidationError(f"{prefix}_lat and {prefix}_lng are required numbers.") from None


@common.route("/")
def landing():
    return jsonify({
        "ok": True,
        "service": "foodbridge",
        "mapDefaultCenter": {
            "lat": current_app.config.get("MAP_DEFAULT_LAT"),
            "lng": current_app.config.get("MAP_DEFAULT_LNG"),
        },
    })


@common.route("/csrf-token")
def csrf_token():
    return jsonify({"ok": True, "csrfToken": generate_csrf()})


@common.route("/location/suggest")
def location_suggest():
    query = (request.args.get("q") or "").strip()
    return jsonify({"suggestions": suggest_places(query, limit=6)})


@common.route("/location/geocode")
def location_geocode():
    query = (request.args.get("q") or "").strip()
    geo = geocode_place(query)
    if not geo:
        return jsonify({"ok": False, "message": "Location not found"}), 404

    return jsonify({"ok": True, "location": geo})


@common.route("/location/eta")
def location_eta():
    origin = _point("from")
    destination = _point("to")
    return jsonify({
        "ok": True,
        "distanceKm": round(route_distance_km(origin, destination), 1),
        "etaMinutes": estimate_eta_minutes(origin, destination),
    })
