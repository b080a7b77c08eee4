from flask import Blueprint, current_app, g, jsonify, request

from foodbridge.errors import ValidationError
from foodbridge.services.claim_service import claim_listing
from foodbridge.services.lifecycle import AVAILABLE
from foodbridge.services.listing_service import (
	cancel_listing,
	create_listing,
	delete_listing,
	get_listing,
	list_listings,
	update_listing,
)
from foodbridge.services.matching_service import query_listings, resolve_center
from foodbridge.utils.decorators import current_identity, login_required, role_required
from foodbridge.utils.payload import request_data


listings = Blueprint("listings", __name__)


def _listing_payload(listing, distance_km=None):
	payload = listing.to_dict()
	if distance_km is not None:
		payload["distanceKm"] = round(distance_km, 1)
	return payload


def _radius_from_args():
	radius_raw = (request.args.get("radius_km") or "").strip()
	if not radius_raw:
		return None
	try:
		radius_km = float(radius_raw)
	except ValueError:
		raise ValidationError("radius_km must be a number.") from None
	if not radius_km > 0:
		raise ValidationError("radius_km must be greater than zero.")
	return radius_km


@listings.route("/listings")
@login_required
def listing_index():
	identity = g.identity
	if request.args.get("mine") and identity.role == "hotel":
		rows = list_listings(status=request.args.get("status") or None, hotel_id=identity.user_id)
	else:
		rows = list_listings(status=request.args.get("status") or AVAILABLE)

	location_query = (request.args.get("location") or "").strip()
	center, resolved_location = resolve_center(
		lat=request.args.get("lat"),
		lng=request.args.get("lng"),
		location_query=location_query,
	)
	if location_query and center is None:
		raise ValidationError("Could not find that location. Try a nearby place name.")

	radius_km = _radius_from_args()
	if radius_km is None and center is not None:
		radius_km = current_app.config.get("DEFAULT_RADIUS_KM", 8.0)

	matched = query_listings(rows, center=center, radius_km=radius_km, sort_by=request.args.get("sort") or None)
	return jsonify({
		"ok": True,
		"listings": [_listing_payload(listing, distance) for listing, distance in matched],
		"center": {"lat": center[0], "lng": center[1]} if center else None,
		"resolvedLocation": resolved_location,
		"radiusKm": radius_km,
	})


@listings.route("/listings", methods=["POST"])
@role_required("hotel")
def listing_create():
	listing = create_listing(g.identity, request_data())
	return jsonify({"ok": True, "listing": listing.to_dict()}), 201


@listings.route("/listings/<listing_id>")
@login_required
def listing_detail(listing_id):
	return jsonify({"ok": True, "listing": get_listing(listing_id).to_dict()})


@listings.route("/listings/<listing_id>", methods=["PATCH"])
@role_required("hotel")
def listing_update(listing_id):
	data = request_data()
	listing = update_listing(g.identity, listing_id, data, expected_version=data.get("version"))
	return jsonify({"ok": True, "listing": listing.to_dict()})


@listings.route("/listings/<listing_id>", methods=["DELETE"])
@role_required("hotel")
def listing_delete(listing_id):
	delete_listing(g.identity, listing_id)
	return jsonify({"ok": True})


@listings.route("/listings/<listing_id>/cancel", methods=["POST"])
@role_required("hotel")
def listing_cancel(listing_id):
	listing = cancel_listing(g.identity, listing_id)
	return jsonify({"ok": True, "listing": listing.to_dict()})


@listings.route("/listings/<listing_id>/claim", methods=["POST"])
def listing_claim(listing_id):
	# The claim workflow reports missing sessions and wrong roles itself.
	data = request_data()
	result = claim_listing(
		current_identity(),
		listing_id,
		notes=data.get("notes"),
		pickup_time=data.get("pickupTime") or None,
	)
	return jsonify({
		"ok": True,
		"message": "Food claimed successfully. Share your pickup code at collection.",
		"listing": result.listing.to_dict(),
		"collection": result.collection.to_dict(include_code=True),
	}), 201
