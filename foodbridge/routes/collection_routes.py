from flask import Blueprint, g, jsonify

from foodbridge.services.pickup_service import (
	cancel_collection,
	collections_for_user,
	confirm_delivery,
	confirm_pickup,
)
from foodbridge.utils.decorators import login_required, role_required
from foodbridge.utils.payload import request_data


collections = Blueprint("collections", __name__)


@collections.route("/collections")
@login_required
def collection_index():
	user_id = g.identity.user_id
	rows = collections_for_user(user_id)
	return jsonify({
		"ok": True,
		# Only the claimant sees the code they hand over at pickup.
		"collections": [row.to_dict(include_code=row.claimant_id == user_id) for row in rows],
	})


@collections.route("/collections/<collection_id>/pickup", methods=["POST"])
@role_required("hotel")
def collection_pickup(collection_id):
	data = request_data()
	collection = confirm_pickup(g.identity, collection_id, data.get("pickupCode") or data.get("pickup_code"))
	return jsonify({
		"ok": True,
		"message": "Pickup code verified. The food is on its way.",
		"collection": collection.to_dict(),
	})


@collections.route("/collections/<collection_id>/deliver", methods=["POST"])
@role_required("ngo", "volunteer")
def collection_deliver(collection_id):
	collection = confirm_delivery(g.identity, collection_id)
	return jsonify({"ok": True, "message": "Delivery confirmed.", "collection": collection.to_dict()})


@collections.route("/collections/<collection_id>/cancel", methods=["POST"])
@login_required
def collection_cancel(collection_id):
	collection = cancel_collection(g.identity, collection_id, reason=request_data().get("reason"))
	return jsonify({"ok": True, "collection": collection.to_dict()})
