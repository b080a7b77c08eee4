from flask import Blueprint, jsonify, request
from sqlalchemy import func

from foodbridge import db
from foodbridge.errors import ValidationError
from foodbridge.models.collection import FoodCollection
from foodbridge.models.listing import FoodListing
from foodbridge.models.notification import Notification
from foodbridge.models.user import USER_CLASSES, User
from foodbridge.services.lifecycle import COLLECTION_STATUSES, LISTING_STATUSES
from foodbridge.utils.decorators import role_required


admin = Blueprint("admin", __name__)


def _counts_by(column, vocabulary):
	rows = db.session.query(column, func.count()).group_by(column).all()
	counts = {key: 0 for key in vocabulary}
	counts.update({key: count for key, count in rows})
	return counts


@admin.route("/admin/users")
@role_required("admin")
def admin_users():
	role = (request.args.get("role") or "").strip()
	query = User.query
	if role:
		if role not in USER_CLASSES:
			raise ValidationError(f"Unknown role '{role}'.")
		query = query.filter_by(role=role)

	users = query.order_by(User.created_at.desc(), User.id).all()
	return jsonify({"ok": True, "users": [user.to_dict() for user in users]})


@admin.route("/admin/overview")
@role_required("admin")
def admin_overview():
	total_quantity = db.session.query(func.coalesce(func.sum(FoodListing.quantity), 0.0)).filter(
		FoodListing.status == "delivered"
	).scalar()

	return jsonify({
		"ok": True,
		"users": _counts_by(User.role, USER_CLASSES),
		"listings": _counts_by(FoodListing.status, LISTING_STATUSES),
		"collections": _counts_by(FoodCollection.status, COLLECTION_STATUSES),
		"unreadNotifications": Notification.query.filter_by(read=False).count(),
		"deliveredQuantity": round(float(total_quantity or 0), 1),
	})
