from flask import Blueprint, g, jsonify, request

from foodbridge.services.notification_service import (
	clear_notifications,
	delete_notification,
	mark_all_as_read,
	mark_as_read,
	notifications_for_user,
	unread_count,
)
from foodbridge.utils.decorators import login_required


notifications = Blueprint("notifications", __name__)


@notifications.route("/notifications")
@login_required
def notification_index():
	user_id = g.identity.user_id
	rows = notifications_for_user(user_id, unread_only=bool(request.args.get("unread")))
	return jsonify({
		"ok": True,
		"notifications": [row.to_dict() for row in rows],
		"unreadCount": unread_count(user_id),
	})


@notifications.route("/notifications/<notification_id>/read", methods=["POST"])
@login_required
def notification_read(notification_id):
	notification = mark_as_read(g.identity.user_id, notification_id)
	return jsonify({"ok": True, "notification": notification.to_dict()})


@notifications.route("/notifications/read-all", methods=["POST"])
@login_required
def notification_read_all():
	return jsonify({"ok": True, "updated": mark_all_as_read(g.identity.user_id)})


@notifications.route("/notifications/<notification_id>", methods=["DELETE"])
@login_required
def notification_delete(notification_id):
	delete_notification(g.identity.user_id, notification_id)
	return jsonify({"ok": True})


@notifications.route("/notifications", methods=["DELETE"])
@login_required
def notification_clear():
	return jsonify({"ok": True, "deleted": clear_notifications(g.identity.user_id)})
