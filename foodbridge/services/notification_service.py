from flask import current_app

from foodbridge import db
from foodbridge.errors import NotFound, PermissionDenied, ValidationError
from foodbridge.models.notification import NOTIFICATION_TYPES, Notification
from foodbridge.services.realtime_service import publish_platform_update
from foodbridge.services.store import transaction


def notify(user_id: str, title: str, message: str, kind: str = "info") -> Notification:
	"""Stage a notification in the current session; the caller commits."""
	if kind not in NOTIFICATION_TYPES:
		raise ValidationError(f"Unknown notification type '{kind}'.")

	notification = Notification(user_id=user_id, title=title, message=message, type=kind)
	db.session.add(notification)
	return notification


def notifications_for_user(user_id: str, unread_only: bool = False):
	query = Notification.query.filter_by(user_id=user_id)
	if unread_only:
		query = query.filter_by(read=False)
	return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def unread_count(user_id: str) -> int:
	return Notification.query.filter_by(user_id=user_id, read=False).count()


def _owned_notification(user_id, notification_id):
	notification = db.session.get(Notification, notification_id)
	if notification is None:
		raise NotFound("Notification not found.")
	if notification.user_id != user_id:
		raise PermissionDenied("This notification belongs to another user.")
	return notification


def mark_as_read(user_id: str, notification_id: str) -> Notification:
	with transaction("mark notification read"):
		notification = _owned_notification(user_id, notification_id)
		notification.read = True
	return notification


def mark_all_as_read(user_id: str) -> int:
	with transaction("mark all notifications read"):
		updated = (
			Notification.query.filter_by(user_id=user_id, read=False)
			.update({"read": True}, synchronize_session=False)
		)
	return updated


def delete_notification(user_id: str, notification_id: str) -> None:
	with transaction("delete notification"):
		db.session.delete(_owned_notification(user_id, notification_id))
	publish_platform_update(scope="notification", action="deleted", actor_role="user")


def clear_notifications(user_id: str) -> int:
	with transaction("clear notifications"):
		deleted = Notification.query.filter_by(user_id=user_id).delete(synchronize_session=False)
	current_app.logger.info("Cleared %s notifications for user %s", deleted, user_id)
	return deleted
