from foodbridge import db
from foodbridge.models.user import new_id
from foodbridge.utils.clock import now_ms


NOTIFICATION_TYPES = ("info", "success", "warning", "error")


class Notification(db.Model):
	__tablename__ = "notifications"

	id = db.Column(db.String(36), primary_key=True, default=new_id)
	user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
	title = db.Column(db.String(150), nullable=False)
	message = db.Column(db.Text, nullable=False)
	type = db.Column(db.String(10), nullable=False, default="info")
	read = db.Column(db.Boolean, nullable=False, default=False)
	created_at = db.Column(db.BigInteger, nullable=False, default=now_ms)

	def to_dict(self):
		return {
			"id": self.id,
			"userId": self.user_id,
			"title": self.title,
			"message": self.message,
			"type": self.type,
			"read": self.read,
			"createdAt": self.created_at,
		}
