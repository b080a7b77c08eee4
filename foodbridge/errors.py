class FoodBridgeError(Exception):
	"""Base for every failure a service reports to its caller.

	Each subclass carries a stable ``kind`` string and the HTTP status the
	web layer answers with, so routes never have to translate errors.
	"""

	kind = "error"
	status_code = 400
	default_message = "Something went wrong."

	def __init__(self, message=None):
		self.message = message or self.default_message
		super().__init__(self.message)

	def to_dict(self):
		return {"ok": False, "error": self.kind, "message": self.message}


class AuthenticationRequired(FoodBridgeError):
	kind = "authentication_required"
	status_code = 401
	default_message = "Please login to continue."


class PermissionDenied(FoodBridgeError):
	kind = "permission_denied"
	status_code = 403
	default_message = "You are not authorized to perform this action."


class NotFound(FoodBridgeError):
	kind = "not_found"
	status_code = 404
	default_message = "Record not found."


class ListingNotFound(NotFound):
	default_message = "Food listing not found."


class CollectionNotFound(NotFound):
	default_message = "Collection not found."


class AlreadyClaimed(FoodBridgeError):
	kind = "already_claimed"
	status_code = 409
	default_message = "This food listing is no longer available."

	def __init__(self, message=None, current_status=None):
		super().__init__(message)
		self.current_status = current_status

	def to_dict(self):
		payload = super().to_dict()
		if self.current_status:
			payload["status"] = self.current_status
		return payload


class Conflict(FoodBridgeError):
	kind = "conflict"
	status_code = 409
	default_message = "The record was changed by someone else. Reload and try again."


class InvalidTransition(FoodBridgeError):
	kind = "invalid_transition"
	status_code = 409
	default_message = "This action is not allowed in the current status."


class Expired(FoodBridgeError):
	kind = "expired"
	status_code = 410
	default_message = "This food listing has expired. Browse other listings nearby."


class ValidationError(FoodBridgeError):
	kind = "validation_error"
	status_code = 400
	default_message = "Invalid input."


class PersistenceFailure(FoodBridgeError):
	kind = "persistence_failure"
	status_code = 503
	default_message = "Could not save your changes. Reload and try again."
