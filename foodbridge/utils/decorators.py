from collections import namedtuple
from functools import wraps

from flask import g, session

from foodbridge.errors import AuthenticationRequired, PermissionDenied


Identity = namedtuple("Identity", ["user_id", "role", "display_name"])


def current_identity():
	"""The acting principal from the signed session cookie, or None."""
	user_id = session.get("user_id")
	role = session.get("role")
	if not user_id or not role:
		return None
	return Identity(user_id=str(user_id), role=role, display_name=session.get("display_name") or "")


def login_required(view_func):
	@wraps(view_func)
	def wrapper(*args, **kwargs):
		identity = current_identity()
		if identity is None:
			raise AuthenticationRequired()
		g.identity = identity
		return view_func(*args, **kwargs)

	return wrapper


def role_required(*allowed_roles):
	def decorator(view_func):
		@wraps(view_func)
		def wrapper(*args, **kwargs):
			identity = current_identity()
			if identity is None:
				raise AuthenticationRequired()

			if identity.role not in allowed_roles:
				raise PermissionDenied("You are not authorized to access this page.")

			g.identity = identity
			return view_func(*args, **kwargs)

		return wrapper

	return decorator
