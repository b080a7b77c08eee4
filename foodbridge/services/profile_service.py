import re

from flask import current_app

from foodbridge import db
from foodbridge.errors import ValidationError
from foodbridge.models.user import USER_CLASSES, User
from foodbridge.services.maps_service import geocode_place
from foodbridge.services.realtime_service import publish_platform_update
from foodbridge.services.store import transaction


SELF_SERVICE_ROLES = {"hotel", "ngo", "volunteer"}

# request key -> column for the fields every role shares
COMMON_FIELDS = {"name": "name", "phone": "phone", "address": "address"}

# request key -> column for each role's own fields
ROLE_FIELDS = {
    "hotel": {"fssaiNumber": "fssai_number", "contactPerson": "contact_person", "businessType": "business_type"},
    "ngo": {
        "registrationNumber": "registration_number",
        "contactPerson": "contact_person",
        "beneficiaryCount": "beneficiary_count",
    },
    "volunteer": {
        "availability": "availability",
        "trainingCompleted": "training_completed",
        "activeArea": "active_area",
    },
    "admin": {"permissions": "permissions"},
}


def _is_valid_email(email: str) -> bool:
    return bool(re.fullmatch(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}", (email or "").strip()))


def _is_valid_password(password: str) -> bool:
    value = password or ""
    if len(value) < 8:
        return False
    has_letter = any(ch.isalpha() for ch in value)
    has_digit = any(ch.isdigit() for ch in value)
    return has_letter and has_digit


def _is_valid_phone(phone: str) -> bool:
    return bool(re.fullmatch(r"\+?[0-9]{10,13}", (phone or "").strip()))


def register_user(email, password, name, role, phone=None, allowed_roles=SELF_SERVICE_ROLES) -> User:
    email = (email or "").strip().lower()
    name = (name or "").strip()

    if role not in allowed_roles:
        raise ValidationError("Invalid role selected.")
    if not name or not email or not password:
        raise ValidationError("Please fill all required fields.")
    if not _is_valid_email(email):
        raise ValidationError("Enter a valid email address.")
    if not _is_valid_password(password):
        raise ValidationError("Password must be at least 8 characters and contain letters and numbers.")
    if phone and not _is_valid_phone(phone):
        raise ValidationError("Enter a valid phone number.")
    if User.query.filter_by(email=email).first():
        raise ValidationError("Email already registered.")

    with transaction("register user"):
        user = USER_CLASSES[role](email=email, name=name, phone=(phone or "").strip() or None)
        user.set_password(password)
        db.session.add(user)

    current_app.logger.info("Registered %s user %s", role, user.id)
    publish_platform_update(scope="user", action="created", actor_role=role)
    return user


def authenticate(email, password):
    user = User.query.filter_by(email=(email or "").strip().lower()).first()
    if user and user.check_password(password):
        return user
    return None


def _coerce(column, value):
    if column == "beneficiary_count":
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            raise ValidationError("Beneficiary count must be a whole number.") from None
    if column == "training_completed":
        return str(value).strip().lower() in {"1", "true", "yes", "on"} if isinstance(value, str) else bool(value)
    if column == "availability" and not isinstance(value, dict):
        raise ValidationError("Availability must map each day to its slots.")
    if column == "permissions" and not isinstance(value, list):
        raise ValidationError("Permissions must be a list.")
    if isinstance(value, str):
        return value.strip()
    return value


def complete_profile(user: User, data) -> User:
    """Apply profile-setup fields, geocoding the address when needed."""
    if "role" in data and data["role"] != user.role:
        raise ValidationError("Role cannot be changed after registration.")

    values = {column: _coerce(column, data[key]) for key, column in COMMON_FIELDS.items() if key in data}
    values.update(
        {column: _coerce(column, data[key]) for key, column in ROLE_FIELDS[user.role].items() if key in data}
    )

    if values.get("phone") and not _is_valid_phone(values["phone"]):
        raise ValidationError("Enter a valid phone number.")
    if "business_type" in values and values["business_type"] not in user.business_types:
        raise ValidationError("Business type must be hotel, restaurant, shop or other.")

    location = data.get("location") or {}
    lat, lng = location.get("lat", data.get("lat")), location.get("lng", data.get("lng"))
    if lat is not None and lng is not None:
        try:
            values["latitude"], values["longitude"] = float(lat), float(lng)
        except (TypeError, ValueError):
            raise ValidationError("Location must be numeric coordinates.") from None
    elif values.get("address"):
        geo = geocode_place(values["address"])
        if not geo:
            raise ValidationError("Unable to locate this address. Please use a valid place name.")
        values["latitude"], values["longitude"] = geo["lat"], geo["lon"]

    with transaction("complete profile"):
        for column, value in values.items():
            setattr(user, column, value)
        user.profile_complete = bool(user.name and user.address and user.latitude is not None)

    publish_platform_update(scope="user", action="profile_updated", actor_role=user.role)
    return user
