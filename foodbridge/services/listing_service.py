from flask import current_app
from sqlalchemy import delete

from foodbridge import db
from foodbridge.errors import Conflict, InvalidTransition, ListingNotFound, PermissionDenied, ValidationError
from foodbridge.models.collection import FoodCollection
from foodbridge.models.listing import DIETARY_FIELDS, FoodListing
from foodbridge.models.user import User
from foodbridge.services.lifecycle import (
    AVAILABLE,
    LISTING_IN_HANDOVER,
    LISTING_STATUSES,
    next_listing_status,
)
from foodbridge.services.realtime_service import publish_platform_update
from foodbridge.services.store import compare_and_set, get_or_raise, transaction
from foodbridge.utils.clock import HOUR_MS, now_ms


DEFAULT_EXPIRY_HOURS = 4

# request key -> column, for fields a donor may set or edit
TEXT_FIELDS = {"foodName": "food_name", "description": "description", "quantityUnit": "quantity_unit"}
TIME_FIELDS = {"preparationTime": "preparation_time", "expiryTime": "expiry_time"}


def _as_float(value, label):
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a valid number.") from None


def _as_int(value, label):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a whole number.") from None


def _as_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _listing_values(data, reference_ms):
    """Translate a camelCase request payload into column values."""
    values = {}

    for key, column in TEXT_FIELDS.items():
        if key in data:
            values[column] = (data.get(key) or "").strip()

    if "quantity" in data:
        values["quantity"] = _as_float(data.get("quantity"), "Quantity")

    for key, column in TIME_FIELDS.items():
        if data.get(key) is not None:
            values[column] = _as_int(data.get(key), key)

    if data.get("expiryHours") is not None and "expiry_time" not in values:
        hours = _as_float(data.get("expiryHours"), "Expiry hours")
        values["expiry_time"] = reference_ms + int(hours * HOUR_MS)

    dietary = data.get("dietaryInfo") or {}
    for key, column in DIETARY_FIELDS.items():
        if key in dietary:
            values[column] = _as_bool(dietary[key])
        elif key in data:
            values[column] = _as_bool(data[key])

    location = data.get("location") or {}
    if "address" in location or "address" in data:
        values["address"] = (location.get("address", data.get("address")) or "").strip()
    lat = location.get("lat", data.get("lat"))
    lng = location.get("lng", data.get("lng"))
    if lat is not None and lng is not None:
        values["latitude"] = _as_float(lat, "Latitude")
        values["longitude"] = _as_float(lng, "Longitude")

    return values


def validate_listing(values, reference_ms):
    if not values.get("food_name"):
        raise ValidationError("Food name is required.")
    if values.get("quantity") is None or values["quantity"] <= 0:
        raise ValidationError("Quantity must be greater than zero.")
    if values["expiry_time"] <= reference_ms:
        raise ValidationError("Expiry time must be in the future.")
    if values["expiry_time"] <= values["preparation_time"]:
        raise ValidationError("Expiry time must be after the preparation time.")


def _require_donor(identity):
    if identity is None or identity.role != "hotel":
        raise PermissionDenied("Only hotels and restaurants can manage food listings.")


def _owned_listing(identity, listing_id):
    _require_donor(identity)
    listing = get_or_raise(FoodListing, listing_id, error=ListingNotFound, fresh=True)
    if listing.hotel_id != identity.user_id:
        raise PermissionDenied("You are not authorized to update this food listing.")
    return listing


def get_listing(listing_id):
    return get_or_raise(FoodListing, listing_id, error=ListingNotFound)


def list_listings(status=None, hotel_id=None):
    query = FoodListing.query
    if status:
        if status not in LISTING_STATUSES:
            raise ValidationError(f"Unknown listing status '{status}'.")
        query = query.filter_by(status=status)
    if hotel_id:
        query = query.filter_by(hotel_id=hotel_id)
    return query.order_by(FoodListing.created_at.desc(), FoodListing.id).all()


def create_listing(identity, data) -> FoodListing:
    _require_donor(identity)
    donor = get_or_raise(User, identity.user_id, error=PermissionDenied)

    created_at = now_ms()
    values = {
        "preparation_time": created_at,
        "expiry_time": created_at + DEFAULT_EXPIRY_HOURS * HOUR_MS,
        "quantity_unit": "servings",
        "address": donor.address or "",
        "latitude": donor.latitude,
        "longitude": donor.longitude,
    }
    values.update(_listing_values(data, created_at))
    validate_listing(values, created_at)

    with transaction("create listing"):
        if data.get("id"):
            values["id"] = str(data["id"])
        listing = FoodListing(
            hotel_id=donor.id,
            hotel_name=donor.name or "Anonymous Hotel",
            fssai_number=getattr(donor, "fssai_number", None) or "FSSAI-PENDING",
            created_at=created_at,
            status=AVAILABLE,
            **values,
        )
        db.session.add(listing)

    current_app.logger.info("Listing %s created by hotel %s", listing.id, donor.id)
    publish_platform_update(scope="listing", action="created", actor_role="hotel", record_id=listing.id)
    return listing


def update_listing(identity, listing_id, data, expected_version=None) -> FoodListing:
    listing = _owned_listing(identity, listing_id)
    if listing.status != AVAILABLE:
        raise InvalidTransition(f"Only available listings can be edited; this one is {listing.status}.")
    if expected_version is not None and _as_int(expected_version, "Version") != listing.version:
        raise Conflict()

    read_version = listing.version
    reference_ms = now_ms()
    values = _listing_values(data, reference_ms)
    merged = {
        "food_name": listing.food_name,
        "quantity": listing.quantity,
        "preparation_time": listing.preparation_time,
        "expiry_time": listing.expiry_time,
    }
    merged.update(values)
    validate_listing(merged, reference_ms)

    with transaction("update listing"):
        if not compare_and_set(listing, (AVAILABLE,), expected_version=read_version, **values):
            raise Conflict()

    publish_platform_update(scope="listing", action="updated", actor_role="hotel", record_id=listing_id)
    return listing


def delete_listing(identity, listing_id) -> None:
    """Hard-delete a listing that never had a collection.

    Listings that were ever claimed keep their collection history and stay
    in their final status.
    """
    listing = _owned_listing(identity, listing_id)
    if listing.status in LISTING_IN_HANDOVER:
        raise InvalidTransition("A claimed listing cannot be deleted. Cancel the collection first.")

    read_version = listing.version
    with transaction("delete listing"):
        if FoodCollection.query.filter_by(food_listing_id=listing_id).first() is not None:
            raise InvalidTransition("This listing has collection records and cannot be deleted.")

        statement = delete(FoodListing).where(FoodListing.id == listing_id, FoodListing.version == read_version)
        result = db.session.execute(statement.execution_options(synchronize_session=False))
        if result.rowcount != 1:
            raise Conflict()
        db.session.expunge(listing)

    current_app.logger.info("Listing %s deleted by hotel %s", listing_id, identity.user_id)
    publish_platform_update(scope="listing", action="deleted", actor_role="hotel", record_id=listing_id)


def cancel_listing(identity, listing_id) -> FoodListing:
    listing = _owned_listing(identity, listing_id)
    if listing.status != AVAILABLE:
        raise InvalidTransition("Only available listings can be withdrawn here. Cancel the collection instead.")

    read_version = listing.version
    target = next_listing_status(listing.status, "cancel")
    with transaction("cancel listing"):
        if not compare_and_set(listing, (AVAILABLE,), expected_version=read_version, status=target):
            raise Conflict()

    publish_platform_update(scope="listing", action="cancelled", actor_role="hotel", record_id=listing_id)
    return listing
