"""Claiming a food listing.

A claim moves one listing from ``available`` to ``assigned`` and records who
took it. The listing update, the collection record and both notifications
are written in a single transaction. The listing update only matches the
row when its status and version are still the ones read at the start, so of
two recipients racing for the same listing exactly one wins and the other
gets ``AlreadyClaimed``.
"""
from collections import namedtuple

from flask import current_app

from foodbridge import db
from foodbridge.errors import (
	AlreadyClaimed,
	AuthenticationRequired,
	Expired,
	FoodBridgeError,
	ListingNotFound,
	PermissionDenied,
	ValidationError,
)
from foodbridge.models.collection import FoodCollection
from foodbridge.models.listing import FoodListing
from foodbridge.models.user import new_id
from foodbridge.services.lifecycle import (
	OPEN_COLLECTION_STATUSES,
	SCHEDULED,
	can_transition_listing,
	listing_sources,
	next_listing_status,
)
from foodbridge.services.notification_service import notify
from foodbridge.services.realtime_service import publish_platform_update
from foodbridge.services.store import compare_and_set, get_or_raise, transaction
from foodbridge.utils.clock import MINUTE_MS, now_ms
from foodbridge.utils.codes import generate_pickup_code


ClaimResult = namedtuple("ClaimResult", ["listing", "collection"])

DEFAULT_CLAIMANT_ROLES = ("ngo", "volunteer")
ANONYMOUS_NAMES = {"ngo": "Anonymous NGO", "volunteer": "Anonymous Volunteer"}


def claimant_roles():
	return tuple(current_app.config.get("CLAIMANT_ROLES") or DEFAULT_CLAIMANT_ROLES)


def check_claimant(identity):
	if identity is None:
		raise AuthenticationRequired("Please login to claim food.")
	if identity.role not in claimant_roles():
		raise PermissionDenied("Only recipient organisations and volunteers can claim food.")


def check_claimable(status, expiry_time, at_ms):
	if not can_transition_listing(status, "claim"):
		raise AlreadyClaimed(f"This food listing is already {status}.", current_status=status)
	if expiry_time <= at_ms:
		raise Expired()


def _pickup_code_taken(code):
	return (
		FoodCollection.query.filter(
			FoodCollection.pickup_code == code,
			FoodCollection.status.in_(OPEN_COLLECTION_STATUSES),
		).first()
		is not None
	)


def _resolve_pickup_time(pickup_time, claimed_at):
	if pickup_time is None:
		lead_minutes = current_app.config.get("PICKUP_LEAD_MINUTES", 60)
		return claimed_at + int(lead_minutes * MINUTE_MS)

	try:
		pickup_time = int(pickup_time)
	except (TypeError, ValueError):
		raise ValidationError("Pickup time must be epoch milliseconds.") from None

	if pickup_time <= claimed_at:
		raise ValidationError("Pickup time must be in the future.")
	return pickup_time


def claim_listing(identity, listing_id, notes=None, pickup_time=None) -> ClaimResult:
	check_claimant(identity)

	listing = get_or_raise(FoodListing, listing_id, error=ListingNotFound, fresh=True)
	read_status = listing.status
	read_version = listing.version
	expiry_time = listing.expiry_time
	hotel_id = listing.hotel_id
	hotel_name = listing.hotel_name
	food_name = listing.food_name

	claimed_at = now_ms()
	try:
		check_claimable(read_status, expiry_time, claimed_at)
	except FoodBridgeError as exc:
		current_app.logger.warning(
			"Claim on listing %s by %s refused: %s", listing_id, identity.user_id, exc.kind
		)
		raise

	pickup_at = _resolve_pickup_time(pickup_time, claimed_at)
	claimant_name = identity.display_name or ANONYMOUS_NAMES.get(identity.role, "Anonymous")
	notes = (notes or "").strip() or None

	with transaction("claim listing", on_integrity_error=AlreadyClaimed):
		won = compare_and_set(
			listing,
			listing_sources("claim"),
			expected_version=read_version,
			status=next_listing_status(read_status, "claim"),
			assigned_id=identity.user_id,
			assigned_name=claimant_name,
			assigned_role=identity.role,
		)
		if not won:
			current_app.logger.warning(
				"Claim on listing %s by %s lost the race to another claimant", listing_id, identity.user_id
			)
			raise AlreadyClaimed()

		collection_id = new_id()
		collection = FoodCollection(
			id=collection_id,
			food_listing_id=listing_id,
			hotel_id=hotel_id,
			ngo_id=identity.user_id if identity.role == "ngo" else None,
			volunteer_id=identity.user_id if identity.role == "volunteer" else None,
			pickup_time=pickup_at,
			status=SCHEDULED,
			notes=notes,
			pickup_code=generate_pickup_code(_pickup_code_taken),
		)
		db.session.add(collection)

		notify(
			hotel_id,
			"Food Listing Claimed",
			f'Your food listing "{food_name}" has been claimed by {claimant_name}.',
			"success",
		)
		notify(
			identity.user_id,
			"Food Claimed Successfully",
			f'You have successfully claimed "{food_name}" from {hotel_name}.',
			"success",
		)

	current_app.logger.info(
		"Listing %s claimed by %s %s (collection %s)", listing_id, identity.role, identity.user_id, collection_id
	)
	publish_platform_update(scope="listing", action="claimed", actor_role=identity.role, record_id=listing_id)
	return ClaimResult(listing=listing, collection=collection)
