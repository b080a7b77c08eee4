"""Handover steps after a claim: pickup, delivery and cancellation.

The donor confirms pickup with the claimant's code, the claimant confirms
delivery, and either party can cancel until the donor has handed the
food over. Listing and collection move together in one transaction;
each write is conditional on the status read beforehand.
"""
from flask import current_app
from sqlalchemy import or_

from foodbridge.errors import AuthenticationRequired, CollectionNotFound, Conflict, PermissionDenied, ValidationError
from foodbridge.models.collection import FoodCollection
from foodbridge.models.listing import FoodListing
from foodbridge.services.lifecycle import (
	collection_sources,
	listing_sources,
	next_collection_status,
	next_listing_status,
)
from foodbridge.services.notification_service import notify
from foodbridge.services.realtime_service import publish_platform_update
from foodbridge.services.store import compare_and_set, get_or_raise, transaction
from foodbridge.utils.clock import now_ms


def _load(identity, collection_id):
	if identity is None:
		raise AuthenticationRequired()
	collection = get_or_raise(FoodCollection, collection_id, error=CollectionNotFound, fresh=True)
	listing = get_or_raise(FoodListing, collection.food_listing_id, fresh=True)
	return collection, listing


def _advance(listing, collection, listing_action, collection_action, **collection_values):
	listing_target = next_listing_status(listing.status, listing_action)
	collection_target = next_collection_status(collection.status, collection_action)

	if not compare_and_set(
		listing,
		listing_sources(listing_action),
		expected_version=listing.version,
		status=listing_target,
	):
		raise Conflict()
	if not compare_and_set(
		collection,
		collection_sources(collection_action),
		status=collection_target,
		**collection_values,
	):
		raise Conflict()


def collections_for_user(user_id):
	return (
		FoodCollection.query.filter(
			or_(
				FoodCollection.hotel_id == user_id,
				FoodCollection.ngo_id == user_id,
				FoodCollection.volunteer_id == user_id,
			)
		)
		.order_by(FoodCollection.created_at.desc(), FoodCollection.id)
		.all()
	)


def confirm_pickup(identity, collection_id, pickup_code):
	collection, listing = _load(identity, collection_id)
	if collection.hotel_id != identity.user_id:
		raise PermissionDenied("Only the donor can confirm this pickup.")

	entered_code = (pickup_code or "").strip()
	if not entered_code or entered_code != (collection.pickup_code or ""):
		raise ValidationError("Invalid pickup code. The collection remains scheduled.")

	claimant_id = collection.claimant_id
	food_name = listing.food_name

	with transaction("confirm pickup"):
		_advance(listing, collection, "collect", "start")
		notify(claimant_id, "Food Picked Up", f'Pickup of "{food_name}" was confirmed by the donor.', "info")

	current_app.logger.info("Collection %s picked up from hotel %s", collection_id, identity.user_id)
	publish_platform_update(scope="collection", action="picked_up", actor_role=identity.role, record_id=collection_id)
	return collection


def confirm_delivery(identity, collection_id):
	collection, listing = _load(identity, collection_id)
	if identity.user_id not in {collection.ngo_id, collection.volunteer_id}:
		raise PermissionDenied("Only the claimant can confirm delivery.")

	hotel_id = collection.hotel_id
	food_name = listing.food_name

	with transaction("confirm delivery"):
		_advance(listing, collection, "deliver", "complete", delivery_time=now_ms())
		notify(hotel_id, "Food Delivered", f'Your donation "{food_name}" has been delivered. Thank you!', "success")

	current_app.logger.info("Collection %s delivered by %s", collection_id, identity.user_id)
	publish_platform_update(scope="collection", action="delivered", actor_role=identity.role, record_id=collection_id)
	return collection


def cancel_collection(identity, collection_id, reason=None):
	collection, listing = _load(identity, collection_id)
	parties = {collection.hotel_id, collection.ngo_id, collection.volunteer_id} - {None}
	if identity.user_id not in parties:
		raise PermissionDenied("Only the donor or the claimant can cancel this collection.")

	other_party = collection.claimant_id if identity.user_id == collection.hotel_id else collection.hotel_id
	food_name = listing.food_name
	message = f'The collection of "{food_name}" was cancelled.'
	if reason:
		message = f"{message} Reason: {reason.strip()}"

	with transaction("cancel collection"):
		_advance(listing, collection, "cancel", "cancel")
		notify(other_party, "Collection Cancelled", message, "warning")

	current_app.logger.info("Collection %s cancelled by %s", collection_id, identity.user_id)
	publish_platform_update(scope="collection", action="cancelled", actor_role=identity.role, record_id=collection_id)
	return collection
