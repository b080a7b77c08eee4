from flask import current_app

from foodbridge.models.listing import FoodListing
from foodbridge.services.lifecycle import AVAILABLE, listing_sources, next_listing_status
from foodbridge.services.notification_service import notify
from foodbridge.services.realtime_service import publish_platform_update
from foodbridge.services.store import compare_and_set, transaction
from foodbridge.utils.clock import now_ms


def expire_listings(at_ms=None):
	"""Mark available listings past their expiry time as expired.

	Each listing is expired with a conditional write, so a listing claimed
	between the query and the update is left alone. Returns the ids that
	were expired.
	"""
	at_ms = now_ms() if at_ms is None else at_ms
	candidates = (
		FoodListing.query.filter(FoodListing.status == AVAILABLE, FoodListing.expiry_time <= at_ms)
		.order_by(FoodListing.expiry_time)
		.all()
	)

	expired_ids = []
	with transaction("expire listings"):
		for listing in candidates:
			listing_id = listing.id
			hotel_id = listing.hotel_id
			food_name = listing.food_name
			if not compare_and_set(
				listing,
				listing_sources("expire"),
				expected_version=listing.version,
				status=next_listing_status(listing.status, "expire"),
			):
				continue

			notify(
				hotel_id,
				"Food Listing Expired",
				f'Your food listing "{food_name}" has expired and is no longer available.',
				"warning",
			)
			expired_ids.append(listing_id)

	current_app.logger.info("Expiry sweep marked %s listing(s) expired", len(expired_ids))
	if expired_ids:
		publish_platform_update(scope="listing", action="expired")
	return expired_ids
