"""Status vocabularies and the allowed transitions between them.

Listings and collections move only along the edges declared here. Callers
ask for the next status of an action and then persist it with a write that
is conditional on the source status, so two racing requests cannot both
take the same edge.
"""
from foodbridge.errors import InvalidTransition


AVAILABLE = "available"
ASSIGNED = "assigned"
COLLECTED = "collected"
DELIVERED = "delivered"
EXPIRED = "expired"
CANCELLED = "cancelled"

LISTING_STATUSES = (AVAILABLE, ASSIGNED, COLLECTED, DELIVERED, EXPIRED, CANCELLED)

SCHEDULED = "scheduled"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"

COLLECTION_STATUSES = (SCHEDULED, IN_PROGRESS, COMPLETED, CANCELLED)

# action -> (allowed source statuses, target status)
LISTING_TRANSITIONS = {
	"claim": ((AVAILABLE,), ASSIGNED),
	"collect": ((ASSIGNED,), COLLECTED),
	"deliver": ((COLLECTED,), DELIVERED),
	"expire": ((AVAILABLE,), EXPIRED),
	"cancel": ((AVAILABLE, ASSIGNED), CANCELLED),
}

COLLECTION_TRANSITIONS = {
	"start": ((SCHEDULED,), IN_PROGRESS),
	"complete": ((IN_PROGRESS,), COMPLETED),
	"cancel": ((SCHEDULED,), CANCELLED),
}

# Listing statuses that still have an open collection attached.
LISTING_IN_HANDOVER = (ASSIGNED, COLLECTED)
OPEN_COLLECTION_STATUSES = (SCHEDULED, IN_PROGRESS)


def _next_status(table, kind, current, action):
	try:
		sources, target = table[action]
	except KeyError:
		raise InvalidTransition(f"Unknown {kind} action '{action}'.") from None

	if current not in sources:
		raise InvalidTransition(f"Cannot {action} a {kind} that is {current}.")
	return target


def listing_sources(action):
	return LISTING_TRANSITIONS[action][0]


def collection_sources(action):
	return COLLECTION_TRANSITIONS[action][0]


def can_transition_listing(current, action):
	sources, _ = LISTING_TRANSITIONS.get(action, ((), None))
	return current in sources


def next_listing_status(current, action):
	return _next_status(LISTING_TRANSITIONS, "listing", current, action)


def next_collection_status(current, action):
	return _next_status(COLLECTION_TRANSITIONS, "collection", current, action)
