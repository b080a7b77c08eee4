"""
Tests for the claim workflow

- Single winner for interleaved claims
- Role, authentication and expiry gating
- Refusal of claims on listings that are no longer available
- Notification fan-out and the end-to-end L1/H1/N1 scenario
- Rollback on store failures
"""

import pytest
from sqlalchemy.exc import OperationalError

from conftest import identity_for
from foodbridge import db
from foodbridge.errors import (
    AlreadyClaimed,
    AuthenticationRequired,
    Expired,
    ListingNotFound,
    PermissionDenied,
    PersistenceFailure,
    ValidationError,
)
from foodbridge.models.collection import FoodCollection
from foodbridge.models.listing import FoodListing
from foodbridge.models.notification import Notification
from foodbridge.services import claim_service
from foodbridge.services.claim_service import claim_listing
from foodbridge.utils.clock import HOUR_MS, now_ms


@pytest.fixture
def hotel(make_user):
    return make_user("hotel", "H1", name="Hotel Sagar")


@pytest.fixture
def ngo(make_user):
    return make_user("ngo", "N1", name="Helping Hands")


@pytest.fixture
def listing(make_listing, hotel):
    return make_listing(hotel, "L1", food_name="Paneer Curry")


def _fresh(listing_id):
    return db.session.get(FoodListing, listing_id, populate_existing=True)


# ============================================================================
# Happy path
# ============================================================================

class TestSuccessfulClaim:
    """A valid claim assigns the listing, schedules a collection and notifies."""

    def test_end_to_end_scenario(self, hotel, ngo, make_listing):
        make_listing(hotel, "L1", expiry_time=now_ms() + 3600000)

        claim_listing(identity_for(ngo), "L1", notes="arriving by 5pm")

        stored = _fresh("L1")
        assert stored.status == "assigned"
        assert stored.assigned_to == {"id": "N1", "name": "Helping Hands", "role": "ngo"}

        collections = FoodCollection.query.filter_by(food_listing_id="L1").all()
        assert len(collections) == 1
        collection = collections[0]
        assert collection.hotel_id == "H1"
        assert collection.ngo_id == "N1"
        assert collection.volunteer_id is None
        assert collection.status == "scheduled"
        assert collection.notes == "arriving by 5pm"

        recipients = sorted(n.user_id for n in Notification.query.all())
        assert recipients == ["H1", "N1"]

    def test_notifications_address_donor_and_claimant_only(self, listing, ngo):
        claim_listing(identity_for(ngo), listing.id)

        notifications = {n.user_id: n for n in Notification.query.all()}
        assert set(notifications) == {"H1", "N1"}
        assert notifications["H1"].title == "Food Listing Claimed"
        assert notifications["H1"].message == 'Your food listing "Paneer Curry" has been claimed by Helping Hands.'
        assert notifications["N1"].title == "Food Claimed Successfully"
        assert notifications["N1"].message == 'You have successfully claimed "Paneer Curry" from Hotel Sagar.'
        assert all(n.type == "success" and not n.read for n in notifications.values())

    def test_pickup_time_defaults_to_one_hour_later(self, listing, ngo):
        before = now_ms()
        result = claim_listing(identity_for(ngo), listing.id)
        after = now_ms()

        assert before + HOUR_MS <= result.collection.pickup_time <= after + HOUR_MS

    def test_explicit_pickup_time_is_kept(self, listing, ngo):
        pickup_at = now_ms() + 2 * HOUR_MS
        result = claim_listing(identity_for(ngo), listing.id, pickup_time=pickup_at)

        assert result.collection.pickup_time == pickup_at

    def test_pickup_time_in_the_past_is_rejected(self, listing, ngo):
        with pytest.raises(ValidationError):
            claim_listing(identity_for(ngo), listing.id, pickup_time=now_ms() - 1000)

        assert _fresh(listing.id).status == "available"

    def test_volunteer_claim_fills_volunteer_field(self, listing, make_user):
        volunteer = make_user("volunteer", "V1", name="Asha")
        result = claim_listing(identity_for(volunteer), listing.id)

        assert result.collection.volunteer_id == "V1"
        assert result.collection.ngo_id is None
        assert _fresh(listing.id).assigned_role == "volunteer"

    def test_donor_is_told_the_volunteers_name(self, listing, make_user):
        claim_listing(identity_for(make_user("volunteer", "V1", name="Asha")), listing.id)

        message = Notification.query.filter_by(user_id="H1").one().message
        assert message == 'Your food listing "Paneer Curry" has been claimed by Asha.'

    def test_claim_bumps_version_and_issues_pickup_code(self, listing, ngo):
        result = claim_listing(identity_for(ngo), listing.id)

        assert _fresh(listing.id).version == 2
        assert len(result.collection.pickup_code) == 6
        assert result.collection.pickup_code.isdigit()

    def test_blank_note_is_stored_as_none(self, listing, ngo):
        result = claim_listing(identity_for(ngo), listing.id, notes="   ")
        assert result.collection.notes is None

    def test_claim_is_broadcast(self, listing, ngo, broadcasts):
        claim_listing(identity_for(ngo), listing.id)

        payloads = [payload for event, payload in broadcasts if event == "platform_update"]
        assert {"scope": "listing", "action": "claimed"}.items() <= payloads[-1].items()
        assert payloads[-1]["id"] == "L1"


# ============================================================================
# Refusals
# ============================================================================

class TestClaimRefusals:
    """Every failed precondition maps to its own error."""

    def test_anonymous_claim_requires_authentication(self, listing):
        with pytest.raises(AuthenticationRequired):
            claim_listing(None, listing.id)

    @pytest.mark.parametrize("role", ["hotel", "admin"])
    @pytest.mark.parametrize("status", ["available", "assigned", "expired"])
    def test_wrong_role_is_denied_regardless_of_state(self, make_user, make_listing, hotel, role, status):
        actor = make_user(role, f"{role}-actor")
        target = make_listing(hotel, status=status)

        with pytest.raises(PermissionDenied):
            claim_listing(identity_for(actor), target.id)

    def test_wrong_role_is_denied_even_for_missing_listing(self, hotel):
        with pytest.raises(PermissionDenied):
            claim_listing(identity_for(hotel), "does-not-exist")

    def test_volunteer_denied_when_only_ngos_may_claim(self, app, listing, make_user):
        app.config["CLAIMANT_ROLES"] = ("ngo",)
        volunteer = make_user("volunteer", "V1")

        with pytest.raises(PermissionDenied):
            claim_listing(identity_for(volunteer), listing.id)

    def test_missing_listing(self, ngo):
        with pytest.raises(ListingNotFound):
            claim_listing(identity_for(ngo), "missing")

    def test_expired_listing_is_refused_while_available(self, hotel, ngo, make_listing):
        stale = make_listing(hotel, "L2", expires_in_ms=-1000)

        with pytest.raises(Expired):
            claim_listing(identity_for(ngo), stale.id)

        assert _fresh("L2").status == "available"
        assert FoodCollection.query.count() == 0
        assert Notification.query.count() == 0

    @pytest.mark.parametrize("status", ["collected", "delivered", "expired", "cancelled"])
    def test_unavailable_listing_is_already_claimed(self, hotel, ngo, make_listing, status):
        target = make_listing(hotel, status=status)

        with pytest.raises(AlreadyClaimed) as excinfo:
            claim_listing(identity_for(ngo), target.id)

        assert excinfo.value.current_status == status

    def test_second_claim_by_anyone_is_refused_without_side_effects(self, listing, ngo, make_user):
        other = make_user("ngo", "N2")
        claim_listing(identity_for(ngo), listing.id)

        for claimant in (ngo, other):
            with pytest.raises(AlreadyClaimed):
                claim_listing(identity_for(claimant), listing.id)

        stored = _fresh(listing.id)
        assert stored.assigned_to["id"] == "N1"
        assert FoodCollection.query.filter_by(food_listing_id=listing.id).count() == 1
        assert Notification.query.count() == 2


# ============================================================================
# Concurrency and persistence
# ============================================================================

class TestClaimConsistency:
    """The conditional write keeps a single claimant, and failures roll back."""

    def test_interleaved_claims_have_exactly_one_winner(self, monkeypatch, listing, ngo, make_user):
        rival = make_user("ngo", "N2", name="Food Angels")
        original_check = claim_service.check_claimable
        raced = []

        def check_after_rival_claims(status, expiry_time, at_ms):
            # Both claimants have read "available"; let the rival commit first.
            if not raced:
                raced.append(True)
                claim_listing(identity_for(rival), listing.id)
            return original_check(status, expiry_time, at_ms)

        monkeypatch.setattr(claim_service, "check_claimable", check_after_rival_claims)

        with pytest.raises(AlreadyClaimed):
            claim_listing(identity_for(ngo), listing.id)

        stored = _fresh(listing.id)
        assert stored.status == "assigned"
        assert stored.assigned_to["id"] == "N2"
        assert FoodCollection.query.filter_by(food_listing_id=listing.id).count() == 1
        assert sorted(n.user_id for n in Notification.query.all()) == ["H1", "N2"]

    def test_store_failure_rolls_back_every_write(self, monkeypatch, listing, ngo):
        def failing_notify(*args, **kwargs):
            raise OperationalError("INSERT INTO notifications", {}, Exception("disk I/O error"))

        monkeypatch.setattr(claim_service, "notify", failing_notify)

        with pytest.raises(PersistenceFailure):
            claim_listing(identity_for(ngo), listing.id)

        stored = _fresh(listing.id)
        assert stored.status == "available"
        assert stored.assigned_to is None
        assert stored.version == 1
        assert FoodCollection.query.count() == 0
        assert Notification.query.count() == 0

    def test_store_failure_while_reading_the_listing(self, monkeypatch, listing, ngo):
        def failing_get(*args, **kwargs):
            raise OperationalError("SELECT food_listings", {}, Exception("database is locked"))

        monkeypatch.setattr(db.session, "get", failing_get)

        with pytest.raises(PersistenceFailure):
            claim_listing(identity_for(ngo), listing.id)

        assert FoodListing.query.filter_by(id=listing.id).one().status == "available"
        assert FoodCollection.query.count() == 0

    def test_retry_after_store_failure_succeeds_once(self, monkeypatch, listing, ngo):
        def failing_notify(*args, **kwargs):
            raise OperationalError("INSERT INTO notifications", {}, Exception("database is locked"))

        original_notify = claim_service.notify
        monkeypatch.setattr(claim_service, "notify", failing_notify)
        with pytest.raises(PersistenceFailure):
            claim_listing(identity_for(ngo), listing.id)

        monkeypatch.setattr(claim_service, "notify", original_notify)
        claim_listing(identity_for(ngo), listing.id)

        assert FoodCollection.query.filter_by(food_listing_id=listing.id).count() == 1
        assert Notification.query.count() == 2

    def test_open_collection_blocks_a_second_active_claim(self, listing, ngo):
        # A stray open collection for an "available" listing trips the unique index.
        db.session.add(
            FoodCollection(
                food_listing_id=listing.id,
                hotel_id="H1",
                ngo_id="N1",
                pickup_time=now_ms() + HOUR_MS,
                status="scheduled",
            )
        )
        db.session.commit()

        with pytest.raises(AlreadyClaimed):
            claim_listing(identity_for(ngo), listing.id)

        assert _fresh(listing.id).status == "available"
        assert FoodCollection.query.count() == 1
