import pytest

from conftest import CENTER, identity_for
from foodbridge import db
from foodbridge.errors import Conflict, InvalidTransition, ListingNotFound, PermissionDenied, ValidationError
from foodbridge.models.collection import FoodCollection
from foodbridge.models.listing import FoodListing
from foodbridge.services.claim_service import claim_listing
from foodbridge.services.listing_service import (
    cancel_listing,
    create_listing,
    delete_listing,
    get_listing,
    list_listings,
    update_listing,
)
from foodbridge.services.pickup_service import confirm_delivery, confirm_pickup
from foodbridge.utils.clock import HOUR_MS, now_ms


@pytest.fixture
def hotel(make_user):
    return make_user(
        "hotel",
        "H1",
        name="Hotel Sagar",
        address="Sector 19, Koparkhairne",
        latitude=CENTER[0],
        longitude=CENTER[1],
        fssai_number="11522998000123",
    )


def _payload(**overrides):
    payload = {
        "foodName": "Chapati and Sabzi",
        "description": "Packed in foil trays",
        "quantity": 25,
        "quantityUnit": "plates",
        "expiryHours": 3,
        "dietaryInfo": {"isVegetarian": True, "containsGluten": True},
    }
    payload.update(overrides)
    return payload


class TestCreateListing:

    def test_defaults_come_from_donor_profile(self, hotel):
        listing = create_listing(identity_for(hotel), _payload())

        assert listing.status == "available"
        assert listing.version == 1
        assert listing.hotel_name == "Hotel Sagar"
        assert listing.fssai_number == "11522998000123"
        assert (listing.latitude, listing.longitude) == CENTER
        assert listing.address == "Sector 19, Koparkhairne"
        assert listing.is_vegetarian and listing.contains_gluten
        assert not listing.is_vegan
        assert listing.expiry_time - listing.created_at == 3 * HOUR_MS

    def test_explicit_id_and_location(self, hotel):
        listing = create_listing(
            identity_for(hotel),
            _payload(id="L7", location={"address": "Vashi", "lat": 19.077, "lng": 72.998}),
        )

        assert listing.id == "L7"
        assert listing.address == "Vashi"
        assert listing.latitude == pytest.approx(19.077)

    def test_serialized_shape(self, hotel):
        payload = create_listing(identity_for(hotel), _payload()).to_dict()

        assert payload["dietaryInfo"]["isVegetarian"] is True
        assert payload["location"]["lat"] == CENTER[0]
        assert payload["assignedTo"] is None

    def test_already_expired_listing_is_rejected(self, hotel):
        with pytest.raises(ValidationError):
            create_listing(identity_for(hotel), _payload(expiryTime=now_ms() - 1000))

    def test_expiry_before_preparation_is_rejected(self, hotel):
        later = now_ms() + 5 * HOUR_MS
        with pytest.raises(ValidationError):
            create_listing(identity_for(hotel), _payload(preparationTime=later, expiryTime=later - HOUR_MS))

    @pytest.mark.parametrize("quantity", [0, -3, "lots"])
    def test_quantity_must_be_positive_number(self, hotel, quantity):
        with pytest.raises(ValidationError):
            create_listing(identity_for(hotel), _payload(quantity=quantity))

    def test_food_name_required(self, hotel):
        with pytest.raises(ValidationError):
            create_listing(identity_for(hotel), _payload(foodName="  "))

    def test_only_hotels_create_listings(self, make_user):
        with pytest.raises(PermissionDenied):
            create_listing(identity_for(make_user("ngo", "N1")), _payload())


class TestUpdateAndDelete:

    def test_update_bumps_version(self, hotel):
        listing = create_listing(identity_for(hotel), _payload())
        update_listing(identity_for(hotel), listing.id, {"foodName": "Chapati Rolls"}, expected_version=1)

        stored = db.session.get(FoodListing, listing.id, populate_existing=True)
        assert stored.food_name == "Chapati Rolls"
        assert stored.version == 2

    def test_stale_version_conflicts(self, hotel):
        listing = create_listing(identity_for(hotel), _payload())
        update_listing(identity_for(hotel), listing.id, {"quantity": 30})

        with pytest.raises(Conflict):
            update_listing(identity_for(hotel), listing.id, {"quantity": 20}, expected_version=1)

    def test_status_cannot_be_edited(self, hotel):
        listing = create_listing(identity_for(hotel), _payload())
        update_listing(identity_for(hotel), listing.id, {"status": "delivered", "quantity": 12})

        stored = db.session.get(FoodListing, listing.id, populate_existing=True)
        assert stored.status == "available"
        assert stored.quantity == 12

    def test_other_hotel_cannot_edit(self, hotel, make_user):
        listing = create_listing(identity_for(hotel), _payload())

        with pytest.raises(PermissionDenied):
            update_listing(identity_for(make_user("hotel", "H2")), listing.id, {"quantity": 1})

    def test_claimed_listing_is_frozen(self, hotel, make_user):
        listing = create_listing(identity_for(hotel), _payload())
        claim_listing(identity_for(make_user("ngo", "N1")), listing.id)

        with pytest.raises(InvalidTransition):
            update_listing(identity_for(hotel), listing.id, {"quantity": 1})
        with pytest.raises(InvalidTransition):
            delete_listing(identity_for(hotel), listing.id)
        with pytest.raises(InvalidTransition):
            cancel_listing(identity_for(hotel), listing.id)

    def test_delete_available_listing(self, hotel):
        listing = create_listing(identity_for(hotel), _payload())
        delete_listing(identity_for(hotel), listing.id)

        with pytest.raises(ListingNotFound):
            get_listing(listing.id)

    def test_delivered_listing_keeps_its_history(self, hotel, make_user):
        ngo = make_user("ngo", "N1")
        listing = create_listing(identity_for(hotel), _payload())
        collection = claim_listing(identity_for(ngo), listing.id).collection
        confirm_pickup(identity_for(hotel), collection.id, collection.pickup_code)
        confirm_delivery(identity_for(ngo), collection.id)

        with pytest.raises(InvalidTransition):
            delete_listing(identity_for(hotel), listing.id)

        assert get_listing(listing.id).status == "delivered"
        assert FoodCollection.query.filter_by(food_listing_id=listing.id).count() == 1

    def test_expired_unclaimed_listing_can_be_deleted(self, hotel, make_listing):
        make_listing(hotel, "stale", expires_in_ms=-HOUR_MS, status="expired")

        delete_listing(identity_for(hotel), "stale")

        with pytest.raises(ListingNotFound):
            get_listing("stale")

    def test_cancel_withdraws_listing(self, hotel):
        listing = create_listing(identity_for(hotel), _payload())
        cancel_listing(identity_for(hotel), listing.id)

        assert db.session.get(FoodListing, listing.id, populate_existing=True).status == "cancelled"


class TestListListings:

    def test_status_and_owner_filters(self, hotel, make_user, make_listing):
        other = make_user("hotel", "H2")
        make_listing(hotel, "A")
        make_listing(hotel, "B", status="assigned")
        make_listing(other, "C")

        assert {row.id for row in list_listings(status="available")} == {"A", "C"}
        assert {row.id for row in list_listings(hotel_id="H1")} == {"A", "B"}

    def test_unknown_status(self, app):
        with pytest.raises(ValidationError):
            list_listings(status="eaten")
