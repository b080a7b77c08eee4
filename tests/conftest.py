from uuid import uuid4

import pytest
import requests

from config import Config
from foodbridge import create_app, db, socketio
from foodbridge.models.listing import FoodListing
from foodbridge.models.user import USER_CLASSES
from foodbridge.services import maps_service
from foodbridge.utils.clock import HOUR_MS, now_ms
from foodbridge.utils.decorators import Identity


# Koparkhairne, Navi Mumbai
CENTER = (19.1030, 73.0148)


class TestingConfig(Config):
    __test__ = False

    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    CLAIMANT_ROLES = ("ngo", "volunteer")
    PICKUP_LEAD_MINUTES = 60


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def broadcasts(monkeypatch):
    """Socket.IO events published during the test, as (event, payload) pairs."""
    sent = []
    monkeypatch.setattr(socketio, "emit", lambda event, payload=None, **kwargs: sent.append((event, payload)))
    return sent


@pytest.fixture(autouse=True)
def offline_maps(monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.ConnectionError("network disabled in tests")

    maps_service.geocode_place.cache_clear()
    monkeypatch.setattr(maps_service.requests, "get", refuse)
    yield
    maps_service.geocode_place.cache_clear()


@pytest.fixture
def make_user(app):
    def _make(role, user_id=None, name=None, email=None, **fields):
        user_id = user_id or uuid4().hex
        user = USER_CLASSES[role](
            id=user_id,
            email=email or f"{user_id.lower()}@example.org",
            name=name if name is not None else f"{role.title()} {user_id}",
            **fields,
        )
        user.set_password("secret123")
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_listing(app):
    def _make(hotel, listing_id=None, expires_in_ms=HOUR_MS, **fields):
        created_at = now_ms()
        values = {
            "hotel_id": hotel.id,
            "hotel_name": hotel.name,
            "food_name": "Veg Biryani",
            "description": "Leftover from a wedding lunch",
            "quantity": 40,
            "quantity_unit": "servings",
            "created_at": created_at,
            "preparation_time": created_at - HOUR_MS,
            "expiry_time": created_at + expires_in_ms,
            "address": "Sector 19, Koparkhairne",
            "latitude": CENTER[0],
            "longitude": CENTER[1],
            "status": "available",
        }
        values.update(fields)
        if listing_id:
            values["id"] = listing_id
        listing = FoodListing(**values)
        db.session.add(listing)
        db.session.commit()
        return listing

    return _make


def identity_for(user):
    return Identity(user_id=user.id, role=user.role, display_name=user.name)


def login(client, user):
    with client.session_transaction() as session:
        session["user_id"] = user.id
        session["role"] = user.role
        session["display_name"] = user.name
