import os
from datetime import timedelta

from dotenv import load_dotenv


load_dotenv()


def _csv(value, default):
    items = [item.strip() for item in (value or "").split(",") if item.strip()]
    return tuple(items) if items else default


class Config:
    database_url = os.getenv("DATABASE_URL", "sqlite:///foodbridge_local.db")
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-change-this-secret")
    SQLALCHEMY_DATABASE_URI = database_url
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    PREFERRED_URL_SCHEME = os.getenv("PREFERRED_URL_SCHEME", "http")
    WTF_CSRF_TIME_LIMIT = 3600
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    CLAIMANT_ROLES = _csv(os.getenv("CLAIMANT_ROLES"), ("ngo", "volunteer"))
    PICKUP_LEAD_MINUTES = int(os.getenv("PICKUP_LEAD_MINUTES", "60"))
    DEFAULT_RADIUS_KM = float(os.getenv("DEFAULT_RADIUS_KM", "8"))
    MAP_DEFAULT_LAT = float(os.getenv("MAP_DEFAULT_LAT", "19.1030"))
    MAP_DEFAULT_LNG = float(os.getenv("MAP_DEFAULT_LNG", "73.0148"))
