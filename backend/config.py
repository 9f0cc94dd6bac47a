"""
Flask configuration classes.

Config reads from environment variables with sensible defaults.
TestConfig overrides for pytest with SQLite in-memory.

The postgres:// → postgresql:// fix handles Render's connection string
format, which uses the older 'postgres://' prefix that SQLAlchemy 1.4+
no longer accepts.
"""
import os

# Public CORS relays, tried in this order after the direct call fails.
# {url} is the raw target URL, {url_encoded} the percent-encoded one.
DEFAULT_PUBLIC_RELAYS = [
    "https://api.allorigins.win/raw?url={url_encoded}",
    "https://cors-anywhere.herokuapp.com/{url}",
    "https://thingproxy.freeboard.io/fetch/{url}",
    "https://corsproxy.io/?{url}",
    "https://cors.eu.org/?{url}",
    "https://api.codetabs.com/v1/proxy?quest={url}",
    "https://cors.bridged.cc/{url}",
]


def _split_list(raw):
    """Split a comma-separated env value, dropping blanks."""
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    """Base configuration for Flask app."""

    # Flask core
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key-change-me"

    # Database - Render uses postgres:// but SQLAlchemy needs postgresql://
    _raw_db_url = os.environ.get("DATABASE_URL") or "sqlite:///storesync_dev.db"
    SQLALCHEMY_DATABASE_URI = _raw_db_url.replace(
        "postgres://", "postgresql://", 1
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,  # Verify connections before use
        "pool_recycle": 300,    # Recycle connections every 5 minutes
    }

    # Bootstrap admin account (created on first start only)
    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME") or "E-sellers"
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD") or "E-sellers@123"

    # JWT settings
    JWT_EXPIRY_HOURS = int(os.environ.get("JWT_EXPIRY_HOURS") or "24")

    # CORS - frontend URL for allowed origins
    FRONTEND_URL = os.environ.get("FRONTEND_URL") or "http://localhost:5173"

    # Shopify Admin REST API
    PLATFORM_API_VERSION = os.environ.get("PLATFORM_API_VERSION") or "2024-04"
    PUBLIC_RELAYS = (
        _split_list(os.environ.get("PUBLIC_RELAYS") or "") or DEFAULT_PUBLIC_RELAYS
    )
    RELAY_URL = os.environ.get("RELAY_URL") or "http://localhost:5000/api/relay"
    # Unset means no timeout, matching the browser client's behaviour
    _raw_timeout = os.environ.get("PLATFORM_TIMEOUT_SECONDS") or ""
    PLATFORM_TIMEOUT_SECONDS = int(_raw_timeout) if _raw_timeout else None


class TestConfig(Config):
    """Test configuration - SQLite in-memory, no external dependencies."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}  # No pool settings needed for SQLite
    PUBLIC_RELAYS = [
        "https://relay-one.test/raw?url={url_encoded}",
        "https://relay-two.test/{url}",
    ]
    RELAY_URL = "https://app.test/api/relay"
    PLATFORM_TIMEOUT_SECONDS = 5
