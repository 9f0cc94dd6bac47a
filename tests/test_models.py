"""
Tests for SQLAlchemy models and the PlatformConfig value object.

Uses db_session fixture for per-test isolation.
"""
from datetime import date

from models.log_entry import LogEntry, LogType
from models.user import (
    User,
    Role,
    ConnectionStatus,
    PlatformConfig,
    normalize_store_domain,
)


def test_create_user_defaults(db_session):
    """A bare user gets CLIENT role, UNTESTED status and an empty config."""
    user = User(id="user-model-1", username="model-user-1", password_hash="x")
    db_session.add(user)
    db_session.flush()

    assert user.role == Role.CLIENT
    assert user.connection_status == ConnectionStatus.UNTESTED
    assert user.config == PlatformConfig()
    assert user.created_at is not None


def test_config_property_roundtrip(db_session):
    """Assigning a PlatformConfig fills the flat columns."""
    user = User(id="user-model-2", username="model-user-2", password_hash="x")
    user.config = PlatformConfig("shop.myshopify.com", "shpat_123", "42", "sheet-9")
    db_session.add(user)
    db_session.flush()

    assert user.store_domain == "shop.myshopify.com"
    assert user.access_token == "shpat_123"
    assert user.location_id == "42"
    assert user.sheet_id == "sheet-9"
    assert user.config.access_token == "shpat_123"


def test_admin_to_dict_has_no_subscription_fields(db_session, admin_user):
    """Subscription fields are only present for clients."""
    data = admin_user.to_dict()
    assert data["role"] == "ADMIN"
    assert "subscription_status" not in data
    assert "password_hash" not in data


def test_client_to_dict_has_subscription_fields(db_session, make_client):
    """Client dicts include plan and renewal date."""
    data = make_client().to_dict()
    assert data["subscription_status"] == "ACTIVE"
    assert data["plan_name"] == "Pro Plan"
    assert date.fromisoformat(data["renewal_date"]) > date.today()


def test_log_entry_to_dict(db_session, make_client):
    """Log entries serialize type, message and timestamp."""
    user = make_client()
    entry = LogEntry(user_id=user.id, type=LogType.WARN, message="careful")
    db_session.add(entry)
    db_session.flush()

    data = entry.to_dict()
    assert data["type"] == "WARN"
    assert data["message"] == "careful"
    assert data["timestamp"]


class TestPlatformConfig:
    """Tests for the PlatformConfig value object."""

    def test_domain_normalized(self):
        """Scheme and admin API suffix are stripped."""
        config = PlatformConfig(store_domain="https://shop.myshopify.com/admin/api/2024-04")
        assert config.store_domain == "shop.myshopify.com"

    def test_normalize_http_and_trailing_slash(self):
        assert normalize_store_domain("http://shop.myshopify.com/") == "shop.myshopify.com"
        assert normalize_store_domain(None) == ""

    def test_from_dict_accepts_legacy_keys(self):
        """camelCase keys from the browser storage are understood."""
        config = PlatformConfig.from_dict({
            "storeDomain": "a.myshopify.com",
            "accessToken": "tok",
            "locationId": "7",
            "googleSheetId": "sheet",
        })
        assert config == PlatformConfig("a.myshopify.com", "tok", "7", "sheet")

    def test_to_dict(self):
        config = PlatformConfig("a.myshopify.com", "tok")
        assert config.to_dict() == {
            "store_domain": "a.myshopify.com",
            "access_token": "tok",
            "location_id": "",
            "sheet_id": "",
        }
