"""
User model - admin and client accounts with platform credentials.

role is either ADMIN or CLIENT. Bootstrap guarantees exactly one admin.
Clients carry subscription fields (status, plan, renewal date) and the
Shopify credentials they entered in Settings, stored as flat columns and
exposed through the `config` property as a PlatformConfig value.
"""
import enum
import re
from dataclasses import dataclass, asdict
from datetime import datetime, timezone

from sqlalchemy.orm import validates

from models import db


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    CLIENT = "CLIENT"


class ConnectionStatus(str, enum.Enum):
    UNTESTED = "UNTESTED"
    TESTING = "TESTING"
    CONNECTED = "CONNECTED"
    FAILED = "FAILED"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"


def normalize_store_domain(value):
    """Strip a pasted scheme and /admin/api/<version> suffix from a domain."""
    domain = (value or "").strip()
    domain = re.sub(r"^https?://", "", domain)
    domain = re.sub(r"/admin/api/[^/]*/?$", "", domain)
    return domain.rstrip("/")


def fold_username(value):
    """Comparison key for usernames: full Unicode case folding, not ASCII-only."""
    return (value or "").casefold()


@dataclass(frozen=True)
class PlatformConfig:
    """Per-client Shopify credentials. Empty string means unset."""

    store_domain: str = ""
    access_token: str = ""
    location_id: str = ""
    sheet_id: str = ""

    def __post_init__(self):
        object.__setattr__(self, "store_domain", normalize_store_domain(self.store_domain))

    @classmethod
    def from_dict(cls, data):
        """Build from API input; accepts snake_case or the legacy camelCase keys."""
        data = data or {}
        return cls(
            store_domain=str(data.get("store_domain") or data.get("storeDomain") or ""),
            access_token=str(data.get("access_token") or data.get("accessToken") or ""),
            location_id=str(data.get("location_id") or data.get("locationId") or ""),
            sheet_id=str(data.get("sheet_id") or data.get("googleSheetId") or ""),
        )

    def to_dict(self):
        return asdict(self)


class User(db.Model):
    """Represents an admin or client account."""

    __tablename__ = "users"

    id = db.Column(db.String(64), primary_key=True)
    username = db.Column(db.String(255), unique=True, nullable=False)
    # fold_username(username); unique, so case variants collide in any alphabet
    username_key = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(Role), nullable=False, default=Role.CLIENT)

    store_domain = db.Column(db.String(255), nullable=False, default="")
    access_token = db.Column(db.String(255), nullable=False, default="")
    location_id = db.Column(db.String(64), nullable=False, default="")
    sheet_id = db.Column(db.String(255), nullable=False, default="")
    connection_status = db.Column(
        db.Enum(ConnectionStatus), nullable=False, default=ConnectionStatus.UNTESTED
    )

    # CLIENT only
    subscription_status = db.Column(db.Enum(SubscriptionStatus))
    plan_name = db.Column(db.String(100))
    renewal_date = db.Column(db.Date)

    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc)
    )

    log_entries = db.relationship(
        "LogEntry", backref="user", order_by="LogEntry.id", lazy=True
    )

    @validates("username")
    def _set_username_key(self, key, value):
        self.username_key = fold_username(value)
        return value

    @property
    def config(self):
        return PlatformConfig(
            store_domain=self.store_domain or "",
            access_token=self.access_token or "",
            location_id=self.location_id or "",
            sheet_id=self.sheet_id or "",
        )

    @config.setter
    def config(self, value):
        self.store_domain = value.store_domain
        self.access_token = value.access_token
        self.location_id = value.location_id
        self.sheet_id = value.sheet_id

    @property
    def is_client(self):
        return self.role == Role.CLIENT

    def to_dict(self):
        """Serialize user to dictionary for API responses."""
        data = {
            "id": self.id,
            "username": self.username,
            "role": self.role.value,
            "config": self.config.to_dict(),
            "connection_status": self.connection_status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if self.is_client:
            data["subscription_status"] = (
                self.subscription_status.value if self.subscription_status else None
            )
            data["plan_name"] = self.plan_name
            data["renewal_date"] = (
                self.renewal_date.isoformat() if self.renewal_date else None
            )
        return data

    def __repr__(self):
        return f"<User {self.username} ({self.role.value})>"
