"""
Account service - users, sessions, subscriptions.

Owns the account store:
  1. Bootstrap the admin and demo client accounts
  2. Username/password login into an explicit Session object
  3. Client provisioning (admin only, enforced at the route)
  4. Per-client platform config and connection status
  5. Subscription cancellation
  6. Import/export of the legacy browser storage snapshot

Every mutation commits immediately. There is no locking; the last write wins.
"""
import json
import logging
import uuid
from datetime import date, datetime, timedelta

from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

from models import db
from models.user import (
    User,
    Role,
    ConnectionStatus,
    SubscriptionStatus,
    PlatformConfig,
    fold_username,
)

logger = logging.getLogger(__name__)

ADMIN_USER_ID = "admin-user"
DEMO_CLIENT_ID = "demo-client"
DEMO_CLIENT_USERNAME = "User"
DEMO_CLIENT_PASSWORD = "User"
DEFAULT_PLAN_NAME = "Pro Plan"
RENEWAL_PERIOD_DAYS = 30

# Key the browser dashboard used for its localStorage user collection
LEGACY_STORAGE_KEY = "shopify-sync-users"


class AccountError(Exception):
    """Base class for account store failures."""

    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class AuthFailure(AccountError):
    status_code = 401

    def __init__(self):
        super().__init__("Invalid username or password")


class DuplicateUsername(AccountError):
    status_code = 409

    def __init__(self, username):
        super().__init__("Username already exists.")
        self.username = username


class NotAuthenticated(AccountError):
    status_code = 401

    def __init__(self):
        super().__init__("No active session")


class NotAClient(AccountError):
    status_code = 403

    def __init__(self):
        super().__init__("Only client accounts have a subscription")


class StorageCorrupt(AccountError):
    """Raised when a storage snapshot cannot be parsed."""


class Session:
    """The authenticated user for one caller. Empty until login()."""

    def __init__(self, user=None):
        self.user = user

    @property
    def is_authenticated(self):
        return self.user is not None

    def require_user(self):
        if self.user is None:
            raise NotAuthenticated()
        return self.user

    def __repr__(self):
        who = self.user.username if self.user else "anonymous"
        return f"<Session {who}>"


def _renewal_date(today=None):
    return (today or date.today()) + timedelta(days=RENEWAL_PERIOD_DAYS)


def _new_client(user_id, username, password):
    return User(
        id=user_id,
        username=username,
        password_hash=generate_password_hash(password),
        role=Role.CLIENT,
        connection_status=ConnectionStatus.UNTESTED,
        subscription_status=SubscriptionStatus.ACTIVE,
        plan_name=DEFAULT_PLAN_NAME,
        renewal_date=_renewal_date(),
    )


def find_by_username(username, case_sensitive=True):
    """Look up a user by username; case-insensitive lookup is used for uniqueness."""
    if case_sensitive:
        return User.query.filter_by(username=username).first()
    return User.query.filter_by(username_key=fold_username(username)).first()


def bootstrap_accounts():
    """
    Make sure the admin and the demo client exist.

    Safe to call repeatedly: the admin is created only when no ADMIN row
    exists, the demo client only when no user is named "User".

    Returns:
        list of User instances that were created (empty when nothing changed).
    """
    created = []

    if User.query.filter_by(role=Role.ADMIN).first() is None:
        admin = User(
            id=ADMIN_USER_ID,
            username=current_app.config["ADMIN_USERNAME"],
            password_hash=generate_password_hash(current_app.config["ADMIN_PASSWORD"]),
            role=Role.ADMIN,
            connection_status=ConnectionStatus.UNTESTED,
        )
        db.session.add(admin)
        created.append(admin)

    if find_by_username(DEMO_CLIENT_USERNAME) is None:
        demo = _new_client(DEMO_CLIENT_ID, DEMO_CLIENT_USERNAME, DEMO_CLIENT_PASSWORD)
        db.session.add(demo)
        created.append(demo)

    if created:
        db.session.commit()
        logger.info(
            "[OK] Bootstrapped accounts: %s",
            ", ".join(u.username for u in created),
        )
    return created


def authenticate(username, password):
    """
    Check a username/password pair.

    Username match is exact and case-sensitive. No lockout or throttling.

    Raises:
        AuthFailure: unknown user or wrong password (indistinguishable).
    """
    user = find_by_username(username)
    if user is None or not check_password_hash(user.password_hash, password or ""):
        logger.info("[--] Login rejected for %s", username)
        raise AuthFailure()
    logger.info("[OK] User logged in: %s", user.username)
    return user


def login(session, username, password):
    """Authenticate and bind the user to the session. Returns True on success."""
    try:
        session.user = authenticate(username, password)
    except AuthFailure:
        return False
    return True


def logout(session):
    """Drop the session's user. Stored data is not touched."""
    session.user = None


def add_client(username, password):
    """
    Create a CLIENT account with empty config and an active subscription.

    Raises:
        ValueError: if username or password is blank.
        DuplicateUsername: if the username exists, compared case-insensitively.
    """
    username = (username or "").strip()
    if not username or not password:
        raise ValueError("Username and password are required")

    if find_by_username(username, case_sensitive=False) is not None:
        logger.info("[--] Client not created, username taken: %s", username)
        raise DuplicateUsername(username)

    client = _new_client(f"user-{uuid.uuid4().hex}", username, password)
    db.session.add(client)
    db.session.commit()
    logger.info("[OK] Created client %s (id=%s)", client.username, client.id)
    return client


def update_user_config(session, config, status):
    """
    Replace the session user's platform config and connection status.

    Raises:
        NotAuthenticated: if the session has no user.
    """
    user = session.require_user()
    user.config = config
    user.connection_status = ConnectionStatus(status)
    db.session.commit()
    logger.info(
        "[OK] Updated config for %s (status=%s)",
        user.username, user.connection_status.value,
    )
    return user


def cancel_subscription(session):
    """
    Mark the session user's subscription CANCELED.

    The renewal date stays as it was; access continues until then.

    Raises:
        NotAuthenticated: if the session has no user.
        NotAClient: if the user is not a CLIENT.
    """
    user = session.require_user()
    if not user.is_client:
        raise NotAClient()
    user.subscription_status = SubscriptionStatus.CANCELED
    db.session.commit()
    logger.info("[OK] Subscription canceled for %s", user.username)
    return user


def get_clients():
    """All CLIENT users, oldest first."""
    return (
        User.query.filter_by(role=Role.CLIENT)
        .order_by(User.created_at, User.id)
        .all()
    )


def load_users_snapshot(text):
    """
    Parse a JSON snapshot of the browser's user collection.

    Accepts the bare array or a localStorage dump keyed by
    "shopify-sync-users" (value either the array or its JSON string).

    Raises:
        StorageCorrupt: if the text is not a JSON array of objects.
    """
    try:
        records = json.loads(text)
        if isinstance(records, dict) and LEGACY_STORAGE_KEY in records:
            records = records[LEGACY_STORAGE_KEY]
            if isinstance(records, str):
                records = json.loads(records)
    except (TypeError, ValueError) as exc:
        raise StorageCorrupt(f"Snapshot is not valid JSON: {exc}")
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise StorageCorrupt("Snapshot must be a JSON array of user objects")
    return records


def _parse_renewal(value):
    if not value:
        return None
    for fmt in ("%Y-%m-%d", "%B %d, %Y"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def import_users(records):
    """
    Insert snapshot records whose username is not already taken.

    Reads the browser snapshot shape: camelCase keys and a plaintext
    `password`, hashed on the way in. Records without a password are
    skipped, so the output of export_users() imports nothing.

    Returns:
        list of imported User instances.
    """
    imported = []
    for record in records:
        username = record.get("username") or ""
        password = record.get("password") or ""
        if not isinstance(username, str) or not isinstance(password, str):
            logger.warning("[--] Skipping snapshot record with non-text credentials")
            continue
        username = username.strip()
        if not username or not password:
            logger.warning("[--] Skipping snapshot record without credentials")
            continue
        if find_by_username(username, case_sensitive=False) is not None:
            logger.info("[--] Skipping existing user %s", username)
            continue

        try:
            role = Role(record.get("role") or "CLIENT")
            status = ConnectionStatus(record.get("connectionStatus") or "UNTESTED")
            subscription = SubscriptionStatus(record.get("subscriptionStatus") or "ACTIVE")
        except ValueError:
            logger.warning("[--] Skipping snapshot record with bad role/status: %s", username)
            continue

        # Exactly one admin: the bootstrapped one wins
        if role == Role.ADMIN:
            logger.info("[--] Skipping snapshot admin %s", username)
            continue

        user_id = record.get("id") or ""
        if not user_id or db.session.get(User, user_id) is not None:
            user_id = f"user-{uuid.uuid4().hex}"

        user = User(
            id=user_id,
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            connection_status=status,
        )
        user.config = PlatformConfig.from_dict(record.get("config"))
        user.subscription_status = subscription
        user.plan_name = record.get("planName") or DEFAULT_PLAN_NAME
        user.renewal_date = _parse_renewal(record.get("renewalDate")) or _renewal_date()
        db.session.add(user)
        imported.append(user)

    db.session.commit()
    logger.info("[OK] Imported %d users from snapshot", len(imported))
    return imported


def import_users_snapshot(text):
    """
    Import a raw snapshot. A corrupt snapshot is discarded and treated as empty.

    Returns:
        list of imported User instances.
    """
    try:
        records = load_users_snapshot(text)
    except StorageCorrupt as exc:
        logger.warning("[--] Discarding corrupt user snapshot: %s", exc)
        return []
    return import_users(records)


def export_users():
    """
    Dump all users in insertion order, in the API's snake_case shape.

    Neither passwords nor their hashes are included, so this is a listing,
    not a backup: import_users() skips every record it produces.
    """
    users = User.query.order_by(User.created_at, User.id).all()
    return [u.to_dict() for u in users]
