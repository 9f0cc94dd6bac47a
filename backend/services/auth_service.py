"""
Auth service - JWT session tokens.

A successful username/password login (see account_service) is turned
into a signed JWT here. login_required decodes it on every request and
rebuilds the Session for that request.
"""
import logging
from datetime import datetime, timezone, timedelta

import jwt
from flask import current_app

logger = logging.getLogger(__name__)


def generate_jwt(user):
    """
    Create a signed JWT for the given user.

    Payload: sub (username), role, user_id, exp (now + JWT_EXPIRY_HOURS).
    Signed with app SECRET_KEY using HS256.
    """
    expiry_hours = current_app.config.get("JWT_EXPIRY_HOURS") or 24
    payload = {
        "sub": user.username,
        "role": user.role.value,
        "user_id": user.id,
        "exp": datetime.now(timezone.utc) + timedelta(hours=expiry_hours),
    }
    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")


def decode_jwt(token):
    """
    Decode and validate a JWT.

    Returns:
        dict of claims on success, None on failure (expired, invalid, etc.)
    """
    try:
        return jwt.decode(
            token,
            current_app.config["SECRET_KEY"],
            algorithms=["HS256"],
        )
    except jwt.PyJWTError:
        return None
