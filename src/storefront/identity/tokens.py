"""Bearer tokens: who is calling and whether they are an admin.

Tokens are HS256 JWTs carrying ``sub`` (the user id), ``role`` and ``exp``.
Accounts themselves live elsewhere; the storefront only needs the caller's
identity.
"""

import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt

from storefront.shared.errors import Unauthorized

DEFAULT_EXPIRES_IN = 86400  # 1 day, in seconds


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: Role = Role.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def _secret() -> str:
    return os.environ.get("JWT_SECRET", "storefront-dev-secret-change-me-in-production")


def _algorithm() -> str:
    return os.environ.get("JWT_ALGORITHM", "HS256")


def _expires_in() -> int:
    return int(os.environ.get("JWT_EXPIRES_IN", DEFAULT_EXPIRES_IN))


def issue_token(user_id, role=Role.CUSTOMER, expires_in=None) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "role": Role(role).value,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in if expires_in is not None else _expires_in()),
    }
    return jwt.encode(payload, _secret(), algorithm=_algorithm())


def verify_token(token: str) -> Identity:
    """Decode ``token`` into an Identity, raising Unauthorized if it cannot be trusted."""
    try:
        payload = jwt.decode(token, _secret(), algorithms=[_algorithm()], options={"require": ["sub", "exp"]})
    except jwt.ExpiredSignatureError as exc:
        raise Unauthorized("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise Unauthorized("Invalid token") from exc

    try:
        role = Role(payload.get("role", Role.CUSTOMER.value))
    except ValueError as exc:
        raise Unauthorized("Invalid token") from exc

    return Identity(user_id=str(payload["sub"]), role=role)
