"""Bearer token issuing/verification and password hashing."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from cloudvault.core.errors import UnauthenticatedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Trusted identity extracted from a verified token."""

    user_id: int
    email: str


class IdentityVerifier:
    def __init__(self, secret: str, algorithm: str = "HS256", expires_in: int = 3600):
        self._secret = secret
        self._algorithm = algorithm
        self._expires_in = expires_in

    def issue(self, identity: Identity) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(identity.user_id),
            "email": identity.email,
            "iat": now,
            "exp": now + timedelta(seconds=self._expires_in),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise UnauthenticatedError("Token expired")
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            raise UnauthenticatedError("Invalid token")

        try:
            return Identity(user_id=int(payload["sub"]), email=payload.get("email", ""))
        except (TypeError, ValueError):
            raise UnauthenticatedError("Invalid token")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)
