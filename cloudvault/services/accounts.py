import logging

from cloudvault.core.errors import BadRequestError, ConflictError, UnauthenticatedError
from cloudvault.core.security import Identity, IdentityVerifier, hash_password, verify_password
from cloudvault.models.records import User
from cloudvault.stores.metadata import MetadataStore

logger = logging.getLogger(__name__)


class Accounts:
    def __init__(self, metadata: MetadataStore, identity: IdentityVerifier):
        self._metadata = metadata
        self._identity = identity

    def signup(self, email: str, password: str, name: str = "") -> User:
        if not email or not password:
            raise BadRequestError("Email & password required")

        email = email.strip().lower()
        if self._metadata.find_user_by_email(email) is not None:
            raise ConflictError("Email already registered")

        user = self._metadata.insert_user(email, hash_password(password), name=name or "")
        logger.info("User created: id=%d", user.id)
        return user

    def login(self, email: str, password: str) -> str:
        user = self._metadata.find_user_by_email((email or "").strip().lower())
        if user is None or not verify_password(password or "", user.password_hash):
            raise UnauthenticatedError("Invalid email or password")
        return self._identity.issue(Identity(user_id=user.id, email=user.email))
