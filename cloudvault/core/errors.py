"""Error taxonomy shared by the stores, the services and the HTTP layer.

Store adapters translate native library failures (botocore, SQLAlchemy)
into one of these kinds, so nothing above the store boundary has to know
which client library produced a failure.
"""

import enum


class ErrorKind(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class CloudVaultError(Exception):
    """Base class for every failure surfaced by the core."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(CloudVaultError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Unauthorized"


class ForbiddenError(CloudVaultError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(CloudVaultError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class BlobMissingError(NotFoundError):
    """A metadata record points at a storage path with no object behind it."""

    default_message = "File content is missing from storage"

    def __init__(self, storage_path: str) -> None:
        self.storage_path = storage_path
        super().__init__(f"File content is missing from storage: {storage_path}")


class BadRequestError(CloudVaultError):
    kind = ErrorKind.BAD_REQUEST
    default_message = "Bad request"


class UnsupportedMediaTypeError(CloudVaultError):
    kind = ErrorKind.UNSUPPORTED_MEDIA_TYPE

    def __init__(self, mime_type: str) -> None:
        self.mime_type = mime_type
        super().__init__(f"File type not allowed: {mime_type}")


class ConflictError(CloudVaultError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class InternalError(CloudVaultError):
    kind = ErrorKind.INTERNAL
