"""Typed records handed out by the metadata store.

Rows are converted here, at the store boundary. A row missing a required
field is a storage fault and surfaces as ``InternalError`` instead of
leaking ``None`` into the services.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from cloudvault.core.errors import InternalError


def _require(row: Any, attr: str, kind: type) -> Any:
    value = getattr(row, attr, None)
    if value is None or not isinstance(value, kind):
        raise InternalError(
            f"Malformed {type(row).__name__} row: {attr}={value!r}"
        )
    return value


def _optional_int(row: Any, attr: str) -> Optional[int]:
    value = getattr(row, attr, None)
    if value is not None and not isinstance(value, int):
        raise InternalError(f"Malformed {type(row).__name__} row: {attr}={value!r}")
    return value


@dataclass(frozen=True)
class User:
    id: int
    email: str
    name: str
    password_hash: str

    @classmethod
    def from_row(cls, row) -> "User":
        return cls(
            id=_require(row, "id", int),
            email=_require(row, "email", str),
            name=getattr(row, "name", None) or "",
            password_hash=_require(row, "password", str),
        )


@dataclass(frozen=True)
class Folder:
    id: int
    owner_id: int
    name: str
    parent_folder_id: Optional[int]

    @classmethod
    def from_row(cls, row) -> "Folder":
        return cls(
            id=_require(row, "id", int),
            owner_id=_require(row, "user_id", int),
            name=_require(row, "folder_name", str),
            parent_folder_id=_optional_int(row, "parent_folder_id"),
        )


@dataclass(frozen=True)
class File:
    id: int
    owner_id: int
    logical_name: str
    storage_path: str
    mime_type: str
    size_bytes: int
    folder_id: Optional[int]
    created_at: datetime

    @classmethod
    def from_row(cls, row) -> "File":
        created_at = _require(row, "created_at", datetime)
        if created_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=_require(row, "id", int),
            owner_id=_require(row, "user_id", int),
            logical_name=_require(row, "file_name", str),
            storage_path=_require(row, "file_path", str),
            mime_type=_require(row, "file_type", str),
            size_bytes=_require(row, "size", int),
            folder_id=_optional_int(row, "folder_id"),
            created_at=created_at,
        )
