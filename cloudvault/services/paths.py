"""Logical (owner, folder, name) to physical object key mapping.

A storage path looks like::

    {owner_id}/{top folder}/.../{folder}/{token}_{logical name}

The folder segment is built from the folder's whole ancestor chain, so two
folders with the same name under different parents never share a prefix.
"""

import logging
import unicodedata
import uuid
from typing import List, Optional

from cloudvault.core.errors import BadRequestError, ForbiddenError, InternalError
from cloudvault.models.records import Folder
from cloudvault.stores.metadata import MetadataStore

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
MAX_FOLDER_DEPTH = 64


def validate_name(name: Optional[str], what: str = "name") -> str:
    """Return ``name`` stripped, or raise ``BadRequestError``.

    Names become path components, so separators, dot segments and control
    characters are refused outright rather than rewritten.
    """
    if name is None or not name.strip():
        raise BadRequestError(f"{what} is required")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise BadRequestError(f"{what} is longer than {MAX_NAME_LENGTH} characters")
    if name in (".", ".."):
        raise BadRequestError(f"{what} cannot be '{name}'")
    if "/" in name or "\\" in name:
        raise BadRequestError(f"{what} cannot contain path separators")
    if any(unicodedata.category(ch) == "Cc" for ch in name):
        raise BadRequestError(f"{what} cannot contain control characters")
    return name


def make_physical_filename(logical_name: str) -> str:
    return f"{uuid.uuid4().hex}_{validate_name(logical_name, 'File name')}"


def build_storage_path(owner_id: int, folder_segment: str, physical_filename: str) -> str:
    parts = [str(owner_id)]
    if folder_segment:
        parts.append(folder_segment)
    parts.append(physical_filename)
    return "/".join(parts)


def folder_segment_of(owner_id: int, storage_path: str) -> str:
    """Recover the folder segment from an existing storage path."""
    prefix = f"{owner_id}/"
    if not storage_path.startswith(prefix):
        raise InternalError(f"Storage path {storage_path!r} is outside owner {owner_id}")
    rest = storage_path[len(prefix):]
    folder_segment, _, _ = rest.rpartition("/")
    return folder_segment


class PathResolver:
    def __init__(self, metadata: MetadataStore):
        self._metadata = metadata

    def owned_folder(self, owner_id: int, folder_id: int) -> Folder:
        """Fetch a folder by id and prove ``owner_id`` owns it."""
        folder = self._metadata.get_folder(folder_id)
        if folder.owner_id != owner_id:
            logger.warning(
                "User %s tried to use folder %s owned by %s", owner_id, folder_id, folder.owner_id
            )
            raise ForbiddenError()
        return folder

    def folder_chain(self, owner_id: int, folder_id: int) -> List[Folder]:
        """Folders from the top level down to ``folder_id``, all owned by ``owner_id``."""
        chain = []
        seen = set()
        current: Optional[int] = folder_id
        while current is not None:
            if current in seen or len(chain) >= MAX_FOLDER_DEPTH:
                raise InternalError(f"Folder {folder_id} has a broken ancestor chain")
            seen.add(current)
            folder = self.owned_folder(owner_id, current)
            chain.append(folder)
            current = folder.parent_folder_id
        chain.reverse()
        return chain

    def folder_segment(self, owner_id: int, folder_id: Optional[int]) -> str:
        if folder_id is None:
            return ""
        return "/".join(folder.name for folder in self.folder_chain(owner_id, folder_id))

    def resolve(self, owner_id: int, folder_id: Optional[int], physical_filename: str) -> str:
        return build_storage_path(
            owner_id, self.folder_segment(owner_id, folder_id), physical_filename
        )
