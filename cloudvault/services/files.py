"""File operations.

The metadata store and the object store share no transaction, so the order
of the steps below is the only thing keeping them consistent. Every
operation is ordered so that a crash between two steps leaves an extra blob
(cleaned up out of band, see ``reconcile``) rather than a record pointing
at nothing.

Every operation on an existing file fetches the record by id and compares
the owner before it touches either store.
"""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Set

from cloudvault.core.errors import (
    BadRequestError,
    BlobMissingError,
    InternalError,
    NotFoundError,
    UnsupportedMediaTypeError,
)
from cloudvault.models.records import File
from cloudvault.services.paths import (
    PathResolver,
    build_storage_path,
    folder_segment_of,
    make_physical_filename,
    validate_name,
)
from cloudvault.stores.metadata import MetadataStore
from cloudvault.stores.objects import ObjectStore

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES: FrozenSet[str] = frozenset({
    "image/png",
    "image/jpeg",
    "image/webp",
    "application/pdf",
    "text/plain",
    "application/zip",
})


@dataclass(frozen=True)
class Download:
    content: bytes
    mime_type: str
    logical_name: str


@dataclass(frozen=True)
class RenameResult:
    file: File
    # old blobs the post-commit cleanup could not remove
    stale_paths: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class SharedLink:
    url: str
    expires_in: int


class FileManager:
    def __init__(
        self,
        metadata: MetadataStore,
        objects: ObjectStore,
        paths: PathResolver,
        max_share_expires_in: int = 7 * 24 * 3600,
    ):
        self._metadata = metadata
        self._objects = objects
        self._paths = paths
        self._max_share_expires_in = max_share_expires_in

    def _owned_file(self, owner_id: int, file_id: int) -> File:
        file = self._metadata.get_file(file_id)
        if file.owner_id != owner_id:
            # answered exactly like a missing file so ids can't be probed
            logger.warning(
                "User %d asked for file %d owned by %d", owner_id, file_id, file.owner_id
            )
            raise NotFoundError("File not found")
        return file

    def upload(
        self,
        owner_id: int,
        folder_id: Optional[int],
        mime_type: str,
        content: bytes,
        logical_name: str,
    ) -> File:
        if mime_type not in ALLOWED_MIME_TYPES:
            raise UnsupportedMediaTypeError(mime_type)
        logical_name = validate_name(logical_name, "File name")

        storage_path = self._paths.resolve(
            owner_id, folder_id, make_physical_filename(logical_name)
        )

        # Step 1: blob first; a failure here leaves nothing behind
        logger.info("Uploading %d bytes to %s", len(content), storage_path)
        self._objects.put(storage_path, content, mime_type, overwrite=False)

        # Step 2: record; a failure here orphans the blob, left to reconcile
        try:
            file = self._metadata.insert_file(
                owner_id=owner_id,
                logical_name=logical_name,
                storage_path=storage_path,
                mime_type=mime_type,
                size_bytes=len(content),
                folder_id=folder_id,
            )
        except InternalError:
            logger.error("File record not saved, blob orphaned: %s", storage_path)
            raise

        logger.info("File uploaded: id=%d path=%s", file.id, storage_path)
        return file

    def list(self, owner_id: int, folder_id: Optional[int] = None) -> List[File]:
        return self._metadata.query_files(owner_id, folder_id)

    def download(self, owner_id: int, file_id: int) -> Download:
        file = self._owned_file(owner_id, file_id)
        try:
            content = self._objects.get(file.storage_path)
        except NotFoundError as exc:
            logger.error("File %d has no blob at %s", file.id, file.storage_path)
            raise BlobMissingError(file.storage_path) from exc
        return Download(content=content, mime_type=file.mime_type, logical_name=file.logical_name)

    def delete(self, owner_id: int, file_id: int) -> None:
        file = self._owned_file(owner_id, file_id)

        # Step 1: blob. If it stays, so does the record.
        failed = self._objects.delete({file.storage_path})
        if failed:
            raise InternalError(f"Could not delete file content for file {file_id}")

        # Step 2: record. A failure here leaves a dangling record, which
        # download reports as BlobMissingError and a retried delete clears.
        self._metadata.delete_file(file.id)
        logger.info("File deleted: id=%d path=%s", file.id, file.storage_path)

    def rename(self, owner_id: int, file_id: int, new_logical_name: str) -> RenameResult:
        """Copy the blob to a fresh path, repoint the record, then drop the old blob.

        S3 has no atomic rename, so this never moves in place.
        """
        file = self._owned_file(owner_id, file_id)
        new_logical_name = validate_name(new_logical_name, "newName")

        try:
            content = self._objects.get(file.storage_path)
        except NotFoundError as exc:
            raise BlobMissingError(file.storage_path) from exc

        new_path = build_storage_path(
            owner_id,
            folder_segment_of(owner_id, file.storage_path),
            make_physical_filename(new_logical_name),
        )
        self._objects.put(new_path, content, file.mime_type, overwrite=False)
        logger.info("File %d copied to %s", file.id, new_path)

        try:
            renamed = self._metadata.update_file(
                file.id, logical_name=new_logical_name, storage_path=new_path
            )
        except Exception:
            logger.exception("Rename of file %d not recorded, dropping new copy", file.id)
            self._objects.delete({new_path})
            raise

        stale = self._remove_replaced_blob(file.storage_path)
        return RenameResult(file=renamed, stale_paths=stale)

    def _remove_replaced_blob(self, old_path: str) -> Set[str]:
        """Post-commit cleanup after a rename.

        The rename already happened; failures are logged and returned,
        never raised.
        """
        try:
            failed = self._objects.delete({old_path})
        except Exception:
            logger.exception("Cleanup of %s failed", old_path)
            return {old_path}
        if failed:
            logger.warning("Old blob left behind after rename: %s", old_path)
        return failed

    def share(self, owner_id: int, file_id: int, expires_in_seconds: int) -> SharedLink:
        file = self._owned_file(owner_id, file_id)
        if not 1 <= expires_in_seconds <= self._max_share_expires_in:
            raise BadRequestError(
                f"expiresIn must be between 1 and {self._max_share_expires_in} seconds"
            )
        url = self._objects.sign(file.storage_path, expires_in_seconds)
        logger.info("Signed link issued for file %d (%ds)", file.id, expires_in_seconds)
        return SharedLink(url=url, expires_in=expires_in_seconds)
