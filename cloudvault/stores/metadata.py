"""Relational metadata store for users, folders and files.

Every query that returns many rows is filtered by owner. The single-record
lookups (``get_folder``, ``get_file``) filter by id alone; comparing the
owner is the caller's job.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from cloudvault.core.errors import ConflictError, InternalError, NotFoundError
from cloudvault.models.file import FileRow
from cloudvault.models.folder import FolderRow
from cloudvault.models.records import File, Folder, User
from cloudvault.models.user import UserRow

logger = logging.getLogger(__name__)

# record field -> column for the patchable file fields
_FILE_PATCH_COLUMNS = {
    "logical_name": "file_name",
    "storage_path": "file_path",
}


class MetadataStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str, not_found: str = "Not found") -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except OverflowError as exc:
            # an id wider than the INTEGER column cannot name any row
            db.rollback()
            raise NotFoundError(not_found) from exc
        except IntegrityError as exc:
            db.rollback()
            logger.warning("Integrity error during %s: %s", operation, exc.orig)
            raise ConflictError(f"{operation} violates a constraint") from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Metadata store failure during %s", operation)
            raise InternalError(f"Metadata store failure during {operation}") from exc
        finally:
            db.close()

    # --- users ---

    def insert_user(self, email: str, password_hash: str, name: str = "") -> User:
        with self._session("insert user") as db:
            row = UserRow(email=email, password=password_hash, name=name)
            db.add(row)
            db.commit()
            return User.from_row(row)

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._session("find user") as db:
            row = db.query(UserRow).filter(UserRow.email == email).first()
            return User.from_row(row) if row else None

    def get_user(self, user_id: int) -> User:
        with self._session("get user", "User not found") as db:
            row = db.get(UserRow, user_id)
            if row is None:
                raise NotFoundError("User not found")
            return User.from_row(row)

    # --- folders ---

    def insert_folder(self, owner_id: int, name: str, parent_folder_id: Optional[int]) -> Folder:
        with self._session("insert folder", "Folder not found") as db:
            row = FolderRow(user_id=owner_id, folder_name=name, parent_folder_id=parent_folder_id)
            db.add(row)
            db.commit()
            return Folder.from_row(row)

    def get_folder(self, folder_id: int) -> Folder:
        with self._session("get folder", "Folder not found") as db:
            row = db.get(FolderRow, folder_id)
            if row is None:
                raise NotFoundError("Folder not found")
            return Folder.from_row(row)

    def query_folders(self, owner_id: int, parent_folder_id: Optional[int]) -> List[Folder]:
        with self._session("list folders", "Folder not found") as db:
            query = db.query(FolderRow).filter(FolderRow.user_id == owner_id)
            if parent_folder_id is None:
                query = query.filter(FolderRow.parent_folder_id.is_(None))
            else:
                query = query.filter(FolderRow.parent_folder_id == parent_folder_id)
            return [Folder.from_row(row) for row in query.order_by(FolderRow.id).all()]

    # --- files ---

    def insert_file(
        self,
        owner_id: int,
        logical_name: str,
        storage_path: str,
        mime_type: str,
        size_bytes: int,
        folder_id: Optional[int],
    ) -> File:
        with self._session("insert file", "Folder not found") as db:
            row = FileRow(
                user_id=owner_id,
                file_name=logical_name,
                file_path=storage_path,
                file_type=mime_type,
                size=size_bytes,
                folder_id=folder_id,
            )
            db.add(row)
            db.commit()
            return File.from_row(row)

    def get_file(self, file_id: int) -> File:
        with self._session("get file", "File not found") as db:
            row = db.get(FileRow, file_id)
            if row is None:
                raise NotFoundError("File not found")
            return File.from_row(row)

    def query_files(self, owner_id: int, folder_id: Optional[int]) -> List[File]:
        with self._session("list files", "Folder not found") as db:
            query = db.query(FileRow).filter(FileRow.user_id == owner_id)
            if folder_id is None:
                query = query.filter(FileRow.folder_id.is_(None))
            else:
                query = query.filter(FileRow.folder_id == folder_id)
            rows = query.order_by(FileRow.created_at.desc(), FileRow.id.desc()).all()
            return [File.from_row(row) for row in rows]

    def query_all_files(self, owner_id: int) -> List[File]:
        with self._session("list all files") as db:
            rows = db.query(FileRow).filter(FileRow.user_id == owner_id).all()
            return [File.from_row(row) for row in rows]

    def update_file(self, file_id: int, **patch) -> File:
        unknown = set(patch) - set(_FILE_PATCH_COLUMNS)
        if unknown:
            raise ValueError(f"Cannot patch file fields: {sorted(unknown)}")

        with self._session("update file", "File not found") as db:
            row = db.get(FileRow, file_id)
            if row is None:
                raise NotFoundError("File not found")
            for field, value in patch.items():
                setattr(row, _FILE_PATCH_COLUMNS[field], value)
            db.commit()
            return File.from_row(row)

    def delete_file(self, file_id: int) -> None:
        with self._session("delete file", "File not found") as db:
            row = db.get(FileRow, file_id)
            if row is None:
                raise NotFoundError("File not found")
            db.delete(row)
            db.commit()
