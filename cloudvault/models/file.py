# cloudvault/models/file.py
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from cloudvault.models.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class FileRow(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    file_name = Column(String(255), nullable=False)     # Name the user sees
    file_path = Column(String(1024), nullable=False)    # Object key in the bucket
    file_type = Column(String(100), nullable=False)     # MIME type
    size = Column(BigInteger, nullable=False)           # Size in bytes
    folder_id = Column(Integer, ForeignKey("folders.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Many files → one owner
    owner = relationship("UserRow", back_populates="files")
