# cloudvault/models/folder.py
from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from cloudvault.models.database import Base


class FolderRow(Base):
    __tablename__ = "folders"

    id = Column(Integer, primary_key=True, index=True)
    folder_name = Column(String(255), nullable=False)
    # NULL for a top level folder
    parent_folder_id = Column(Integer, ForeignKey("folders.id"), nullable=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    owner = relationship("UserRow", back_populates="folders")
