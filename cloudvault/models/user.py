from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from cloudvault.models.database import Base


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, default="")
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)

    # One user → many folders / files
    folders = relationship("FolderRow", back_populates="owner")
    files = relationship("FileRow", back_populates="owner")
