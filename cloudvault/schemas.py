from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    name: str = ""
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class SignupResponse(BaseModel):
    message: str
    user: UserOut


class LoginResponse(BaseModel):
    message: str
    token: str


class FolderCreate(BaseModel):
    folder_name: Optional[str] = None
    parent_folder_id: Optional[int] = None


class FolderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    parent_folder_id: Optional[int]


class FolderCreated(BaseModel):
    message: str
    folder: FolderOut


class FolderList(BaseModel):
    folders: List[FolderOut]


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    logical_name: str
    storage_path: str
    mime_type: str
    size_bytes: int
    folder_id: Optional[int]
    created_at: datetime


class FileUploaded(BaseModel):
    message: str
    file: FileOut


class FileList(BaseModel):
    files: List[FileOut]


class RenameRequest(BaseModel):
    new_name: Optional[str] = Field(default=None, alias="newName")


class FileRenamed(BaseModel):
    message: str
    file: FileOut


class ShareRequest(BaseModel):
    expires_in: Optional[int] = Field(default=None, alias="expiresIn")


class ShareResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    expires_in: int = Field(serialization_alias="expiresIn")


class Message(BaseModel):
    message: str
