from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File as FastAPIFile, Form, UploadFile
from fastapi.responses import Response

from cloudvault.core.errors import BadRequestError
from cloudvault.core.security import Identity
from cloudvault.dependencies import Services, get_current_user, get_services
from cloudvault.routers.params import optional_id
from cloudvault.schemas import (
    FileList,
    FileOut,
    FileRenamed,
    FileUploaded,
    Message,
    RenameRequest,
    ShareRequest,
    ShareResponse,
)

router = APIRouter(prefix="/api/files", tags=["files"])


def content_disposition(filename: str) -> str:
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


# --- upload a new file (multipart/form-data: file, optional folder_id) ---
@router.post("/upload", response_model=FileUploaded)
def upload_file(
    file: Optional[UploadFile] = FastAPIFile(None),
    folder_id: Optional[str] = Form(None),
    user: Identity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    if file is None:
        raise BadRequestError("No file uploaded")

    content = file.file.read()
    stored = services.files.upload(
        user.user_id,
        optional_id(folder_id, "folder_id"),
        file.content_type or "application/octet-stream",
        content,
        file.filename,
    )
    return FileUploaded(message="File uploaded", file=FileOut.model_validate(stored))


# --- list files of a folder (no folder_id = root) ---
@router.get("", response_model=FileList)
def list_files(
    folder_id: Optional[str] = None,
    user: Identity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    files = services.files.list(user.user_id, optional_id(folder_id, "folder_id"))
    return FileList(files=[FileOut.model_validate(f) for f in files])


# --- download a file ---
@router.get("/download/{file_id}")
def download_file(
    file_id: int,
    user: Identity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    download = services.files.download(user.user_id, file_id)
    return Response(
        content=download.content,
        media_type=download.mime_type,
        headers={"Content-Disposition": content_disposition(download.logical_name)},
    )


# --- delete a file ---
@router.delete("/{file_id}", response_model=Message)
def delete_file(
    file_id: int,
    user: Identity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.files.delete(user.user_id, file_id)
    return Message(message="File deleted")


# --- rename a file ---
@router.put("/rename/{file_id}", response_model=FileRenamed)
def rename_file(
    file_id: int,
    body: RenameRequest,
    user: Identity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    result = services.files.rename(user.user_id, file_id, body.new_name)
    return FileRenamed(message="File renamed", file=FileOut.model_validate(result.file))


# --- signed share link ---
@router.post("/share/{file_id}", response_model=ShareResponse)
def share_file(
    file_id: int,
    body: Optional[ShareRequest] = None,
    user: Identity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    expires_in = body.expires_in if body and body.expires_in is not None else None
    if expires_in is None:
        expires_in = services.settings.default_share_expires_in
    link = services.files.share(user.user_id, file_id, expires_in)
    return ShareResponse(url=link.url, expires_in=link.expires_in)
