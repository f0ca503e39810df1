from typing import Optional

from fastapi import APIRouter, Depends

from cloudvault.core.security import Identity
from cloudvault.dependencies import Services, get_current_user, get_services
from cloudvault.routers.params import optional_id
from cloudvault.schemas import FolderCreate, FolderCreated, FolderList, FolderOut

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.post("", response_model=FolderCreated)
def create_folder(
    body: FolderCreate,
    user: Identity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    folder = services.folders.create(user.user_id, body.folder_name, body.parent_folder_id)
    return FolderCreated(message="Folder created", folder=FolderOut.model_validate(folder))


# GET /api/folders?parent_folder_id=<id|null>
@router.get("", response_model=FolderList)
def list_folders(
    parent_folder_id: Optional[str] = None,
    user: Identity = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    parent = optional_id(parent_folder_id, "parent_folder_id")
    folders = services.folders.list(user.user_id, parent)
    return FolderList(folders=[FolderOut.model_validate(f) for f in folders])
