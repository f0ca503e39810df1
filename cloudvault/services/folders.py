import logging
from typing import List, Optional

from cloudvault.core.errors import BadRequestError
from cloudvault.models.records import Folder
from cloudvault.services.paths import MAX_FOLDER_DEPTH, PathResolver, validate_name
from cloudvault.stores.metadata import MetadataStore

logger = logging.getLogger(__name__)


class FolderTree:
    def __init__(self, metadata: MetadataStore, paths: PathResolver):
        self._metadata = metadata
        self._paths = paths

    def create(self, owner_id: int, name: str, parent_folder_id: Optional[int] = None) -> Folder:
        name = validate_name(name, "folder_name")
        if parent_folder_id is not None:
            # every ancestor must be owned; raises NotFoundError / ForbiddenError
            chain = self._paths.folder_chain(owner_id, parent_folder_id)
            if len(chain) >= MAX_FOLDER_DEPTH:
                raise BadRequestError(f"Folders cannot be nested more than {MAX_FOLDER_DEPTH} deep")

        folder = self._metadata.insert_folder(owner_id, name, parent_folder_id)
        logger.info(
            "Folder created: id=%d owner=%d parent=%s", folder.id, owner_id, parent_folder_id
        )
        return folder

    def list(self, owner_id: int, parent_folder_id: Optional[int] = None) -> List[Folder]:
        return self._metadata.query_folders(owner_id, parent_folder_id)
