from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cloudvault.core.config import Settings
from cloudvault.core.errors import UnauthenticatedError
from cloudvault.core.security import Identity, IdentityVerifier
from cloudvault.services.accounts import Accounts
from cloudvault.services.files import FileManager
from cloudvault.services.folders import FolderTree

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Services:
    settings: Settings
    identity: IdentityVerifier
    accounts: Accounts
    folders: FolderTree
    files: FileManager


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    services: Services = Depends(get_services),
) -> Identity:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthenticatedError("Token missing")
    return services.identity.verify(credentials.credentials)
