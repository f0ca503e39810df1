"""Application entry point.

Run with ``uvicorn cloudvault.main:create_app --factory``. The factory owns
the lifecycle of the S3 client and the database engine; nothing below it
reaches for a global client.
"""

import logging
from contextlib import asynccontextmanager

from botocore.client import BaseClient
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.engine import Engine

from cloudvault.core.config import Settings, get_settings
from cloudvault.core.errors import CloudVaultError, ErrorKind
from cloudvault.core.logging import configure_logging
from cloudvault.core.security import IdentityVerifier
from cloudvault.dependencies import Services
from cloudvault.models.database import create_tables, make_engine, make_session_factory
from cloudvault.routers import auth, files, folders
from cloudvault.services.accounts import Accounts
from cloudvault.services.files import FileManager
from cloudvault.services.folders import FolderTree
from cloudvault.services.paths import PathResolver
from cloudvault.stores.metadata import MetadataStore
from cloudvault.stores.objects import ObjectStore, make_s3_client

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNSUPPORTED_MEDIA_TYPE: 415,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


def build_services(settings: Settings, engine: Engine, s3_client: BaseClient) -> Services:
    metadata = MetadataStore(make_session_factory(engine))
    objects = ObjectStore(s3_client, settings.aws_s3_bucket_name)
    paths = PathResolver(metadata)
    identity = IdentityVerifier(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_in=settings.access_token_expire_seconds,
    )
    return Services(
        settings=settings,
        identity=identity,
        accounts=Accounts(metadata, identity),
        folders=FolderTree(metadata, paths),
        files=FileManager(
            metadata,
            objects,
            paths,
            max_share_expires_in=settings.max_share_expires_in,
        ),
    )


async def handle_cloudvault_error(request: Request, exc: CloudVaultError) -> JSONResponse:
    status = STATUS_BY_KIND.get(exc.kind, 500)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        # store internals stay in the log
        return JSONResponse(status_code=status, content={"error": "Internal error"})
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content={"error": exc.message}, headers=headers)


def create_app(
    settings: Settings | None = None,
    engine: Engine | None = None,
    s3_client: BaseClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    owns_engine = engine is None
    if engine is None:
        engine = make_engine(settings.database_url, timeout=settings.store_timeout_seconds)
    if s3_client is None:
        s3_client = make_s3_client(settings)
    create_tables(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_engine:
            engine.dispose()

    app = FastAPI(title="CloudVault", lifespan=lifespan)
    app.state.services = build_services(settings, engine, s3_client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CloudVaultError, handle_cloudvault_error)

    # include our routers
    app.include_router(auth.router)
    app.include_router(folders.router)
    app.include_router(files.router)

    @app.get("/", response_class=PlainTextResponse)
    def health():
        return "CloudVault backend running"

    return app
