"""Shared fixtures: in-memory SQLite metadata, moto S3 objects."""

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from cloudvault.core.config import Settings
from cloudvault.core.security import IdentityVerifier, hash_password
from cloudvault.main import create_app
from cloudvault.models.database import create_tables, make_engine, make_session_factory
from cloudvault.services.files import FileManager
from cloudvault.services.folders import FolderTree
from cloudvault.services.paths import PathResolver
from cloudvault.stores.metadata import MetadataStore
from cloudvault.stores.objects import ObjectStore

TEST_BUCKET = "cloudvault-test"


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Keep boto3 away from any real credentials."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        jwt_secret="test-secret-with-at-least-32-bytes!",
        aws_s3_bucket_name=TEST_BUCKET,
        database_url="sqlite://",
    )


@pytest.fixture
def engine():
    """Fresh in-memory database with all tables created."""
    engine = make_engine("sqlite://")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def s3_client():
    """Mock S3 with the test bucket created.

    Yields:
        boto3 S3 client bound to the moto backend.
    """
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def metadata(engine):
    return MetadataStore(make_session_factory(engine))


@pytest.fixture
def objects(s3_client):
    return ObjectStore(s3_client, TEST_BUCKET)


@pytest.fixture
def paths(metadata):
    return PathResolver(metadata)


@pytest.fixture
def folder_tree(metadata, paths):
    return FolderTree(metadata, paths)


@pytest.fixture
def file_manager(metadata, objects, paths):
    return FileManager(metadata, objects, paths, max_share_expires_in=3600)


@pytest.fixture
def alice(metadata):
    return metadata.insert_user("alice@example.com", hash_password("alice-pass"), name="Alice")


@pytest.fixture
def bob(metadata):
    return metadata.insert_user("bob@example.com", hash_password("bob-pass"), name="Bob")


@pytest.fixture
def identity(settings):
    return IdentityVerifier(settings.jwt_secret)


@pytest.fixture
def client(settings, engine, s3_client):
    """HTTP client for an app wired to the test stores."""
    app = create_app(settings, engine=engine, s3_client=s3_client)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def blob_keys(s3_client):
    """Callable listing every key currently in the test bucket."""

    def _keys():
        response = s3_client.list_objects_v2(Bucket=TEST_BUCKET)
        return sorted(obj["Key"] for obj in response.get("Contents", []))

    return _keys
