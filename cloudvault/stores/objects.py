"""S3 backed object store."""

import logging
from typing import Iterable, List, Set

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from cloudvault.core.config import Settings
from cloudvault.core.errors import ConflictError, InternalError, NotFoundError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}
_PRECONDITION_CODES = {"PreconditionFailed", "412", "ConditionalRequestConflict"}

# S3 DeleteObjects accepts at most 1000 keys per request
_DELETE_BATCH = 1000


def make_s3_client(settings: Settings) -> BaseClient:
    return boto3.client(
        "s3",
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region,
        endpoint_url=settings.aws_endpoint_url,
        config=Config(
            connect_timeout=settings.store_timeout_seconds,
            read_timeout=settings.store_timeout_seconds,
            retries={"max_attempts": 3},
        ),
    )


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class ObjectStore:
    def __init__(self, client: BaseClient, bucket: str):
        self._s3 = client
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    def exists(self, path: str) -> bool:
        try:
            self._s3.head_object(Bucket=self._bucket, Key=path)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                return False
            logger.exception("Object store HEAD failed: %s", path)
            raise InternalError(f"Object store failure for {path}") from exc
        except BotoCoreError as exc:
            logger.exception("Object store HEAD failed: %s", path)
            raise InternalError(f"Object store failure for {path}") from exc
        return True

    def put(self, path: str, data: bytes, content_type: str, overwrite: bool = False) -> None:
        """Store ``data`` at ``path``.

        With ``overwrite=False`` an existing object is never replaced; the
        write is conditional on the key being absent and a collision raises
        ``ConflictError``.
        """
        kwargs = {
            "Bucket": self._bucket,
            "Key": path,
            "Body": data,
            "ContentType": content_type,
        }
        if not overwrite:
            if self.exists(path):
                raise ConflictError(f"Object already exists: {path}")
            kwargs["IfNoneMatch"] = "*"

        try:
            self._s3.put_object(**kwargs)
        except ClientError as exc:
            if _error_code(exc) in _PRECONDITION_CODES:
                raise ConflictError(f"Object already exists: {path}") from exc
            logger.exception("Object store PUT failed: %s", path)
            raise InternalError(f"Object store failure for {path}") from exc
        except BotoCoreError as exc:
            logger.exception("Object store PUT failed: %s", path)
            raise InternalError(f"Object store failure for {path}") from exc

    def get(self, path: str) -> bytes:
        try:
            obj = self._s3.get_object(Bucket=self._bucket, Key=path)
            return obj["Body"].read()
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                raise NotFoundError(f"Object not found: {path}") from exc
            logger.exception("Object store GET failed: %s", path)
            raise InternalError(f"Object store failure for {path}") from exc
        except BotoCoreError as exc:
            logger.exception("Object store GET failed: %s", path)
            raise InternalError(f"Object store failure for {path}") from exc

    def delete(self, paths: Iterable[str]) -> Set[str]:
        """Delete every path, best effort.

        Returns the subset of paths that could not be deleted. Deleting a
        path that does not exist counts as success.
        """
        keys = sorted(set(paths))
        failed: Set[str] = set()
        for start in range(0, len(keys), _DELETE_BATCH):
            batch = keys[start:start + _DELETE_BATCH]
            try:
                response = self._s3.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            except (ClientError, BotoCoreError):
                logger.exception("Object store DELETE failed for %d keys", len(batch))
                failed.update(batch)
                continue
            for error in response.get("Errors", []):
                logger.warning(
                    "Could not delete %s: %s", error.get("Key"), error.get("Message")
                )
                failed.add(error.get("Key"))
        return failed

    def list_paths(self, prefix: str) -> List[str]:
        paths = []
        try:
            paginator = self._s3.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                paths.extend(obj["Key"] for obj in page.get("Contents", []))
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Object store LIST failed: %s", prefix)
            raise InternalError(f"Object store failure listing {prefix}") from exc
        return paths

    def sign(self, path: str, ttl_seconds: int) -> str:
        try:
            return self._s3.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": path},
                ExpiresIn=ttl_seconds,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Could not sign URL for %s", path)
            raise InternalError(f"Could not sign URL for {path}") from exc
