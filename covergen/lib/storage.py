# covergen/lib/storage.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

from covergen.config import config
from covergen.lib.errors import StorageError
from covergen import logger

log = logger.get_logger(__name__)

LONG_CACHE = "public, max-age=31536000, immutable"


class LocalDriver:
    """Files under LOCAL_STORAGE_DIR, served back through /api/storage/{key}."""

    name = "local"

    def __init__(self, root: Path | str | None = None, base_url: str | None = None):
        self.root = Path(root or config.local_storage_dir).resolve()
        self.base_url = (base_url or config.app_url).rstrip("/")

    def _path(self, key: str) -> Path:
        p = (self.root / key).resolve()
        if p != self.root and self.root not in p.parents:
            raise StorageError(f"Refusing to access path outside storage root: {key}")
        return p

    def put(self, key: str, data: bytes, content_type: str) -> None:
        p = self._path(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(p.suffix + ".tmp")
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, p)

    def get(self, key: str) -> Optional[bytes]:
        p = self._path(key)
        if not p.is_file():
            return None
        return p.read_bytes()

    def delete(self, key: str) -> None:
        p = self._path(key)
        if p.exists():
            p.unlink()

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def url(self, key: str) -> str:
        return f"{self.base_url}/api/storage/{key}"


class R2Driver:
    """Cloudflare R2 through its S3-compatible API."""

    name = "r2"

    def __init__(self):
        if not (config.r2_account_id and config.r2_access_key and config.r2_secret_key and config.r2_bucket):
            raise StorageError("R2 storage is not configured (CLOUDFLARE_R2_* variables missing)")
        import boto3

        self.bucket = config.r2_bucket
        self.account_id = config.r2_account_id
        self.public_url = config.r2_public_url
        self.client = boto3.client(
            "s3",
            endpoint_url=f"https://{self.account_id}.r2.cloudflarestorage.com",
            aws_access_key_id=config.r2_access_key,
            aws_secret_access_key=config.r2_secret_key,
            region_name="auto",
        )

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            CacheControl=LONG_CACHE,
        )

    def get(self, key: str) -> Optional[bytes]:
        from botocore.exceptions import ClientError

        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in {"NoSuchKey", "404", "NotFound"}:
                return None
            raise
        return obj["Body"].read()

    def delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)

    def exists(self, key: str) -> bool:
        from botocore.exceptions import ClientError

        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError:
            return False

    def url(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{key}"
        return f"https://{self.bucket}.{self.account_id}.r2.cloudflarestorage.com/{key}"


class GCSDriver:
    """Google Cloud Storage bucket; objects are served from their public URL."""

    name = "gcs"

    def __init__(self):
        if not config.gcs_bucket:
            raise StorageError("GCS_BUCKET not configured")
        from google.cloud import storage

        self.bucket_name = config.gcs_bucket
        self.bucket = storage.Client().bucket(self.bucket_name)

    def put(self, key: str, data: bytes, content_type: str) -> None:
        blob = self.bucket.blob(key)
        blob.cache_control = LONG_CACHE
        blob.upload_from_string(data, content_type=content_type)

    def get(self, key: str) -> Optional[bytes]:
        from google.api_core.exceptions import NotFound

        try:
            return self.bucket.blob(key).download_as_bytes()
        except NotFound:
            return None

    def delete(self, key: str) -> None:
        from google.api_core.exceptions import NotFound

        try:
            self.bucket.blob(key).delete()
        except NotFound:
            pass

    def exists(self, key: str) -> bool:
        return self.bucket.blob(key).exists()

    def url(self, key: str) -> str:
        return f"https://storage.googleapis.com/{self.bucket_name}/{key}"


_DRIVERS = {"local": LocalDriver, "r2": R2Driver, "gcs": GCSDriver}
_driver = None


def get_driver():
    global _driver
    if _driver is None:
        cls = _DRIVERS.get(config.storage_mode)
        if cls is None:
            raise StorageError(f"Unknown STORAGE_MODE: {config.storage_mode}")
        _driver = cls()
        log.info(f"storage driver: {_driver.name}")
    return _driver


def set_driver(driver) -> None:
    """Swap the active driver (tests, or a custom backend)."""
    global _driver
    _driver = driver


def upload_image(key: str, data: bytes, content_type: str = "image/webp") -> Dict[str, object]:
    driver = get_driver()
    try:
        driver.put(key, data, content_type)
    except StorageError:
        raise
    except Exception as e:
        raise StorageError(f"Failed to upload {key}: {e}")
    log.debug(f"uploaded {key} ({len(data)} bytes) via {driver.name}")
    return {"key": key, "url": driver.url(key), "size": len(data)}


def delete_image(key: str) -> None:
    try:
        get_driver().delete(key)
    except Exception as e:
        raise StorageError(f"Failed to delete {key}: {e}")


def get_image(key: str) -> Optional[bytes]:
    return get_driver().get(key)


def image_exists(key: str) -> bool:
    return get_driver().exists(key)


def get_image_url(key: str) -> str:
    return get_driver().url(key)


def storage_mode() -> str:
    return get_driver().name
