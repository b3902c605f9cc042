import os
from pathlib import Path
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from violation_tracker.config import Settings
from violation_tracker.exceptions import DependencyError
from violation_tracker.log import get_logger

log = get_logger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class PhotoStore(Protocol):
    """Flat blob store keyed by generated file name; no nested paths."""

    def write(self, file_name: str, data: bytes, content_type: str) -> None:
        ...

    def read(self, file_name: str) -> Optional[bytes]:
        ...

    def delete(self, file_name: str) -> None:
        ...

    def exists(self, file_name: str) -> bool:
        ...

    def url_for(self, file_name: str) -> str:
        ...


class LocalPhotoStore:
    def __init__(self, directory: str, public_prefix: str = "/uploads/photos"):
        self.directory = Path(directory)
        self.public_prefix = public_prefix.rstrip("/")

    def _path(self, file_name: str) -> Path:
        return self.directory / file_name

    def write(self, file_name: str, data: bytes, content_type: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._path(file_name).write_bytes(data)
        except OSError as e:
            log.error(f"Error writing photo {file_name}: {e}")
            raise DependencyError("Failed to store photo") from e

    def read(self, file_name: str) -> Optional[bytes]:
        try:
            return self._path(file_name).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            log.error(f"Error reading photo {file_name}: {e}")
            raise DependencyError("Failed to read photo") from e

    def delete(self, file_name: str) -> None:
        try:
            os.remove(self._path(file_name))
        except FileNotFoundError:
            log.warning(f"Photo {file_name} does not exist, nothing to delete")
        except OSError as e:
            log.error(f"Error deleting photo {file_name}: {e}")
            raise DependencyError("Failed to delete photo") from e

    def exists(self, file_name: str) -> bool:
        return self._path(file_name).is_file()

    def url_for(self, file_name: str) -> str:
        return f"{self.public_prefix}/{file_name}"


class S3PhotoStore:
    def __init__(self, s3_client, bucket_name: str, folder_prefix: str = "photos"):
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.folder_prefix = folder_prefix

    def _key(self, file_name: str) -> str:
        return f"{self.folder_prefix}/{file_name}"

    def write(self, file_name: str, data: bytes, content_type: str) -> None:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=self._key(file_name),
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            log.error(f"Error uploading to S3: {e}")
            raise DependencyError("Failed to store photo") from e

    def read(self, file_name: str) -> Optional[bytes]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=self._key(file_name))
            return response["Body"].read()
        except ClientError as e:
            if e.response["Error"]["Code"] in _MISSING_CODES:
                return None
            log.error(f"AWS ClientError getting from S3: {e}")
            raise DependencyError("Failed to read photo") from e
        except BotoCoreError as e:
            log.error(f"Unexpected error getting file content from S3: {e}")
            raise DependencyError("Failed to read photo") from e

    def delete(self, file_name: str) -> None:
        if not self.exists(file_name):
            log.warning(f"File {self._key(file_name)} does not exist in S3")
            return
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._key(file_name))
            log.info(f"Successfully deleted file from S3: {self._key(file_name)}")
        except (ClientError, BotoCoreError) as e:
            log.error(f"AWS error deleting from S3: {e}")
            raise DependencyError("Failed to delete photo") from e

    def exists(self, file_name: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=self._key(file_name))
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] in _MISSING_CODES:
                return False
            log.error(f"AWS ClientError checking S3 object: {e}")
            raise DependencyError("Failed to check photo") from e

    def url_for(self, file_name: str) -> str:
        return f"https://{self.bucket_name}.s3.amazonaws.com/{self._key(file_name)}"


def build_photo_store(_settings: Settings) -> PhotoStore:
    if _settings.PHOTO_STORAGE == "s3":
        s3_client = boto3.client(
            "s3",
            aws_access_key_id=_settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=_settings.AWS_SECRET_ACCESS_KEY,
            region_name=_settings.AWS_DEFAULT_REGION,
        )
        return S3PhotoStore(s3_client, _settings.AWS_S3_BUCKET_NAME)
    if _settings.PHOTO_STORAGE != "local":
        raise ValueError(f"Unknown PHOTO_STORAGE: {_settings.PHOTO_STORAGE}")
    return LocalPhotoStore(_settings.PHOTO_UPLOAD_DIR, _settings.PHOTO_PUBLIC_PREFIX)
