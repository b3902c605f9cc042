import base64
import binascii
import io
import re
import time
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from violation_tracker.config import settings
from violation_tracker.exceptions import InvalidInputError
from violation_tracker.log import get_logger
from violation_tracker.router.photo_store import PhotoStore
from violation_tracker.schema.photo_schema import PhotoUpload, PhotoUploadOut, PhotoValidation

log = get_logger(__name__)

DATA_URL_PATTERN = re.compile(r"data:image/([\w.+-]+);base64,(.*)", re.DOTALL)

# declared format -> canonical name used for extensions and MIME types
SUPPORTED_FORMATS = {"jpeg": "jpeg", "jpg": "jpeg", "png": "png", "gif": "gif"}

MAGIC_BYTES = {
    "jpeg": (b"\xff\xd8\xff",),
    "png": (b"\x89PNG\r\n\x1a\n",),
    "gif": (b"GIF87a", b"GIF89a"),
}

PIL_FORMATS = {"jpeg": "JPEG", "png": "PNG", "gif": "GIF"}


def _decode_photo(file_data: str, max_bytes: int = None) -> Tuple[str, bytes]:
    """
    Parse a data URL into its canonical format and raw bytes.

    Raises:
        InvalidInputError: With a message naming the first check that failed.
    """
    max_bytes = max_bytes or settings.PHOTO_MAX_BYTES
    match = DATA_URL_PATTERN.fullmatch(file_data or "")
    if not match:
        raise InvalidInputError("Invalid base64 image data format")

    declared, payload = match.group(1).lower(), match.group(2)
    if declared not in SUPPORTED_FORMATS:
        raise InvalidInputError(
            f"Unsupported image format: {declared}. Allowed formats: jpeg, jpg, png, gif"
        )
    image_format = SUPPORTED_FORMATS[declared]

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError("Invalid base64 encoding in image data") from e

    if len(raw) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise InvalidInputError(f"File size exceeds maximum limit of {limit_mb:g}MB")

    if not raw.startswith(MAGIC_BYTES[image_format]):
        raise InvalidInputError(f"Corrupt image header: data is not a valid {image_format} image")

    return image_format, raw


def validate_photo_format_logic(file_data: str, max_bytes: int = None) -> PhotoValidation:
    try:
        image_format, _ = _decode_photo(file_data, max_bytes)
    except InvalidInputError as e:
        return PhotoValidation(valid=False, error=e.detail)
    return PhotoValidation(valid=True, format=image_format)


def is_safe_file_name(file_name: str) -> bool:
    """Stored photos live in one flat directory, so any separator or '..' is rejected."""
    return bool(file_name) and ".." not in file_name and "/" not in file_name and "\\" not in file_name


def _unique_file_name(store: PhotoStore, file_name: str, image_format: str) -> str:
    stamp = int(time.time() * 1000)
    candidate = f"{stamp}_{file_name}.{image_format}"
    while store.exists(candidate):
        stamp += 1
        candidate = f"{stamp}_{file_name}.{image_format}"
    return candidate


def upload_photo_logic(store: PhotoStore, upload: PhotoUpload) -> PhotoUploadOut:
    """Validate and persist an evidence photo under a fresh name.

    Args:
        store (PhotoStore): Blob store to write to
        upload (PhotoUpload): Data URL and the caller's base name

    Returns:
        PhotoUploadOut: Public URL and generated file name

    Raises:
        InvalidInputError: If the image or file name is rejected
    """
    if not is_safe_file_name(upload.file_name):
        raise InvalidInputError("Invalid filename")
    image_format, raw = _decode_photo(upload.file_data)

    stored_name = _unique_file_name(store, upload.file_name, image_format)
    store.write(stored_name, raw, content_type=f"image/{image_format}")
    log.info(f"Stored photo {stored_name} ({len(raw)} bytes)")
    return PhotoUploadOut(url=store.url_for(stored_name), fileName=stored_name)


def get_photo_logic(store: PhotoStore, file_name: str) -> Optional[bytes]:
    """Stored bytes, or None for both unsafe and unknown names."""
    if not is_safe_file_name(file_name):
        log.warning(f"Rejected photo lookup for unsafe name {file_name!r}")
        return None
    return store.read(file_name)


def delete_photo_logic(store: PhotoStore, file_name: str) -> None:
    """Remove a stored photo; a name that was never stored is not an error."""
    if not is_safe_file_name(file_name):
        raise InvalidInputError("Invalid filename")
    store.delete(file_name)


def generate_photo_thumbnail_logic(
    file_data: str, threshold_bytes: int = None, max_size: int = None
) -> str:
    """
    Shrink a large photo for previews.

    Images already under the threshold come back unchanged. Larger ones
    are scaled down with Pillow to fit ``max_size`` on the longer side and
    re-encoded in their original format.
    """
    threshold_bytes = threshold_bytes or settings.THUMBNAIL_THRESHOLD_BYTES
    max_size = max_size or settings.THUMBNAIL_MAX_SIZE

    image_format, raw = _decode_photo(file_data)
    if len(raw) <= threshold_bytes:
        return file_data

    try:
        with Image.open(io.BytesIO(raw)) as image:
            image.thumbnail((max_size, max_size))
            if image_format == "jpeg" and image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            output = io.BytesIO()
            image.save(output, format=PIL_FORMATS[image_format])
    except Image.DecompressionBombError as e:
        raise InvalidInputError("Image dimensions are too large") from e
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidInputError("Image data could not be decoded") from e

    thumbnail = output.getvalue()
    if len(thumbnail) >= len(raw):
        return file_data
    encoded = base64.b64encode(thumbnail).decode("ascii")
    return f"data:image/{image_format};base64,{encoded}"
