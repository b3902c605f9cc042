from fastapi import APIRouter, Depends, HTTPException, Response, status

from violation_tracker.router.api.logics.photo_logic import (
    delete_photo_logic,
    generate_photo_thumbnail_logic,
    get_photo_logic,
    upload_photo_logic,
    validate_photo_format_logic,
)
from violation_tracker.router.dependencies import get_photo_store
from violation_tracker.router.photo_store import PhotoStore
from violation_tracker.schema.photo_schema import (
    PhotoData, PhotoUpload, PhotoUploadOut, PhotoValidation, ThumbnailOut,
)

router = APIRouter()

MEDIA_TYPES = {"jpeg": "image/jpeg", "jpg": "image/jpeg", "png": "image/png", "gif": "image/gif"}


@router.post("/validate", response_model=PhotoValidation, response_model_exclude_none=True,
             status_code=status.HTTP_200_OK)
async def validate_photo(photo: PhotoData):
    return validate_photo_format_logic(photo.file_data)


@router.post("/upload", response_model=PhotoUploadOut, status_code=status.HTTP_201_CREATED)
def upload_photo(upload: PhotoUpload, store: PhotoStore = Depends(get_photo_store)):
    return upload_photo_logic(store, upload)


@router.post("/thumbnail", response_model=ThumbnailOut, status_code=status.HTTP_200_OK)
def generate_thumbnail(photo: PhotoData):
    return ThumbnailOut(thumbnail=generate_photo_thumbnail_logic(photo.file_data))


@router.get("/{file_name}", status_code=status.HTTP_200_OK)
def get_photo(file_name: str, store: PhotoStore = Depends(get_photo_store)):
    content = get_photo_logic(store, file_name)
    if content is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Photo not found")
    extension = file_name.rsplit(".", 1)[-1].lower()
    return Response(content=content, media_type=MEDIA_TYPES.get(extension, "application/octet-stream"))


@router.delete("/{file_name}", status_code=status.HTTP_204_NO_CONTENT)
def delete_photo(file_name: str, store: PhotoStore = Depends(get_photo_store)):
    delete_photo_logic(store, file_name)
