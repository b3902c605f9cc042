from typing import Optional

from pydantic import BaseModel, Field


class PhotoUpload(BaseModel):
    file_data: str  # data:image/<fmt>;base64,<payload>
    file_name: str = Field(min_length=1)


class PhotoData(BaseModel):
    file_data: str


class PhotoUploadOut(BaseModel):
    url: str
    fileName: str


class PhotoValidation(BaseModel):
    valid: bool
    format: Optional[str] = None
    error: Optional[str] = None


class ThumbnailOut(BaseModel):
    thumbnail: str
