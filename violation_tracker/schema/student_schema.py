from typing import Optional, List
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

_CLASS_ALIAS = dict(
    validation_alias=AliasChoices("class", "class_name"),
    serialization_alias="class",
)


class StudentCreate(BaseModel):
    nisn: str = Field(min_length=1)
    name: str = Field(min_length=1)
    class_name: str = Field(min_length=1, **_CLASS_ALIAS)
    parent_name: str = Field(min_length=1)
    parent_whatsapp: str = Field(min_length=1)


class StudentUpdate(BaseModel):
    """Partial update; only fields present in the request are written."""
    id: int
    nisn: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    class_name: Optional[str] = Field(default=None, min_length=1, **_CLASS_ALIAS)
    parent_name: Optional[str] = Field(default=None, min_length=1)
    parent_whatsapp: Optional[str] = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for field in self.model_fields_set - {"id"}:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class StudentBulkCreate(BaseModel):
    students: List[StudentCreate]


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nisn: str
    name: str
    class_name: str = Field(**_CLASS_ALIAS)
    parent_name: str
    parent_whatsapp: str
    created_at: datetime
    updated_at: datetime
