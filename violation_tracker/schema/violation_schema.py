from typing import Annotated, Optional
from datetime import datetime, timezone

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store every timestamp as aware UTC; naive input is read as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class ViolationCreate(BaseModel):
    student_id: int
    violation_type: str = Field(min_length=1)
    location: str = Field(min_length=1)
    description: Optional[str] = None
    photo_url: Optional[str] = None
    violation_time: UtcDatetime
    reported_by: int


class ViolationUpdate(BaseModel):
    """
    Partial update of a violation.

    Every field except ``id`` is optional; ``model_fields_set`` tells the
    logic layer which ones the caller actually supplied. ``description`` and
    ``photo_url`` may be supplied as null to clear them.
    """
    id: int
    student_id: Optional[int] = None
    violation_type: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    photo_url: Optional[str] = None
    violation_time: Optional[UtcDatetime] = None
    whatsapp_sent: Optional[bool] = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        nullable = {"id", "description", "photo_url"}
        for field in self.model_fields_set - nullable:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class ViolationFilter(BaseModel):
    student_id: Optional[int] = None
    limit: int = Field(default=1000, gt=0)
    offset: int = Field(default=0, ge=0)


class ViolationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    violation_type: str
    location: str
    description: Optional[str]
    photo_url: Optional[str]
    violation_time: datetime
    reported_by: int
    whatsapp_sent: bool
    whatsapp_sent_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
