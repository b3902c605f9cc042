from typing import Optional

from pydantic import BaseModel, Field


class WhatsAppSend(BaseModel):
    violation_id: int
    phone_number: str = Field(min_length=1)
    message: str = Field(min_length=1)


class WhatsAppSendResult(BaseModel):
    success: bool
    messageId: Optional[str] = None
    error: Optional[str] = None


class WhatsAppPreview(BaseModel):
    message: str
    recipient: str
    studentName: str
    violationType: str


class WhatsAppMarkSent(BaseModel):
    violationId: int
    messageId: str
