from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from violation_tracker.database import get_db
from violation_tracker.router.api.logics.whatsapp_logic import (
    generate_violation_message_logic,
    mark_whatsapp_sent_logic,
    preview_whatsapp_message_logic,
    send_whatsapp_message_logic,
)
from violation_tracker.router.dependencies import get_whatsapp_gateway
from violation_tracker.router.whatsapp_gateway import WhatsAppGateway
from violation_tracker.schema.violation_schema import ViolationOut
from violation_tracker.schema.whatsapp_schema import (
    WhatsAppMarkSent, WhatsAppPreview, WhatsAppSend, WhatsAppSendResult,
)

router = APIRouter()


@router.post("/send", response_model=WhatsAppSendResult, response_model_exclude_none=True,
             status_code=status.HTTP_200_OK)
def send_whatsapp_message(
    send_in: WhatsAppSend,
    db: Session = Depends(get_db),
    gateway: WhatsAppGateway = Depends(get_whatsapp_gateway),
):
    return send_whatsapp_message_logic(db, gateway, send_in)


@router.get("/message/{violation_id}", response_model=str, status_code=status.HTTP_200_OK)
async def generate_violation_message(violation_id: int, db: Session = Depends(get_db)):
    return generate_violation_message_logic(db, violation_id)


@router.get("/preview/{violation_id}", response_model=WhatsAppPreview, status_code=status.HTTP_200_OK)
async def preview_whatsapp_message(violation_id: int, db: Session = Depends(get_db)):
    return preview_whatsapp_message_logic(db, violation_id)


@router.post("/mark-sent", response_model=ViolationOut, status_code=status.HTTP_200_OK)
async def mark_whatsapp_sent(payload: WhatsAppMarkSent, db: Session = Depends(get_db)):
    return mark_whatsapp_sent_logic(db, payload.violationId, payload.messageId)
