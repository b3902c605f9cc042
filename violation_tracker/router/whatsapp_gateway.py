import random
import string
import time
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from violation_tracker.config import Settings
from violation_tracker.log import get_logger

log = get_logger(__name__)


@dataclass
class GatewayResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class WhatsAppGateway(Protocol):
    def send_message(self, phone_number: str, message: str) -> GatewayResult:
        ...


def generate_message_id() -> str:
    """Opaque id in the form wa_<epoch ms>_<9 base36 chars>."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"wa_{int(time.time() * 1000)}_{suffix}"


class DryRunWhatsAppGateway:
    """Logs the message instead of sending it and always reports success."""

    def send_message(self, phone_number: str, message: str) -> GatewayResult:
        message_id = generate_message_id()
        log.info("WHATSAPP DRY_RUN (no actual send) to=%s id=%s", phone_number, message_id)
        log.info("Message:\n%s", message)
        return GatewayResult(success=True, message_id=message_id)


class CloudApiWhatsAppGateway:
    """WhatsApp Business Cloud API text message sender."""

    def __init__(self, token: str, phone_id: str, api_url: str, timeout: int = 10):
        self.token = token
        self.phone_id = phone_id
        self.base_url = f"{api_url.rstrip('/')}/{phone_id}/messages"
        self.timeout = timeout

    def send_message(self, phone_number: str, message: str) -> GatewayResult:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        payload = {
            "messaging_product": "whatsapp",
            "to": normalize_phone_number(phone_number),
            "type": "text",
            "text": {"body": message},
        }
        try:
            response = requests.post(self.base_url, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            log.error(f"WhatsApp request failed: {e}")
            return GatewayResult(success=False, error="Failed to send WhatsApp message")

        if response.status_code != 200:
            log.error(f"WhatsApp API error {response.status_code}: {response.text}")
            return GatewayResult(success=False, error=f"WhatsApp API error: {response.status_code}")

        messages = response.json().get("messages") or [{}]
        message_id = messages[0].get("id") or generate_message_id()
        log.info(f"WhatsApp message sent, id={message_id}")
        return GatewayResult(success=True, message_id=message_id)


def normalize_phone_number(phone_number: str) -> str:
    """
    Convert a local Indonesian number to the international form the API
    expects: digits only, leading 0 replaced by 62.
    """
    digits = "".join(ch for ch in phone_number if ch.isdigit())
    if digits.startswith("0"):
        digits = "62" + digits[1:]
    return digits


def build_whatsapp_gateway(_settings: Settings) -> WhatsAppGateway:
    if _settings.WHATSAPP_DRY_RUN:
        return DryRunWhatsAppGateway()
    if not _settings.WHATSAPP_TOKEN or not _settings.WHATSAPP_PHONE_ID:
        raise ValueError("WHATSAPP_TOKEN and WHATSAPP_PHONE_ID are required when WHATSAPP_DRY_RUN is off")
    return CloudApiWhatsAppGateway(
        token=_settings.WHATSAPP_TOKEN,
        phone_id=_settings.WHATSAPP_PHONE_ID,
        api_url=_settings.WHATSAPP_API_URL,
        timeout=_settings.WHATSAPP_TIMEOUT,
    )
