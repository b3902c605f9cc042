import inspect
import re
import time
from datetime import datetime, timezone

import pytest
import requests

from violation_tracker.exceptions import NotFoundError
from violation_tracker.router import whatsapp_gateway
from violation_tracker.router.api import whatsapp
from violation_tracker.router.api.logics.whatsapp_logic import (
    compose_violation_message,
    format_tanggal,
    generate_violation_message_logic,
    mark_whatsapp_sent_logic,
    preview_whatsapp_message_logic,
    send_whatsapp_message_logic,
)
from violation_tracker.router.whatsapp_gateway import (
    CloudApiWhatsAppGateway,
    DryRunWhatsAppGateway,
    normalize_phone_number,
)
from violation_tracker.schema.whatsapp_schema import WhatsAppSend


@pytest.fixture
def reported(make_student, make_user, make_violation):
    student, user = make_student(), make_user()
    violation = make_violation(
        student, user,
        description="Terlambat 30 menit tanpa keterangan",
        photo_url="https://example.com/photo.jpg",
    )
    return student, violation


def test_message_contains_student_and_incident_details(db, reported):
    _, violation = reported

    message = generate_violation_message_logic(db, violation.id)

    assert message.startswith("Assalamu'alaikum Bapak/Ibu")
    for expected in ("Ahmad Budi", "12 IPA 1", "1234567890", "Terlambat", "Gerbang Sekolah",
                     "Senin, 15 Januari 2024", "Hormat kami", "Sekolah"):
        assert expected in message
    assert "Keterangan: Terlambat 30 menit tanpa keterangan" in message
    assert "Bukti foto: https://example.com/photo.jpg" in message
    assert re.search(r"Waktu: \d{2}\.\d{2}", message)


def test_message_omits_optional_lines(db, make_student, make_user, make_violation):
    violation = make_violation(make_student(), make_user(), violation_type="Tidak Berseragam",
                               location="Kelas", description=None, photo_url=None)

    message = generate_violation_message_logic(db, violation.id)

    assert "Keterangan:" not in message
    assert "Bukti foto:" not in message
    assert "Tidak Berseragam" in message


def test_message_treats_empty_strings_as_absent(db, make_student, make_user, make_violation):
    violation = make_violation(make_student(), make_user(), description="", photo_url="")

    message = generate_violation_message_logic(db, violation.id)

    assert "Keterangan:" not in message
    assert "Bukti foto:" not in message


def test_compose_uses_school_timezone_and_name(db, reported):
    student, violation = reported

    jakarta = compose_violation_message(violation, student, school_name="SMA Negeri 1", tz_name="Asia/Jakarta")
    utc = compose_violation_message(violation, student, tz_name="UTC")

    assert "Waktu: 14.30" in jakarta
    assert jakarta.rstrip().endswith("SMA Negeri 1")
    assert "Waktu: 07.30" in utc


def test_format_tanggal_full_names():
    assert format_tanggal(datetime(2024, 8, 17)) == "Sabtu, 17 Agustus 2024"
    assert format_tanggal(datetime(2023, 12, 31)) == "Minggu, 31 Desember 2023"


def test_generate_message_missing_violation(db):
    with pytest.raises(NotFoundError, match="(?i)violation not found"):
        generate_violation_message_logic(db, 99999)


def test_preview(db, reported):
    _, violation = reported

    preview = preview_whatsapp_message_logic(db, violation.id)

    assert preview.message.startswith("Assalamu'alaikum Bapak/Ibu")
    assert preview.recipient == "+6281234567890"
    assert preview.studentName == "Ahmad Budi"
    assert preview.violationType == "Terlambat"

    db.expire_all()
    assert db.get(type(violation), violation.id).whatsapp_sent is False

    with pytest.raises(NotFoundError):
        preview_whatsapp_message_logic(db, 99999)


def test_send_marks_violation(db, reported, gateway):
    student, violation = reported

    result = send_whatsapp_message_logic(
        db, gateway, WhatsAppSend(violation_id=violation.id, phone_number=student.parent_whatsapp, message="Halo")
    )

    assert result.success is True
    assert result.messageId.startswith("wa_")
    assert gateway.sent == [("+6281234567890", "Halo")]
    db.expire_all()
    stored = db.get(type(violation), violation.id)
    assert stored.whatsapp_sent is True
    assert stored.whatsapp_sent_at is not None


def test_send_missing_violation_returns_failure(db, gateway):
    result = send_whatsapp_message_logic(
        db, gateway, WhatsAppSend(violation_id=99999, phone_number="+62811", message="Halo")
    )

    assert result.success is False
    assert result.error == "Violation not found"
    assert result.messageId is None
    assert gateway.sent == []


def test_send_gateway_failure_leaves_violation_unsent(db, reported, gateway):
    student, violation = reported
    gateway.fail_with = "WhatsApp API error: 401"

    result = send_whatsapp_message_logic(
        db, gateway, WhatsAppSend(violation_id=violation.id, phone_number=student.parent_whatsapp, message="Halo")
    )

    assert result.success is False
    assert result.error == "WhatsApp API error: 401"
    db.expire_all()
    stored = db.get(type(violation), violation.id)
    assert stored.whatsapp_sent is False
    assert stored.whatsapp_sent_at is None


def test_send_gateway_exception_is_reported_as_value(db, reported, gateway):
    student, violation = reported
    gateway.raise_error = ConnectionError("network down")

    result = send_whatsapp_message_logic(
        db, gateway, WhatsAppSend(violation_id=violation.id, phone_number=student.parent_whatsapp, message="Halo")
    )

    assert result.success is False
    assert result.error == "Failed to send WhatsApp message"


def test_mark_sent_advances_timestamp(db, reported):
    _, violation = reported

    first = mark_whatsapp_sent_logic(db, violation.id, "first_message").whatsapp_sent_at
    time.sleep(0.01)
    second = mark_whatsapp_sent_logic(db, violation.id, "second_message")

    assert second.whatsapp_sent is True
    assert second.whatsapp_sent_at > first


def test_mark_sent_missing_violation(db):
    with pytest.raises(NotFoundError):
        mark_whatsapp_sent_logic(db, 99999, "id")


def test_whatsapp_routes(client, reported):
    student, violation = reported

    preview = client.get(f"/whatsapp/preview/{violation.id}")
    assert preview.status_code == 200
    assert preview.json()["studentName"] == "Ahmad Budi"

    message = client.get(f"/whatsapp/message/{violation.id}").json()
    assert "Senin, 15 Januari 2024" in message

    sent = client.post("/whatsapp/send", json={
        "violation_id": violation.id,
        "phone_number": student.parent_whatsapp,
        "message": message,
    })
    assert sent.status_code == 200
    assert sent.json()["success"] is True
    assert "error" not in sent.json()

    missing = client.post("/whatsapp/send", json={"violation_id": 99999, "phone_number": "1", "message": "x"})
    assert missing.status_code == 200
    assert missing.json() == {"success": False, "error": "Violation not found"}

    marked = client.post("/whatsapp/mark-sent", json={"violationId": violation.id, "messageId": "abc"})
    assert marked.json()["whatsapp_sent"] is True

    assert client.get("/whatsapp/preview/99999").status_code == 404


def test_dry_run_gateway_generates_ids():
    result = DryRunWhatsAppGateway().send_message("+62811", "Halo")
    assert result.success is True
    assert re.fullmatch(r"wa_\d+_[a-z0-9]{9}", result.message_id)


def test_normalize_phone_number():
    assert normalize_phone_number("0812-3456-7890") == "6281234567890"
    assert normalize_phone_number("+62 812 3456 7890") == "6281234567890"


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


def test_cloud_api_gateway_success(monkeypatch):
    calls = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append((url, headers, json))
        return FakeResponse(200, {"messages": [{"id": "wamid.ABC"}]})

    monkeypatch.setattr(whatsapp_gateway.requests, "post", fake_post)
    gateway = CloudApiWhatsAppGateway("token", "12345", "https://graph.facebook.com/v17.0")

    result = gateway.send_message("081234567890", "Halo")

    assert result.success is True
    assert result.message_id == "wamid.ABC"
    url, headers, body = calls[0]
    assert url == "https://graph.facebook.com/v17.0/12345/messages"
    assert headers["Authorization"] == "Bearer token"
    assert body["to"] == "6281234567890"
    assert body["text"] == {"body": "Halo"}


def test_cloud_api_gateway_failures(monkeypatch):
    gateway = CloudApiWhatsAppGateway("token", "12345", "https://graph.facebook.com/v17.0")

    monkeypatch.setattr(whatsapp_gateway.requests, "post",
                        lambda *a, **kw: FakeResponse(401, text="unauthorized"))
    rejected = gateway.send_message("0812", "Halo")
    assert rejected.success is False
    assert "401" in rejected.error

    def boom(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(whatsapp_gateway.requests, "post", boom)
    failed = gateway.send_message("0812", "Halo")
    assert failed.success is False
    assert failed.error == "Failed to send WhatsApp message"


def test_send_route_runs_in_threadpool():
    assert not inspect.iscoroutinefunction(whatsapp.send_whatsapp_message)
