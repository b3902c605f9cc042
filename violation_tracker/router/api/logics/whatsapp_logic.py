from datetime import datetime, timezone
from typing import Tuple
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from violation_tracker.config import settings
from violation_tracker.database import commit_or_raise
from violation_tracker.exceptions import NotFoundError
from violation_tracker.log import get_logger
from violation_tracker.model.students import Student
from violation_tracker.model.users import utcnow
from violation_tracker.model.violations import Violation
from violation_tracker.router.whatsapp_gateway import WhatsAppGateway
from violation_tracker.schema.whatsapp_schema import WhatsAppPreview, WhatsAppSend, WhatsAppSendResult

log = get_logger(__name__)

# Monday first, matching datetime.weekday()
HARI = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
BULAN = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def _localize(moment: datetime, tz_name: str) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(tz_name))


def format_tanggal(moment: datetime) -> str:
    """e.g. 'Senin, 15 Januari 2024'"""
    return f"{HARI[moment.weekday()]}, {moment.day} {BULAN[moment.month - 1]} {moment.year}"


def format_waktu(moment: datetime) -> str:
    """24-hour clock with a dot separator, e.g. '14.30'"""
    return f"{moment.hour:02d}.{moment.minute:02d}"


def compose_violation_message(
    violation: Violation,
    student: Student,
    school_name: str = None,
    tz_name: str = None,
) -> str:
    """
    Render the parent notification for one violation.

    The "Keterangan" and "Bukti foto" lines are left out entirely when the
    violation has no description or photo.

    Parameters:
        violation (Violation): The recorded violation.
        student (Student): The student the violation belongs to.
        school_name (str): Sign-off name. Defaults to settings.SCHOOL_NAME.
        tz_name (str): Zone used for the date and time. Defaults to settings.SCHOOL_TIMEZONE.

    Returns:
        str: The message text.
    """
    school_name = school_name or settings.SCHOOL_NAME
    moment = _localize(violation.violation_time, tz_name or settings.SCHOOL_TIMEZONE)

    lines = [
        "Assalamu'alaikum Bapak/Ibu,",
        "",
        "Kami dari pihak sekolah ingin memberitahukan bahwa anak Bapak/Ibu:",
        "",
        f"Nama: {student.name}",
        f"Kelas: {student.class_name}",
        f"NISN: {student.nisn}",
        "",
        "Telah melakukan pelanggaran pada:",
        f"Hari/Tanggal: {format_tanggal(moment)}",
        f"Waktu: {format_waktu(moment)}",
        f"Jenis Pelanggaran: {violation.violation_type}",
        f"Lokasi: {violation.location}",
    ]
    if violation.description:
        lines.append(f"Keterangan: {violation.description}")
    if violation.photo_url:
        lines += ["", f"Bukti foto: {violation.photo_url}"]
    lines += [
        "",
        "Mohon untuk memberikan pembinaan kepada anak Bapak/Ibu di rumah.",
        "",
        "Terima kasih atas perhatiannya.",
        "",
        "Hormat kami,",
        school_name,
    ]
    return "\n".join(lines)


def _load_violation_with_student(db: Session, violation_id: int) -> Tuple[Violation, Student]:
    row = (
        db.query(Violation, Student)
        .join(Student, Violation.student_id == Student.id)
        .filter(Violation.id == violation_id)
        .first()
    )
    if not row:
        raise NotFoundError("Violation not found")
    return row[0], row[1]


def generate_violation_message_logic(db: Session, violation_id: int) -> str:
    violation, student = _load_violation_with_student(db, violation_id)
    return compose_violation_message(violation, student)


def preview_whatsapp_message_logic(db: Session, violation_id: int) -> WhatsAppPreview:
    """Message and recipient for a violation, without sending anything."""
    violation, student = _load_violation_with_student(db, violation_id)
    return WhatsAppPreview(
        message=compose_violation_message(violation, student),
        recipient=student.parent_whatsapp,
        studentName=student.name,
        violationType=violation.violation_type,
    )


def mark_whatsapp_sent_logic(db: Session, violation_id: int, message_id: str) -> Violation:
    """
    Flag the violation as notified.

    Always stamps the current time, so calling it again for an already
    notified violation moves ``whatsapp_sent_at`` forward.
    """
    violation = db.get(Violation, violation_id)
    if not violation:
        raise NotFoundError("Violation not found")

    now = utcnow()
    violation.whatsapp_sent = True
    violation.whatsapp_sent_at = now
    violation.updated_at = now
    commit_or_raise(db, f"Violation {violation_id} could not be updated")
    db.refresh(violation)
    log.info(f"Violation {violation_id} marked as sent (message {message_id})")
    return violation


def send_whatsapp_message_logic(
    db: Session, gateway: WhatsAppGateway, send_in: WhatsAppSend
) -> WhatsAppSendResult:
    """
    Send a parent notification through the gateway.

    Delivery problems come back as ``success=False`` so the caller can tell
    them apart from request errors and retry.
    """
    if not db.get(Violation, send_in.violation_id):
        return WhatsAppSendResult(success=False, error="Violation not found")

    try:
        result = gateway.send_message(send_in.phone_number, send_in.message)
    except Exception as e:
        log.exception(f"WhatsApp send failed for violation {send_in.violation_id}: {e}")
        return WhatsAppSendResult(success=False, error="Failed to send WhatsApp message")

    if not result.success:
        log.error(f"Gateway rejected message for violation {send_in.violation_id}: {result.error}")
        return WhatsAppSendResult(success=False, error=result.error or "Failed to send WhatsApp message")

    mark_whatsapp_sent_logic(db, send_in.violation_id, result.message_id)
    return WhatsAppSendResult(success=True, messageId=result.message_id)
