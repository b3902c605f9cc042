from typing import List, Optional

from sqlalchemy.orm import Session

from violation_tracker.database import commit_or_raise
from violation_tracker.exceptions import NotFoundError
from violation_tracker.log import get_logger
from violation_tracker.model.students import Student
from violation_tracker.model.users import User, utcnow
from violation_tracker.model.violations import Violation
from violation_tracker.schema.violation_schema import ViolationCreate, ViolationFilter, ViolationUpdate

log = get_logger(__name__)


def _require_student(db: Session, student_id: int) -> Student:
    student = db.get(Student, student_id)
    if not student:
        raise NotFoundError(f"Student with id {student_id} not found")
    return student


def _require_violation(db: Session, violation_id: int) -> Violation:
    violation = db.get(Violation, violation_id)
    if not violation:
        raise NotFoundError(f"Violation with id {violation_id} not found")
    return violation


def create_violation_logic(db: Session, violation_in: ViolationCreate) -> Violation:
    """Record a new violation for a student.

    The student and the reporting user are checked up front so the caller
    learns which reference is wrong; the foreign keys still back this up.

    Args:
        db (Session): Database session
        violation_in (ViolationCreate): Violation data

    Returns:
        Violation: The stored record, not yet notified

    Raises:
        NotFoundError: If the student or reporter does not exist
    """
    _require_student(db, violation_in.student_id)
    if not db.get(User, violation_in.reported_by):
        raise NotFoundError(f"User with id {violation_in.reported_by} not found")

    now = utcnow()
    violation = Violation(
        **violation_in.model_dump(),
        whatsapp_sent=False,
        whatsapp_sent_at=None,
        created_at=now,
        updated_at=now,
    )
    db.add(violation)
    commit_or_raise(db, "Student or reporter no longer exists")
    db.refresh(violation)
    log.info(f"Violation {violation.id} recorded for student {violation.student_id}")
    return violation


def get_violation_logic(db: Session, violation_id: int) -> Optional[Violation]:
    return db.get(Violation, violation_id)


def get_violations_logic(db: Session, filters: Optional[ViolationFilter] = None) -> List[Violation]:
    """List violations, most recent incident first.

    An unknown ``student_id`` yields an empty list rather than an error.
    """
    filters = filters or ViolationFilter()
    query = db.query(Violation)
    if filters.student_id is not None:
        query = query.filter(Violation.student_id == filters.student_id)
    return (
        query.order_by(Violation.violation_time.desc(), Violation.id.desc())
        .offset(filters.offset)
        .limit(filters.limit)
        .all()
    )


def get_violations_by_student_logic(db: Session, student_id: int) -> List[Violation]:
    """All violations of one student; unlike the filtered list, an unknown student is an error."""
    _require_student(db, student_id)
    return (
        db.query(Violation)
        .filter(Violation.student_id == student_id)
        .order_by(Violation.violation_time.desc(), Violation.id.desc())
        .all()
    )


def update_violation_logic(db: Session, violation_in: ViolationUpdate) -> Violation:
    """Apply a partial update.

    Only fields present in the request are written. Every
    ``whatsapp_sent=True`` stamps ``whatsapp_sent_at`` with the current time,
    even when the violation was already sent; ``whatsapp_sent=False`` clears
    the stamp so the two stay consistent.
    """
    violation = _require_violation(db, violation_in.id)
    changes = violation_in.model_dump(exclude_unset=True, exclude={"id"})

    if "student_id" in changes:
        _require_student(db, changes["student_id"])

    now = utcnow()
    if "whatsapp_sent" in changes:
        sent = changes.pop("whatsapp_sent")
        if sent:
            violation.whatsapp_sent_at = now
        else:
            violation.whatsapp_sent_at = None
        violation.whatsapp_sent = sent

    for field, value in changes.items():
        setattr(violation, field, value)
    violation.updated_at = now

    commit_or_raise(db, "Student no longer exists")
    db.refresh(violation)
    return violation


def delete_violation_logic(db: Session, violation_id: int) -> None:
    violation = _require_violation(db, violation_id)
    db.delete(violation)
    commit_or_raise(db, f"Violation {violation_id} could not be deleted")
    log.info(f"Violation {violation_id} deleted")
