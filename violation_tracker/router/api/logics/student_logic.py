import csv
import io
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from violation_tracker.database import commit_or_raise
from violation_tracker.exceptions import ConflictError, NotFoundError
from violation_tracker.log import get_logger
from violation_tracker.model.students import Student
from violation_tracker.model.users import utcnow
from violation_tracker.model.violations import Violation
from violation_tracker.schema.student_schema import StudentBulkCreate, StudentCreate, StudentUpdate

log = get_logger(__name__)

TEMPLATE_HEADERS = ["NISN", "Nama Siswa", "Kelas", "Nama Orang Tua", "Nomor WA Orang Tua"]
TEMPLATE_SAMPLE = ["1234567890", "Contoh Siswa", "XII-A", "Contoh Orang Tua", "081234567890"]


def _nisn_conflict(nisn: str) -> str:
    return f"Student with NISN {nisn} already exists"


def get_students_logic(db: Session) -> List[Student]:
    return db.query(Student).order_by(Student.name).all()


def get_student_logic(db: Session, student_id: int) -> Optional[Student]:
    return db.get(Student, student_id)


def create_student_logic(db: Session, student: StudentCreate) -> Student:
    """Create a single student.

    Raises:
        ConflictError: If another student already has the NISN
    """
    if db.query(Student).filter(Student.nisn == student.nisn).first():
        raise ConflictError(_nisn_conflict(student.nisn))

    new_student = Student(**student.model_dump())
    db.add(new_student)
    commit_or_raise(db, _nisn_conflict(student.nisn))
    db.refresh(new_student)
    return new_student


def bulk_create_students_logic(db: Session, payload: StudentBulkCreate) -> List[Student]:
    """Insert every student or none of them.

    Duplicate NISNs are rejected whether they clash with stored students or
    with another row of the same batch.
    """
    seen = set()
    for student in payload.students:
        if student.nisn in seen:
            raise ConflictError(f"Duplicate NISN {student.nisn} in upload")
        seen.add(student.nisn)

    if seen:
        existing = db.query(Student.nisn).filter(Student.nisn.in_(list(seen))).first()
        if existing:
            raise ConflictError(_nisn_conflict(existing.nisn))

    new_students = [Student(**student.model_dump()) for student in payload.students]
    db.add_all(new_students)
    commit_or_raise(db, "One or more NISN values already exist")
    for new_student in new_students:
        db.refresh(new_student)
    log.info(f"Bulk created {len(new_students)} students")
    return new_students


def update_student_logic(db: Session, student_in: StudentUpdate) -> Student:
    student = db.get(Student, student_in.id)
    if not student:
        raise NotFoundError(f"Student with id {student_in.id} not found")

    changes = student_in.model_dump(exclude_unset=True, exclude={"id"})
    if "nisn" in changes and changes["nisn"] != student.nisn:
        if db.query(Student).filter(Student.nisn == changes["nisn"]).first():
            raise ConflictError(_nisn_conflict(changes["nisn"]))

    for field, value in changes.items():
        setattr(student, field, value)
    student.updated_at = utcnow()

    commit_or_raise(db, _nisn_conflict(student.nisn))
    db.refresh(student)
    return student


def delete_student_logic(db: Session, student_id: int) -> None:
    """Delete a student that has no recorded violations.

    Raises:
        ConflictError: If any violation still references the student
        NotFoundError: If the student does not exist
    """
    violation_count = (
        db.query(func.count(Violation.id))
        .filter(Violation.student_id == student_id)
        .scalar()
    )
    if violation_count:
        raise ConflictError("Cannot delete student with existing violations")

    student = db.get(Student, student_id)
    if not student:
        raise NotFoundError(f"Student with id {student_id} not found")

    db.delete(student)
    commit_or_raise(db, "Cannot delete student with existing violations")


def get_import_template_logic() -> bytes:
    """CSV template for bulk student import (opens directly in Excel)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(TEMPLATE_HEADERS)
    writer.writerow(TEMPLATE_SAMPLE)
    return buffer.getvalue().encode("utf-8")
