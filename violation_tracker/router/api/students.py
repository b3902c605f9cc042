from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from violation_tracker.database import get_db
from violation_tracker.router.api.logics.student_logic import (
    bulk_create_students_logic,
    create_student_logic,
    delete_student_logic,
    get_import_template_logic,
    get_student_logic,
    get_students_logic,
    update_student_logic,
)
from violation_tracker.schema.student_schema import StudentBulkCreate, StudentCreate, StudentOut, StudentUpdate

router = APIRouter()


@router.get("", response_model=List[StudentOut], status_code=status.HTTP_200_OK)
async def get_students(db: Session = Depends(get_db)):
    return get_students_logic(db)


@router.get("/template", status_code=status.HTTP_200_OK)
async def get_import_template():
    return Response(
        content=get_import_template_logic(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="template_siswa.csv"'},
    )


@router.post("/bulk", response_model=List[StudentOut], status_code=status.HTTP_201_CREATED)
async def bulk_create_students(payload: StudentBulkCreate, db: Session = Depends(get_db)):
    return bulk_create_students_logic(db, payload)


@router.get("/{student_id}", response_model=Optional[StudentOut], status_code=status.HTTP_200_OK)
async def get_student(student_id: int, db: Session = Depends(get_db)):
    return get_student_logic(db, student_id)


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
async def create_student(student: StudentCreate, db: Session = Depends(get_db)):
    return create_student_logic(db, student)


@router.put("", response_model=StudentOut, status_code=status.HTTP_200_OK)
async def update_student(student: StudentUpdate, db: Session = Depends(get_db)):
    return update_student_logic(db, student)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(student_id: int, db: Session = Depends(get_db)):
    delete_student_logic(db, student_id)
