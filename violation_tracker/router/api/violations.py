from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from violation_tracker.database import get_db
from violation_tracker.router.api.logics.violation_logic import (
    create_violation_logic,
    delete_violation_logic,
    get_violation_logic,
    get_violations_by_student_logic,
    get_violations_logic,
    update_violation_logic,
)
from violation_tracker.router.dependencies import get_pagination_params
from violation_tracker.schema.violation_schema import ViolationCreate, ViolationFilter, ViolationOut, ViolationUpdate

router = APIRouter()


@router.get("", response_model=List[ViolationOut], status_code=status.HTTP_200_OK)
async def get_violations(
    student_id: Optional[int] = Query(None),
    pagination: Tuple[int, int] = Depends(get_pagination_params),
    db: Session = Depends(get_db),
):
    offset, limit = pagination
    return get_violations_logic(db, ViolationFilter(student_id=student_id, limit=limit, offset=offset))


@router.get("/student/{student_id}", response_model=List[ViolationOut], status_code=status.HTTP_200_OK)
async def get_violations_by_student(student_id: int, db: Session = Depends(get_db)):
    return get_violations_by_student_logic(db, student_id)


@router.get("/{violation_id}", response_model=Optional[ViolationOut], status_code=status.HTTP_200_OK)
async def get_violation(violation_id: int, db: Session = Depends(get_db)):
    return get_violation_logic(db, violation_id)


@router.post("", response_model=ViolationOut, status_code=status.HTTP_201_CREATED)
async def create_violation(violation: ViolationCreate, db: Session = Depends(get_db)):
    return create_violation_logic(db, violation)


@router.put("", response_model=ViolationOut, status_code=status.HTTP_200_OK)
async def update_violation(violation: ViolationUpdate, db: Session = Depends(get_db)):
    return update_violation_logic(db, violation)


@router.delete("/{violation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_violation(violation_id: int, db: Session = Depends(get_db)):
    delete_violation_logic(db, violation_id)
