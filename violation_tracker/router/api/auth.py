from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from violation_tracker.database import get_db
from violation_tracker.model.users import User
from violation_tracker.router.api.logics.auth_logic import (
    create_user_logic, get_user_logic, login_logic, to_user_out,
)
from violation_tracker.router.dependencies import get_current_admin, get_current_user
from violation_tracker.schema.auth_schema import LoginRequest, LoginResponse, Token, UserCreate, UserOut

router = APIRouter()


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """
    Log in an admin or teacher.

    Returns the user (password blanked) and a bearer token.
    """
    return login_logic(db, credentials)


@router.post("/token", response_model=Token, status_code=status.HTTP_200_OK)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)
):
    """OAuth2 password flow used by the interactive docs."""
    result = login_logic(db, LoginRequest(username=form_data.username, password=form_data.password))
    return Token(access_token=result.access_token, token_type=result.token_type)


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return create_user_logic(db, user_in)


@router.get("/users/{user_id}", response_model=Optional[UserOut], status_code=status.HTTP_200_OK)
async def get_user(user_id: int, db: Session = Depends(get_db)):
    return get_user_logic(db, user_id)


@router.get("/me", response_model=UserOut, status_code=status.HTTP_200_OK)
async def get_me(current_user: User = Depends(get_current_user)):
    return to_user_out(current_user)
