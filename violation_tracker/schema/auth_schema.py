from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from violation_tracker.model.users import UserRole


class Token(BaseModel):
    """Bearer Access Token"""

    access_token: str
    token_type: str


class TokenPayload(BaseModel):
    """Payload for Bearer Access Token"""
    sub: str  # user id
    username: str
    role: UserRole
    exp: int


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserCreate(BaseModel):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    role: UserRole


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    # never populated from the stored hash
    password: str = ""
    role: UserRole
    created_at: datetime
    updated_at: datetime


class LoginResponse(BaseModel):
    user: UserOut
    access_token: str
    token_type: str = "bearer"
