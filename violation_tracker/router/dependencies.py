from typing import Tuple

from fastapi import Depends, Query, Request, status, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt
from pydantic import ValidationError
from sqlalchemy.orm import Session

from violation_tracker.config import settings
from violation_tracker.database import get_db
from violation_tracker.model.users import User, UserRole
from violation_tracker.router.photo_store import PhotoStore
from violation_tracker.router.whatsapp_gateway import WhatsAppGateway
from violation_tracker.schema.auth_schema import TokenPayload

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def get_pagination_params(
    offset: int = Query(0, ge=0), limit: int = Query(1000, gt=0)
) -> Tuple[int, int]:
    return offset, limit


def get_whatsapp_gateway(request: Request) -> WhatsAppGateway:
    return request.app.state.whatsapp_gateway


def get_photo_store(request: Request) -> PhotoStore:
    return request.app.state.photo_store


def get_token(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        token_data = TokenPayload(**payload)
    except (jwt.JWTError, ValidationError) as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Could not validate credentials") from e
    return token_data


def get_current_user(
    db: Session = Depends(get_db), token: TokenPayload = Depends(get_token)
) -> User:
    user = db.get(User, int(token.sub))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return user


def get_current_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    if current_user.role != UserRole.admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This user isn't an admin.",
        )
    return current_user
