from typing import Optional

from sqlalchemy.orm import Session

from violation_tracker.database import commit_or_raise
from violation_tracker.exceptions import AuthenticationError, ConflictError
from violation_tracker.log import get_logger
from violation_tracker.model.users import User
from violation_tracker.router.auth_util import create_access_token, get_password_hash, verify_password
from violation_tracker.schema.auth_schema import LoginRequest, LoginResponse, UserCreate, UserOut

log = get_logger(__name__)


def to_user_out(user: User) -> UserOut:
    """Public view of a user; the password hash is never exposed."""
    return UserOut(
        id=user.id,
        username=user.username,
        password="",
        role=user.role,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def create_user_logic(db: Session, user_in: UserCreate) -> UserOut:
    """Create an admin or teacher account.

    Args:
        db (Session): Database session
        user_in (UserCreate): Username, plain password and role

    Returns:
        UserOut: The stored user with an empty password

    Raises:
        ConflictError: If the username is already taken
    """
    if db.query(User).filter(User.username == user_in.username).first():
        raise ConflictError("Username already exists")

    new_user = User(
        username=user_in.username,
        hashed_password=get_password_hash(user_in.password),
        role=user_in.role,
    )
    db.add(new_user)
    commit_or_raise(db, "Username already exists")
    db.refresh(new_user)
    log.info(f"Created {new_user.role.value} account {new_user.username}")
    return to_user_out(new_user)


def login_logic(db: Session, credentials: LoginRequest) -> LoginResponse:
    """Check a username/password pair and issue a bearer token.

    Raises:
        AuthenticationError: Same message for unknown user and wrong password
    """
    user = db.query(User).filter(User.username == credentials.username).first()
    if not user or not verify_password(credentials.password, user.hashed_password):
        raise AuthenticationError("Invalid username or password")

    access_token = create_access_token(user.id, user.username, user.role.value)
    return LoginResponse(user=to_user_out(user), access_token=access_token)


def get_user_logic(db: Session, user_id: int) -> Optional[UserOut]:
    user = db.get(User, user_id)
    if not user:
        return None
    return to_user_out(user)
