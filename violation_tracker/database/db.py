from typing import Generator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from violation_tracker.database.session import SQLALCHEMY_DATABASE_URL, get_engine, get_local_session
from violation_tracker.exceptions import ConflictError, DependencyError
from violation_tracker.log import get_logger

log = get_logger(__name__)


ENGINE = get_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = get_local_session(ENGINE)


def get_db() -> Generator:  # pragma: no cover
    """
    Returns a generator that yields a database session

    Yields:
        Session: A database session object.
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db: Session, conflict_detail: str) -> None:
    """
    Commit the current transaction, translating store failures.

    The store's unique and foreign-key constraints are the real guard
    against concurrent writes; a violation of either surfaces here.

    Parameters:
        db (Session): Database session with pending changes.
        conflict_detail (str): Message used when a constraint rejects the write.

    Raises:
        ConflictError: If the store reports an integrity violation.
        DependencyError: If the store fails for any other reason.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log.error("Integrity error on commit: %s", e.orig)
        raise ConflictError(conflict_detail) from e
    except SQLAlchemyError as e:
        db.rollback()
        log.error("Database error on commit: %s", e)
        raise DependencyError("Database operation failed") from e
