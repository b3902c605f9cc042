# create_tables.py
from sqlalchemy import inspect

from violation_tracker import model  # noqa: F401
from violation_tracker.config import settings
from violation_tracker.database import ENGINE, SessionLocal
from violation_tracker.database.base_class import Base
from violation_tracker.model.users import User, UserRole
from violation_tracker.router.auth_util import get_password_hash


Base.metadata.create_all(bind=ENGINE)
print("Tables created.")

inspector = inspect(ENGINE)
print("Existing tables:", inspector.get_table_names())

if settings.FIRST_ADMIN_PASSWORD:
    with SessionLocal() as db:
        if not db.query(User).filter(User.username == settings.FIRST_ADMIN_USERNAME).first():
            db.add(User(
                username=settings.FIRST_ADMIN_USERNAME,
                hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                role=UserRole.admin,
            ))
            db.commit()
            print(f"Admin account '{settings.FIRST_ADMIN_USERNAME}' created.")
