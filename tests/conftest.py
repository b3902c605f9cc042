import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["WHATSAPP_DRY_RUN"] = "true"
os.environ["PHOTO_STORAGE"] = "local"

import base64
import io
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from violation_tracker import model  # noqa: F401
from violation_tracker.database import SessionLocal, ENGINE, get_db
from violation_tracker.database.base_class import Base
from violation_tracker.main import app
from violation_tracker.model.students import Student
from violation_tracker.model.users import User, UserRole
from violation_tracker.model.violations import Violation
from violation_tracker.router.auth_util import create_access_token, get_password_hash
from violation_tracker.router.dependencies import get_photo_store, get_whatsapp_gateway
from violation_tracker.router.photo_store import LocalPhotoStore
from violation_tracker.router.whatsapp_gateway import GatewayResult, generate_message_id


class RecordingGateway:
    """Messaging gateway double that remembers what it was asked to send."""

    def __init__(self):
        self.sent = []
        self.fail_with = None
        self.raise_error = None

    def send_message(self, phone_number, message):
        if self.raise_error:
            raise self.raise_error
        if self.fail_with:
            return GatewayResult(success=False, error=self.fail_with)
        self.sent.append((phone_number, message))
        return GatewayResult(success=True, message_id=generate_message_id())


def image_data_url(fmt="PNG", size=(4, 4), color=(200, 30, 30), image=None):
    image = image or Image.new("RGB", size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/{fmt.lower()};base64,{encoded}"


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=ENGINE)
    yield
    Base.metadata.drop_all(bind=ENGINE)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def photo_store(tmp_path):
    return LocalPhotoStore(str(tmp_path / "uploads" / "photos"), "/uploads/photos")


@pytest.fixture
def client(gateway, photo_store):
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_whatsapp_gateway] = lambda: gateway
    app.dependency_overrides[get_photo_store] = lambda: photo_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(username="guru_bk", password="rahasia123", role=UserRole.teacher):
        user = User(username=username, hashed_password=get_password_hash(password), role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_student(db):
    def _make_student(nisn="1234567890", name="Ahmad Budi", class_name="12 IPA 1",
                      parent_name="Budi Santoso", parent_whatsapp="+6281234567890"):
        student = Student(nisn=nisn, name=name, class_name=class_name,
                          parent_name=parent_name, parent_whatsapp=parent_whatsapp)
        db.add(student)
        db.commit()
        db.refresh(student)
        return student
    return _make_student


@pytest.fixture
def make_violation(db):
    def _make_violation(student, reporter, violation_type="Terlambat", location="Gerbang Sekolah",
                        description=None, photo_url=None,
                        violation_time=datetime(2024, 1, 15, 7, 30, tzinfo=timezone.utc)):
        violation = Violation(
            student_id=student.id,
            reported_by=reporter.id,
            violation_type=violation_type,
            location=location,
            description=description,
            photo_url=photo_url,
            violation_time=violation_time,
        )
        db.add(violation)
        db.commit()
        db.refresh(violation)
        return violation
    return _make_violation


@pytest.fixture
def admin_headers(make_user):
    admin = make_user(username="admin", password="adminpass456", role=UserRole.admin)
    token = create_access_token(admin.id, admin.username, admin.role.value)
    return {"Authorization": f"Bearer {token}"}
