import os
import sys
from datetime import date, datetime
from unittest.mock import patch

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_edusmart.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/99")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from edusmart.application.use_cases.register_user import EnsureAdmin
from edusmart.domain.enums import Role
from edusmart.infrastructure.db import get_db
from edusmart.infrastructure.models import Base
from edusmart.infrastructure.rate_limit import limiter
from edusmart.infrastructure.repositories import UserRepository
from edusmart.infrastructure.security import PasswordHasher, create_access_token
from edusmart.interfaces.http.deps import get_clock
from edusmart.main import app

# Monday
TODAY = datetime(2025, 3, 10, 9, 0)
TERM_START = date(2025, 3, 1)
TERM_END = date(2025, 6, 30)


class FakeClock:
    """Settable time source; tests move ``now`` to simulate another day."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """No Redis and no rate limiting in tests."""
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/99")
    limiter.enabled = False
    with patch("edusmart.infrastructure.cache.get_redis", side_effect=Exception("redis down")):
        yield
    limiter.enabled = True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # enforce foreign keys the way PostgreSQL does
    @event.listens_for(engine, "connect")
    def _foreign_keys_on(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock():
    return FakeClock(TODAY)


@pytest.fixture
def client(session_factory, clock):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(user_id: int, role: Role) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


@pytest.fixture
def register(client):
    def _register(full_name: str, role: str, password: str = "secret123") -> dict:
        response = client.post(
            "/api/auth/register",
            json={"full_name": full_name, "role": role, "password": password},
        )
        assert response.status_code == 201, response.text
        data = response.json()
        data["headers"] = bearer(data["id"], Role(role))
        return data
    return _register


@pytest.fixture
def admin(session_factory):
    db = session_factory()
    try:
        user = EnsureAdmin(UserRepository(db), PasswordHasher()).execute("admin", "admin-pass")
    finally:
        db.close()
    return {"id": user.id, "headers": bearer(user.id, Role.ADMIN)}


@pytest.fixture
def make_teacher(client, register, admin):
    """Register a teacher and push them through KYC approval."""
    def _make(full_name: str = "Nguyễn Văn An") -> dict:
        teacher = register(full_name, "teacher")
        response = client.post(
            "/api/kyc",
            json={
                "kyc_type": "lecturer",
                "data": {"work_place": "HUST", "degree_number": "D-42"},
                "files": {"degree": "/uploads/kyc/degree.jpg"},
            },
            headers=teacher["headers"],
        )
        assert response.status_code == 200, response.text
        response = client.post(f"/api/kyc/{teacher['id']}/approve", headers=admin["headers"])
        assert response.status_code == 200, response.text
        return teacher
    return _make


@pytest.fixture
def teacher(make_teacher):
    return make_teacher()


@pytest.fixture
def learner(register):
    return register("Trần Thị Bình", "learner")


@pytest.fixture
def make_course(client):
    """Create a course with one class and return both payloads."""
    def _make(
        teacher: dict,
        title: str = "Python Basics",
        price: int = 2,
        capacity: int = 30,
        schedule: str = "2,4,6 (08:00-10:00)",
        start_date: date = TERM_START,
        end_date: date = TERM_END,
    ) -> tuple[dict, dict]:
        response = client.post(
            "/api/courses",
            json={"title": title, "description": "Intro", "price": price},
            headers=teacher["headers"],
        )
        assert response.status_code == 201, response.text
        course = response.json()
        response = client.post(
            f"/api/courses/{course['id']}/classes",
            json={
                "name": "Class A",
                "schedule": schedule,
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "capacity": capacity,
                "meeting_url": "https://meet.example.com/a",
            },
            headers=teacher["headers"],
        )
        assert response.status_code == 201, response.text
        return course, response.json()
    return _make


@pytest.fixture
def enroll(client):
    def _enroll(learner: dict, course: dict, cls: dict):
        return client.post(
            "/api/enrollments",
            json={"course_id": course["id"], "class_id": cls["id"]},
            headers=learner["headers"],
        )
    return _enroll


@pytest.fixture
def check_in(client):
    def _check_in(teacher: dict, learner: dict, course: dict):
        return client.post(
            "/api/attendance",
            json={"student_id": learner["id"], "course_id": course["id"]},
            headers=teacher["headers"],
        )
    return _check_in


@pytest.fixture
def wallet_of(session_factory):
    def _wallet(user_id: int) -> int:
        db = session_factory()
        try:
            return UserRepository(db).get(user_id).wallet_tokens
        finally:
            db.close()
    return _wallet
