# backend/tests/conftest.py
"""
Pytest configuration for the tutoring-center backend.

Every test gets its own in-memory SQLite database, so services are free to
commit. The ``world`` fixture seeds one tenant with two centers, an assigned
tutor, two students, a group and a class.
"""

import os

# Set testing mode BEFORE any tutorcenter imports
os.environ["IS_TESTING"] = "true"
os.environ.setdefault("SITE_MODE", "local")

from typing import Iterator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from scheduling_factories import TENANT_ID, TUTOR_ID, SchedulingWorld
from tutorcenter.api.dependencies.database import get_db
from tutorcenter.core.config import settings
from tutorcenter.database import Base
from tutorcenter.main import fastapi_app as app
from tutorcenter.models import (
    Center,
    Group,
    GroupStudent,
    MembershipRole,
    StaffCenter,
    Student,
    TenantMembership,
)

settings.is_testing = True


@pytest.fixture
def engine() -> Iterator[Engine]:
    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(session_factory: sessionmaker) -> Iterator[TestClient]:
    """TestClient whose request-scoped sessions use the per-test database."""

    def override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def world(db: Session) -> SchedulingWorld:
    center = Center(tenant_id=TENANT_ID, name="Downtown")
    other_center = Center(tenant_id=TENANT_ID, name="Uptown")
    db.add_all([center, other_center])
    db.flush()

    db.add(TenantMembership(tenant_id=TENANT_ID, user_id=TUTOR_ID, role=MembershipRole.TUTOR.value))
    db.add(StaffCenter(tenant_id=TENANT_ID, user_id=TUTOR_ID, center_id=center.id))
    db.add(StaffCenter(tenant_id=TENANT_ID, user_id=TUTOR_ID, center_id=other_center.id))

    student = Student(tenant_id=TENANT_ID, first_name="Ada", last_name="Lovelace")
    other_student = Student(tenant_id=TENANT_ID, first_name="Alan", last_name="Turing")
    db.add_all([student, other_student])
    db.flush()

    group = Group(tenant_id=TENANT_ID, center_id=center.id, name="Algebra I", type="GROUP")
    class_group = Group(tenant_id=TENANT_ID, center_id=center.id, name="Physics", type="CLASS")
    db.add_all([group, class_group])
    db.flush()
    db.add(GroupStudent(tenant_id=TENANT_ID, group_id=group.id, student_id=student.id))
    db.add(GroupStudent(tenant_id=TENANT_ID, group_id=group.id, student_id=other_student.id))
    db.commit()

    return SchedulingWorld(
        tenant_id=TENANT_ID,
        center=center,
        other_center=other_center,
        tutor_id=TUTOR_ID,
        student=student,
        other_student=other_student,
        group=group,
        class_group=class_group,
    )
