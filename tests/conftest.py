"""Shared fixtures: a fresh in-memory database per test plus record factories."""

import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eduhub.models import Base, Role
from eduhub.utils.assignment_manager import AssignmentManager
from eduhub.utils.enrollment_manager import EnrollmentManager
from eduhub.utils.module_manager import ModuleManager
from eduhub.utils.role_transition import RoleTransitionEngine
from eduhub.utils.user_manager import UserManager


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    return UserManager(db)


@pytest.fixture
def modules(db):
    return ModuleManager(db)


@pytest.fixture
def roles(db):
    return RoleTransitionEngine(db)


@pytest.fixture
def enrollments(db, roles):
    return EnrollmentManager(
        db,
        role_transitions=roles,
        max_enrollments_per_student=4,
        max_students_per_module=10,
    )


@pytest.fixture
def assignments(db):
    return AssignmentManager(db)


@pytest.fixture
def make_user(users):
    counter = itertools.count(1)

    def _make(role=Role.STUDENT, username=None):
        n = next(counter)
        name = username or f"{Role(role).value.lower()}{n}"
        return users.create_user(name, role=role, email=f"{name}@example.edu")

    return _make


@pytest.fixture
def make_student(make_user):
    return lambda username=None: make_user(Role.STUDENT, username)


@pytest.fixture
def make_module(modules):
    counter = itertools.count(1)

    def _make(name=None, teacher_id=None, is_active=True):
        return modules.create_module(
            name or f"Module {next(counter)}",
            teacher_id=teacher_id,
            is_active=is_active,
        )

    return _make
