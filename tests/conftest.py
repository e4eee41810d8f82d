"""Shared fixtures: an in-memory SQLite database and an authenticated client."""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_DB_MIGRATIONS_ON_STARTUP", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from teamclock.db import get_db  # noqa: E402
from teamclock.deps import AuthContext  # noqa: E402
from teamclock.main import app  # noqa: E402
from teamclock.models import Base, Project, ProjectMember, Team, TeamMember, Ticket, User  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()

@pytest.fixture
def test_user(db_session):
    user = User(email="dev@example.com", full_name="Dev User", password_hash="not-a-real-hash")
    db_session.add(user)
    db_session.commit()
    return user

@pytest.fixture
def ctx(test_user):
    return AuthContext(user_id=test_user.id, email=test_user.email, full_name=test_user.full_name)

@pytest.fixture
def project(db_session, test_user):
    team = Team(name="Core", invite_code="X7Y2Z9", created_by=test_user.id)
    team.members.append(TeamMember(user_id=test_user.id, role="owner", email=test_user.email))
    project = Project(team=team, name="Backend", created_by=test_user.id)
    project.members.append(ProjectMember(user_id=test_user.id, role="owner", email=test_user.email))
    db_session.add_all([team, project])
    db_session.commit()
    return project

@pytest.fixture
def make_ticket(db_session, project):
    def _make(title="Fix login", status="open") -> Ticket:
        ticket = Ticket(project_id=project.id, title=title, status=status, priority="medium", total_duration=0)
        db_session.add(ticket)
        db_session.commit()
        return ticket

    return _make

@pytest.fixture
def ticket(make_ticket):
    return make_ticket()

@pytest.fixture
def client(db_session):
    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

@pytest.fixture
def auth_client(client):
    response = client.post(
        "/api/auth/signup",
        json={"email": "api@example.com", "full_name": "Api User", "password": "s3cret-pass"},
    )
    assert response.status_code == 201
    return client
