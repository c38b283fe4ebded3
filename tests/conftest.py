"""
Pytest configuration and shared fixtures for testing the RoomBook API.
"""
import os
import tempfile
from dataclasses import replace
from datetime import datetime, timedelta

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="roombook-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from roombook.database import Base
from roombook.main import app
from roombook.config import get_settings
from roombook.deps import get_db, get_password_hash
from roombook import models


# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with the test database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def override_settings():
    """
    Swap settings for the duration of a test, e.g. ``override_settings(require_auth=True)``.
    """
    def _override(**changes):
        patched = replace(get_settings(), **changes)
        app.dependency_overrides[get_settings] = lambda: patched
        return patched

    return _override


def make_user(db_session, username: str, password: str, role: models.UserRole) -> models.User:
    user = models.User(
        username=username,
        hashed_password=get_password_hash(password),
        role=role,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    """
    Create the built-in admin account.
    """
    return make_user(db_session, "admin", "admin123", models.UserRole.admin)


@pytest.fixture
def super_admin(db_session):
    return make_user(db_session, "superadmin", "super123", models.UserRole.super_admin)


@pytest.fixture
def regular_user(db_session):
    """
    Create a regular user for testing.
    """
    return make_user(db_session, "regularuser", "regularpass123", models.UserRole.user)


@pytest.fixture
def viewer_user(db_session):
    return make_user(db_session, "lobbyscreen", "viewerpass123", models.UserRole.viewer)


@pytest.fixture
def admin_token(client, admin_user):
    """
    Get an admin authentication token.
    """
    response = client.post(
        "/api/login",
        json={"username": "admin", "password": "admin123"},
    )
    return response.json()["access_token"]


@pytest.fixture
def viewer_token(client, viewer_user):
    response = client.post(
        "/api/login",
        json={"username": "lobbyscreen", "password": "viewerpass123"},
    )
    return response.json()["access_token"]


@pytest.fixture
def sample_room(db_session):
    """
    Create a sample room for testing.
    """
    room = models.Room(
        name="Conference Room A",
        capacity=12,
        description="Large conference room with projector and whiteboard.",
        image_url="/uploads/room-a.jpg",
        equipment="Projector, Whiteboard, Video Conf",
    )
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture
def sample_rooms(db_session):
    """
    Create multiple sample rooms for testing.
    """
    rooms = [
        models.Room(name="Meeting Room B", capacity=6, equipment="TV, Whiteboard"),
        models.Room(name="Focus Pod 1", capacity=1, equipment="Desk, Chair"),
    ]
    for room in rooms:
        db_session.add(room)
    db_session.commit()
    for room in rooms:
        db_session.refresh(room)
    return rooms


def make_booking(
    db_session,
    room,
    start_time: datetime,
    end_time: datetime,
    status: models.BookingStatus = models.BookingStatus.pending,
    title: str = "Weekly sync",
    created_at: datetime | None = None,
) -> models.Booking:
    booking = models.Booking(
        room_id=room.id,
        user_name="Budi",
        title=title,
        start_time=start_time,
        end_time=end_time,
        attendees=4,
        applicant="Finance",
        contact="08123456789",
        status=status,
    )
    if created_at is not None:
        booking.created_at = created_at
    db_session.add(booking)
    db_session.commit()
    db_session.refresh(booking)
    return booking


@pytest.fixture
def slot_start():
    """A fixed 10:00 tomorrow, so bookings land on round hours."""
    tomorrow = datetime.utcnow().date() + timedelta(days=1)
    return datetime(tomorrow.year, tomorrow.month, tomorrow.day, 10, 0)


@pytest.fixture
def approved_booking(db_session, sample_room, slot_start):
    """
    Approved booking on the sample room from 10:00 to 11:00.
    """
    return make_booking(
        db_session,
        sample_room,
        slot_start,
        slot_start + timedelta(hours=1),
        status=models.BookingStatus.approved,
    )


def get_auth_header(token: str) -> dict:
    """
    Helper function to create authorization header.
    """
    return {"Authorization": f"Bearer {token}"}
