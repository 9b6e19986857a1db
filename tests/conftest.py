"""
Pytest configuration and shared fixtures for testing the booking API.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from pybreaker import CircuitBreaker
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from minibnb.database import Base
from minibnb.main import app
from minibnb.deps import get_db
from minibnb.security import get_password_hash
from minibnb.store import RecordStore
from minibnb import models


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
def store(db_session):
    """
    Record store over the test session with its own circuit breaker, so a
    test that trips it cannot affect the others.
    """
    return RecordStore(db_session, breaker=CircuitBreaker(fail_max=5, reset_timeout=60))


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


def _create_user(db_session, email, password, role, first_name="Test", last_name="User"):
    user = models.User(
        email=email,
        first_name=first_name,
        last_name=last_name,
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
    Create an admin user for testing.
    """
    return _create_user(db_session, "admin@example.com", "adminpass123", models.UserRole.ADMIN, "Admin")


@pytest.fixture
def host_user(db_session):
    """
    Create a host user for testing.
    """
    return _create_user(db_session, "host@example.com", "hostpass123", models.UserRole.HOST, "Hannah", "Host")


@pytest.fixture
def guest_user(db_session):
    """
    Create a guest user for testing.
    """
    return _create_user(db_session, "guest@example.com", "guestpass123", models.UserRole.GUEST, "Gary", "Guest")


@pytest.fixture
def other_guest(db_session):
    """
    Create a second guest user for testing.
    """
    return _create_user(db_session, "other@example.com", "otherpass123", models.UserRole.GUEST, "Olga", "Other")


def login(client, email, password) -> str:
    response = client.post(
        "/users/login",
        params={"email": email, "password": password},
    )
    return response.json()["access_token"]


@pytest.fixture
def admin_token(client, admin_user):
    """
    Get an admin authentication token.
    """
    return login(client, "admin@example.com", "adminpass123")


@pytest.fixture
def host_token(client, host_user):
    """
    Get a host authentication token.
    """
    return login(client, "host@example.com", "hostpass123")


@pytest.fixture
def guest_token(client, guest_user):
    """
    Get a guest authentication token.
    """
    return login(client, "guest@example.com", "guestpass123")


@pytest.fixture
def other_guest_token(client, other_guest):
    """
    Get a token for the second guest.
    """
    return login(client, "other@example.com", "otherpass123")


@pytest.fixture
def sample_property(db_session, host_user):
    """
    Create a sample property: $100/night, up to 2 guests.
    """
    prop = models.Property(
        title="Cozy Studio",
        description="Small studio near the old town",
        address="1 Main Street",
        city="Cluj-Napoca",
        country="Romania",
        price_per_night=Decimal("100.00"),
        bedrooms=1,
        bathrooms=1,
        max_guests=2,
        is_active=True,
        host_id=host_user.id,
    )
    db_session.add(prop)
    db_session.commit()
    db_session.refresh(prop)
    return prop


@pytest.fixture
def sample_properties(db_session, host_user):
    """
    Create multiple sample properties for testing.
    """
    rows = [
        ("Old Town Loft", "Cluj-Napoca", "Romania", True),
        ("Seaside Flat", "Constanta", "Romania", True),
        ("Lake House", "Annecy", "France", True),
        ("Closed Chalet", "Cluj-Napoca", "Romania", False),
    ]
    props = []
    for title, city, country, active in rows:
        prop = models.Property(
            title=title,
            address="Somewhere 1",
            city=city,
            country=country,
            price_per_night=Decimal("80.00"),
            bedrooms=2,
            bathrooms=1,
            max_guests=4,
            is_active=active,
            host_id=host_user.id,
        )
        db_session.add(prop)
        props.append(prop)
    db_session.commit()
    for prop in props:
        db_session.refresh(prop)
    return props


def _create_reservation(db_session, prop, guest, check_in, check_out, status, guests=1):
    reservation = models.Reservation(
        property_id=prop.id,
        guest_id=guest.id,
        check_in_date=check_in,
        check_out_date=check_out,
        number_of_guests=guests,
        total_price=prop.price_per_night * (check_out - check_in).days,
        status=status,
    )
    db_session.add(reservation)
    db_session.commit()
    db_session.refresh(reservation)
    return reservation


@pytest.fixture
def pending_reservation(db_session, sample_property, guest_user):
    """
    A PENDING two-night reservation starting ten days from now.
    """
    start = date.today() + timedelta(days=10)
    return _create_reservation(
        db_session, sample_property, guest_user, start, start + timedelta(days=2),
        models.ReservationStatus.PENDING,
    )


def get_auth_header(token: str) -> dict:
    """
    Helper function to create authorization header.
    """
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(db_session):
    """
    Factory for extra users: make_user(email, password, role).
    """
    def factory(email, password, role, first_name="Test", last_name="User"):
        return _create_user(db_session, email, password, role, first_name, last_name)

    return factory


@pytest.fixture
def make_reservation(db_session):
    """
    Factory inserting a reservation directly, bypassing the engine rules.
    """
    def factory(prop, guest, check_in, check_out, status, guests=1):
        return _create_reservation(db_session, prop, guest, check_in, check_out, status, guests)

    return factory
