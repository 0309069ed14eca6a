"""
Pytest configuration and fixtures for the ledger tests.

Every test gets a fresh in-memory SQLite database. Outbound email is replaced
by a recorder so notifications never touch SMTP.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aeroledger.db.session import Base, get_db
from aeroledger.core.config import settings
from aeroledger.core.security import ALGO
from aeroledger.models.user import User
from aeroledger.models.aircraft import Aircraft
from aeroledger.models.component import Component, AIRFRAME, ENGINE, PROPELLER
from aeroledger.models.flight_submission import FlightSubmission  # noqa: F401
from aeroledger.models.flight import Flight  # noqa: F401
from aeroledger.models.transaction import Transaction  # noqa: F401
from aeroledger.models.deposit import Deposit  # noqa: F401
from aeroledger.models.fuel_log import FuelLog  # noqa: F401
from aeroledger.models.audit_log import AuditLog  # noqa: F401
from aeroledger.models.email_log import EmailLog  # noqa: F401
from aeroledger.services import email_service
from aeroledger.services.submission_service import create_flight_submission


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Record outbound emails instead of sending them."""
    sent = []

    def _fake_send(to_email, subject, body):
        sent.append({"to": to_email, "subject": subject, "body": body})

    monkeypatch.setattr(email_service, "send_email", _fake_send)
    return sent


# =============================================================================
# Domain Fixtures
# =============================================================================

@pytest.fixture
def aircraft(db):
    """CC-AQI at HOBBS 100.0 / TACH 50.0; the propeller has no recorded baseline."""
    a = Aircraft(matricula="CC-AQI", modelo="Cessna 172", hobbs_actual=Decimal("100.0"), tach_actual=Decimal("50.0"))
    db.add(a)
    db.add_all([
        Component(aircraft_id="CC-AQI", tipo=AIRFRAME, horas_acumuladas=Decimal("1000.0"), limite_tbo=Decimal("30000")),
        Component(aircraft_id="CC-AQI", tipo=ENGINE, horas_acumuladas=Decimal("500.0"), limite_tbo=Decimal("2000")),
        Component(aircraft_id="CC-AQI", tipo=PROPELLER, horas_acumuladas=None, limite_tbo=Decimal("2000")),
    ])
    db.commit()
    return a


@pytest.fixture
def pilot(db):
    u = User(email="jperez@aeroclub.cl", full_name="Juan Perez", role="pilot", codigo="JP")
    db.add(u)
    db.commit()
    return u


@pytest.fixture
def other_pilot(db):
    u = User(email="mrojas@aeroclub.cl", full_name="Maria Rojas", role="pilot", codigo="MR")
    db.add(u)
    db.commit()
    return u


@pytest.fixture
def admin(db):
    u = User(email="admin@aeroclub.cl", full_name="Admin", role="admin")
    db.add(u)
    db.commit()
    return u


@pytest.fixture
def make_submission(db, aircraft, pilot):
    """Create a PENDIENTE submission for the default pilot on CC-AQI."""
    def _make(hobbs, tach, fecha=None, piloto=None):
        return create_flight_submission(
            db,
            piloto_id=(piloto or pilot).id,
            hobbs_final=Decimal(str(hobbs)),
            tach_final=Decimal(str(tach)),
            fecha_vuelo=fecha or datetime(2025, 12, 1, 10, 0, 0),
            aircraft_id=aircraft.matricula,
        )
    return _make


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def client(session_factory):
    from aeroledger.main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_token(user: User, minutes: int = 30) -> str:
    """Token shaped like the ones the club login service issues."""
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGO)


@pytest.fixture
def auth_headers():
    def _headers(user: User, minutes: int = 30) -> dict:
        return {"Authorization": f"Bearer {make_token(user, minutes)}"}
    return _headers


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def pilot_headers(pilot, auth_headers):
    return auth_headers(pilot)
