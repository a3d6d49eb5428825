"""
Shared fixtures: an in-memory SQLite database, a small salon catalog and an
HTTP client wired to the same database.
"""
import os

# Settings are cached on first import, so configure before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUDIT_RETRY_ENABLED", "false")

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.database import get_db
from app.models import (
    Appointment,
    AppointmentStatus,
    Base,
    Professional,
    ScheduleOverride,
    Service,
    Tenant,
    professional_services,
)

MONDAY = date(2026, 10, 19)
SUNDAY = date(2026, 10, 18)

WEEKDAY_HOURS = [{"start": "09:00", "end": "18:00"}]


def at(day: date, hour: int, minute: int = 0) -> datetime:
    """UTC instant on a given day"""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


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
def tenant(db):
    tenant = Tenant(
        name="Studio Bela",
        slug="studio-bela",
        timezone="UTC",
        business_hours={
            "monday": WEEKDAY_HOURS,
            "tuesday": WEEKDAY_HOURS,
            "wednesday": WEEKDAY_HOURS,
            "thursday": WEEKDAY_HOURS,
            "friday": WEEKDAY_HOURS,
            "saturday": WEEKDAY_HOURS,
            "sunday": [],
        },
        settings={},
    )
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture
def haircut(db, tenant):
    service = Service(tenant_id=tenant.id, name="Haircut", price=Decimal("50.00"), duration=30)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def beard_trim(db, tenant):
    service = Service(tenant_id=tenant.id, name="Beard trim", price=Decimal("30.00"), duration=20)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def professional(db, tenant, haircut, beard_trim):
    professional = Professional(tenant_id=tenant.id, name="Ana")
    db.add(professional)
    db.commit()

    for service in (haircut, beard_trim):
        db.execute(professional_services.insert().values(
            tenant_id=tenant.id,
            professional_id=professional.id,
            service_id=service.id,
        ))
    db.commit()
    db.refresh(professional)
    return professional


@pytest.fixture
def make_appointment(db, tenant, professional):
    """Insert a bare appointment row (no line items) for conflict scenarios"""

    def _make(start: datetime, duration: int = 30, status: str = AppointmentStatus.SCHEDULED.value):
        appointment = Appointment(
            tenant_id=tenant.id,
            professional_id=professional.id,
            start_time=start,
            end_time=start + timedelta(minutes=duration),
            status=status,
            total_duration=duration,
            total_price=Decimal("0"),
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def make_override(db, tenant, professional):

    def _make(start_date, end_date=None, override_type="unavailable",
              start_time=None, end_time=None, created_at=None):
        override = ScheduleOverride(
            tenant_id=tenant.id,
            professional_id=professional.id,
            start_date=start_date,
            end_date=end_date or start_date,
            override_type=override_type,
            start_time=start_time,
            end_time=end_time,
        )
        if created_at is not None:
            override.created_at = created_at
        db.add(override)
        db.commit()
        db.refresh(override)
        return override

    return _make


@pytest.fixture
def client(session_factory):
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
