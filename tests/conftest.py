"""Shared test fixtures."""
import os

from cryptography.fernet import Fernet

# Settings are read once at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CALENDAR_ENCRYPTION_KEY"] = Fernet.generate_key().decode()
os.environ["CALENDAR_TIMEZONE"] = "America/Los_Angeles"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from barberbook.config.database import get_db
from barberbook.main import create_app
from barberbook.models import Base
from barberbook.services.barber.barber_service import BarberService
from tests.helpers import BARBER_PHONE, FakeCalendarGateway


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
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def calendar():
    return FakeCalendarGateway()


@pytest.fixture
def gateway_factory(calendar):
    return lambda barber: calendar


@pytest.fixture
def barber(db_session):
    return BarberService.update_or_create(
        db_session,
        phone_number=BARBER_PHONE,
        name="Sam",
        email="sam@example.com",
        refresh_token="refresh-token-abc",
    )


@pytest.fixture
def unauthorized_barber(db_session):
    return BarberService.update_or_create(db_session, phone_number="+15550002222", name="Alex")


@pytest.fixture
def app(db_session, gateway_factory):
    app = create_app(gateway_factory=gateway_factory)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
