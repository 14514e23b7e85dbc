import os

# Must be set before domia is imported: config is read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.pop("REDIS_URL", None)
os.environ.pop("REDIS_HOST", None)

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from domia.auth import create_access_token  # noqa: E402
from domia.database import Base, SessionLocal, engine, get_db  # noqa: E402
from domia.domain.tours.geo import Coordinate  # noqa: E402
from domia.main import app  # noqa: E402
from domia.models import ACCOUNT_TYPE_COMPANY, ACCOUNT_TYPE_WORKER, Appointment, Client, User  # noqa: E402
from domia.models_mission import OFFER_PENDING, JobOffer  # noqa: E402
from domia.services.geocoding_service import get_geocoder  # noqa: E402
from domia.shared.datetime_utils import utc_now  # noqa: E402

# Fixed "now" for service-level tests that inject a clock
NOW = datetime(2030, 3, 4, 8, 0)


class FakeGeocoder:
    """Answers from a dict of address-query substrings; records every lookup"""

    def __init__(self, known=None):
        self.known = dict(known or {})
        self.queries = []

    async def geocode(self, address, country=None, language=None):
        self.queries.append(address)
        for fragment, coordinate in self.known.items():
            if fragment in address:
                return coordinate
        return None


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(account_type=ACCOUNT_TYPE_WORKER, **fields):
        counter["n"] += 1
        fields.setdefault("email", f"user{counter['n']}@example.com")
        fields.setdefault("first_name", f"User{counter['n']}")
        user = User(account_type=account_type, **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def company(make_user):
    return make_user(
        ACCOUNT_TYPE_COMPANY,
        email="planning@soins-paris.fr",
        first_name="Claire",
        business_name="Soins Paris",
        phone="+33140000000",
    )


@pytest.fixture
def worker(make_user):
    return make_user(ACCOUNT_TYPE_WORKER, email="nurse@example.com", first_name="Lea", profession="infirmiere")


@pytest.fixture
def make_client(db):
    def _make(user, lat=None, lon=None, **fields):
        fields.setdefault("first_name", "Jean")
        fields.setdefault("address", "1 rue de Rivoli")
        fields.setdefault("city", "Paris")
        fields.setdefault("postal_code", "75001")
        client = Client(user_id=user.id, latitude=lat, longitude=lon, **fields)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    return _make


@pytest.fixture
def make_appointment(db):
    def _make(user, client, start=None, minutes=30, status="scheduled", **fields):
        start = start or NOW + timedelta(days=1)
        appointment = Appointment(
            user_id=user.id,
            client_id=client.id,
            start_time=start,
            end_time=start + timedelta(minutes=minutes),
            duration=minutes,
            status=status,
            **fields,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def make_offer(db):
    def _make(issuer, worker, start=None, hours=2, status=OFFER_PENDING, **fields):
        start = start or NOW + timedelta(days=1, hours=2)
        fields.setdefault("title", "Night shift")
        fields.setdefault("address", "10 avenue Foch")
        fields.setdefault("city", "Paris")
        fields.setdefault("postal_code", "75016")
        offer = JobOffer(
            issuer_id=issuer.id,
            worker_id=worker.id,
            start_date=start,
            end_date=start + timedelta(hours=hours),
            status=status,
            **fields,
        )
        db.add(offer)
        db.commit()
        db.refresh(offer)
        return offer

    return _make


@pytest.fixture
def geocoder():
    return FakeGeocoder({"Rivoli": Coordinate(48.8606, 2.3376), "Foch": Coordinate(48.8719, 2.2852)})


@pytest.fixture
def client(db, geocoder):
    """HTTP client sharing the test session, with the geocoder replaced"""

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def future(days=1, hour=9, minute=0):
    """A naive UTC datetime ``days`` ahead of the real clock, at a fixed time of day"""
    base = utc_now() + timedelta(days=days)
    return base.replace(hour=hour, minute=minute, second=0, microsecond=0)
