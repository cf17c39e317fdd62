import os

# avant tout import d'opslearn : pas de Postgres ni de RabbitMQ en test
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EVENTS_ENABLED"] = "0"
os.environ["LOCAL_TZ"] = "America/Toronto"
os.environ["WEEKLY_LIMIT_MINUTES"] = "90"

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi import Depends  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from opslearn import api  # noqa: E402
from opslearn.app import app  # noqa: E402
from opslearn.config import LOCAL_TZ  # noqa: E402
from opslearn.content import NullContentGenerator  # noqa: E402
from opslearn.lifecycle import BookingService  # noqa: E402
from opslearn.models import Booking  # noqa: E402
from opslearn.repository import SqlStorage  # noqa: E402
from opslearn.seed import seed_database  # noqa: E402
from opslearn.timeutils import add_minutes, to_utc  # noqa: E402


# Semaine de référence : lundi 2 juin 2025 -> dimanche 8 juin 2025
def at(day: int, hour: int, minute: int = 0, month: int = 6, year: int = 2025) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=LOCAL_TZ)


def make_booking(user_id: str, start: datetime, minutes: int, booking_id: str = None, course_id: str = "c1") -> Booking:
    return Booking(
        id=booking_id or f"{user_id}-{start.isoformat()}",
        user_id=user_id,
        course_id=course_id,
        start_time=to_utc(start),
        end_time=to_utc(add_minutes(start, minutes)),
        duration_minutes=minutes,
    )


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def __call__(self, event_type: str, payload: dict):
        self.events.append((event_type, payload))


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        seed_database(s)
        yield s


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def client(engine, session, publisher):
    def override_session():
        with Session(engine) as s:
            yield s

    def override_service(storage: SqlStorage = Depends(api.get_storage)):
        return BookingService(storage, publish=publisher)

    app.dependency_overrides[api.get_session] = override_session
    app.dependency_overrides[api.get_booking_service] = override_service
    app.dependency_overrides[api.get_content_generator] = NullContentGenerator
    yield TestClient(app)
    app.dependency_overrides.clear()
