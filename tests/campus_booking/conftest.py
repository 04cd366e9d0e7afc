import pytest

from campus_booking.auth.identity import PROFESSOR_ROLE, STUDENT_ROLE, Identity
from campus_booking.booking.engine import BookingEngine
from campus_booking.database import create_db_engine, create_session_factory, init_schema


@pytest.fixture
def session_factory(tmp_path):
    db_engine = create_db_engine(f"sqlite:///{tmp_path / 'booking.db'}")
    init_schema(db_engine)
    try:
        yield create_session_factory(db_engine)
    finally:
        db_engine.dispose()


@pytest.fixture
def booking_engine(session_factory) -> BookingEngine:
    return BookingEngine(session_factory)


@pytest.fixture
def professor() -> Identity:
    return Identity(user_id=1, role=PROFESSOR_ROLE)


@pytest.fixture
def other_professor() -> Identity:
    return Identity(user_id=2, role=PROFESSOR_ROLE)


@pytest.fixture
def student_a1() -> Identity:
    return Identity(user_id=11, role=STUDENT_ROLE)


@pytest.fixture
def student_a2() -> Identity:
    return Identity(user_id=12, role=STUDENT_ROLE)
