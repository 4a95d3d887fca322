import os

# Must be set before the application modules read their configuration
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from salon_api.auth import Principal, get_clock  # noqa: E402
from salon_api.config import get_settings  # noqa: E402
from salon_api.database import Base, get_db  # noqa: E402
from salon_api.main import app  # noqa: E402
from salon_api.models import Appointment, Formula, User  # noqa: E402
from salon_api.security_utils import create_jwt_token  # noqa: E402

# Use in-memory SQLite shared across sessions for tests
TEST_DATABASE_URL = "sqlite://"

test_engine = create_engine(
    TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

FIXED_NOW = datetime(2025, 5, 20, 10, 0)


class FrozenClock:
    """Callable clock returning a settable instant"""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current


@pytest.fixture(autouse=True)
def prepare_database():
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock(FIXED_NOW)


@pytest.fixture
def client(clock):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, email: str, role: str = "client", first_name: str = "Test") -> User:
    user = User(
        first_name=first_name,
        last_name="User",
        email=email,
        password_hash="not-a-real-hash",
        phone="+33612345678",
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_formula(db, title: str = "Soin Eclat", is_active: bool = True) -> Formula:
    formula = Formula(title=title, price=59.0, duration=60, treatments=["cleanse"], is_active=is_active)
    db.add(formula)
    db.commit()
    db.refresh(formula)
    return formula


def make_appointment(
    db,
    client: User,
    formula: Formula,
    day: date,
    start_time: str,
    end_time: str,
    status: str = "pending",
) -> Appointment:
    appointment = Appointment(
        client_id=client.id,
        formula_id=formula.id,
        date=day,
        start_time=start_time,
        end_time=end_time,
        status=status,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


def principal(user: User) -> Principal:
    return Principal(user_id=user.id, role=user.role)


def auth_headers(user: User) -> dict:
    token = create_jwt_token({"sub": str(user.id), "role": user.role}, get_settings())
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(db):
    return make_user(db, "alice@example.com", first_name="Alice")


@pytest.fixture
def bob(db):
    return make_user(db, "bob@example.com", first_name="Bob")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role="admin", first_name="Admin")


@pytest.fixture
def formula(db):
    return make_formula(db)
