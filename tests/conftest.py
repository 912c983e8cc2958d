"""Fixtures de test / Test fixtures."""

import itertools
from datetime import datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import carrental.models  # noqa: F401
from carrental.database import Base, enable_sqlite_foreign_keys, get_db
from carrental.main import app
from carrental.models.user import Role, User
from carrental.rate_limit import limiter
from carrental.schemas.availability import AvailabilityInput
from carrental.schemas.listing import ListingCreate
from carrental.services.image_store import ImageStore, get_image_store
from carrental.services.listings import ListingService
from carrental.utils.auth import hash_password
from carrental.utils.clock import FixedClock, get_clock

# Lundi 2 mars 2026, 09:00 / Monday 2 March 2026
NOW = datetime(2026, 3, 2, 9, 0)
PASSWORD = "secret-password"

_password_hash: str | None = None
_emails = itertools.count(1)


def week(**days) -> list[AvailabilityInput]:
    """week(monday=("09:00", "17:00")) -> planning soumis / submitted schedule."""
    return [
        AvailabilityInput(day=day, selected=True, time_from=start, time_to=end)
        for day, (start, end) in days.items()
    ]


def listing_data(**overrides) -> ListingCreate:
    fields = {
        "title": "Clio 4 automatique",
        "description": "Citadine récente, climatisée",
        "car_model": "Renault Clio",
        "city": "Tanger",
        "color": "#FF0000",
        "price": Decimal("250.00"),
        "premium": False,
        "availability": week(monday=("09:00", "17:00")),
    }
    fields.update(overrides)
    return ListingCreate(**fields)


@pytest.fixture(autouse=True)
def _no_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    enable_sqlite_foreign_keys(engine.sync_engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    """Session directe pour les tests de services / Direct session for service tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store(tmp_path):
    return ImageStore(tmp_path / "uploads", "/storage")


@pytest.fixture
async def client(session_factory, clock, store):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_image_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# --- Factories ---

@pytest.fixture
def make_user(db):
    async def _make_user(role: Role = Role.CLIENT, email: str | None = None, name: str = "Test User") -> User:
        global _password_hash
        if _password_hash is None:
            _password_hash = hash_password(PASSWORD)
        user = User(
            name=name,
            email=email or f"{role.value}-{next(_emails)}@example.com",
            hashed_password=_password_hash,
            role=role,
            country="Morocco",
            city="Tanger",
            job="Engineer",
        )
        db.add(user)
        await db.flush()
        return user
    return _make_user


@pytest.fixture
def make_listing(db, clock, store):
    async def _make_listing(partner: User, images=None, **overrides):
        return await ListingService.create_listing(
            db, clock, store, partner, listing_data(**overrides), images or []
        )
    return _make_listing
