import os

# tablewise.db reads DATABASE_URL at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from werkzeug.security import generate_password_hash

import tablewise.config as config_mod
import tablewise.db as db
from tablewise.app_factory import create_app
from tablewise.models import Base, Category, MenuItem, Restaurant
from tablewise.rate_limit import limiter

# Test admin credentials
TEST_ADMIN_USERNAME = "testadmin"
TEST_ADMIN_PASSWORD = "testpassword123"

# Restaurant admin credentials for the seeded restaurant
RESTAURANT_USERNAME = "spiceroute"
RESTAURANT_PASSWORD = "curry-house"
OTHER_USERNAME = "tandoor"
OTHER_PASSWORD = "naan-bread"

# Cheap hashes for seeded accounts; real passwords use the werkzeug default
FAST_HASH_METHOD = "pbkdf2:sha256:1000"


def _seed(session) -> dict:
    """Two restaurants: a fully stocked one and a small one for isolation tests."""
    restaurant = Restaurant(
        name="Spice Route",
        slug="spice-route",
        owner_name="Asha Rao",
        username=RESTAURANT_USERNAME,
        password_hash=generate_password_hash(RESTAURANT_PASSWORD, method=FAST_HASH_METHOD),
        tax_enabled=True,
        tax_percentage=5.0,
        delivery_enabled=True,
        delivery_charges_enabled=True,
        delivery_charges=40.0,
        delivery_free_threshold=500.0,
    )
    other = Restaurant(
        name="Tandoor Express",
        slug="tandoor-express",
        username=OTHER_USERNAME,
        password_hash=generate_password_hash(OTHER_PASSWORD, method=FAST_HASH_METHOD),
    )
    session.add_all([restaurant, other])
    session.flush()

    starters = Category(restaurant_id=restaurant.id, name="Starters", icon="fire", fake_discount_pct=20.0, position=0)
    desserts = Category(restaurant_id=restaurant.id, name="Desserts", icon="ice-cream", position=1)
    breads = Category(restaurant_id=other.id, name="Breads", position=0)
    session.add_all([starters, desserts, breads])
    session.flush()

    paneer = MenuItem(
        restaurant_id=restaurant.id, category_id=starters.id, name="Paneer Tikka",
        full_price=280.0, half_price=160.0, is_veg=True,
    )
    spring_roll = MenuItem(
        restaurant_id=restaurant.id, category_id=starters.id, name="Veg Spring Roll",
        full_price=180.0, is_veg=True,
    )
    chicken = MenuItem(
        restaurant_id=restaurant.id, category_id=starters.id, name="Chicken 65",
        full_price=320.0, is_veg=False,
    )
    jamun = MenuItem(
        restaurant_id=restaurant.id, category_id=desserts.id, name="Gulab Jamun",
        full_price=90.0, is_veg=True,
    )
    kulfi = MenuItem(
        restaurant_id=restaurant.id, category_id=desserts.id, name="Kulfi",
        full_price=120.0, is_veg=True, is_available=False,
    )
    naan = MenuItem(
        restaurant_id=other.id, category_id=breads.id, name="Butter Naan",
        full_price=60.0, is_veg=True,
    )
    session.add_all([paneer, spring_roll, chicken, jamun, kulfi, naan])
    session.commit()

    return {
        "restaurant_id": restaurant.id,
        "other_restaurant_id": other.id,
        "starters_id": starters.id,
        "desserts_id": desserts.id,
        "breads_id": breads.id,
        "paneer_id": paneer.id,
        "spring_roll_id": spring_roll.id,
        "chicken_id": chicken.id,
        "jamun_id": jamun.id,
        "kulfi_id": kulfi.id,
        "naan_id": naan.id,
    }


@pytest.fixture
def session_factory(monkeypatch):
    """In-memory SQLite shared by every connection (StaticPool), seeded."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the db module used by the app and background jobs
    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(db, "SessionLocal", TestingSessionLocal)

    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    """IDs of the seeded rows."""
    session = session_factory()
    try:
        return _seed(session)
    finally:
        session.close()


@pytest.fixture
def db_session(session_factory, seeded):
    """A session on the seeded database for service-level tests."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory, seeded, monkeypatch, tmp_path):
    """Shared FastAPI TestClient using the seeded in-memory database.

    Sets test super admin credentials, disables rate limiting and points
    uploads at a temporary directory.
    """
    monkeypatch.setattr(config_mod, "ADMIN_USERNAME", TEST_ADMIN_USERNAME)
    monkeypatch.setattr(config_mod, "ADMIN_PASSWORD", TEST_ADMIN_PASSWORD)
    monkeypatch.setattr(config_mod, "OPENAI_API_KEY", "")
    monkeypatch.setattr(config_mod, "GEMINI_API_KEY", "")
    upload_dir = tmp_path / "uploads"
    monkeypatch.setattr(config_mod, "UPLOAD_DIR", str(upload_dir))
    monkeypatch.setattr(limiter, "enabled", False)

    app = create_app(upload_dir=str(upload_dir))

    # Override FastAPI DB dependency
    def override_get_db():
        db_sess = session_factory()
        try:
            yield db_sess
        finally:
            db_sess.close()

    app.dependency_overrides[db.get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_auth():
    """Returns HTTP Basic Auth tuple for super admin endpoints."""
    return (TEST_ADMIN_USERNAME, TEST_ADMIN_PASSWORD)


@pytest.fixture
def restaurant_auth():
    """Returns HTTP Basic Auth tuple for the seeded restaurant's admin."""
    return (RESTAURANT_USERNAME, RESTAURANT_PASSWORD)


@pytest.fixture
def other_auth():
    """Returns HTTP Basic Auth tuple for the second restaurant's admin."""
    return (OTHER_USERNAME, OTHER_PASSWORD)
