"""
Pytest fixtures for backend tests.

Provides common test fixtures for the database, reference catalog,
store records and API client.
"""

import os

# Keep the app's own engine off PostgreSQL and the advisory backend unconfigured
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADVISORY_API_KEY"] = ""
os.environ["GROQ_API_KEY"] = ""

import pytest
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from healthflow.main import app
from healthflow.core.rate_limiter import limiter
from healthflow.db.base import Base
from healthflow.db.session import get_db
from healthflow.models import Procedure, HiddenCost, Hospital
from healthflow.services.catalog_service import ReferenceCatalog, load


# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite:///:memory:"

# Create test engine
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Test session factory
TestSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=test_engine,
)


# Reference document used across tests. Maharashtra's "Cataract Surgery"
# is deliberately absent from the store records below so it resolves from
# the catalog.
FIXTURE_DOCUMENT = [
    {
        "country": "India",
        "currency_symbol": "₹",
        "states": [
            {
                "state_name": "Maharashtra",
                "hospitals": [
                    {"name": "KEM Hospital", "city": "Mumbai", "type": "Government", "rating": 4.1},
                    {"name": "Kokilaben Hospital", "city": "Mumbai", "type": "Private", "rating": 4.6},
                    {"name": "Sassoon General Hospital", "city": "Pune", "type": "Government", "rating": 3.8},
                ],
                "procedures": [
                    {
                        "name": "Knee Replacement",
                        "avg_cost_private": 350000,
                        "avg_cost_govt": 80000,
                        "hidden_costs": [
                            {"item": "Implant upgrade", "cost": 60000, "note": "Imported implants cost extra"},
                            {"item": "Physiotherapy", "cost": 18000, "note": "Six weeks of sessions"},
                        ],
                    },
                    {
                        "name": "Cataract Surgery",
                        "avg_cost_private": 45000,
                        "avg_cost_govt": 10000,
                        "hidden_costs": [
                            {"item": "Premium IOL lens", "cost": 25000, "note": "Multifocal lenses are optional"},
                            {"item": "Post-op eye drops", "cost": 1500, "note": "Generics available"},
                        ],
                    },
                    {
                        "name": "Physiotherapy Session",
                        "avg_cost_private": 1200,
                    },
                ],
            },
            {
                "state_name": "Delhi",
                "hospitals": [
                    {"name": "AIIMS New Delhi", "city": "New Delhi", "type": "Government", "rating": 4.7},
                ],
                "procedures": [
                    {
                        "name": "Appendectomy",
                        "avg_cost_private": 90000,
                        "avg_cost_govt": 20000,
                        "hidden_costs": [
                            {"item": "Laparoscopic surcharge", "cost": 15000, "note": "Optional technique"},
                        ],
                    },
                ],
            },
        ],
    },
    {
        "country": "Nepal",
        "currency_symbol": "रु",
        "states": [
            {"state_name": "Bagmati", "hospitals": [], "procedures": []},
        ],
    },
]


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test.

    Yields:
        Session: Test database session.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def catalog() -> ReferenceCatalog:
    """Catalog built from the fixture document."""
    return load(FIXTURE_DOCUMENT)


@pytest.fixture
def store_records(db: Session) -> dict:
    """
    Insert canonical store rows.

    Two procedures contain "knee"; Knee Replacement is inserted first so it
    has the lower id.
    """
    knee = Procedure(
        name="Knee Replacement",
        avg_private_cost=340000,
        pmjay_rate=80000,
        recovery_days=21,
        hidden_costs=[
            HiddenCost(item_name="Implant upgrade", avg_cost=55000, description="Imported implant", is_avoidable=True),
            HiddenCost(item_name="Post-op physiotherapy", avg_cost=20000, description="Six weeks", is_avoidable=False),
        ],
    )
    arthroscopy = Procedure(
        name="Knee Arthroscopy",
        avg_private_cost=90000,
        pmjay_rate=30000,
        recovery_days=7,
        hidden_costs=[
            HiddenCost(item_name="Knee brace", avg_cost=3000, description="Often cheaper outside", is_avoidable=True),
        ],
    )
    mri = Procedure(
        name="MRI Brain",
        avg_private_cost=8000,
        pmjay_rate=3000,
        recovery_days=0,
        hidden_costs=[
            HiddenCost(item_name="Contrast agent", avg_cost=2500, description="Only when ordered", is_avoidable=False),
        ],
    )
    db.add_all([knee, arthroscopy, mri])
    db.flush()

    hospitals = [
        Hospital(name="City Government Hospital", location="Mumbai, Maharashtra", is_pmjay_empaneled=True, rating=4.0),
        Hospital(name="Lilavati Hospital", location="Mumbai, Maharashtra", is_pmjay_empaneled=False, rating=4.7),
        Hospital(name="Sassoon General Hospital", location="Pune, Maharashtra", is_pmjay_empaneled=True, rating=4.0),
        Hospital(name="AIIMS New Delhi", location="New Delhi, Delhi", is_pmjay_empaneled=True, rating=4.8),
    ]
    db.add_all(hospitals)
    db.commit()

    return {"knee": knee, "arthroscopy": arthroscopy, "mri": mri, "hospitals": hospitals}


@pytest.fixture(scope="function")
def client(db: Session, catalog: ReferenceCatalog) -> Generator[TestClient, None, None]:
    """
    Create a test client with database and catalog overrides.

    Args:
        db: Test database session.
        catalog: Fixture catalog installed after startup.

    Yields:
        TestClient: FastAPI test client.
    """

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    with TestClient(app) as test_client:
        app.state.catalog = catalog
        yield test_client

    app.dependency_overrides.clear()
