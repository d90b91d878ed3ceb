"""Shared fixtures: an app wired to a throwaway in-memory SQLite database."""

import os

# Set before app.main is imported: it builds a module-level app from settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("FRONTEND_URL", "http://localhost:5173")

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.session import Database
from app.main import create_app

FRONTEND_URL = "http://localhost:5173"


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", frontend_url=FRONTEND_URL)


@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    yield database
    database.dispose()


@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database)


@pytest.fixture
def client(app):
    # Entering the context runs the lifespan, which creates the schema
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_product(client):
    """Create a product through the API and return its ``data`` payload."""

    def _create(name="product test", price=100, **extra):
        response = client.post("/api/products", json={"name": name, "price": price, **extra})
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
