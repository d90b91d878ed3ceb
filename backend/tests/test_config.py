"""Settings parsing."""

from app.core.config import Settings


def test_heroku_style_database_url_rewritten():
    settings = Settings(database_url="postgres://u:p@db:5432/catalog")
    assert settings.database_url == "postgresql+psycopg://u:p@db:5432/catalog"


def test_frontend_url_normalized():
    settings = Settings(frontend_url=" http://localhost:5173/ ")
    assert settings.frontend_url == "http://localhost:5173"
    assert settings.allowed_origins == ["http://localhost:5173"]


def test_blank_frontend_url_allows_no_origin():
    settings = Settings(frontend_url="  ")
    assert settings.frontend_url is None
    assert settings.allowed_origins == []


def test_environment_variables_read(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///catalog.db")
    monkeypatch.setenv("FRONTEND_URL", "https://shop.example")
    settings = Settings()
    assert settings.database_url == "sqlite:///catalog.db"
    assert settings.frontend_url == "https://shop.example"
