import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from learnlang.core.config import get_settings
from learnlang.db.database import build_engine, init_db
from learnlang.main import create_app
from learnlang.services.entities import EntityStore
from learnlang.services.schema_probe import SchemaCapabilities

API_KEY = "test_key"

# En-tête PNG minimal : suffisant pour la détection de type
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 32


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """
    Settings isolés : dossier d'upload et base SQLite temporaires.
    """
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("APP_NAME", "LearnLang API (tests)")
    monkeypatch.setenv("UPLOAD_DIR", str(uploads))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'learnlang.db'}")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost")
    monkeypatch.setenv("API_KEY", API_KEY)
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    # IMPORTANT: vider le cache des settings pour prendre en compte les env
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def test_client(settings):
    app = create_app()
    with TestClient(app) as client:
        yield client
    app.state.engine.dispose()


@pytest.fixture
def engine(settings):
    eng = build_engine(settings)
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine):
    with Session(engine, expire_on_commit=False) as db:
        yield EntityStore(db, SchemaCapabilities(engine))


@pytest.fixture
def png_bytes():
    return PNG_BYTES
