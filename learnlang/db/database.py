from __future__ import annotations

import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from learnlang.core.config import Settings

logger = logging.getLogger(__name__)

# Langues proposées (données de référence, jamais modifiées par l'API)
SEED_LANGUAGES = [
    ("1", "Hindi", "hi"),
    ("2", "Spanish", "es"),
    ("3", "French", "fr"),
    ("4", "German", "de"),
    ("5", "Japanese", "ja"),
    ("6", "Italian", "it"),
]


class Base(DeclarativeBase):
    pass


def build_engine(settings: Settings) -> Engine:
    url = settings.DATABASE_URL
    connect_args: dict[str, object] = {}

    if url.startswith("sqlite"):
        # SQLite + threadpool FastAPI ; "timeout" = attente max sur un verrou
        connect_args = {"check_same_thread": False, "timeout": settings.DB_CONNECT_TIMEOUT}
    elif url.startswith("postgresql"):
        connect_args = {
            "connect_timeout": settings.DB_CONNECT_TIMEOUT,
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        }

    engine = create_engine(
        url,
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
        connect_args=connect_args,
    )

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_conn, _record):
            dbapi_conn.execute("PRAGMA foreign_keys=ON")

    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        class_=Session,
    )


def init_db(engine: Engine) -> None:
    """
    Crée les tables manquantes et insère les langues de référence.
    """
    from learnlang.db import models  # noqa: F401  (enregistre les modèles)

    Base.metadata.create_all(bind=engine)

    with Session(engine) as db:
        existing = set(db.execute(select(models.Language.id)).scalars().all())
        missing = [lang for lang in SEED_LANGUAGES if lang[0] not in existing]
        for lang_id, name, code in missing:
            db.add(models.Language(id=lang_id, name=name, code=code))
        if missing:
            db.commit()
            logger.info("Seeded %d language(s)", len(missing))


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dépendance FastAPI : une session par requête, toujours fermée.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
