from fastapi import Depends, Request
from sqlalchemy.orm import Session

from learnlang.core.config import Settings, get_settings
from learnlang.db.database import get_db
from learnlang.services.entities import EntityStore
from learnlang.services.storage import BlobStore


def get_settings_dep() -> Settings:
    return get_settings()


def get_storage_service(settings: Settings = Depends(get_settings_dep)) -> BlobStore:
    """
    Fournit le stockage des images en dépendance (DI).
    """
    return BlobStore(root=settings.UPLOAD_DIR, max_upload_bytes=settings.max_upload_bytes)


def get_entity_store(request: Request, db: Session = Depends(get_db)) -> EntityStore:
    return EntityStore(db, request.app.state.capabilities)
