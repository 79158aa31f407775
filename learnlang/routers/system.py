import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from learnlang.core.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/health")
def health(request: Request):
    s = get_settings()
    checks = {"database": "ok", "uploads": "ok"}

    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Health check: database unreachable (%s)", e)
        checks["database"] = "unavailable"

    if not Path(s.UPLOAD_DIR).is_dir():
        checks["uploads"] = "unavailable"

    ok = all(v == "ok" for v in checks.values())
    body = {"status": "ok" if ok else "degraded", "version": s.APP_VERSION, "checks": checks}
    if not ok:
        return JSONResponse(status_code=HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@router.get("/version")
def version():
    s = get_settings()
    return {"name": s.APP_NAME, "version": s.APP_VERSION, "env": s.APP_ENV}
