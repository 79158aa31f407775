import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from learnlang.core.config import get_settings
from learnlang.core.errors import (
    CODE_EMPTY_BODY,
    CODE_INTERNAL,
    CODE_INVALID_INPUT,
    CODE_JSON_SYNTAX,
    CODE_JSON_TYPE,
    CODE_UNKNOWN_FIELD,
    LearnLangError,
)
from learnlang.core.logging import setup_logging
from learnlang.db.database import build_engine, build_session_factory, init_db
from learnlang.routers import admin, flashcards, languages, packs, system, vocabs
from learnlang.schemas.packs import ErrorOut
from learnlang.services.schema_probe import SchemaCapabilities
from learnlang.services.storage import BlobStore, IMAGES_PREFIX, verify_upload_dir_writable

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    rid = _request_id(request)
    logger.info("Error [%s]: %s (RequestID: %s)", code, message, rid)
    body = ErrorOut(error=message, code=code, request_id=rid)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _validation_code(error: dict) -> tuple[str, str]:
    """Code et message pour la première erreur de validation FastAPI/pydantic."""
    kind = error.get("type", "")
    loc = tuple(error.get("loc", ()))
    field = ".".join(str(p) for p in loc if p != "body")

    if kind == "missing" and loc == ("body",):
        return CODE_EMPTY_BODY, "request body must not be empty"
    if kind == "json_invalid":
        return CODE_JSON_SYNTAX, "badly-formed JSON"
    if kind == "extra_forbidden":
        return CODE_UNKNOWN_FIELD, f"unknown field {field!r}"
    if kind.endswith(("_type", "_parsing")):
        return CODE_JSON_TYPE, f"invalid type for field {field!r}" if field else "invalid JSON value"

    message = f"{field}: {error.get('msg', 'invalid value')}" if field else "invalid request payload"
    return CODE_INVALID_INPUT, message


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LearnLangError)
    async def learnlang_error(request: Request, exc: LearnLangError):
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc.__cause__)
        return error_response(request, exc.status_code, exc.code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        code, message = _validation_code(errors[0] if errors else {})
        return error_response(request, HTTP_400_BAD_REQUEST, code, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return error_response(request, exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled %s on %s %s", type(exc).__name__, request.method, request.url.path, exc_info=exc)
        return error_response(request, HTTP_500_INTERNAL_SERVER_ERROR, CODE_INTERNAL, "internal server error")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    # Le dossier d'upload doit exister et être inscriptible : sinon on ne démarre pas
    verify_upload_dir_writable(settings.UPLOAD_DIR)
    storage = BlobStore(root=settings.UPLOAD_DIR, max_upload_bytes=settings.max_upload_bytes)
    storage.images_dir.mkdir(exist_ok=True)

    engine = build_engine(settings)
    init_db(engine)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="API backend LearnLang (langues, packs, vocabs, flashcards)",
    )
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.capabilities = SchemaCapabilities(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],  # fallback si mal configuré
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token", REQUEST_ID_HEADER],
        expose_headers=["Link", REQUEST_ID_HEADER],
        max_age=300,
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = rid
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response

    register_error_handlers(app)

    # Routers
    app.include_router(system.router)
    app.include_router(languages.router)
    app.include_router(packs.router)
    app.include_router(vocabs.router)
    app.include_router(flashcards.router)
    app.include_router(admin.router)

    # Images uploadées (pas de listing de dossier)
    app.mount(IMAGES_PREFIX.rstrip("/"), StaticFiles(directory=storage.images_dir), name="images")

    # Redirect root → docs
    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/docs")

    logger.info("%s %s started (env=%s, db=%s)", settings.APP_NAME, settings.APP_VERSION, settings.APP_ENV, engine.url.render_as_string(hide_password=True))
    return app

