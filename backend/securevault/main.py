import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from securevault.api.v1.audit_routes import router as audit_router
from securevault.api.v1.auth_routes import router as auth_router
from securevault.api.v1.vault_routes import router as vault_router
from securevault.core.audit import AuditRecorder
from securevault.core.config import Settings, settings as default_settings
from securevault.core.crypto_utils import FieldCipher
from securevault.core.errors import (
    DecryptionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from securevault.db.session import make_engine, make_session_factory

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError):
        messages = {}
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part != "body"]
            messages.setdefault(".".join(loc) or "body", []).append(err.get("msg", "Invalid value"))
        return JSONResponse(
            status_code=422,
            content={"error": "Validation failed", "messages": messages},
        )

    @app.exception_handler(ValidationError)
    async def _validation_failed(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=422,
            content={"error": "Validation failed", "messages": exc.messages},
        )

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": "Vault item not found"})

    @app.exception_handler(DecryptionError)
    async def _decryption_failed(request: Request, exc: DecryptionError):
        logger.error("Decryption failure on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Failed to retrieve vault items"})

    @app.exception_handler(PersistenceError)
    async def _storage_unavailable(request: Request, exc: PersistenceError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"error": "Service temporarily unavailable"})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or default_settings
    configure_logging(app_settings.LOG_LEVEL)

    app = FastAPI(
        title="SecureVault Backend",
        description="Password manager with field-level encrypted vault and audit trail",
        version="1.0.0",
    )

    # built once per process, read-only afterwards
    engine = make_engine(app_settings.DATABASE_URL)
    session_factory = make_session_factory(engine)
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.cipher = FieldCipher.from_settings(app_settings)
    app.state.audit = AuditRecorder(session_factory)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    app.include_router(auth_router, prefix="/auth", tags=["Auth"])
    app.include_router(vault_router)         # /vault/...
    app.include_router(audit_router)         # /audit-logs

    @app.get("/")
    def root():
        return {"status": "Backend running"}

    return app


app = create_app()
