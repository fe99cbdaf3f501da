# backend/tasktracker/main.py
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.api.routers import auth, tasks, teachers
from tasktracker.config import Settings
from tasktracker.db import init_db, make_engine, make_sessionmaker
from tasktracker.errors import AppError, InternalError
from tasktracker.logging_config import setup_logging
from tasktracker.services.credentials import CredentialService

logger = logging.getLogger(__name__)


def _error_body(message: str) -> dict:
    return {"success": False, "message": message}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid value"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    field = str(first.get("loc", ["value"])[-1])
    if first.get("type") == "missing":
        return f"{field[:1].upper()}{field[1:]} is required"
    if first.get("type") == "value_error":
        # raised by our own validators; drop pydantic's prefix
        return str(first.get("msg", "")).removeprefix("Value error, ")
    return f"Invalid value for {field}"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=_error_body(_validation_message(exc)))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        err = InternalError()
        return JSONResponse(status_code=err.status_code, content=_error_body(err.message))

    @app.middleware("http")
    async def internal_error_boundary(request: Request, call_next):
        # anything no handler above claimed ends here; the detail stays in the log
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            err = InternalError()
            return JSONResponse(status_code=err.status_code, content=_error_body(err.message))


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    settings.validate()
    setup_logging(settings.log_level)

    engine = make_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.db_auto_create:
            try:
                await init_db(engine)
            except SQLAlchemyError:
                logger.exception("Database initialization failed. Check ASYNC_DATABASE_URL.")
                raise
        logger.info("Task tracker API started (env=%s)", settings.app_env)
        try:
            yield
        finally:
            await engine.dispose()

    app = FastAPI(title="Task Tracker API", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = make_sessionmaker(engine)
    app.state.credentials = CredentialService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        lifetime=timedelta(days=settings.token_expire_days),
    )

    # registered before CORS so error responses still get CORS headers
    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(auth.router)
    app.include_router(tasks.router)
    app.include_router(teachers.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)
