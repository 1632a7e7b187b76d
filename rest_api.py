import logging
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import APP_VERSION, YamlConfig
from db import Database, ExerciseRepository, UserRepository
from errors import (
    DuplicateError,
    NotFoundError,
    OwnerMissingError,
    StorageError,
    TrackerError,
    ValidationError,
)
from log_service import ExerciseLogService
from validators import validate_log_filters

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    DuplicateError: 400,
    NotFoundError: 404,
    OwnerMissingError: 404,
    StorageError: 400,
}


def error_status(exc: Exception) -> int:
    for kind, status in ERROR_STATUS.items():
        if isinstance(exc, kind):
            return status
    return 400


def error_response(exc: Exception) -> JSONResponse:
    """Translate a failure into the ``{"error": message}`` payload."""
    if isinstance(exc, TrackerError):
        message = exc.message
    else:
        message = str(exc) or repr(exc)
    status = error_status(exc)
    logger.warning("%s -> %s: %s", type(exc).__name__, status, message)
    return JSONResponse(status_code=status, content={"error": message})


class ErrorMapper:
    """Middleware mapping unclassified exceptions to a 400 response."""

    async def __call__(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception("unhandled error on %s %s", request.method, request.url.path)
            return error_response(e)


class ExerciseTrackerAPI:
    """Provides REST endpoints for exercise tracking."""

    def __init__(
        self,
        db_path: str | None = None,
        yaml_path: str = "settings.yaml",
        *,
        pool_size: int | None = None,
    ) -> None:
        self.settings = YamlConfig(yaml_path).settings()
        self.db_path = db_path or self.settings.db_path
        self.database = Database(
            self.db_path,
            pool_size or self.settings.pool_size,
            self.settings.pool_timeout,
        )
        self.users = UserRepository(self.database)
        self.exercises = ExerciseRepository(self.database)
        self.logs = ExerciseLogService(self.users, self.exercises)
        self.app = FastAPI(
            title="Exercise Tracker API",
            description="REST API for logging exercises and querying user logs",
            version=APP_VERSION,
        )
        self.app.middleware("http")(ErrorMapper())
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=self.settings.cors_origins,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        self._setup_error_handlers()
        self._setup_routes()

    def close(self) -> None:
        self.database.close()

    def _setup_error_handlers(self) -> None:
        @self.app.exception_handler(TrackerError)
        async def tracker_error(request: Request, exc: TrackerError):
            return error_response(exc)

        @self.app.exception_handler(RequestValidationError)
        async def request_error(request: Request, exc: RequestValidationError):
            errors = exc.errors()
            message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
            return error_response(ValidationError(message))

    def _setup_routes(self) -> None:
        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            self.users.count()
            return {"status": "ok"}

        @self.app.get("/api/users")
        def list_users():
            return self.logs.list_users()

        @self.app.post("/api/users", status_code=201)
        def create_user(payload: Dict[str, Any] = Body(default={})):
            return self.logs.register_user(payload.get("username"))

        @self.app.get("/api/users/{user_id}")
        def get_user(user_id: str):
            return self.logs.get_user(user_id)

        @self.app.post("/api/users/{user_id}/exercises", status_code=201)
        def add_exercise(user_id: str, payload: Dict[str, Any] = Body(default={})):
            return self.logs.add_exercise(user_id, payload)

        @self.app.get("/api/users/{user_id}/logs")
        def get_logs(
            user_id: str,
            date_from: Optional[str] = Query(None, alias="from"),
            date_to: Optional[str] = Query(None, alias="to"),
            limit: Optional[str] = None,
        ):
            filters = validate_log_filters(date_from, date_to, limit)
            return self.logs.user_log(user_id, filters)


def create_app(db_path: str | None = None, yaml_path: str = "settings.yaml") -> FastAPI:
    return ExerciseTrackerAPI(db_path=db_path, yaml_path=yaml_path).app


if __name__ == "__main__":
    import uvicorn

    from log_config import setup_logging

    api = ExerciseTrackerAPI()
    setup_logging(api.settings.log_level)
    uvicorn.run(api.app, host=api.settings.host, port=api.settings.port)
