import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ticketflow.api.routes import router
from ticketflow.core.config import settings
from ticketflow.core.errors import (
    AppError,
    ConflictError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from ticketflow.core.log_config import setup_logging
from ticketflow.deps import get_progress_engine

load_dotenv()
logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[Exception], int] = {
    PayloadTooLargeError: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


def _status_for(exc: Exception) -> int:
    for klass in type(exc).__mro__:
        if klass in _ERROR_STATUS:
            return _ERROR_STATUS[klass]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _register_exception_handlers(app: FastAPI) -> None:
    def handler(request: Request, exc: AppError) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Application error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"status": exc.code, "detail": str(exc)})

    app.add_exception_handler(AppError, handler)

    def unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "internal-error", "detail": "Internal server error"},
        )

    app.add_exception_handler(Exception, unhandled_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = get_progress_engine()
    if settings.progress_autostart:
        engine.start()
    try:
        yield
    finally:
        engine.stop()


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Ticketflow Video Analysis API", version="1.0.0", lifespan=lifespan)
    _register_exception_handlers(app)

    app.include_router(router, prefix="", dependencies=[])

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("ticketflow.main:app", host=settings.host, port=settings.port)
