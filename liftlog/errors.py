# liftlog/errors.py
"""Map every failure onto the API's ``{"error": message}`` envelope."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = logging.getLogger(__name__)


class WorkoutFinishedError(Exception):
    """Raised when a finished workout is asked to change state again."""


def _error(status_code: int, message: str, headers=None, **extra) -> JSONResponse:
    body = {"error": message, **extra}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Drop the raw input/ctx objects; they are not always JSON serialisable
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    return _error(status.HTTP_400_BAD_REQUEST, "Invalid request data", details=details)


async def workout_finished_handler(request: Request, exc: WorkoutFinishedError):
    return _error(status.HTTP_409_CONFLICT, str(exc) or "Workout already finished")


async def unhandled_exception_handler(request: Request, exc: Exception):
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(WorkoutFinishedError, workout_finished_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
