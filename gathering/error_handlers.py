"""Map engine failures to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import (
    AddOptionsDisabled,
    ExpiredPoll,
    GatheringError,
    InvalidContent,
    InvalidTarget,
    MissingIdentityContext,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    InvalidTarget: 404,
    ExpiredPoll: 409,
    MissingIdentityContext: 400,
    AddOptionsDisabled: 403,
    InvalidContent: 422,
}


async def gathering_error_handler(request: Request, exc: GatheringError) -> JSONResponse:
    """The document was not written; report why."""
    code = STATUS_CODES.get(type(exc), 400)
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=code, content={"detail": exc.to_dict()})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatheringError, gathering_error_handler)
