"""Map any raised value to the uniform ``{error, details}`` envelope.

Classified failures (``AppError``) keep their code and status. FastAPI's
own request validation errors become ``VALIDATION_INVALID`` and its HTTP
errors ``INNO_HTTP_<status>``. Anything else becomes ``INNO_INTERNAL``
with status 500; its message is logged and never written to the response.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from innokit.errors import AppError, InternalError, ValidationError
from innokit.schemas.error import ErrorResponse, FieldFailure

logger = logging.getLogger(__name__)


def _request_validation_error(exc: RequestValidationError) -> ValidationError:
    # The rejected input is not echoed back; only the field name is reported.
    errors = exc.errors()
    loc = errors[0].get("loc", ()) if errors else ()
    field = str(loc[-1]) if loc else ""
    return ValidationError(ValidationError.INVALID, FieldFailure(invalidField=field).model_dump())


def classify(exc: BaseException) -> AppError | None:
    """Return the AppError for ``exc``, or None when it is not a known failure."""
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, RequestValidationError):
        return _request_validation_error(exc)
    if isinstance(exc, StarletteHTTPException) and 400 <= exc.status_code < 600:
        return InternalError.from_status(exc.status_code, inner_details=exc.detail)
    return None


def error_response(exc: BaseException) -> JSONResponse:
    """Log ``exc`` and return a standardized error response."""
    error = classify(exc)
    if error is None:
        logger.exception("Unhandled %s: %s", type(exc).__name__, exc, exc_info=exc)
        error = InternalError(InternalError.INTERNAL)
    elif error.http_status >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s: %r", error.wire_code, error.inner_details)
    else:
        logger.warning("%s: %r", error.wire_code, error.inner_details)

    body = ErrorResponse.model_validate(error.to_envelope())
    return JSONResponse(
        status_code=error.http_status,
        content=body.model_dump(exclude_unset=True),
        headers=getattr(exc, "headers", None),
    )


def handle_error(_request: Request, exc: Exception) -> JSONResponse:
    return error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Render AppErrors and FastAPI's own HTTP and validation errors as envelopes."""
    app.add_exception_handler(AppError, handle_error)
    app.add_exception_handler(RequestValidationError, handle_error)
    app.add_exception_handler(StarletteHTTPException, handle_error)


class ErrorMiddleware:
    """
    Outermost ASGI layer: the single boundary where failures are rendered.

    Errors raised after the response has started cannot be rendered and
    are re-raised.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise
            response = error_response(exc)
            await response(scope, receive, send)
