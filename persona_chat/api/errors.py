import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict

from fastapi import FastAPI, Request
from starlette import status as st
from starlette.responses import JSONResponse

from persona_chat.domain.errors import PlatformError

logger = logging.getLogger(__name__)

TECHNICAL_ERROR_MESSAGE = (
    'An error occurred. Please try again or contact support if the problem persists.'
)
UNEXPECTED_ERROR_MESSAGE = (
    'An unexpected error occurred. Please contact support if the problem persists.'
)
EXCEPTION_TYPE_HEADER = 'Exception-Type'


@dataclass(frozen=True)
class ErrorTranslation:
    status_code: int
    body: Dict[str, object]
    headers: Dict[str, str] = field(default_factory=dict)


def _status_for(exc: Exception) -> int:
    if isinstance(exc, PlatformError):
        if exc.is_not_found:
            return st.HTTP_404_NOT_FOUND
        if exc.is_business:
            return st.HTTP_400_BAD_REQUEST
    return st.HTTP_500_INTERNAL_SERVER_ERROR


def _message_for(exc: Exception) -> str:
    if isinstance(exc, PlatformError):
        return exc.reason if exc.is_business else TECHNICAL_ERROR_MESSAGE
    return UNEXPECTED_ERROR_MESSAGE


def translate(exc: Exception) -> ErrorTranslation:
    """
    Map any exception to the public error response.

    Business errors disclose only their reason; technical and
    unclassified errors get a fixed sentence so internal detail
    never reaches the client.
    """
    status_code = _status_for(exc)
    exception_type = type(exc).__name__
    is_platform = isinstance(exc, PlatformError)

    body = {
        'statusCode': status_code,
        'message': _message_for(exc),
        'exceptionType': exception_type,
        'isBusinessException': is_platform and exc.is_business,
        'isTechnicalException': is_platform and exc.is_technical,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }
    return ErrorTranslation(
        status_code=status_code,
        body=body,
        headers={EXCEPTION_TYPE_HEADER: exception_type},
    )


def _respond(request: Request, exc: Exception) -> JSONResponse:
    level = logging.WARNING if isinstance(exc, PlatformError) and exc.is_business else logging.ERROR
    logger.log(
        level,
        '%s on %s %s: %s',
        type(exc).__name__,
        request.method,
        request.url.path,
        getattr(exc, 'message', str(exc)),
        exc_info=exc,
    )
    translation = translate(exc)
    return JSONResponse(
        status_code=translation.status_code,
        content=translation.body,
        headers=translation.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PlatformError)
    async def _platform_error(request: Request, exc: PlatformError):
        return _respond(request, exc)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        return _respond(request, exc)
