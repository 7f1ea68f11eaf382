"""
Error translation

Single place where exceptions become HTTP responses with the body
{"error": {"code", "message", "details"?}}.

- AppError: its own status, logged at warning
- request validation: 400 VALIDATION_ERROR
- unmatched route / other HTTP errors: mapped by status
- anything else: 500, logged at error with traceback
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.errors import AppError, ErrorCode, to_error_response

logger = logging.getLogger(__name__)

HTTP_STATUS_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        f"Application error {exc.code} ({exc.status_code}) on {request.method} {request.url.path}: {exc.message}"
    )
    cause = getattr(exc, "cause", None)
    if cause is not None:
        logger.error(f"❌ Cause of {exc.code} on {request.method} {request.url.path}: {cause!r}", exc_info=cause)
    return JSONResponse(status_code=exc.status_code, content=to_error_response(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {'field': '.'.join(str(p) for p in err.get('loc', ())), 'message': err.get('msg', '')}
        for err in exc.errors()
    ]
    logger.warning(f"Validation failed on {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={'error': {
            'code': ErrorCode.VALIDATION_ERROR,
            'message': 'Validation failed',
            'details': {'errors': errors},
        }},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL_SERVER_ERROR)
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={'error': {'code': code, 'message': message}},
        headers=getattr(exc, 'headers', None),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"❌ Unexpected error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content=to_error_response(exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
