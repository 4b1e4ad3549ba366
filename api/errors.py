import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import settings
from core.exceptions import ErrorCode, RecommendationServiceError

logger = logging.getLogger(settings.LOGGER_NAME)

STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.VALIDATION_FAILED: 400,
    ErrorCode.CONFLICT: 409,
    ErrorCode.UPSTREAM_FAILED: 502,
    ErrorCode.AUTH_FAILED: 401,
    ErrorCode.PERMISSION_DENIED: 403,
}


def register_exception_handlers(app: FastAPI) -> None:
    """Translate service errors into one-shot JSON error responses."""

    @app.exception_handler(RecommendationServiceError)
    async def handle_service_error(request: Request, exc: RecommendationServiceError) -> JSONResponse:
        status_code = STATUS_BY_CODE.get(exc.error_code, 500)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.message, "errorCode": exc.error_code.value},
        )
