import logging
import traceback

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from estatelink.config import settings
from estatelink.exceptions import AppError, StoreError

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    content = {"success": False, "message": exc.message}
    if exc.error is not None:
        content["error"] = exc.error

    if isinstance(exc, StoreError):
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message} ({exc.error})")
        if not settings.is_production:
            content["details"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    return JSONResponse(status_code=exc.status_code, content=content)


def _readable(error: dict) -> str:
    message = str(error.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    if error.get("type") == "missing":
        return f"{field} is required" if field else "All fields are required"
    return f"{field}: {message}" if field and error.get("type") != "value_error" else message


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "loc": list(err.get("loc", ())),
            "msg": str(err.get("msg")),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    message = _readable(exc.errors()[0]) if errors else "Validation failed"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message, "error": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled server error on {request.method} {request.url.path}: {exc}")
    content = {"success": False, "message": "Internal server error"}
    if not settings.is_production:
        content["error"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
