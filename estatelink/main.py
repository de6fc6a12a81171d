from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from estatelink.config import settings
from estatelink.controllers.auth_controller import router as auth_router
from estatelink.controllers.user_controller import router as user_router
from estatelink.controllers.property_controller import router as property_router
from estatelink.controllers.health_controller import router as health_router
from estatelink.database.bootstrap import SchemaReport, ensure_default_admin, ensure_schema
from estatelink.database.connection import Store, create_engine
from estatelink.exceptions import AppError, SchemaBootstrapError
from estatelink.utils.exception_handlers import (
    app_error_handler,
    unhandled_error_handler,
    validation_error_handler,
)
import logging
import time

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Any localhost or private-LAN origin, accepted outside production
DEV_ORIGIN_REGEX = (
    r"^https?://(localhost|127\.0\.0\.1|192\.168\.\d+\.\d+|10\.\d+\.\d+\.\d+)(:\d+)?$"
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all incoming requests"""
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"
        logger.info(f"📡 {request.method} {request.url.path} from {client_ip}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"Response: {response.status_code} for {request.method} {request.url.path} ({process_time:.3f}s)")
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared body exceeds MAX_BODY_SIZE"""
    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > settings.MAX_BODY_SIZE:
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"success": False, "message": "Request body too large"},
            )
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting estateLink Backend Server...")
    logger.info(f"🔧 Environment: {settings.ENVIRONMENT}")
    logger.info(f"🌍 FRONTEND_URL: {settings.FRONTEND_URL}")

    store = Store(create_engine())
    app.state.store = store
    app.state.schema_report = SchemaReport()

    if await store.ping():
        logger.info("✅ Database connected successfully")
        try:
            app.state.schema_report = await ensure_schema(store)
        except SchemaBootstrapError as e:
            logger.error(f"❌ Failed to create tables: {e.error or e.message}")
        await ensure_default_admin(store)
    else:
        # Database may be temporarily unavailable; keep serving
        logger.warning("⚠️ Database connection failed, but server will start anyway")

    yield

    logger.info("🛑 Shutting down gracefully...")
    try:
        await store.close()
        logger.info("🗄️ Database connection closed")
    except Exception as e:
        logger.error(f"Error closing database: {str(e)}")


app = FastAPI(
    title="estateLink API",
    description="Accounts and property listings for the estateLink platform",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(BodySizeLimitMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_origin_regex=None if settings.is_production else DEV_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(user_router, prefix=settings.API_PREFIX)
app.include_router(property_router, prefix=settings.API_PREFIX)
app.include_router(health_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {
        "message": "estateLink Backend Server is running!",
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "port": settings.PORT,
    }
