# market/main.py
# FastAPI entry point. Tables are created in the lifespan startup with retries.

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from market.core.config import settings
from market.core.errors import MarketError
from market.db.base import Base
from market.db.session import engine
from market.schemas.common import fail

# Import models so SQLAlchemy registers their tables
import market.models.user
import market.models.product
import market.models.cart
import market.models.order

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def try_create_tables(retries: int = 5, delay: int = 2) -> bool:
    """
    Create the tables, retrying while the database is unreachable.

    Args:
        retries: Number of connection attempts
        delay: Seconds between attempts

    Returns:
        True if the tables exist, False once every attempt failed
    """
    for attempt in range(1, retries + 1):
        try:
            logger.info(f"Creating tables ({attempt}/{retries})...")
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created (or already exist).")
            return True
        except Exception as e:
            logger.warning(f"Attempt {attempt}/{retries} failed to create tables: {e}")
            if attempt < retries:
                logger.info(f"Waiting {delay}s before retry...")
                time.sleep(delay)
            else:
                logger.error(
                    f"Could not create tables after {retries} retries. "
                    "Database initialization failed."
                )
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Market API starting up...")
    if not try_create_tables(retries=5, delay=2):
        if settings.is_production:
            raise RuntimeError("Cannot start application: database tables creation failed")
        logger.error("Failed to create database tables. Application may not work correctly.")

    yield

    logger.info("Market API shutting down...")
    engine.dispose()


app = FastAPI(
    title="Market API",
    description="E-commerce backend: catalog, cart, checkout and order lifecycle",
    version="1.0.0",
    lifespan=lifespan,
)

if settings.ENVIRONMENT == "development":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )


@app.exception_handler(MarketError)
async def market_error_handler(request: Request, exc: MarketError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=fail(exc.message))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Bad bodies/params are a 400 whose error echoes the violated rule."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query"))
        error = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        error = "Invalid request"
    return JSONResponse(status_code=400, content=fail(error, "Invalid request"))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=fail(str(exc.detail)), headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content=fail("Internal server error"))


from market.api import admin, auth, catalog, user  # noqa: E402

app.include_router(auth.router, prefix=settings.API_PREFIX, tags=["auth"])
app.include_router(catalog.router, prefix=settings.API_PREFIX, tags=["catalog"])
app.include_router(user.router, prefix=settings.API_PREFIX, tags=["user"])
app.include_router(admin.router, prefix=settings.API_PREFIX, tags=["admin"])


@app.get("/", tags=["health"])
async def root():
    return {
        "status": "ok",
        "service": "Market API",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health", tags=["health"])
async def health():
    return {
        "status": "healthy",
        "version": "1.0.0",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "market.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
