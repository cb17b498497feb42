# storefront/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.config import settings
from storefront.core.errors import StorefrontError
from storefront.database import db
from storefront.api.routes import auth as auth_routes
from storefront.api.routes import products as product_routes
from storefront.api.routes import cart as cart_routes
from storefront.middleware.cors_config import configure_cors
from storefront.middleware.security_headers import add_security_headers

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: make sure the data directory exists before serving and
    warn when there is nothing to sell yet.
    """
    logger.info("Starting Storefront API (%s)", settings.ENV)
    db.data_dir.mkdir(parents=True, exist_ok=True)
    products_path = db._file_path("products")
    if not products_path.exists():
        logger.warning(
            "Products file not found at %s - seed the catalog with scripts/init_db.py.",
            products_path,
        )
    else:
        logger.info("Using data directory %s", db.data_dir)
    if not settings.SMTP_HOST:
        logger.warning("SMTP_HOST is not set; order confirmation emails will fail and be logged.")

    yield
    logger.info("Shutting down Storefront API")


app = FastAPI(title="Storefront API", version="0.1.0", lifespan=lifespan)
configure_cors(app)
add_security_headers(app)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    # one stable code per failure kind so clients can branch on it
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


app.include_router(auth_routes.router)
app.include_router(product_routes.router)
app.include_router(cart_routes.router)


@app.get("/", tags=["root"])
async def root():
    return {"status": "ok", "service": "Storefront API"}
