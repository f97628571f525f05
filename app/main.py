from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from app.database import engine, Base
from app.utils.cors import ScopedCORSMiddleware
from app.api import analytics, auth, health, products

# Register models on Base.metadata before create_all
from app.models import product, user  # noqa: F401

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up application...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    yield

    logger.info("Shutting down application...")


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Backend for an inventory dashboard:

    - **Authentication**: Registration, login and cookie-based sessions
    - **Product Management**: CRUD over the product catalogue
    - **Business Insights**: Analytics snapshot computed from the full catalogue
    - **Low-Stock Alerts**: Celery workers flag products with 1-20 units left

    ## Sessions
    Login sets a `session_id` cookie holding a signed token valid for one hour.
    Tokens are not revoked server-side; logout deletes the cookie.

    ## Analytics
    Every request recomputes the snapshot from scratch: totals, stock health,
    category/status/price-range distributions, a Jan-Dec growth trend, the
    top products by value and the low-stock alert list.
    """,
    version=settings.APP_VERSION,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT"
    },
    lifespan=lifespan
)

# Registration answers its own CORS, including preflight
app.add_middleware(
    ScopedCORSMiddleware,
    exempt_paths=[auth.REGISTER_PATH],
    allow_origins=settings.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(auth.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/v1/health"
    }
