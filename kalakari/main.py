"""
Kalakari - Backend API
Marketplace for handcrafted goods: customers, artisans and admins
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables before settings are read
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from kalakari.api import (  # noqa: E402
    addresses, admin, artisans, auth, cart, contact, health, journal, orders, payment, products, reviews, search,
    testimonials, wishlist,
)
from kalakari.core.config import settings  # noqa: E402
from kalakari.core.csrf import CSRFMiddleware  # noqa: E402
from kalakari.core.database import init_db  # noqa: E402
from kalakari.core.errors import register_exception_handlers  # noqa: E402
from kalakari.core.logging import configure_logging  # noqa: E402
from kalakari.core.metrics import MetricsMiddleware  # noqa: E402
from kalakari.core.rate_limit import RateLimitMiddleware  # noqa: E402
from kalakari.core.security import RequestLoggingMiddleware, SecurityHeadersMiddleware  # noqa: E402

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"{settings.API_TITLE} {settings.API_VERSION} started ({settings.ENVIRONMENT})")
    yield


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    lifespan=lifespan,
)

# Last added is outermost; CORS wraps everything
app.add_middleware(CSRFMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"],
)

register_exception_handlers(app)

# Include API routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(auth.session_router)
app.include_router(addresses.router)
app.include_router(cart.router)
app.include_router(wishlist.router)
app.include_router(products.router)
app.include_router(reviews.router)
app.include_router(orders.router)
app.include_router(payment.router)
app.include_router(artisans.router)
app.include_router(journal.router)
app.include_router(testimonials.router)
app.include_router(contact.router)
app.include_router(search.router)
app.include_router(admin.router)

if settings.dev_endpoints_enabled:
    from kalakari.dev.router import router as dev_router

    app.include_router(dev_router)
    logger.info("Development endpoints enabled under /api/dev")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("kalakari.main:app", host=settings.API_HOST, port=settings.API_PORT)
