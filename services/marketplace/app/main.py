import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.applications.admin_router import router as applications_admin_router
from app.applications.router import router as applications_router
from app.cart.router import router as cart_router
from app.catalog.router import router as catalog_router
from app.certificates.router import router as certificates_router
from app.checkout.router import router as checkout_router
from app.database import init_db
from app.dependencies import get_settings
from app.favourites.router import router as favourites_router
from app.progress.router import router as progress_router
from app.rate_limit import limiter
from app.reviews.router import router as reviews_router
from shared.middleware.error_handler import (
    error_body,
    error_envelope_middleware,
    install_error_handlers,
)
from shared.middleware.request_id import request_id_middleware

logger = logging.getLogger(__name__)


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Coursemart Marketplace Service

Course browsing, cart and Stripe checkout, enrollment, lecture progress,
reviews, favourites, certificates and instructor applications.

### Authentication
Protected endpoints require:
```
Authorization: Bearer <access_token>
```
Admin endpoints additionally require the `admin` role in the token.

### Error shape
```json
{ "error": { "code": "ALREADY_IN_CART", "kind": "CONFLICT", "message": "..." }, "request_id": "..." }
```
Clients branch on `error.code`. Validation failures return `400 VALIDATION_ERROR`
with the offending fields under `error.issues`.
"""

_TAGS_METADATA = [
    {"name": "Catalog", "description": "Published courses, curriculum, free enrollment."},
    {"name": "Cart", "description": "Courses the caller intends to buy."},
    {"name": "Favourites", "description": "Toggle-only wishlist."},
    {
        "name": "Checkout",
        "description": "Stripe Checkout sessions. `/verify` is idempotent per session.",
    },
    {"name": "Progress", "description": "Lecture progress and course completion."},
    {"name": "Reviews", "description": "One review per enrolled student per course."},
    {"name": "Certificates", "description": "Completion certificates and public verification."},
    {"name": "instructor-applications", "description": "Students applying to teach."},
    {
        "name": "admin-instructor-applications",
        "description": "**Admin only.** Approve or reject instructor applications.",
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body(
            request,
            code="RATE_LIMITED",
            kind="RATE_LIMITED",
            message=f"Rate limit exceeded: {exc.detail}",
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db(settings.marketplace_database_url)
    logger.info("Marketplace service started (env=%s)", settings.env_name)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s:%(name)s: %(message)s",
    )
    app = FastAPI(
        title="Coursemart Marketplace Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Attach rate limiter state before middleware
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    install_error_handlers(app)

    # Middleware is applied in reverse-registration order (last added = outermost).
    # Request id wraps the error envelope so 500s carry X-Request-ID too.
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(error_envelope_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    for router in (
        catalog_router,
        cart_router,
        favourites_router,
        checkout_router,
        progress_router,
        reviews_router,
        certificates_router,
        applications_router,
        applications_admin_router,
    ):
        app.include_router(router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="marketplace")

    return app


app = create_app()
