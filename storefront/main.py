import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import ALLOWED_ORIGINS
from storefront.logging_config import setup_logging
from storefront.middleware import RequestIDMiddleware
from storefront.routes.health import router as health_router
from storefront.routes.listings import router as listings_router
from storefront.routes.metrics import router as metrics_router
from storefront.routes.pages import router as pages_router
from storefront.routes.webhook import router as webhook_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Second-Hand Storefront",
    description="Browse, search and filter second-hand listings",
    version="1.0.0",
)

app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(pages_router, tags=["Pages"])
app.include_router(listings_router, prefix="/api", tags=["Listings"])
app.include_router(webhook_router, tags=["Webhooks"])


@app.on_event("startup")
def startup_event() -> None:
    """Log configuration on startup."""
    from storefront.config import IMAGE_BASE_URL, PAGE_RENDER_TIMEOUT

    logger.info(
        "storefront_starting",
        image_base_url=IMAGE_BASE_URL,
        page_render_timeout=PAGE_RENDER_TIMEOUT,
    )
