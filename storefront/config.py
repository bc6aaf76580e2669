import os
from enum import Enum

from dotenv import load_dotenv

load_dotenv()


class ErrorPolicy(str, Enum):
    """How a failed backend call is reported to the person browsing."""

    NOTIFY = "notify"  # log and show a transient notice
    LOG = "log"  # log only


def _error_policy(name: str, default: ErrorPolicy) -> ErrorPolicy:
    raw = os.getenv(name, default.value).strip().lower()
    try:
        return ErrorPolicy(raw)
    except ValueError:
        raise ValueError(
            f"{name} must be one of {[p.value for p in ErrorPolicy]}, got {raw!r}"
        ) from None


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

SCHEMA = "marketplace"

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Image keys are appended verbatim, so the base must end with a slash
IMAGE_BASE_URL = os.getenv(
    "IMAGE_BASE_URL",
    "http://localhost:54321/storage/v1/object/public/product-images/",
)
PLACEHOLDER_IMAGE = "/placeholder.svg"

WEBHOOK_USERNAME = os.getenv("WEBHOOK_USERNAME", "")
WEBHOOK_PASSWORD = os.getenv("WEBHOOK_PASSWORD", "")

PAGE_RENDER_TIMEOUT = float(os.getenv("PAGE_RENDER_TIMEOUT", "2.0"))

LISTINGS_ERROR_POLICY = _error_policy("LISTINGS_ERROR_POLICY", ErrorPolicy.NOTIFY)
CATEGORIES_ERROR_POLICY = _error_policy("CATEGORIES_ERROR_POLICY", ErrorPolicy.NOTIFY)
VIEWS_ERROR_POLICY = _error_policy("VIEWS_ERROR_POLICY", ErrorPolicy.LOG)
