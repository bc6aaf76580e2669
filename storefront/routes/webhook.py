"""Database change webhook receiver route."""

import base64
import secrets
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from storefront.config import WEBHOOK_PASSWORD, WEBHOOK_USERNAME
from storefront.dependencies import get_change_feed
from storefront.realtime.changes import ChangeEvent, ChangeFeed, ChangeType

router = APIRouter()
logger = structlog.get_logger(__name__)

# Only listings have subscribers (the listing feeds)
WATCHED_TABLES = {"listings"}


def validate_basic_auth(auth_header: Optional[str]) -> bool:
    """
    Validate HTTP Basic Auth credentials against the webhook credentials.

    Args:
        auth_header: Authorization header value (e.g., "Basic dXNlcjpwYXNz")

    Returns:
        bool: True if credentials match, False otherwise
    """
    if not WEBHOOK_USERNAME or not WEBHOOK_PASSWORD:
        logger.error("webhook_credentials_not_configured")
        return False

    if not auth_header or not auth_header.startswith("Basic "):
        return False

    try:
        encoded_credentials = auth_header.replace("Basic ", "", 1)
        decoded_credentials = base64.b64decode(encoded_credentials).decode("utf-8")
        username, password = decoded_credentials.split(":", 1)
    except ValueError:
        logger.warning("Failed to decode Basic Auth header")
        return False

    # Both fields are always compared
    username_ok = secrets.compare_digest(
        username.encode("utf-8"), WEBHOOK_USERNAME.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        password.encode("utf-8"), WEBHOOK_PASSWORD.encode("utf-8")
    )
    return username_ok and password_ok


def record_id_of(payload: dict[str, Any]) -> Optional[str]:
    """
    Primary key of the changed row.

    DELETE events only carry ``old_record``; the others carry ``record``.
    """
    for key in ("record", "old_record"):
        row = payload.get(key)
        if isinstance(row, dict) and row.get("id") is not None:
            return str(row["id"])
    return None


def parse_change_event(payload: dict[str, Any]) -> ChangeEvent:
    """
    Build a ChangeEvent from a webhook body.

    Args:
        payload: ``{"type": ..., "table": ..., "record": ..., "old_record": ...}``

    Returns:
        ChangeEvent: Event tagged with source "webhook"

    Raises:
        ValueError: If type or table is missing or type is unknown
    """
    raw_type = payload.get("type")
    table = payload.get("table")
    if not raw_type or not table:
        raise ValueError("Missing type or table field")

    change_type = ChangeType(str(raw_type).upper())
    return ChangeEvent(
        table=str(table),
        change_type=change_type,
        record_id=record_id_of(payload),
        source="webhook",
    )


@router.post("/webhooks/changes")
async def receive_change_webhook(
    request: Request,
    feed: ChangeFeed = Depends(get_change_feed),
) -> JSONResponse:
    """
    Handle row-change notifications posted by the database.

    Authentication: HTTP Basic Auth with WEBHOOK_USERNAME/WEBHOOK_PASSWORD

    Expected payload:
        {
            "type": "UPDATE",
            "table": "listings",
            "schema": "marketplace",
            "record": {"id": "...", ...},
            "old_record": {"id": "...", ...}
        }

    Events for tables the storefront does not watch are acknowledged with 200.

    Args:
        request: FastAPI request containing the webhook payload
        feed: Injected change feed

    Returns:
        JSONResponse: Acknowledgment response
    """
    if not validate_basic_auth(request.headers.get("Authorization")):
        logger.warning("Webhook authentication failed")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Unauthorized"},
        )

    try:
        payload: Any = await request.json()
    except ValueError:
        logger.warning("webhook_invalid_json")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid JSON"},
        )

    if not isinstance(payload, dict):
        logger.warning("webhook_invalid_payload", payload_type=type(payload).__name__)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Payload must be a JSON object"},
        )

    try:
        event = parse_change_event(payload)
    except ValueError as e:
        logger.warning("webhook_malformed_event", error=str(e), payload=payload)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(e)},
        )

    logger.info(
        "webhook_received",
        table=event.table,
        change_type=event.change_type.value,
        record_id=event.record_id,
    )

    if event.table not in WATCHED_TABLES:
        logger.info("webhook_unwatched_table", table=event.table)
        return JSONResponse(content={"status": "ignored"})

    try:
        delivered = feed.publish(event)
    except Exception as e:
        logger.exception("webhook_processing_failed", table=event.table, error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    return JSONResponse(content={"status": "accepted", "delivered": delivered})
