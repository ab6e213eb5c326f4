"""Billing provider (RevenueCat) webhook."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from certprep.config import get_settings
from certprep.database import get_session
from certprep.errors import AppError, UnauthorizedError, ValidationError
from certprep.subscriptions.service import set_subscription
from certprep.subscriptions.tiers import FREE, tier_for_product
from certprep.webhooks.signature import verify_signature

logger = structlog.get_logger()

router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])

ACTIVATING_EVENTS = frozenset({"INITIAL_PURCHASE", "RENEWAL", "UNCANCELLATION"})


def _expiry(event: dict[str, Any]) -> datetime | None:
    ms = event.get("expiration_at_ms")
    if not ms:
        return None
    try:
        return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        msg = "Webhook expiration_at_ms must be a millisecond timestamp"
        raise ValidationError(msg) from None


def _parse_body(raw: bytes) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except ValueError:
        msg = "Webhook body is not valid JSON"
        raise ValidationError(msg) from None
    event = payload.get("event") if isinstance(payload, dict) else None
    if not isinstance(event, dict):
        msg = "Webhook body has no event"
        raise ValidationError(msg)
    return event


@router.post("/revenuecat")
async def revenuecat_webhook(request: Request, db: AsyncSession = Depends(get_session)) -> dict[str, bool]:
    """Apply a subscription lifecycle event.

    The ``Authorization`` header carries the hex HMAC-SHA256 of the raw body.
    Verification is mandatory whenever a secret is configured; production
    refuses to run without one.
    """
    settings = get_settings()
    raw = await request.body()
    secret = settings.revenuecat_webhook_secret

    if not secret:
        if settings.environment == "production":
            logger.error("webhook_secret_missing")
            msg = "Webhook secret not configured"
            raise AppError(msg)
        logger.warning("webhook_unverified", reason="no secret configured")
    elif not verify_signature(raw, request.headers.get("authorization"), secret):
        logger.warning("webhook_signature_invalid")
        msg = "Invalid signature"
        raise UnauthorizedError(msg)

    event = _parse_body(raw)
    event_type = event.get("type")
    app_user_id = event.get("app_user_id")
    tier = tier_for_product(event.get("product_id"))
    expires_at = _expiry(event)

    logger.info(
        "webhook_received",
        event_type=event_type,
        app_user_id=app_user_id,
        product_id=event.get("product_id"),
        tier=tier,
    )

    if event_type not in ACTIVATING_EVENTS and event_type != "EXPIRATION":
        # CANCELLATION keeps access until expiry; BILLING_ISSUE is inside the grace period.
        logger.info("webhook_event_ignored", event_type=event_type)
        return {"received": True}

    try:
        user_id = uuid.UUID(str(app_user_id))
    except ValueError:
        logger.warning("webhook_unknown_user", app_user_id=app_user_id)
        return {"received": True}

    if event_type == "EXPIRATION":
        updated = await set_subscription(db, user_id, FREE, None)
    else:
        updated = await set_subscription(db, user_id, tier, expires_at)
    if not updated:
        logger.warning("webhook_unknown_user", app_user_id=app_user_id)
    await db.commit()
    return {"received": True}
