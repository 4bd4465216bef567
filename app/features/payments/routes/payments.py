import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.auth.routes.auth import get_current_user
from app.features.payments.schemas.webhook import RevenueCatWebhook, SubscriptionResponse
from app.features.payments.services.subscription_service import (
    SubscriptionEvent,
    SubscriptionService,
)
from app.platform.config import settings
from app.platform.db.session import get_db
from app.platform.exceptions import InvalidInput, UnknownEvent
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def verify_webhook_authorization(authorization: Optional[str] = Header(default=None)) -> None:
    """RevenueCat sends the configured shared secret as the Authorization header."""
    expected = settings.REVENUECAT_WEBHOOK_AUTH
    if not expected:
        return
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook authorization",
        )


@router.post(
    "/webhook",
    response_model=dict,
    summary="RevenueCat webhook",
    dependencies=[Depends(verify_webhook_authorization)],
)
async def revenuecat_webhook(
    payload: RevenueCatWebhook,
    db: AsyncSession = Depends(get_db),
):
    """
    Apply a RevenueCat event to the subscriber's entitlement.
    Events of a type this service does not track, or missing the ids needed to
    apply them, are acknowledged and ignored so RevenueCat stops retrying them.
    """
    event = payload.event
    logger.info(
        f"RevenueCat webhook received: type={event.type} app_user_id={event.app_user_id} "
        f"product_id={event.product_id}"
    )

    try:
        subscription = await SubscriptionService(db).apply(
            SubscriptionEvent(
                event_type=event.type,
                app_user_id=event.app_user_id,
                product_id=event.product_id,
                expires_at=event.expires_at,
                occurred_at=event.occurred_at,
            )
        )
    except (UnknownEvent, InvalidInput) as e:
        logger.warning(f"Ignoring RevenueCat event: {e.message}")
        return api_response(data={"applied": False}, message="Event ignored")

    return api_response(
        data=SubscriptionResponse.model_validate(subscription),
        message="Event applied",
    )


@router.get("/status", response_model=dict, summary="Current user's subscription")
async def get_subscription_status(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    subscription = await SubscriptionService(db).get_status(current_user.id)
    return api_response(
        data=SubscriptionResponse.model_validate(subscription),
        message="Subscription status retrieved",
    )


@router.post("/sync", response_model=dict, summary="Resync subscription from RevenueCat")
async def sync_subscription(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    subscription = await SubscriptionService(db).sync(current_user.id)
    return api_response(
        data=SubscriptionResponse.model_validate(subscription),
        message="Subscription synced",
    )
