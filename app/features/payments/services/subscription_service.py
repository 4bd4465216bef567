from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

import httpx
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.payments.models.subscription import (
    Subscription,
    SubscriptionPlan,
    SubscriptionState,
)
from app.platform.config import settings
from app.platform.exceptions import BillingUnavailable, InvalidInput, NotFound, UnknownEvent
from app.platform.logger import get_logger
from app.platform.utils.time import as_utc, utcnow

logger = get_logger(__name__)

INITIAL_PURCHASE = "INITIAL_PURCHASE"
RENEWAL = "RENEWAL"
CANCELLATION = "CANCELLATION"
EXPIRATION = "EXPIRATION"

ACTIVATING_EVENTS = frozenset({INITIAL_PURCHASE, RENEWAL})
HANDLED_EVENTS = ACTIVATING_EVENTS | {CANCELLATION, EXPIRATION}


@dataclass(frozen=True)
class SubscriptionEvent:
    """A billing event that has already been authenticated by the caller."""
    event_type: str
    app_user_id: Optional[str]
    product_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    occurred_at: Optional[datetime] = None


@dataclass(frozen=True)
class SubscriptionChange:
    """Column assignments for a new record and for an existing one."""
    on_insert: dict = field(default_factory=dict)
    on_update: dict = field(default_factory=dict)


def plan_for_product(product_id: str) -> SubscriptionPlan:
    # Every paid product unlocks Pro
    if not product_id or product_id.strip().lower() == SubscriptionPlan.FREE.value:
        return SubscriptionPlan.FREE
    return SubscriptionPlan.VANTAGE_PRO


def period_for_product(product_id: str) -> timedelta:
    pid = product_id.lower()
    if "annual" in pid or "yearly" in pid:
        return timedelta(days=365)
    if "weekly" in pid or "week" in pid:
        return timedelta(days=7)
    return timedelta(days=31)


def plan_change(event: SubscriptionEvent, now: Optional[datetime] = None) -> SubscriptionChange:
    """
    Map an event to the assignments it makes. Pure: the same event always
    yields the same change, which is what makes redelivery harmless.
    """
    if event.event_type not in HANDLED_EVENTS:
        raise UnknownEvent(f"Unhandled event type '{event.event_type}'")
    if not event.app_user_id:
        raise InvalidInput("Event is missing app_user_id")

    if event.event_type in ACTIVATING_EVENTS:
        if not event.product_id:
            raise InvalidInput("Purchase event is missing product_id")
        expires_at = event.expires_at
        if expires_at is None:
            started_at = event.occurred_at or now or utcnow()
            expires_at = started_at + period_for_product(event.product_id)
        values = {
            "status": SubscriptionState.ACTIVE.value,
            "plan": plan_for_product(event.product_id).value,
            "expires_at": expires_at,
            "revenue_cat_id": event.app_user_id,
            "product_id": event.product_id,
        }
        return SubscriptionChange(on_insert=dict(values), on_update=dict(values))

    if event.event_type == CANCELLATION:
        # Entitlement stays usable until expires_at; only the status moves
        return SubscriptionChange(
            on_insert={
                "status": SubscriptionState.CANCELLED.value,
                "plan": SubscriptionPlan.FREE.value,
                "revenue_cat_id": event.app_user_id,
            },
            on_update={"status": SubscriptionState.CANCELLED.value},
        )

    values = {
        "status": SubscriptionState.EXPIRED.value,
        "plan": SubscriptionPlan.FREE.value,
    }
    return SubscriptionChange(
        on_insert={**values, "revenue_cat_id": event.app_user_id},
        on_update=dict(values),
    )


class SubscriptionService:
    """Keeps the local entitlement record in step with RevenueCat."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert
        if dialect == "sqlite":
            return sqlite_insert
        raise RuntimeError(f"Subscription upsert is not supported on {dialect}")

    async def apply(self, event: SubscriptionEvent) -> Subscription:
        """
        Apply a billing event as a single INSERT ... ON CONFLICT DO UPDATE
        keyed on app_user_id.

        Raises:
            UnknownEvent: event type is not handled
            InvalidInput: event lacks the identifiers it needs
        """
        change = plan_change(event)

        insert = self._insert()
        stmt = insert(Subscription).values(app_user_id=event.app_user_id, **change.on_insert)
        stmt = stmt.on_conflict_do_update(
            index_elements=["app_user_id"],
            set_={**change.on_update, "updated_at": func.now()},
        ).returning(Subscription)

        result = await self.db.execute(stmt, execution_options={"populate_existing": True})
        subscription = result.scalar_one()
        await self.db.commit()

        logger.info(
            f"Applied {event.event_type} for {event.app_user_id}: "
            f"status={subscription.status} plan={subscription.plan}"
        )
        return subscription

    async def get_status(self, app_user_id: str) -> Subscription:
        result = await self.db.execute(
            select(Subscription).where(Subscription.app_user_id == app_user_id)
        )
        subscription = result.scalar_one_or_none()
        if subscription is None:
            raise NotFound("No subscription found for this user")
        return subscription

    async def sync(self, app_user_id: str) -> Subscription:
        """
        Pull the subscriber from RevenueCat and apply the matching event.
        Used when the app suspects a missed webhook.
        """
        subscriber = await fetch_subscriber(app_user_id)
        entitlement = _latest_active_entitlement(subscriber)

        if entitlement is not None:
            product_id, expires_at = entitlement
            return await self.apply(
                SubscriptionEvent(
                    event_type=RENEWAL,
                    app_user_id=app_user_id,
                    product_id=product_id,
                    expires_at=expires_at,
                )
            )

        result = await self.db.execute(
            select(Subscription).where(Subscription.app_user_id == app_user_id)
        )
        current = result.scalar_one_or_none()
        if current is not None and current.plan == SubscriptionPlan.VANTAGE_PRO.value:
            return await self.apply(SubscriptionEvent(event_type=EXPIRATION, app_user_id=app_user_id))
        if current is None:
            raise NotFound("No subscription found for this user")
        return current


async def fetch_subscriber(app_user_id: str) -> dict:
    if not settings.REVENUECAT_API_KEY:
        raise BillingUnavailable("RevenueCat API key is not configured")

    url = f"{settings.REVENUECAT_API_URL.rstrip('/')}/subscribers/{app_user_id}"
    headers = {
        "Authorization": f"Bearer {settings.REVENUECAT_API_KEY}",
        "Accept": "application/json",
    }
    try:
        async with httpx.AsyncClient(timeout=settings.REVENUECAT_API_TIMEOUT) as client:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"RevenueCat lookup failed for {app_user_id}: {e}")
        raise BillingUnavailable(f"RevenueCat API error: {e}") from e

    return response.json().get("subscriber") or {}


def _parse_date(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    return as_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))


def _latest_active_entitlement(subscriber: dict) -> Optional[tuple[str, Optional[datetime]]]:
    """(product_id, expires_at) of the longest running active entitlement, if any."""
    now = utcnow()
    active = []
    for entitlement in (subscriber.get("entitlements") or {}).values():
        expires_at = _parse_date(entitlement.get("expires_date"))
        if expires_at is None or expires_at > now:
            active.append((entitlement.get("product_identifier") or "unknown_pro_product", expires_at))
    if not active:
        return None
    # Lifetime entitlements (no expiry) win
    return max(active, key=lambda item: item[1] or datetime.max.replace(tzinfo=now.tzinfo))
