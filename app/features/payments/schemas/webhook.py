from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator


def _from_ms(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class RevenueCatEvent(BaseModel):
    """The `event` object of a RevenueCat webhook. Unused fields are ignored."""
    model_config = ConfigDict(extra="ignore")

    type: str
    app_user_id: Optional[str] = None
    product_id: Optional[str] = None
    expiration_at_ms: Optional[int] = None
    event_timestamp_ms: Optional[int] = None
    id: Optional[str] = None

    @property
    def expires_at(self) -> Optional[datetime]:
        return _from_ms(self.expiration_at_ms)

    @property
    def occurred_at(self) -> Optional[datetime]:
        return _from_ms(self.event_timestamp_ms)


class RevenueCatWebhook(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "api_version": "1.0",
                "event": {
                    "type": "INITIAL_PURCHASE",
                    "app_user_id": "0190f1d2-7c4e-7b1a-9c1e-2f6d7a8b9c0d",
                    "product_id": "vantage_pro_monthly",
                    "expiration_at_ms": 1767225600000,
                    "event_timestamp_ms": 1764547200000,
                },
            }
        },
    )

    api_version: Optional[str] = None
    event: RevenueCatEvent

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_event(cls, data: Any) -> Any:
        # Some senders post the event object without the envelope
        if isinstance(data, dict) and "event" not in data and "type" in data:
            return {"event": data}
        return data


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    app_user_id: str
    status: str
    plan: str
    expires_at: Optional[datetime] = None
    revenue_cat_id: Optional[str] = None
    product_id: Optional[str] = None
    updated_at: Optional[datetime] = None
