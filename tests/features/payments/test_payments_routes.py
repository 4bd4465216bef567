import pytest
from fastapi import status

from app.platform.config import settings
from app.platform.exceptions import BillingUnavailable

PURCHASE = {
    "api_version": "1.0",
    "event": {
        "type": "INITIAL_PURCHASE",
        "app_user_id": "u1",
        "product_id": "vantage_pro",
        "expiration_at_ms": 1767225600000,
        "event_timestamp_ms": 1764547200000,
    },
}
EXPIRATION = {"event": {"type": "EXPIRATION", "app_user_id": "u1", "product_id": "vantage_pro"}}


@pytest.mark.asyncio
async def test_purchase_then_expiration_webhooks(client):
    purchased = await client.post("/api/v1/payments/webhook", json=PURCHASE)
    expired = await client.post("/api/v1/payments/webhook", json=EXPIRATION)

    assert purchased.status_code == status.HTTP_200_OK
    assert purchased.json()["data"]["status"] == "active"
    assert purchased.json()["data"]["plan"] == "vantage_pro"
    assert purchased.json()["data"]["expires_at"].startswith("2026-01-01")

    assert expired.status_code == status.HTTP_200_OK
    assert expired.json()["data"]["status"] == "expired"
    assert expired.json()["data"]["plan"] == "free"


@pytest.mark.asyncio
async def test_redelivered_webhook_is_idempotent(client):
    first = await client.post("/api/v1/payments/webhook", json=PURCHASE)
    second = await client.post("/api/v1/payments/webhook", json=PURCHASE)

    keys = ("app_user_id", "status", "plan", "expires_at", "revenue_cat_id", "product_id")
    assert {k: first.json()["data"][k] for k in keys} == {k: second.json()["data"][k] for k in keys}


@pytest.mark.asyncio
async def test_bare_event_payload_is_accepted(client):
    response = await client.post("/api/v1/payments/webhook", json=PURCHASE["event"])

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["status"] == "active"


@pytest.mark.asyncio
async def test_unknown_event_is_acknowledged(client):
    response = await client.post(
        "/api/v1/payments/webhook",
        json={"event": {"type": "SUBSCRIBER_ALIAS", "app_user_id": "u1"}},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Event ignored"
    assert response.json()["data"] == {"applied": False}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "event",
    [
        {"type": "RENEWAL", "app_user_id": "u1"},
        {"type": "EXPIRATION", "product_id": "vantage_pro"},
        {"type": "INITIAL_PURCHASE", "product_id": "vantage_pro"},
    ],
)
async def test_unusable_event_is_acknowledged_without_changes(client, event):
    response = await client.post("/api/v1/payments/webhook", json={"event": event})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Event ignored"
    assert response.json()["data"] == {"applied": False}


@pytest.mark.asyncio
async def test_event_without_app_user_leaves_existing_record(client, auth_headers, make_user):
    user = await make_user("kept@example.com")
    await client.post("/api/v1/payments/webhook", json={"event": {**PURCHASE["event"], "app_user_id": user.id}})

    ignored = await client.post("/api/v1/payments/webhook", json={"event": {"type": "EXPIRATION"}})
    current = await client.get("/api/v1/payments/status", headers=auth_headers(user))

    assert ignored.json()["data"] == {"applied": False}
    assert current.json()["data"]["status"] == "active"
    assert current.json()["data"]["plan"] == "vantage_pro"


@pytest.mark.asyncio
async def test_webhook_secret_is_enforced(client, monkeypatch):
    monkeypatch.setattr(settings, "REVENUECAT_WEBHOOK_AUTH", "Bearer shh")

    missing = await client.post("/api/v1/payments/webhook", json=PURCHASE)
    wrong = await client.post("/api/v1/payments/webhook", json=PURCHASE, headers={"Authorization": "Bearer nope"})
    right = await client.post("/api/v1/payments/webhook", json=PURCHASE, headers={"Authorization": "Bearer shh"})

    assert missing.status_code == status.HTTP_401_UNAUTHORIZED
    assert wrong.status_code == status.HTTP_401_UNAUTHORIZED
    assert right.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_status_for_current_user(client, auth_headers, make_user):
    user = await make_user("payer@example.com")
    event = {**PURCHASE["event"], "app_user_id": user.id}
    await client.post("/api/v1/payments/webhook", json={"event": event})

    response = await client.get("/api/v1/payments/status", headers=auth_headers(user))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["app_user_id"] == user.id
    assert response.json()["data"]["plan"] == "vantage_pro"


@pytest.mark.asyncio
async def test_status_without_subscription_404(client, auth_headers, make_user):
    user = await make_user("free@example.com")

    response = await client.get("/api/v1/payments/status", headers=auth_headers(user))

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_sync_applies_remote_entitlement(client, auth_headers, make_user, mocker):
    user = await make_user("sync@example.com")
    mocker.patch(
        "app.features.payments.services.subscription_service.fetch_subscriber",
        return_value={
            "entitlements": {
                "pro": {"product_identifier": "vantage_pro_annual", "expires_date": "2099-01-01T00:00:00Z"}
            }
        },
    )

    response = await client.post("/api/v1/payments/sync", headers=auth_headers(user))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["status"] == "active"
    assert response.json()["data"]["product_id"] == "vantage_pro_annual"


@pytest.mark.asyncio
async def test_sync_provider_down_502(client, auth_headers, make_user, mocker):
    user = await make_user("down@example.com")
    mocker.patch(
        "app.features.payments.services.subscription_service.fetch_subscriber",
        side_effect=BillingUnavailable("RevenueCat API error"),
    )

    response = await client.post("/api/v1/payments/sync", headers=auth_headers(user))

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json()["error_code"] == "BILLING_UNAVAILABLE"
