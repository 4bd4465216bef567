import pytest
from fastapi import status


@pytest.mark.asyncio
async def test_vouch_for_user_201(client, auth_headers, make_user):
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")

    response = await client.post(f"/api/v1/vouching/{bob.id}", headers=auth_headers(alice))

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["voucher_id"] == alice.id
    assert data["vouchee_id"] == bob.id


@pytest.mark.asyncio
async def test_duplicate_vouch_409(client, auth_headers, make_user):
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")
    await client.post(f"/api/v1/vouching/{bob.id}", headers=auth_headers(alice))

    response = await client.post(f"/api/v1/vouching/{bob.id}", headers=auth_headers(alice))

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error_code"] == "DUPLICATE_VOUCH"


@pytest.mark.asyncio
async def test_self_vouch_400(client, auth_headers, make_user):
    alice = await make_user("alice@example.com")

    response = await client.post(f"/api/v1/vouching/{alice.id}", headers=auth_headers(alice))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error_code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_vouch_unknown_user_404(client, auth_headers, make_user):
    alice = await make_user("alice@example.com")

    response = await client.post("/api/v1/vouching/ghost", headers=auth_headers(alice))

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_received_vouches_for_current_user(client, auth_headers, make_user):
    alice = await make_user("alice@example.com", name="Alice")
    bob = await make_user("bob@example.com")
    await client.post(f"/api/v1/vouching/{bob.id}", headers=auth_headers(alice))

    response = await client.get("/api/v1/vouching/received", headers=auth_headers(bob))

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["count"] == 1
    assert data["vouches"][0]["voucher"]["id"] == alice.id
    assert data["vouches"][0]["voucher"]["name"] == "Alice"
    assert data["vouches"][0]["voucher"]["nomad_verified"] is False


@pytest.mark.asyncio
async def test_vouches_for_another_user(client, auth_headers, make_user):
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")
    carol = await make_user("carol@example.com")
    await client.post(f"/api/v1/vouching/{bob.id}", headers=auth_headers(alice))

    response = await client.get(f"/api/v1/vouching/users/{bob.id}", headers=auth_headers(carol))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["count"] == 1


@pytest.mark.asyncio
async def test_third_vouch_verifies_nomad(client, auth_headers, make_user):
    target = await make_user("target@example.com")
    for i in range(3):
        voucher = await make_user(f"voucher{i}@example.com")
        response = await client.post(f"/api/v1/vouching/{target.id}", headers=auth_headers(voucher))
        assert response.status_code == status.HTTP_201_CREATED

    me = await client.get("/api/v1/auth/me", headers=auth_headers(target))

    assert me.json()["data"]["vouch_count"] == 3
    assert me.json()["data"]["nomad_verified"] is True
