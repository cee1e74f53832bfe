import pytest

from app.utils.exceptions import GatewayUnavailableError


async def _place_order(synced) -> dict:
    client = synced["client"]
    photos = synced["photos"]
    response = await client.post("/api/v1/orders", json={
        "photoshoot_id": synced["photoshoot"]["id"],
        "items": [{"photo_id": photos[0]["id"], "format": "digital_printed", "print_size": "15x21"}],
        "payment_method": "pix",
        "delivery_method": "pickup",
    })
    assert response.status_code == 201
    return response.json()["data"]["order"]


@pytest.mark.asyncio
async def test_pix_payment(synced_photoshoot, fake_gateway, admin_client):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)

    response = await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["qr_code"] == "000201"
    assert fake_gateway.created[0]["amount"] == 2000
    assert order["order_number"] in fake_gateway.created[0]["description"]

    fetched = await admin_client.get(f"/api/v1/orders/{order['id']}")
    assert fetched.json()["data"]["payment_id"] == data["id"]
    assert fetched.json()["data"]["status"] == "awaiting_payment"


@pytest.mark.asyncio
async def test_card_payment_approves_order(synced_photoshoot, fake_gateway):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)

    response = await client.post("/api/v1/payments/card", json={
        "order_id": order["id"], "token": "tok_123", "payment_method_id": "visa", "installments": 2,
    })

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "approved"
    assert data["order_status"] == "payment_approved"
    assert fake_gateway.created[0]["installments"] == 2


@pytest.mark.asyncio
async def test_payment_for_unknown_order(synced_photoshoot, fake_gateway):
    client = synced_photoshoot["client"]

    response = await client.post("/api/v1/payments/pix", json={"order_id": "missing"})

    assert response.status_code == 404
    assert fake_gateway.created == []


@pytest.mark.asyncio
async def test_payment_for_other_clients_order(synced_photoshoot, fake_gateway, new_client, anon_client):
    order = await _place_order(synced_photoshoot)
    other = await new_client()
    await anon_client.post("/api/v1/auth/login", json={"email": other["email"], "code": other["linking_code"]})

    response = await anon_client.post("/api/v1/payments/pix", json={"order_id": order["id"]})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_gateway_unavailable(synced_photoshoot, fake_gateway):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)
    fake_gateway.error = GatewayUnavailableError()

    response = await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})

    assert response.status_code == 502
    assert response.json()["data"]["code"] == "GATEWAY_UNAVAILABLE"


@pytest.mark.asyncio
async def test_check_payment_status(synced_photoshoot, fake_gateway):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)
    pix = (await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})).json()["data"]
    fake_gateway.statuses[pix["id"]] = "approved"

    response = await client.get(f"/api/v1/payments/{pix['id']}/status")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "approved"
    assert response.json()["data"]["order_status"] == "payment_approved"
    assert fake_gateway.status_requests == [pix["id"]]


@pytest.mark.asyncio
async def test_check_unknown_payment(synced_photoshoot, fake_gateway):
    client = synced_photoshoot["client"]

    response = await client.get("/api/v1/payments/999999/status")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_webhook_approves_order(synced_photoshoot, fake_gateway, anon_client, admin_client):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)
    pix = (await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})).json()["data"]
    fake_gateway.statuses[pix["id"]] = "approved"

    response = await anon_client.post("/api/v1/payments/webhook", json={"topic": "payment", "id": int(pix["id"])})

    assert response.status_code == 200
    assert response.json()["data"] == {"order_id": order["id"], "status": "payment_approved", "changed": True}
    fetched = await admin_client.get(f"/api/v1/orders/{order['id']}")
    assert fetched.json()["data"]["status"] == "payment_approved"
    assert fetched.json()["data"]["payment_confirmed_at"] is not None


@pytest.mark.asyncio
async def test_webhook_redelivery_is_idempotent(synced_photoshoot, fake_gateway, anon_client):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)
    pix = (await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})).json()["data"]
    fake_gateway.statuses[pix["id"]] = "approved"
    notification = {"topic": "payment", "id": pix["id"]}

    first = await anon_client.post("/api/v1/payments/webhook", json=notification)
    second = await anon_client.post("/api/v1/payments/webhook", json=notification)

    assert first.json()["data"]["changed"] is True
    assert second.json()["data"]["changed"] is False
    assert second.json()["data"]["status"] == "payment_approved"


@pytest.mark.asyncio
async def test_webhook_rejected_payment_cancels(synced_photoshoot, fake_gateway, anon_client):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)
    pix = (await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})).json()["data"]
    fake_gateway.statuses[pix["id"]] = "rejected"

    response = await anon_client.post("/api/v1/payments/webhook", json={"topic": "payment", "id": pix["id"]})

    assert response.json()["data"]["status"] == "cancelled"


@pytest.mark.asyncio
async def test_webhook_ignores_other_topics(fake_gateway, anon_client):
    response = await anon_client.post("/api/v1/payments/webhook", json={"topic": "merchant_order", "id": "1"})

    assert response.status_code == 200
    assert response.json()["message"] == "Notificação ignorada"
    assert fake_gateway.status_requests == []


@pytest.mark.asyncio
async def test_webhook_for_unknown_payment(fake_gateway, anon_client):
    response = await anon_client.post("/api/v1/payments/webhook", json={"topic": "payment", "id": "424242"})

    assert response.status_code == 200
    assert response.json()["data"] is None


@pytest.mark.asyncio
async def test_pending_payment_blocks_a_second_one(synced_photoshoot, fake_gateway, anon_client, admin_client):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)
    first = (await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})).json()["data"]

    second = await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})

    assert second.status_code == 409
    assert second.json()["data"]["code"] == "PAYMENT_IN_PROGRESS"
    assert len(fake_gateway.created) == 1
    assert fake_gateway.status_requests == [first["id"]]

    # the first payment still reaches its order
    fake_gateway.statuses[first["id"]] = "approved"
    response = await anon_client.post("/api/v1/payments/webhook", json={"topic": "payment", "id": first["id"]})
    assert response.json()["data"]["order_id"] == order["id"]
    fetched = await admin_client.get(f"/api/v1/orders/{order['id']}")
    assert fetched.json()["data"]["status"] == "payment_approved"
    assert fetched.json()["data"]["payment_id"] == first["id"]


@pytest.mark.asyncio
async def test_missed_approval_is_applied_before_new_payment(synced_photoshoot, fake_gateway, admin_client):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)
    first = (await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})).json()["data"]
    fake_gateway.statuses[first["id"]] = "approved"

    response = await client.post("/api/v1/payments/card", json={
        "order_id": order["id"], "token": "tok_123", "payment_method_id": "visa",
    })

    assert response.status_code == 409
    assert response.json()["data"]["code"] == "ORDER_NOT_PAYABLE"
    assert [c["kind"] for c in fake_gateway.created] == ["pix"]
    fetched = await admin_client.get(f"/api/v1/orders/{order['id']}")
    assert fetched.json()["data"]["status"] == "payment_approved"


@pytest.mark.asyncio
async def test_cancelled_order_cannot_be_paid(synced_photoshoot, fake_gateway, admin_client):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)
    response = await admin_client.patch(f"/api/v1/orders/{order['id']}/status", json={"status": "cancelled"})
    assert response.status_code == 200

    card = await client.post("/api/v1/payments/card", json={
        "order_id": order["id"], "token": "tok_123", "payment_method_id": "visa",
    })
    pix = await client.post("/api/v1/payments/pix", json={"order_id": order["id"]})

    assert card.status_code == 409
    assert card.json()["data"]["code"] == "ORDER_NOT_PAYABLE"
    assert pix.status_code == 409
    assert fake_gateway.created == []


@pytest.mark.asyncio
async def test_paid_order_cannot_be_paid_again(synced_photoshoot, fake_gateway):
    client = synced_photoshoot["client"]
    order = await _place_order(synced_photoshoot)
    card = {"order_id": order["id"], "token": "tok_123", "payment_method_id": "visa"}
    assert (await client.post("/api/v1/payments/card", json=card)).json()["data"]["order_status"] == "payment_approved"

    response = await client.post("/api/v1/payments/card", json=card)

    assert response.status_code == 409
    assert response.json()["data"]["code"] == "ORDER_NOT_PAYABLE"
    assert len(fake_gateway.created) == 1
