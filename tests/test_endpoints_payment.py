import pytest
from sqlalchemy import select

from app.models.subscription_model import Subscription
from app.modules.payment.service import PaymentConfig, PaymentService
from app.core.dependencies import get_payment_service
from app.main import app


async def add_pending(db, user_id, payment_id="bill_123", plan="premium"):
    row = Subscription(user_id=user_id, plan=plan, status="pending", payment_id=payment_id, price_cents=2990)
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


# --- /api/create-payment ---

@pytest.mark.asyncio
async def test_create_payment_success(api_client, auth_headers, db_session, user_id):
    response = await api_client.post(
        "/api/create-payment",
        json={"plan": "premium"},
        headers={**auth_headers, "Origin": "https://festiva.app"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "paymentUrl": "https://pay.abacatepay.com/bill_123",
        "paymentId": "bill_123",
    }
    row = (await db_session.execute(select(Subscription))).scalar_one()
    assert row.user_id == user_id
    assert row.status == "pending"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"plan": "gold"}, {"plan": "free"}, {}, {"plan": 5}])
async def test_create_payment_invalid_plan(api_client, auth_headers, fake_provider, body):
    response = await api_client.post("/api/create-payment", json=body, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid plan selected"}
    assert fake_provider.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"plan": "premium", "returnUrl": 42}, {"plan": "premium", "returnUrl": ["x"]}])
async def test_create_payment_invalid_body_is_not_a_plan_error(api_client, auth_headers, fake_provider, body):
    response = await api_client.post("/api/create-payment", json=body, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}
    assert fake_provider.requests == []


@pytest.mark.asyncio
async def test_create_payment_requires_auth(api_client, fake_provider):
    response = await api_client.post("/api/create-payment", json={"plan": "premium"})

    assert response.status_code == 400
    assert response.json() == {"error": "Authorization header required"}
    assert fake_provider.requests == []


@pytest.mark.asyncio
async def test_create_payment_rejects_bad_token(api_client):
    response = await api_client.post(
        "/api/create-payment", json={"plan": "premium"}, headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid user token"}


@pytest.mark.asyncio
async def test_create_payment_malformed_body(api_client, auth_headers):
    response = await api_client.post(
        "/api/create-payment",
        content=b"{not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert "Invalid JSON payload" in response.json()["error"]


@pytest.mark.asyncio
async def test_create_payment_unexpected_provider_body_is_400(api_client, auth_headers, fake_provider, db_session):
    fake_provider.create_body = [{"id": "bill_list"}]

    response = await api_client.post("/api/create-payment", json={"plan": "premium"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Payment provider returned no billing id"}
    assert (await db_session.execute(select(Subscription))).scalars().all() == []


@pytest.mark.asyncio
async def test_create_payment_provider_failure_is_400(api_client, auth_headers, fake_provider, db_session):
    fake_provider.create_status = 422
    fake_provider.create_body = {"error": "Customer data invalid"}

    response = await api_client.post("/api/create-payment", json={"plan": "family"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Customer data invalid"}
    assert (await db_session.execute(select(Subscription))).scalars().all() == []


# --- /api/payment-webhook ---

@pytest.mark.asyncio
async def test_webhook_activates_subscription(api_client, db_session, user_id):
    row = await add_pending(db_session, user_id)

    response = await api_client.post(
        "/api/payment-webhook",
        json={"event": "billing.paid", "data": {"billing": {"id": "bill_123", "status": "PAID"}}},
    )

    assert response.status_code == 200
    assert response.json() == {"received": True, "event": "billing.paid", "billingId": "bill_123"}
    await db_session.refresh(row)
    assert row.status == "active"


@pytest.mark.asyncio
async def test_webhook_without_billing_id(api_client):
    response = await api_client.post("/api/payment-webhook", json={"event": "billing.paid"})

    assert response.status_code == 200
    assert response.json() == {
        "received": True,
        "event": "billing.paid",
        "billingId": None,
        "message": "No billing ID",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [b"not json", b"[1, 2]"])
async def test_webhook_rejects_malformed_payload(api_client, content):
    response = await api_client.post(
        "/api/payment-webhook", content=content, headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_webhook_secret_enforced_when_configured(api_client, provider_client):
    app.dependency_overrides[get_payment_service] = lambda: PaymentService(
        provider_client, PaymentConfig(app_base_url="https://festiva.test", webhook_secret="s3cret")
    )
    payload = {"event": "billing.paid", "data": {"billing": {"id": "bill_x"}}}

    rejected = await api_client.post("/api/payment-webhook", json=payload)
    accepted = await api_client.post("/api/payment-webhook?webhookSecret=s3cret", json=payload)

    assert rejected.status_code == 401
    assert rejected.json() == {"error": "Invalid webhook secret"}
    assert accepted.status_code == 200


# --- /api/verify-payment ---

@pytest.mark.asyncio
async def test_verify_requires_auth(api_client):
    response = await api_client.post("/api/verify-payment")

    assert response.status_code == 401
    assert response.json() == {"error": "Authorization header required"}


@pytest.mark.asyncio
async def test_verify_invalid_token(api_client):
    response = await api_client.post("/api/verify-payment", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid user token"}


@pytest.mark.asyncio
async def test_verify_no_pending(api_client, auth_headers):
    response = await api_client.post("/api/verify-payment", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["status"] == "no_pending"
    assert body["message"] == "No pending payment found"


@pytest.mark.asyncio
async def test_verify_paid(api_client, auth_headers, db_session, fake_provider, user_id):
    await add_pending(db_session, user_id)
    fake_provider.add_billing("bill_123", "PAID")

    response = await api_client.post("/api/verify-payment", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "active"
    assert body["subscription"]["status"] == "active"
    assert body["subscription"]["payment_id"] == "bill_123"


@pytest.mark.asyncio
async def test_verify_still_processing(api_client, auth_headers, db_session, user_id):
    await add_pending(db_session, user_id)

    response = await api_client.post("/api/verify-payment", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    assert response.json()["message"] == "Payment still processing"


@pytest.mark.asyncio
async def test_verify_provider_failure_is_500(api_client, auth_headers, db_session, fake_provider, user_id):
    await add_pending(db_session, user_id)
    fake_provider.list_status = 503

    response = await api_client.post("/api/verify-payment", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Error checking payment status"}
