"""Scenario 2: Retrying Fetch Against a Real ASGI App

This module drives idempotent_fetch against a FastAPI app that deduplicates
by Idempotency-Key, reached in-process through httpx.ASGITransport:
- Transient 503s are retried until the payment is accepted
- A payment processed before a lost (500) response is replayed, not duplicated
- Validation errors (400) come back to the caller after one attempt
- Persistent rate limiting (429) exhausts retries and raises NetworkError
"""

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from idempotent_ops import NetworkError, idempotent_fetch

BASE_URL = "http://testserver"
FAST_RETRY = {"retries": 3, "min_timeout_ms": 1, "max_timeout_ms": 5, "randomize": False}


class PaymentRequest(BaseModel):
    """Payment request model for testing."""

    amount: int
    currency: str = "USD"


class PaymentServer:
    """In-memory payment service keyed by idempotency key."""

    def __init__(self) -> None:
        self.payments: dict[str, dict] = {}
        self.seen_keys: list[str] = []
        self.unavailable_for = 0
        self.lose_response_for = 0

    def build_app(self) -> FastAPI:
        app = FastAPI()

        @app.post("/api/payments")
        async def create_payment(payment: PaymentRequest, idempotency_key: str = Header(...)):
            self.seen_keys.append(idempotency_key)

            if self.unavailable_for > 0:
                self.unavailable_for -= 1
                return JSONResponse(status_code=503, content={"error": "unavailable"})

            if payment.amount <= 0:
                raise HTTPException(status_code=400, detail="amount must be positive")

            if idempotency_key in self.payments:
                return JSONResponse(
                    status_code=200,
                    content=self.payments[idempotency_key],
                    headers={"Idempotent-Replay": "true"},
                )

            record = {
                "id": f"pay_{len(self.payments) + 1}",
                "amount": payment.amount,
                "currency": payment.currency,
            }
            self.payments[idempotency_key] = record

            if self.lose_response_for > 0:
                self.lose_response_for -= 1
                return JSONResponse(status_code=500, content={"error": "response lost"})

            return JSONResponse(status_code=201, content=record)

        @app.get("/api/quota")
        async def quota(idempotency_key: str = Header(...)):
            self.seen_keys.append(idempotency_key)
            return JSONResponse(status_code=429, content={"error": "slow down"})

        return app


@pytest.fixture
def server() -> PaymentServer:
    """Create a fresh payment server for each test."""
    return PaymentServer()


@pytest_asyncio.fixture
async def client(server: PaymentServer) -> AsyncIterator[httpx.AsyncClient]:
    """Create an httpx client routed to the FastAPI app."""
    transport = httpx.ASGITransport(app=server.build_app())
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as test_client:
        yield test_client


@pytest.mark.asyncio
async def test_transient_unavailability_is_retried(server, client):
    server.unavailable_for = 2

    response = await idempotent_fetch(
        f"{BASE_URL}/api/payments",
        idempotency_key="pay-key-1",
        method="POST",
        json={"amount": 1000},
        client=client,
        retry=FAST_RETRY,
    )

    assert response.status_code == 201
    assert response.json()["amount"] == 1000
    assert server.seen_keys == ["pay-key-1"] * 3
    assert len(server.payments) == 1


@pytest.mark.asyncio
async def test_lost_response_is_replayed_not_duplicated(server, client):
    server.lose_response_for = 1

    response = await idempotent_fetch(
        f"{BASE_URL}/api/payments",
        idempotency_key="pay-key-2",
        method="POST",
        json={"amount": 250, "currency": "EUR"},
        client=client,
        retry=FAST_RETRY,
    )

    assert response.status_code == 200
    assert response.headers["Idempotent-Replay"] == "true"
    assert response.json() == {"id": "pay_1", "amount": 250, "currency": "EUR"}
    assert len(server.payments) == 1


@pytest.mark.asyncio
async def test_validation_error_returned_after_one_attempt(server, client):
    response = await idempotent_fetch(
        f"{BASE_URL}/api/payments",
        idempotency_key="pay-key-3",
        method="POST",
        json={"amount": -5},
        client=client,
        retry=FAST_RETRY,
    )

    assert response.status_code == 400
    assert len(server.seen_keys) == 1
    assert server.payments == {}


@pytest.mark.asyncio
async def test_persistent_rate_limit_exhausts(server, client):
    with pytest.raises(NetworkError) as exc_info:
        await idempotent_fetch(
            f"{BASE_URL}/api/quota",
            idempotency_key="quota-key",
            client=client,
            retry=FAST_RETRY,
        )

    assert exc_info.value.status == 429
    assert exc_info.value.url == f"{BASE_URL}/api/quota"
    assert len(server.seen_keys) == 4
    assert set(server.seen_keys) == {"quota-key"}


@pytest.mark.asyncio
async def test_caller_key_header_is_overridden(server, client):
    response = await idempotent_fetch(
        f"{BASE_URL}/api/payments",
        idempotency_key="authoritative",
        method="POST",
        headers={"Idempotency-Key": "stale"},
        json={"amount": 1},
        client=client,
        retry=FAST_RETRY,
    )

    assert response.status_code == 201
    assert server.seen_keys == ["authoritative"]
