"""Concurrency tests for seats, credits, stock and status changes."""

import asyncio
from collections import Counter
from datetime import date, timedelta

import pytest


def booking_payload(package, pilgrims=1, **extra):
    return {
        "package_id": package["package"]["id"],
        "departure_id": package["departure"]["id"],
        "number_of_pilgrims": pilgrims,
        "contact_name": "Siti Aminah",
        "contact_phone": "081234567890",
        **extra,
    }


async def departure_state(client, package):
    response = await client.post("/v1/package/get", json={"package_id": package["package"]["id"]})
    return response.json()["departures"][0]


async def credit_balance(client, headers, travel_id):
    response = await client.post("/v1/credit/balance", json={"travel_id": travel_id}, headers=headers)
    return response.json()


@pytest.mark.asyncio
async def test_concurrent_bookings_no_overbooking(parallel_client, parallel_package, headers_for):
    """Fifteen pilgrims race for ten seats."""
    num_concurrent_requests = 15

    async def book(pilgrim: int):
        return await parallel_client.post(
            "/v1/booking/create",
            json=booking_payload(parallel_package),
            headers={**headers_for(f"jamaah-{pilgrim}", ["jamaah"]), "Idempotency-Key": f"seat-{pilgrim}"},
        )

    responses = await asyncio.gather(*(book(i) for i in range(num_concurrent_requests)))

    assert Counter(r.status_code for r in responses) == {200: 10, 409: 5}
    assert {r.json()["code"] for r in responses if r.status_code == 409} == {"SEATS_UNAVAILABLE"}

    departure = await departure_state(parallel_client, parallel_package)
    assert departure["available_seats"] == 0
    assert departure["status"] == "full"


@pytest.mark.asyncio
async def test_concurrent_cancels_restore_seats_once(parallel_client, parallel_package, jamaah_headers,
                                                     agent_headers):
    response = await parallel_client.post(
        "/v1/booking/create",
        json=booking_payload(parallel_package, pilgrims=3),
        headers={**jamaah_headers, "Idempotency-Key": "to-cancel"},
    )
    booking = response.json()
    assert (await departure_state(parallel_client, parallel_package))["available_seats"] == 7

    responses = await asyncio.gather(
        parallel_client.post("/v1/booking/cancel", json={"booking_id": booking["id"]}, headers=jamaah_headers),
        parallel_client.post(
            "/v1/booking/update-status",
            json={"booking_id": booking["id"], "status": "cancelled"},
            headers=agent_headers,
        ),
    )

    assert sorted(r.status_code for r in responses) == [200, 409]
    assert (await departure_state(parallel_client, parallel_package))["available_seats"] == 10


@pytest.mark.asyncio
async def test_concurrent_payments_recorded_once(parallel_client, parallel_package, jamaah_headers, agent_headers):
    due = (date.today() + timedelta(days=14)).isoformat()
    response = await parallel_client.post(
        "/v1/booking/create",
        json=booking_payload(
            parallel_package,
            payment_schedules=[{"payment_type": "dp", "amount": 10_000_000, "due_date": due}],
        ),
        headers={**jamaah_headers, "Idempotency-Key": "pay-twice"},
    )
    schedule_id = response.json()["payment_schedules"][0]["id"]

    responses = await asyncio.gather(*(
        parallel_client.post(
            "/v1/booking/record-payment", json={"payment_schedule_id": schedule_id}, headers=agent_headers
        )
        for _ in range(3)
    ))

    assert sorted(r.status_code for r in responses) == [200, 409, 409]
    paid = next(r.json() for r in responses if r.status_code == 200)
    assert paid["paid_amount"] == 10_000_000

    response = await parallel_client.post(
        "/v1/booking/get", json={"booking_id": paid["id"]}, headers=agent_headers
    )
    assert response.json()["paid_amount"] == 10_000_000
    assert response.json()["remaining_amount"] == 20_000_000


@pytest.mark.asyncio
async def test_concurrent_featured_purchases_cannot_overdraw(parallel_client, parallel_package, agent_headers,
                                                             admin_headers):
    """Twelve credits buy exactly two six-credit search placements."""
    travel_id = parallel_package["travel"]["id"]
    response = await parallel_client.post(
        "/v1/credit/grant", json={"travel_id": travel_id, "amount": 9}, headers=admin_headers
    )
    assert response.status_code == 200, response.text

    payload = {
        "travel_id": travel_id,
        "package_id": parallel_package["package"]["id"],
        "position": "search",
        "duration": "daily",
    }
    responses = await asyncio.gather(*(
        parallel_client.post(
            "/v1/featured/purchase",
            json=payload,
            headers={**agent_headers, "Idempotency-Key": f"feature-{i}"},
        )
        for i in range(8)
    ))

    assert Counter(r.status_code for r in responses) == {200: 2, 409: 6}
    assert {r.json()["code"] for r in responses if r.status_code == 409} == {"INSUFFICIENT_CREDITS"}

    balance = await credit_balance(parallel_client, agent_headers, travel_id)
    assert balance["credits_remaining"] == 0
    assert balance["credits_used"] == 12


@pytest.mark.asyncio
async def test_concurrent_purchase_approvals_credit_once(parallel_client, parallel_package, agent_headers,
                                                         admin_headers):
    travel_id = parallel_package["travel"]["id"]
    response = await parallel_client.post(
        "/v1/credit/purchase",
        json={"travel_id": travel_id, "credits": 10, "payment_proof_url": "https://cdn.example.com/tf.jpg"},
        headers={**agent_headers, "Idempotency-Key": "buy-10"},
    )
    transaction = response.json()

    responses = await asyncio.gather(*(
        parallel_client.post(
            "/v1/credit/review",
            json={"transaction_id": transaction["id"], "approve": True},
            headers=admin_headers,
        )
        for _ in range(4)
    ))

    assert sorted(r.status_code for r in responses) == [200, 409, 409, 409]
    balance = await credit_balance(parallel_client, agent_headers, travel_id)
    assert balance["credits_remaining"] == 13


@pytest.mark.asyncio
async def test_concurrent_membership_approvals_grant_once(parallel_client, parallel_package, agent_headers,
                                                         admin_headers):
    travel_id = parallel_package["travel"]["id"]
    response = await parallel_client.post(
        "/v1/membership/request", json={"travel_id": travel_id, "plan": "pro"}, headers=agent_headers
    )
    membership = response.json()

    responses = await asyncio.gather(*(
        parallel_client.post(
            "/v1/membership/review",
            json={"membership_id": membership["id"], "approve": True},
            headers=admin_headers,
        )
        for _ in range(3)
    ))

    assert sorted(r.status_code for r in responses) == [200, 409, 409]
    # Three free credits plus one Pro bonus of four
    balance = await credit_balance(parallel_client, agent_headers, travel_id)
    assert balance["credits_remaining"] == 7


@pytest.mark.asyncio
async def test_concurrent_checkouts_no_overselling(parallel_client, seller_headers, admin_headers, headers_for):
    response = await parallel_client.post(
        "/v1/shop/seller/apply", json={"shop_name": "Toko Barokah", "city": "Bandung"}, headers=seller_headers
    )
    await parallel_client.post(
        "/v1/shop/seller/review", json={"seller_id": response.json()["id"], "status": "approved"},
        headers=admin_headers,
    )
    response = await parallel_client.post(
        "/v1/shop/product/create",
        json={"name": "Kain Ihram Premium", "price": 150_000, "stock": 5},
        headers=seller_headers,
    )
    assert response.status_code == 200, response.text
    product = response.json()

    async def checkout(buyer: int):
        return await parallel_client.post(
            "/v1/shop/order/create",
            json={
                "items": [{"product_id": product["id"], "quantity": 1}],
                "shipping_name": f"Pembeli {buyer}",
                "shipping_phone": "081234567890",
                "shipping_address": "Jl. Merdeka No. 10",
                "shipping_city": "Bandung",
            },
            headers=headers_for(f"jamaah-{buyer}", ["jamaah"]),
        )

    responses = await asyncio.gather(*(checkout(i) for i in range(8)))

    assert Counter(r.status_code for r in responses) == {200: 5, 409: 3}
    response = await parallel_client.post("/v1/shop/product/get", json={"product_id": product["id"]})
    assert response.json()["stock"] == 0
