"""API tests for credits, featured placements, memberships and platform settings."""

import pytest


async def grant(client, admin_headers, travel_id, amount):
    response = await client.post(
        "/v1/credit/grant", json={"travel_id": travel_id, "amount": amount}, headers=admin_headers
    )
    assert response.status_code == 200, response.text
    return response.json()


async def balance(client, headers, travel_id):
    response = await client.post("/v1/credit/balance", json={"travel_id": travel_id}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


async def verify(client, admin_headers, travel_id):
    response = await client.post("/v1/travel/verify", json={"travel_id": travel_id}, headers=admin_headers)
    assert response.status_code == 200, response.text


def featured_payload(published_package, position="home", duration="daily"):
    return {
        "travel_id": published_package["travel"]["id"],
        "package_id": published_package["package"]["id"],
        "position": position,
        "duration": duration,
    }


class TestCredits:
    @pytest.mark.asyncio
    async def test_new_travel_has_free_credits(self, test_client, agent_headers, published_package):
        data = await balance(test_client, agent_headers, published_package["travel"]["id"])

        assert data["credits_remaining"] == 3
        assert data["credits_used"] == 0

    @pytest.mark.asyncio
    async def test_price_list(self, test_client):
        response = await test_client.post("/v1/credit/prices")

        assert response.status_code == 200
        assert response.json()["items"][0] == {"credits": 1, "price": 50000}

    @pytest.mark.asyncio
    async def test_purchase_and_review(self, test_client, agent_headers, admin_headers, published_package):
        travel_id = published_package["travel"]["id"]

        response = await test_client.post(
            "/v1/credit/purchase",
            json={"travel_id": travel_id, "credits": 5, "payment_proof_url": "https://cdn.example.com/tf.jpg"},
            headers={**agent_headers, "Idempotency-Key": "buy-5"},
        )
        assert response.status_code == 200
        transaction = response.json()
        assert transaction["status"] == "pending"
        assert transaction["price"] == 200000

        response = await test_client.post(
            "/v1/credit/review",
            json={"transaction_id": transaction["id"], "approve": True},
            headers=admin_headers,
        )
        assert response.json()["status"] == "approved"
        assert (await balance(test_client, agent_headers, travel_id))["credits_remaining"] == 8

        response = await test_client.post(
            "/v1/credit/review",
            json={"transaction_id": transaction["id"], "approve": False},
            headers=admin_headers,
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_purchase_for_foreign_travel(self, test_client, other_agent_headers, published_package):
        response = await test_client.post(
            "/v1/credit/purchase",
            json={"travel_id": published_package["travel"]["id"], "credits": 5},
            headers={**other_agent_headers, "Idempotency-Key": "foreign"},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_transactions_require_travel_for_agents(self, test_client, agent_headers, admin_headers,
                                                          published_package):
        response = await test_client.post("/v1/credit/transactions", json={}, headers=agent_headers)
        assert response.status_code == 400

        response = await test_client.post(
            "/v1/credit/transactions",
            json={"travel_id": published_package["travel"]["id"]},
            headers=agent_headers,
        )
        items = response.json()["items"]
        assert [t["transaction_type"] for t in items] == ["bonus"]

        response = await test_client.post("/v1/credit/transactions", json={}, headers=admin_headers)
        assert response.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_refund(self, test_client, agent_headers, admin_headers, published_package):
        travel_id = published_package["travel"]["id"]
        response = await test_client.post(
            "/v1/credit/refund", json={"travel_id": travel_id, "amount": 2, "notes": "Salah potong"},
            headers=admin_headers,
        )
        assert response.json()["transaction_type"] == "refund"
        assert (await balance(test_client, agent_headers, travel_id))["credits_remaining"] == 5

    @pytest.mark.asyncio
    async def test_admin_lists_balances(self, test_client, agent_headers, admin_headers, published_package):
        response = await test_client.post("/v1/credit/balances", json={}, headers=agent_headers)
        assert response.status_code == 403

        response = await test_client.post("/v1/credit/balances", json={}, headers=admin_headers)
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["travel_id"] == published_package["travel"]["id"]


class TestFeatured:
    @pytest.mark.asyncio
    async def test_quote(self, test_client):
        response = await test_client.post("/v1/featured/quote", json={"position": "home", "duration": "weekly"})

        data = response.json()
        assert data["base_credits"] == 25
        assert data["multiplier"] == 1.5
        assert data["credits"] == 38
        assert data["duration_days"] == 7

    @pytest.mark.asyncio
    async def test_purchase_spends_credits(self, test_client, agent_headers, admin_headers, published_package):
        travel_id = published_package["travel"]["id"]
        await grant(test_client, admin_headers, travel_id, 10)

        response = await test_client.post(
            "/v1/featured/purchase",
            json=featured_payload(published_package),
            headers={**agent_headers, "Idempotency-Key": "feature-1"},
        )
        assert response.status_code == 200
        featured = response.json()
        assert featured["credits_used"] == 8
        assert featured["status"] == "active"

        data = await balance(test_client, agent_headers, travel_id)
        assert data["credits_remaining"] == 5
        assert data["credits_used"] == 8

        # A retried purchase does not spend twice
        replay = await test_client.post(
            "/v1/featured/purchase",
            json=featured_payload(published_package),
            headers={**agent_headers, "Idempotency-Key": "feature-1"},
        )
        assert replay.json()["id"] == featured["id"]
        assert (await balance(test_client, agent_headers, travel_id))["credits_remaining"] == 5

    @pytest.mark.asyncio
    async def test_insufficient_credits(self, test_client, agent_headers, published_package):
        response = await test_client.post(
            "/v1/featured/purchase",
            json=featured_payload(published_package, duration="monthly"),
            headers={**agent_headers, "Idempotency-Key": "too-expensive"},
        )

        assert response.status_code == 409
        data = response.json()
        assert data["code"] == "INSUFFICIENT_CREDITS"
        assert data["required_credits"] == 120
        assert data["available_credits"] == 3

    @pytest.mark.asyncio
    async def test_home_limit(self, test_client, agent_headers, admin_headers, published_package):
        travel_id = published_package["travel"]["id"]
        await grant(test_client, admin_headers, travel_id, 100)
        response = await test_client.post(
            "/v1/settings/set",
            json={"key": "featured_package_limits", "value": {"max_per_travel": 3, "max_home_total": 1}},
            headers=admin_headers,
        )
        assert response.status_code == 200

        first = await test_client.post(
            "/v1/featured/purchase",
            json=featured_payload(published_package),
            headers={**agent_headers, "Idempotency-Key": "home-1"},
        )
        assert first.status_code == 200

        second = await test_client.post(
            "/v1/featured/purchase",
            json=featured_payload(published_package),
            headers={**agent_headers, "Idempotency-Key": "home-2"},
        )
        assert second.status_code == 409
        assert second.json()["limit_name"] == "max_home_total"
        assert (await balance(test_client, agent_headers, travel_id))["credits_remaining"] == 103 - 8

        # Search placements are not capped by position
        third = await test_client.post(
            "/v1/featured/purchase",
            json=featured_payload(published_package, position="search"),
            headers={**agent_headers, "Idempotency-Key": "search-1"},
        )
        assert third.status_code == 200

    @pytest.mark.asyncio
    async def test_display_only_verified_travels(self, test_client, agent_headers, admin_headers,
                                                 published_package):
        travel_id = published_package["travel"]["id"]
        await grant(test_client, admin_headers, travel_id, 10)
        await test_client.post(
            "/v1/featured/purchase",
            json=featured_payload(published_package),
            headers={**agent_headers, "Idempotency-Key": "display-1"},
        )

        response = await test_client.post("/v1/featured/display", json={"position": "home"})
        assert response.json()["items"] == []

        await verify(test_client, admin_headers, travel_id)
        response = await test_client.post("/v1/featured/display", json={"position": "home"})
        items = response.json()["items"]
        assert len(items) == 1
        assert items[0]["package_name"] == published_package["package"]["name"]
        assert items[0]["lowest_price"] == 30_000_000

    @pytest.mark.asyncio
    async def test_cancel_without_refund(self, test_client, agent_headers, admin_headers, published_package):
        travel_id = published_package["travel"]["id"]
        await grant(test_client, admin_headers, travel_id, 10)
        featured = (await test_client.post(
            "/v1/featured/purchase",
            json=featured_payload(published_package),
            headers={**agent_headers, "Idempotency-Key": "cancel-1"},
        )).json()

        response = await test_client.post("/v1/featured/cancel", json={"featured_id": featured["id"]},
                                          headers=agent_headers)
        assert response.json()["status"] == "cancelled"
        assert (await balance(test_client, agent_headers, travel_id))["credits_remaining"] == 5

        response = await test_client.post("/v1/featured/cancel", json={"featured_id": featured["id"]},
                                          headers=agent_headers)
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_stats(self, test_client, agent_headers, admin_headers, published_package):
        await grant(test_client, admin_headers, published_package["travel"]["id"], 10)
        await test_client.post(
            "/v1/featured/purchase",
            json=featured_payload(published_package, position="search"),
            headers={**agent_headers, "Idempotency-Key": "stats-1"},
        )

        response = await test_client.post("/v1/featured/stats", headers=admin_headers)

        data = response.json()
        assert data["total"] == 1
        assert data["active"] == 1
        assert data["active_by_position"]["search"] == 1
        # 5 daily credits x 1.2 for search
        assert data["total_credits_used"] == 6


class TestMemberships:
    @pytest.mark.asyncio
    async def test_upgrade_raises_package_limit(self, test_client, agent_headers, admin_headers,
                                                published_package, sample_package_data):
        travel_id = published_package["travel"]["id"]
        for index in range(2):
            response = await test_client.post(
                "/v1/package/create",
                json={**sample_package_data, "travel_id": travel_id, "name": f"Umroh Plus {index}"},
                headers=agent_headers,
            )
            assert response.status_code == 200

        response = await test_client.post(
            "/v1/package/create",
            json={**sample_package_data, "travel_id": travel_id, "name": "Umroh Plus Turki"},
            headers=agent_headers,
        )
        assert response.status_code == 409
        assert response.json()["code"] == "PLAN_LIMIT_REACHED"

        membership = (await test_client.post(
            "/v1/membership/request", json={"travel_id": travel_id, "plan": "pro"}, headers=agent_headers
        )).json()
        assert membership["status"] == "pending"
        assert membership["amount"] == 2_000_000

        response = await test_client.post(
            "/v1/membership/review", json={"membership_id": membership["id"], "approve": True},
            headers=admin_headers,
        )
        assert response.json()["status"] == "active"

        response = await test_client.post("/v1/membership/current", json={"travel_id": travel_id},
                                          headers=agent_headers)
        current = response.json()
        assert current["plan"]["id"] == "pro"
        assert current["is_pro"] is True
        assert current["days_remaining"] == 30
        assert current["active_packages"] == 3

        response = await test_client.post(
            "/v1/package/create",
            json={**sample_package_data, "travel_id": travel_id, "name": "Umroh Plus Turki"},
            headers=agent_headers,
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_plans_are_public(self, test_client):
        response = await test_client.post("/v1/membership/plans")

        plans = {plan["id"]: plan for plan in response.json()["items"]}
        assert plans["free"]["max_packages"] == 3
        assert plans["premium"]["monthly_credits"] == 10


class TestSettings:
    @pytest.mark.asyncio
    async def test_default_value_is_reported(self, test_client, admin_headers):
        response = await test_client.post(
            "/v1/settings/get", json={"key": "featured_package_pricing"}, headers=admin_headers
        )

        data = response.json()
        assert data["is_default"] is True
        assert data["value"]["weekly_credits"] == 25

    @pytest.mark.asyncio
    async def test_invalid_known_setting_rejected(self, test_client, admin_headers):
        response = await test_client.post(
            "/v1/settings/set", json={"key": "credit_prices", "value": {"0": 1000}}, headers=admin_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_settings_require_admin(self, test_client, agent_headers):
        response = await test_client.post("/v1/settings/list", headers=agent_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_merges_defaults(self, test_client, admin_headers):
        await test_client.post(
            "/v1/settings/set", json={"key": "credit_prices", "value": {"3": 120000}}, headers=admin_headers
        )

        response = await test_client.post("/v1/settings/list", headers=admin_headers)
        items = {item["key"]: item for item in response.json()["items"]}
        assert items["credit_prices"]["value"] == {"3": 120000}
        assert items["credit_prices"]["is_default"] is False
        assert items["free_credits_on_register"]["is_default"] is True
