"""API tests for the seller shop: sellers, products and orders."""

import pytest


@pytest.fixture
def sample_product_data():
    return {
        "name": "Kain Ihram Premium",
        "description": "Kain ihram katun tebal, dua lembar",
        "price": 150_000,
        "stock": 5,
    }


async def approved_seller(client, seller_headers, admin_headers):
    response = await client.post(
        "/v1/shop/seller/apply", json={"shop_name": "Toko Barokah", "city": "Bandung"}, headers=seller_headers
    )
    assert response.status_code == 200, response.text
    seller = response.json()

    response = await client.post(
        "/v1/shop/seller/review", json={"seller_id": seller["id"], "status": "approved"}, headers=admin_headers
    )
    assert response.status_code == 200, response.text
    return response.json()


async def create_product(client, seller_headers, data):
    response = await client.post("/v1/shop/product/create", json=data, headers=seller_headers)
    assert response.status_code == 200, response.text
    return response.json()


def order_payload(product_id, quantity=1):
    return {
        "items": [{"product_id": product_id, "quantity": quantity}],
        "shipping_name": "Siti Aminah",
        "shipping_phone": "081234567890",
        "shipping_address": "Jl. Merdeka No. 10",
        "shipping_city": "Bandung",
    }


class TestSellers:
    @pytest.mark.asyncio
    async def test_apply_is_pending(self, test_client, seller_headers):
        response = await test_client.post(
            "/v1/shop/seller/apply", json={"shop_name": "Toko Barokah"}, headers=seller_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "pending"

        response = await test_client.post(
            "/v1/shop/seller/apply", json={"shop_name": "Toko Kedua"}, headers=seller_headers
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_pending_seller_cannot_list_products(self, test_client, seller_headers, sample_product_data):
        await test_client.post("/v1/shop/seller/apply", json={"shop_name": "Toko Barokah"}, headers=seller_headers)

        response = await test_client.post("/v1/shop/product/create", json=sample_product_data, headers=seller_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_review_transitions(self, test_client, seller_headers, admin_headers):
        seller = await approved_seller(test_client, seller_headers, admin_headers)
        assert seller["status"] == "approved"

        response = await test_client.post(
            "/v1/shop/seller/review", json={"seller_id": seller["id"], "status": "rejected"}, headers=admin_headers
        )
        assert response.status_code == 409
        assert response.json()["allowed_statuses"] == ["suspended"]

        response = await test_client.post(
            "/v1/shop/seller/review", json={"seller_id": seller["id"], "status": "suspended"}, headers=admin_headers
        )
        assert response.json()["status"] == "suspended"

    @pytest.mark.asyncio
    async def test_review_requires_admin(self, test_client, seller_headers):
        seller = (await test_client.post(
            "/v1/shop/seller/apply", json={"shop_name": "Toko Barokah"}, headers=seller_headers
        )).json()

        response = await test_client.post(
            "/v1/shop/seller/review", json={"seller_id": seller["id"], "status": "approved"}, headers=seller_headers
        )
        assert response.status_code == 403


class TestProducts:
    @pytest.mark.asyncio
    async def test_product_catalogue(self, test_client, seller_headers, admin_headers, sample_product_data):
        await approved_seller(test_client, seller_headers, admin_headers)
        product = await create_product(test_client, seller_headers, sample_product_data)
        assert product["slug"] == "kain-ihram-premium"

        response = await test_client.post("/v1/shop/product/list", json={"search": "ihram"})
        assert response.json()["total"] == 1

        response = await test_client.post(
            "/v1/shop/product/deactivate", json={"product_id": product["id"]}, headers=seller_headers
        )
        assert response.json()["is_active"] is False

        response = await test_client.post("/v1/shop/product/get", json={"product_id": product["id"]})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_suspended_seller_products_hidden(self, test_client, seller_headers, admin_headers,
                                                    sample_product_data):
        seller = await approved_seller(test_client, seller_headers, admin_headers)
        await create_product(test_client, seller_headers, sample_product_data)

        await test_client.post(
            "/v1/shop/seller/review", json={"seller_id": seller["id"], "status": "suspended"}, headers=admin_headers
        )

        response = await test_client.post("/v1/shop/product/list", json={})
        assert response.json()["total"] == 0


class TestOrders:
    @pytest.mark.asyncio
    async def test_checkout_decrements_stock(self, test_client, seller_headers, admin_headers, jamaah_headers,
                                             sample_product_data):
        await approved_seller(test_client, seller_headers, admin_headers)
        product = await create_product(test_client, seller_headers, sample_product_data)

        response = await test_client.post(
            "/v1/shop/order/create", json=order_payload(product["id"], quantity=2), headers=jamaah_headers
        )

        assert response.status_code == 200
        order = response.json()
        assert order["status"] == "pending"
        assert order["order_code"].startswith("ORD-")
        assert len(order["order_code"]) == 12
        assert order["total_amount"] == 300_000
        assert order["items"][0]["product_name"] == "Kain Ihram Premium"

        response = await test_client.post("/v1/shop/product/get", json={"product_id": product["id"]})
        assert response.json()["stock"] == 3

    @pytest.mark.asyncio
    async def test_checkout_out_of_stock(self, test_client, seller_headers, admin_headers, jamaah_headers,
                                         sample_product_data):
        await approved_seller(test_client, seller_headers, admin_headers)
        product = await create_product(test_client, seller_headers, sample_product_data)

        response = await test_client.post(
            "/v1/shop/order/create", json=order_payload(product["id"], quantity=6), headers=jamaah_headers
        )

        assert response.status_code == 409
        data = response.json()
        assert data["code"] == "OUT_OF_STOCK"
        assert data["available_quantity"] == 5

    @pytest.mark.asyncio
    async def test_fulfilment(self, test_client, seller_headers, admin_headers, jamaah_headers,
                              sample_product_data):
        await approved_seller(test_client, seller_headers, admin_headers)
        product = await create_product(test_client, seller_headers, sample_product_data)
        order = (await test_client.post(
            "/v1/shop/order/create", json=order_payload(product["id"]), headers=jamaah_headers
        )).json()

        response = await test_client.post(
            "/v1/shop/order/upload-payment",
            json={"order_id": order["id"], "payment_proof_url": "https://cdn.example.com/bukti.jpg"},
            headers=jamaah_headers,
        )
        assert response.json()["status"] == "paid"
        assert response.json()["paid_at"] is not None

        response = await test_client.post(
            "/v1/shop/order/update-status", json={"order_id": order["id"], "status": "processing"},
            headers=seller_headers,
        )
        assert response.json()["status"] == "processing"

        response = await test_client.post(
            "/v1/shop/order/update-status", json={"order_id": order["id"], "status": "shipped"},
            headers=seller_headers,
        )
        assert response.status_code == 400

        response = await test_client.post(
            "/v1/shop/order/update-status",
            json={"order_id": order["id"], "status": "shipped", "courier": "JNE", "tracking_number": "JN0001"},
            headers=seller_headers,
        )
        assert response.json()["status"] == "shipped"

        response = await test_client.post(
            "/v1/shop/order/update-status", json={"order_id": order["id"], "status": "cancelled"},
            headers=seller_headers,
        )
        assert response.status_code == 409
        assert response.json()["allowed_statuses"] == ["delivered"]

        response = await test_client.post("/v1/shop/seller/stats", json={}, headers=seller_headers)
        stats = response.json()
        assert stats["total_revenue"] == 150_000
        assert stats["units_sold"] == 1
        assert stats["order_count"] == 1
        assert stats["top_products"][0]["product_name"] == "Kain Ihram Premium"

    @pytest.mark.asyncio
    async def test_cancel_restores_stock(self, test_client, seller_headers, admin_headers, jamaah_headers,
                                         sample_product_data):
        await approved_seller(test_client, seller_headers, admin_headers)
        product = await create_product(test_client, seller_headers, sample_product_data)
        order = (await test_client.post(
            "/v1/shop/order/create", json=order_payload(product["id"], quantity=5), headers=jamaah_headers
        )).json()

        response = await test_client.post(
            "/v1/shop/order/update-status", json={"order_id": order["id"], "status": "cancelled"},
            headers=seller_headers,
        )
        assert response.json()["status"] == "cancelled"

        response = await test_client.post("/v1/shop/product/get", json={"product_id": product["id"]})
        assert response.json()["stock"] == 5

    @pytest.mark.asyncio
    async def test_order_hidden_from_strangers(self, test_client, seller_headers, admin_headers, jamaah_headers,
                                               agent_headers, sample_product_data):
        await approved_seller(test_client, seller_headers, admin_headers)
        product = await create_product(test_client, seller_headers, sample_product_data)
        order = (await test_client.post(
            "/v1/shop/order/create", json=order_payload(product["id"]), headers=jamaah_headers
        )).json()

        response = await test_client.post("/v1/shop/order/get", json={"order_id": order["id"]},
                                          headers=agent_headers)
        assert response.status_code == 404

        response = await test_client.post("/v1/shop/order/get", json={"order_id": order["id"]},
                                          headers=seller_headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_dashboard(self, test_client, seller_headers, admin_headers, jamaah_headers,
                             sample_product_data):
        await approved_seller(test_client, seller_headers, admin_headers)
        product = await create_product(test_client, seller_headers, sample_product_data)
        await test_client.post("/v1/shop/order/create", json=order_payload(product["id"]), headers=jamaah_headers)

        response = await test_client.post("/v1/shop/dashboard", headers=admin_headers)

        data = response.json()
        assert data["total_orders"] == 1
        assert data["orders_by_status"]["pending"] == 1
        assert data["gross_revenue"] == 0
        assert data["active_products"] == 1
