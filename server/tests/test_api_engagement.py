"""API tests for feedback, inquiries, premium subscriptions and admin operations."""

import pytest


def inquiry_payload(published_package, **overrides):
    payload = {
        "package_id": published_package["package"]["id"],
        "full_name": "Ahmad Fauzi",
        "phone": "0812-3456-7890",
        "number_of_people": 4,
        "message": "Apakah bisa keberangkatan dari Surabaya?",
    }
    payload.update(overrides)
    return payload


class TestFeedback:
    @pytest.mark.asyncio
    async def test_anonymous_bug_report(self, test_client):
        response = await test_client.post(
            "/v1/feedback/submit",
            json={
                "feedback_type": "bug",
                "title": "Aplikasi keluar sendiri",
                "description": "Terjadi saat membuka halaman doa",
                "device_info": {"os": "Android 14"},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] is None
        assert data["status"] == "pending"
        assert data["device_info"] == {"os": "Android 14"}

    @pytest.mark.asyncio
    async def test_device_info_dropped_for_suggestions(self, test_client, jamaah_headers):
        response = await test_client.post(
            "/v1/feedback/submit",
            json={
                "feedback_type": "suggestion",
                "title": "Tambah mode gelap",
                "description": "Agar nyaman dibaca malam hari",
                "device_info": {"os": "iOS 18"},
            },
            headers=jamaah_headers,
        )

        assert response.json()["device_info"] is None

        response = await test_client.post("/v1/feedback/mine", headers=jamaah_headers)
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_rating_feedback_requires_rating(self, test_client):
        response = await test_client.post(
            "/v1/feedback/submit",
            json={"feedback_type": "rating", "title": "Nilai", "description": "Aplikasi sangat membantu"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_triage_and_stats(self, test_client, admin_headers, jamaah_headers):
        feedback = (await test_client.post(
            "/v1/feedback/submit",
            json={"feedback_type": "rating", "title": "Nilai", "description": "Aplikasi sangat membantu",
                  "rating": 4},
            headers=jamaah_headers,
        )).json()

        response = await test_client.post(
            "/v1/feedback/update",
            json={"feedback_id": feedback["id"], "status": "resolved", "admin_notes": "Terima kasih"},
            headers=admin_headers,
        )
        data = response.json()
        assert data["status"] == "resolved"
        assert data["resolved_by"] == "admin-1"
        assert data["resolved_at"] is not None

        response = await test_client.post(
            "/v1/feedback/update", json={"feedback_id": feedback["id"], "status": "in_progress"},
            headers=admin_headers,
        )
        assert response.json()["resolved_at"] is None

        response = await test_client.post("/v1/feedback/stats", headers=admin_headers)
        stats = response.json()
        assert stats["total"] == 1
        assert stats["by_status"]["in_progress"] == 1
        assert stats["by_type"]["rating"] == 1
        assert stats["average_rating"] == 4.0

    @pytest.mark.asyncio
    async def test_list_requires_admin(self, test_client, jamaah_headers):
        response = await test_client.post("/v1/feedback/list", json={}, headers=jamaah_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_content_rating_is_replaced(self, test_client, jamaah_headers, agent_headers):
        ref = {"content_type": "prayer", "content_id": "doa-safar"}
        await test_client.post("/v1/feedback/rate-content", json={**ref, "rating": 2}, headers=jamaah_headers)
        await test_client.post("/v1/feedback/rate-content", json={**ref, "rating": 5}, headers=jamaah_headers)
        await test_client.post("/v1/feedback/rate-content", json={**ref, "rating": 4}, headers=agent_headers)

        response = await test_client.post("/v1/feedback/content-rating", json=ref, headers=jamaah_headers)

        data = response.json()
        assert data["rating_count"] == 2
        assert data["average_rating"] == 4.5
        assert data["user_rating"] == 5

        response = await test_client.post("/v1/feedback/content-rating", json=ref)
        assert response.json()["user_rating"] is None


class TestInquiries:
    @pytest.mark.asyncio
    async def test_create_inquiry(self, test_client, jamaah_headers, published_package):
        response = await test_client.post(
            "/v1/inquiry/create", json=inquiry_payload(published_package), headers=jamaah_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["travel_id"] == published_package["travel"]["id"]
        assert data["user_id"] == "jamaah-1"
        assert data["status"] == "pending"

        response = await test_client.post("/v1/inquiry/mine", headers=jamaah_headers)
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_invalid_phone(self, test_client, published_package):
        response = await test_client.post(
            "/v1/inquiry/create", json=inquiry_payload(published_package, phone="08-12")
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_follow_up_and_stats(self, test_client, agent_headers, other_agent_headers, published_package):
        travel_id = published_package["travel"]["id"]
        first = (await test_client.post("/v1/inquiry/create", json=inquiry_payload(published_package))).json()
        await test_client.post("/v1/inquiry/create", json=inquiry_payload(published_package, full_name="Budi"))

        response = await test_client.post(
            "/v1/inquiry/update-status", json={"inquiry_id": first["id"], "status": "contacted"},
            headers=other_agent_headers,
        )
        assert response.status_code == 403

        response = await test_client.post(
            "/v1/inquiry/update-status",
            json={"inquiry_id": first["id"], "status": "contacted", "agent_notes": "Sudah ditelepon"},
            headers=agent_headers,
        )
        assert response.json()["contacted_at"] is not None

        response = await test_client.post(
            "/v1/inquiry/update-status", json={"inquiry_id": first["id"], "status": "converted"},
            headers=agent_headers,
        )
        assert response.json()["status"] == "converted"

        response = await test_client.post(
            "/v1/inquiry/update-status", json={"inquiry_id": first["id"], "status": "pending"},
            headers=agent_headers,
        )
        assert response.status_code == 409

        response = await test_client.post(
            "/v1/inquiry/list-travel", json={"travel_id": travel_id, "status": "pending"}, headers=agent_headers
        )
        assert response.json()["total"] == 1

        response = await test_client.post("/v1/inquiry/stats", json={"travel_id": travel_id}, headers=agent_headers)
        stats = response.json()
        assert stats["total"] == 2
        assert stats["by_status"]["converted"] == 1
        assert stats["conversion_rate"] == 50.0


class TestSubscriptions:
    async def create_plan(self, client, admin_headers):
        response = await client.post(
            "/v1/subscription/plan/create",
            json={"name": "Premium Tahunan", "price_yearly": 99_000, "features": ["Audio doa", "Tanpa iklan"]},
            headers=admin_headers,
        )
        assert response.status_code == 200, response.text
        return response.json()

    @pytest.mark.asyncio
    async def test_request_and_verify(self, test_client, admin_headers, jamaah_headers):
        plan = await self.create_plan(test_client, admin_headers)

        response = await test_client.post("/v1/subscription/mine", headers=jamaah_headers)
        assert response.json() == {"is_premium": False, "subscription": None}

        response = await test_client.post(
            "/v1/subscription/request", json={"plan_id": plan["id"]}, headers=jamaah_headers
        )
        subscription = response.json()
        assert subscription["status"] == "pending"
        assert subscription["payment_amount"] == 99_000

        response = await test_client.post(
            "/v1/subscription/verify", json={"subscription_id": subscription["id"], "approve": True},
            headers=admin_headers,
        )
        assert response.json()["status"] == "active"
        assert response.json()["end_date"] is not None

        response = await test_client.post("/v1/subscription/mine", headers=jamaah_headers)
        assert response.json()["is_premium"] is True
        assert response.json()["subscription"]["plan"]["name"] == "Premium Tahunan"

        response = await test_client.post(
            "/v1/subscription/request", json={"plan_id": plan["id"]}, headers=jamaah_headers
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_rejected_request_can_be_resubmitted(self, test_client, admin_headers, jamaah_headers):
        plan = await self.create_plan(test_client, admin_headers)
        subscription = (await test_client.post(
            "/v1/subscription/request", json={"plan_id": plan["id"]}, headers=jamaah_headers
        )).json()

        response = await test_client.post(
            "/v1/subscription/verify",
            json={"subscription_id": subscription["id"], "approve": False, "admin_notes": "Bukti buram"},
            headers=admin_headers,
        )
        assert response.json()["status"] == "rejected"

        response = await test_client.post(
            "/v1/subscription/verify", json={"subscription_id": subscription["id"], "approve": True},
            headers=admin_headers,
        )
        assert response.status_code == 409

        response = await test_client.post(
            "/v1/subscription/request", json={"plan_id": plan["id"]}, headers=jamaah_headers
        )
        assert response.json()["id"] == subscription["id"]
        assert response.json()["status"] == "pending"
        assert response.json()["admin_notes"] is None

    @pytest.mark.asyncio
    async def test_inactive_plan_not_on_sale(self, test_client, admin_headers, jamaah_headers):
        plan = await self.create_plan(test_client, admin_headers)
        await test_client.post(
            "/v1/subscription/plan/update", json={"plan_id": plan["id"], "is_active": False}, headers=admin_headers
        )

        response = await test_client.post("/v1/subscription/plans")
        assert response.json()["items"] == []

        response = await test_client.post(
            "/v1/subscription/request", json={"plan_id": plan["id"]}, headers=jamaah_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_plan_update_rejects_null_price(self, test_client, admin_headers):
        plan = await self.create_plan(test_client, admin_headers)

        response = await test_client.post(
            "/v1/subscription/plan/update", json={"plan_id": plan["id"], "price_yearly": None}, headers=admin_headers
        )
        assert response.status_code == 422

        response = await test_client.post("/v1/subscription/plans")
        assert response.json()["items"][0]["price_yearly"] == 99_000


class TestAdmin:
    @pytest.mark.asyncio
    async def test_platform_stats(self, test_client, admin_headers, published_package):
        await test_client.post(
            "/v1/feedback/submit",
            json={"feedback_type": "other", "title": "Halo", "description": "Sekadar menyapa"},
        )

        response = await test_client.post("/v1/admin/stats", headers=admin_headers)

        assert response.status_code == 200
        stats = response.json()
        assert stats["total_travels"] == 1
        assert stats["verified_travels"] == 0
        assert stats["active_packages"] == 1
        assert stats["pending_feedback"] == 1
        assert stats["membership_revenue"] == 0

    @pytest.mark.asyncio
    async def test_run_expiry(self, test_client, admin_headers):
        response = await test_client.post("/v1/admin/run-expiry", headers=admin_headers)

        assert response.json() == {"featured_expired": 0, "memberships_expired": 0, "subscriptions_expired": 0}

    @pytest.mark.asyncio
    async def test_admin_only(self, test_client, agent_headers):
        response = await test_client.post("/v1/admin/stats", headers=agent_headers)

        assert response.status_code == 403
