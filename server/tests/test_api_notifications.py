"""API tests for departure countdown reminders and the travel agent inbox."""

from datetime import date, timedelta

import pytest


async def book_departure(client, agent_headers, jamaah_headers, published_package, days_out, confirm=True):
    departure_date = date.today() + timedelta(days=days_out)
    response = await client.post(
        "/v1/package/departure/add",
        json={
            "package_id": published_package["package"]["id"],
            "departure_date": departure_date.isoformat(),
            "return_date": (departure_date + timedelta(days=9)).isoformat(),
            "price": 30_000_000,
            "total_seats": 10,
        },
        headers=agent_headers,
    )
    departure = response.json()

    response = await client.post(
        "/v1/booking/create",
        json={
            "package_id": published_package["package"]["id"],
            "departure_id": departure["id"],
            "number_of_pilgrims": 1,
            "contact_name": "Siti Aminah",
            "contact_phone": "081234567890",
        },
        headers={**jamaah_headers, "Idempotency-Key": f"countdown-{days_out}"},
    )
    booking = response.json()

    if confirm:
        response = await client.post(
            "/v1/booking/update-status",
            json={"booking_id": booking["id"], "status": "confirmed"},
            headers=agent_headers,
        )
        assert response.status_code == 200, response.text
    return booking


class TestDepartureReminders:
    @pytest.mark.asyncio
    async def test_countdown_reminder(self, test_client, agent_headers, jamaah_headers, admin_headers,
                                      published_package):
        booking = await book_departure(test_client, agent_headers, jamaah_headers, published_package, 7)

        response = await test_client.post("/v1/admin/run-departure-reminders", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["run_date"] == date.today().isoformat()
        assert data["h7"] == 1

        response = await test_client.post("/v1/admin/run-departure-reminders", headers=admin_headers)
        assert response.json()["h7"] == 0

        response = await test_client.post("/v1/notification/departure/list", headers=jamaah_headers)
        notifications = response.json()
        assert len(notifications) == 1
        assert notifications[0]["booking_id"] == booking["id"]
        assert notifications[0]["notification_type"] == "h7"
        assert notifications[0]["title"] == "Seminggu Menuju Tanah Suci"
        assert notifications[0]["body"].startswith("Umroh Reguler 9 Hari: ")

        response = await test_client.post(
            "/v1/notification/departure/mark-read",
            json={"notification_id": notifications[0]["id"]},
            headers=agent_headers,
        )
        assert response.status_code == 404

        response = await test_client.post(
            "/v1/notification/departure/mark-read",
            json={"notification_id": notifications[0]["id"]},
            headers=jamaah_headers,
        )
        assert response.json()["is_read"] is True

    @pytest.mark.asyncio
    async def test_pending_booking_gets_no_countdown(self, test_client, agent_headers, jamaah_headers,
                                                     admin_headers, published_package):
        await book_departure(test_client, agent_headers, jamaah_headers, published_package, 7, confirm=False)

        response = await test_client.post("/v1/admin/run-departure-reminders", headers=admin_headers)
        assert sum(v for k, v in response.json().items() if k != "run_date") == 0

    @pytest.mark.asyncio
    async def test_requires_admin(self, test_client, agent_headers):
        response = await test_client.post("/v1/admin/run-departure-reminders", headers=agent_headers)

        assert response.status_code == 403


class TestAgentInbox:
    @pytest.mark.asyncio
    async def test_inquiry_and_booking_reach_the_agent(self, test_client, agent_headers, other_agent_headers,
                                                       jamaah_headers, admin_headers, published_package,
                                                       sample_booking_data):
        travel_id = published_package["travel"]["id"]
        inquiry = (await test_client.post(
            "/v1/inquiry/create",
            json={
                "package_id": published_package["package"]["id"],
                "full_name": "Ahmad Fauzi",
                "phone": "081234567890",
            },
        )).json()
        await test_client.post(
            "/v1/booking/create",
            json={
                **sample_booking_data,
                "package_id": published_package["package"]["id"],
                "departure_id": published_package["departure"]["id"],
                "payment_schedules": [{
                    "payment_type": "dp",
                    "amount": 5_000_000,
                    "due_date": (date.today() - timedelta(days=2)).isoformat(),
                }],
            },
            headers={**jamaah_headers, "Idempotency-Key": "inbox"},
        )

        response = await test_client.post("/v1/admin/run-agent-notifications", headers=admin_headers)
        assert response.json() == {"new_inquiry": 1, "new_booking": 1, "overdue_payment": 1}

        response = await test_client.post("/v1/admin/run-agent-notifications", headers=admin_headers)
        assert response.json() == {"new_inquiry": 0, "new_booking": 0, "overdue_payment": 0}

        response = await test_client.post(
            "/v1/notification/agent/list", json={"travel_id": travel_id}, headers=other_agent_headers
        )
        assert response.status_code == 403

        response = await test_client.post(
            "/v1/notification/agent/list",
            json={"travel_id": travel_id, "notification_type": "new_inquiry"},
            headers=agent_headers,
        )
        data = response.json()
        assert data["total"] == 1
        assert data["unread_count"] == 3
        inquiry_note = data["items"][0]
        assert inquiry_note["reference_id"] == inquiry["id"]
        assert inquiry_note["reference_type"] == "inquiry"
        assert inquiry_note["body"] == "Ahmad Fauzi tertarik dengan paket Anda"

        response = await test_client.post(
            "/v1/notification/agent/mark-read", json={"notification_id": inquiry_note["id"]}, headers=agent_headers
        )
        assert response.json()["is_read"] is True

        response = await test_client.post(
            "/v1/notification/agent/mark-all-read", json={"travel_id": travel_id}, headers=agent_headers
        )
        assert response.json() == {"marked": 2}

        response = await test_client.post(
            "/v1/notification/agent/list", json={"travel_id": travel_id, "unread_only": True}, headers=agent_headers
        )
        assert response.json()["total"] == 0
        assert response.json()["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_inbox_requires_agent(self, test_client, jamaah_headers, published_package):
        response = await test_client.post(
            "/v1/notification/agent/list",
            json={"travel_id": published_package["travel"]["id"]},
            headers=jamaah_headers,
        )

        assert response.status_code == 403
