"""API tests for travels, packages, departures and recommendations."""

import pytest


@pytest.mark.asyncio
async def test_create_travel_requires_agent(test_client, jamaah_headers, sample_travel_data):
    response = await test_client.post("/v1/travel/create", json=sample_travel_data, headers=jamaah_headers)

    assert response.status_code == 403
    assert response.json()["required_permissions"] == ["agent"]


@pytest.mark.asyncio
async def test_create_travel_missing_auth(test_client, sample_travel_data):
    response = await test_client.post("/v1/travel/create", json=sample_travel_data)

    assert response.status_code == 401
    assert "authentication" in response.json()["title"].lower()


@pytest.mark.asyncio
async def test_create_travel_invalid_data(test_client, agent_headers):
    response = await test_client.post("/v1/travel/create", json={"name": "A"}, headers=agent_headers)

    assert response.status_code == 422
    data = response.json()
    assert data["status"] == 422
    assert "violations" in data


@pytest.mark.asyncio
async def test_travel_storefront(test_client, agent_headers, sample_travel_data):
    response = await test_client.post("/v1/travel/create", json=sample_travel_data, headers=agent_headers)
    assert response.status_code == 200
    travel = response.json()
    assert travel["slug"] == "al-hijrah-tour"
    assert travel["verified"] is False

    response = await test_client.post("/v1/travel/get-by-slug", json={"slug": "al-hijrah-tour"})
    assert response.status_code == 200
    assert response.json()["id"] == travel["id"]

    response = await test_client.post("/v1/travel/mine", headers=agent_headers)
    assert response.json()["id"] == travel["id"]


@pytest.mark.asyncio
async def test_update_travel_by_other_agent_forbidden(test_client, agent_headers, other_agent_headers,
                                                      sample_travel_data):
    response = await test_client.post("/v1/travel/create", json=sample_travel_data, headers=agent_headers)
    travel_id = response.json()["id"]

    response = await test_client.post(
        "/v1/travel/update", json={"travel_id": travel_id, "name": "Hijacked"}, headers=other_agent_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_deactivated_travel_hidden_from_public(test_client, agent_headers, admin_headers,
                                                     sample_travel_data):
    response = await test_client.post("/v1/travel/create", json=sample_travel_data, headers=agent_headers)
    travel_id = response.json()["id"]

    response = await test_client.post("/v1/travel/deactivate", json={"travel_id": travel_id}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = await test_client.post("/v1/travel/get", json={"travel_id": travel_id})
    assert response.status_code == 404

    response = await test_client.post("/v1/travel/get", json={"travel_id": travel_id}, headers=agent_headers)
    assert response.status_code == 200

    response = await test_client.post("/v1/travel/list", json={})
    assert response.json()["total"] == 0

    response = await test_client.post("/v1/travel/list", json={"include_inactive": True}, headers=admin_headers)
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_verify_travel(test_client, agent_headers, admin_headers, sample_travel_data):
    response = await test_client.post("/v1/travel/create", json=sample_travel_data, headers=agent_headers)
    travel_id = response.json()["id"]

    response = await test_client.post("/v1/travel/verify", json={"travel_id": travel_id}, headers=agent_headers)
    assert response.status_code == 403

    response = await test_client.post("/v1/travel/verify", json={"travel_id": travel_id}, headers=admin_headers)
    assert response.json()["verified"] is True

    response = await test_client.post("/v1/travel/list", json={"verified_only": True})
    assert [t["id"] for t in response.json()["items"]] == [travel_id]


@pytest.mark.asyncio
async def test_package_detail(test_client, published_package):
    package_id = published_package["package"]["id"]

    response = await test_client.post("/v1/package/get", json={"package_id": package_id})

    assert response.status_code == 200
    data = response.json()
    assert data["travel"]["slug"] == "al-hijrah-tour"
    assert len(data["departures"]) == 1
    assert data["departures"][0]["status"] == "available"
    assert data["departures"][0]["available_seats"] == 10


@pytest.mark.asyncio
async def test_package_search(test_client, published_package, sample_departure_data):
    departure_month = sample_departure_data["departure_date"][:7]

    response = await test_client.post(
        "/v1/package/search",
        json={"max_price": 35_000_000, "hotel_stars": [4, 5], "departure_month": departure_month},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    item = data["items"][0]
    assert item["lowest_price"] == 30_000_000
    assert item["next_departure_date"] == sample_departure_data["departure_date"]

    response = await test_client.post("/v1/package/search", json={"max_price": 20_000_000})
    assert response.json()["total"] == 0

    response = await test_client.post("/v1/package/search", json={"search": "hijrah"})
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_deactivated_package_not_public(test_client, agent_headers, published_package):
    package_id = published_package["package"]["id"]

    response = await test_client.post("/v1/package/deactivate", json={"package_id": package_id}, headers=agent_headers)
    assert response.status_code == 200

    response = await test_client.post("/v1/package/get", json={"package_id": package_id})
    assert response.status_code == 404

    response = await test_client.post(
        "/v1/package/list-travel",
        json={"travel_id": published_package["travel"]["id"]},
        headers=agent_headers,
    )
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_add_departure_validates_dates(test_client, agent_headers, published_package):
    response = await test_client.post(
        "/v1/package/departure/add",
        json={
            "package_id": published_package["package"]["id"],
            "departure_date": "2030-05-10",
            "return_date": "2030-05-01",
            "price": 30_000_000,
            "total_seats": 10,
        },
        headers=agent_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_waitlist_status_is_kept(test_client, agent_headers, published_package):
    departure_id = published_package["departure"]["id"]

    response = await test_client.post(
        "/v1/package/departure/update",
        json={"departure_id": departure_id, "status": "waitlist"},
        headers=agent_headers,
    )
    assert response.json()["status"] == "waitlist"

    response = await test_client.post(
        "/v1/package/departure/update",
        json={"departure_id": departure_id, "available_seats": 5},
        headers=agent_headers,
    )
    assert response.json()["status"] == "waitlist"


@pytest.mark.asyncio
async def test_recommendations(test_client, published_package):
    response = await test_client.post(
        "/v1/recommendation/recommend",
        json={"budget": {"min": 20_000_000, "max": 35_000_000}, "hotel_star": 4, "flight_type": "direct"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_matches"] == 1
    top = data["recommendations"][0]
    assert top["package"]["id"] == published_package["package"]["id"]
    # base 50 + hotel 20 + flight 15
    assert top["score"] == 85
    assert top["lowest_price"] == 30_000_000


@pytest.mark.asyncio
async def test_recommendations_without_match(test_client, published_package):
    response = await test_client.post(
        "/v1/recommendation/recommend", json={"budget": {"min": 0, "max": 1_000_000}}
    )

    data = response.json()
    assert data["total_matches"] == 0
    assert data["recommendations"] == []
    assert data["summary"].startswith("Tidak ada paket")


@pytest.mark.asyncio
async def test_update_package_rejects_null_for_required_fields(test_client, agent_headers, published_package):
    package_id = published_package["package"]["id"]

    for field in ("name", "duration_days", "is_active"):
        response = await test_client.post(
            "/v1/package/update", json={"package_id": package_id, field: None}, headers=agent_headers
        )
        assert response.status_code == 422, field
        assert response.json()["violations"][0]["path"] == f"body.{field}"

    # Nullable columns may still be cleared
    response = await test_client.post(
        "/v1/package/update", json={"package_id": package_id, "airline": None}, headers=agent_headers
    )
    assert response.status_code == 200
    assert response.json()["airline"] is None
    assert response.json()["name"] == "Umroh Reguler 9 Hari"


@pytest.mark.asyncio
async def test_update_departure_rejects_null_price(test_client, agent_headers, published_package):
    departure_id = published_package["departure"]["id"]

    response = await test_client.post(
        "/v1/package/departure/update", json={"departure_id": departure_id, "price": None}, headers=agent_headers
    )
    assert response.status_code == 422

    response = await test_client.post(
        "/v1/package/departure/update",
        json={"departure_id": departure_id, "available_seats": 4},
        headers=agent_headers,
    )
    assert response.status_code == 200
    assert response.json()["price"] == 30_000_000
    assert response.json()["available_seats"] == 4


@pytest.mark.asyncio
async def test_update_travel_rejects_null_name(test_client, agent_headers, sample_travel_data):
    travel = (await test_client.post("/v1/travel/create", json=sample_travel_data, headers=agent_headers)).json()

    response = await test_client.post(
        "/v1/travel/update", json={"travel_id": travel["id"], "name": None}, headers=agent_headers
    )
    assert response.status_code == 422

    response = await test_client.post("/v1/travel/get", json={"travel_id": travel["id"]})
    assert response.json()["name"] == "Al Hijrah Tour"
