"""API tests for prayers, checklists and manasik guides."""

import pytest


async def create(client, path, data, admin_headers):
    response = await client.post(f"/v1/content/{path}", json=data, headers=admin_headers)
    assert response.status_code == 200, response.text
    return response.json()


class TestPrayers:
    @pytest.mark.asyncio
    async def test_prayer_catalogue(self, test_client, admin_headers):
        category = await create(test_client, "prayer/category/create", {"name": "Doa Thawaf"}, admin_headers)
        await create(
            test_client,
            "prayer/create",
            {
                "category_id": category["id"],
                "title": "Doa memulai thawaf",
                "arabic_text": "بِسْمِ اللهِ وَاللهُ أَكْبَرُ",
                "translation": "Dengan nama Allah, Allah Maha Besar",
            },
            admin_headers,
        )
        await create(
            test_client, "prayer/create", {"title": "Doa safar", "arabic_text": "سُبْحَانَ الَّذِي"}, admin_headers
        )

        response = await test_client.post("/v1/content/prayer/list", json={"category_id": category["id"]})
        assert [p["title"] for p in response.json()["items"]] == ["Doa memulai thawaf"]

        response = await test_client.post("/v1/content/prayer/list", json={"search": "maha besar"})
        assert len(response.json()["items"]) == 1

        response = await test_client.post("/v1/content/prayer/categories")
        assert response.json()["items"][0]["name"] == "Doa Thawaf"

    @pytest.mark.asyncio
    async def test_inactive_prayer_hidden(self, test_client, admin_headers):
        prayer = await create(
            test_client,
            "prayer/create",
            {"title": "Doa safar", "arabic_text": "سُبْحَانَ الَّذِي", "is_active": False},
            admin_headers,
        )

        response = await test_client.post("/v1/content/prayer/get", json={"id": prayer["id"]})
        assert response.status_code == 404

        response = await test_client.post("/v1/content/prayer/list", json={})
        assert response.json()["items"] == []

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, test_client, admin_headers):
        response = await test_client.post(
            "/v1/content/prayer/create",
            json={
                "category_id": "00000000-0000-0000-0000-000000000001",
                "title": "Doa safar",
                "arabic_text": "سُبْحَانَ الَّذِي",
            },
            headers=admin_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_prayer(self, test_client, admin_headers, jamaah_headers):
        prayer = await create(
            test_client, "prayer/create", {"title": "Doa safar", "arabic_text": "سُبْحَانَ الَّذِي"}, admin_headers
        )

        response = await test_client.post("/v1/content/prayer/delete", json={"id": prayer["id"]},
                                          headers=jamaah_headers)
        assert response.status_code == 403

        response = await test_client.post("/v1/content/prayer/delete", json={"id": prayer["id"]},
                                          headers=admin_headers)
        assert response.json() == {"id": prayer["id"], "deleted": True}


class TestChecklists:
    @pytest.mark.asyncio
    async def test_progress(self, test_client, admin_headers, jamaah_headers):
        passport = await create(
            test_client,
            "checklist/create",
            {"title": "Paspor berlaku 8 bulan", "category": "dokumen", "phase": "H-30"},
            admin_headers,
        )
        await create(
            test_client,
            "checklist/create",
            {"title": "Vaksin meningitis", "category": "kesehatan", "phase": "H-14"},
            admin_headers,
        )

        response = await test_client.post(
            "/v1/content/checklist/toggle", json={"checklist_id": passport["id"]}, headers=jamaah_headers
        )
        assert response.json()["is_checked"] is True
        assert response.json()["checked_at"] is not None

        response = await test_client.post("/v1/content/checklist/progress", headers=jamaah_headers)
        progress = response.json()
        assert progress["total"] == 2
        assert progress["completed"] == 1
        assert progress["percent_complete"] == 50
        assert progress["by_category"]["dokumen"] == {"total": 1, "completed": 1}
        assert progress["by_category"]["perlengkapan"] == {"total": 0, "completed": 0}

        response = await test_client.post(
            "/v1/content/checklist/toggle", json={"checklist_id": passport["id"]}, headers=jamaah_headers
        )
        assert response.json()["is_checked"] is False
        assert response.json()["checked_at"] is None

    @pytest.mark.asyncio
    async def test_progress_is_per_user(self, test_client, admin_headers, jamaah_headers, agent_headers):
        item = await create(
            test_client,
            "checklist/create",
            {"title": "Kain ihram", "category": "perlengkapan", "phase": "H-7"},
            admin_headers,
        )
        await test_client.post("/v1/content/checklist/toggle", json={"checklist_id": item["id"]},
                               headers=jamaah_headers)

        response = await test_client.post("/v1/content/checklist/progress", headers=agent_headers)

        assert response.json()["completed"] == 0
        assert response.json()["percent_complete"] == 0

    @pytest.mark.asyncio
    async def test_notes(self, test_client, admin_headers, jamaah_headers):
        item = await create(
            test_client,
            "checklist/create",
            {"title": "Kain ihram", "category": "perlengkapan", "phase": "H-7"},
            admin_headers,
        )

        response = await test_client.post(
            "/v1/content/checklist/notes",
            json={"checklist_id": item["id"], "notes": "Beli 2 set"},
            headers=jamaah_headers,
        )

        assert response.status_code == 200
        assert response.json()["notes"] == "Beli 2 set"
        assert response.json()["is_checked"] is False

    @pytest.mark.asyncio
    async def test_inactive_item_cannot_be_toggled(self, test_client, admin_headers, jamaah_headers):
        item = await create(
            test_client,
            "checklist/create",
            {"title": "Kain ihram", "category": "perlengkapan", "phase": "H-7", "is_active": False},
            admin_headers,
        )

        response = await test_client.post(
            "/v1/content/checklist/toggle", json={"checklist_id": item["id"]}, headers=jamaah_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_progress_requires_auth(self, test_client):
        response = await test_client.post("/v1/content/checklist/progress")

        assert response.status_code == 401


class TestManasik:
    @pytest.mark.asyncio
    async def test_guides_in_walkthrough_order(self, test_client, admin_headers):
        for index, title in [(2, "Sa'i"), (1, "Thawaf"), (0, "Ihram")]:
            await create(
                test_client,
                "manasik/create",
                {"title": title, "content": f"Tata cara {title}", "order_index": index},
                admin_headers,
            )
        await create(
            test_client,
            "manasik/create",
            {"title": "Wukuf di Arafah", "content": "Tata cara wukuf", "category": "haji"},
            admin_headers,
        )

        response = await test_client.post("/v1/content/manasik/list", json={})
        data = response.json()
        assert data["category"] == "umroh"
        assert [g["title"] for g in data["items"]] == ["Ihram", "Thawaf", "Sa'i"]

        response = await test_client.post("/v1/content/manasik/list", json={"category": "haji"})
        assert [g["title"] for g in response.json()["items"]] == ["Wukuf di Arafah"]

    @pytest.mark.asyncio
    async def test_update_replaces_guide(self, test_client, admin_headers):
        guide = await create(
            test_client,
            "manasik/create",
            {"title": "Ihram", "content": "Niat dari miqat", "description": "Langkah pertama"},
            admin_headers,
        )

        response = await test_client.post(
            "/v1/content/manasik/update",
            json={"id": guide["id"], "title": "Ihram", "content": "Niat dan talbiyah dari miqat"},
            headers=admin_headers,
        )

        data = response.json()
        assert data["content"] == "Niat dan talbiyah dari miqat"
        assert data["description"] is None
