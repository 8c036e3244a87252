"""Tests for property endpoints."""

import json
import uuid

import pytest
from httpx import AsyncClient

from conftest import listing_payload, make_property
from havenstay.models import Property
from havenstay.models.user import User
from havenstay.storage.memory import MemoryStorage

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# POST /api/properties
# ---------------------------------------------------------------------------


class TestCreateProperty:
    async def test_create_json(self, client: AsyncClient, host_headers: dict, host: User) -> None:
        response = await client.post("/api/properties", json=listing_payload(), headers=host_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Sunny Lekki Apartment"
        assert data["hostId"] == str(host.id)
        assert data["pricePerNight"] == 25000
        assert data["amenities"] == ["wifi", "ac"]
        assert data["isApproved"] is False
        assert data["isActive"] is True
        assert data["cancellationPolicy"] == "moderate"

    async def test_create_multipart_with_images(
        self, client: AsyncClient, host_headers: dict, storage: MemoryStorage
    ) -> None:
        form = {k: str(v) for k, v in listing_payload().items() if k != "amenities"}
        form["amenities"] = json.dumps(["wifi", "generator"])
        files = [
            ("images", ("front.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")),
            ("images", ("room.png", b"\x89PNG fake png", "image/png")),
        ]
        response = await client.post("/api/properties", data=form, files=files, headers=host_headers)
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["amenities"] == ["wifi", "generator"]
        assert len(data["images"]) == 2
        assert all(path.startswith("/uploads/") for path in data["images"])
        assert data["pricePerNight"] == 25000

    async def test_rejects_non_image_upload(self, client: AsyncClient, host_headers: dict) -> None:
        form = {k: str(v) for k, v in listing_payload().items() if k != "amenities"}
        files = [("images", ("notes.txt", b"hello", "text/plain"))]
        response = await client.post("/api/properties", data=form, files=files, headers=host_headers)
        assert response.status_code == 400
        assert response.json()["fields"][0]["field"] == "images"

    async def test_missing_fields(self, client: AsyncClient, host_headers: dict) -> None:
        response = await client.post("/api/properties", json={"title": "Only a title"}, headers=host_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_input"
        assert {f["field"] for f in body["fields"]} >= {"description", "pricePerNight"}

    async def test_guest_forbidden(self, client: AsyncClient, guest_headers: dict) -> None:
        response = await client.post("/api/properties", json=listing_payload(), headers=guest_headers)
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# GET /api/properties
# ---------------------------------------------------------------------------


class TestListProperties:
    async def test_public_listing_hides_pending(
        self, client: AsyncClient, storage: MemoryStorage, host: User, listed_property: Property
    ) -> None:
        await make_property(storage, host, approved=False)
        response = await client.get("/api/properties")
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [str(listed_property.id)]

    async def test_filters(self, client: AsyncClient, storage: MemoryStorage, host: User) -> None:
        cheap = await make_property(storage, host, neighborhood="Yaba", price_per_night=10000)
        await make_property(storage, host, neighborhood="Yaba", price_per_night=90000)
        await make_property(storage, host, neighborhood="Ikeja", price_per_night=10000)

        response = await client.get("/api/properties", params={"neighborhood": "Yaba", "maxPrice": 20000})
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [str(cheap.id)]

    async def test_min_above_max_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/api/properties", params={"minPrice": 500, "maxPrice": 100})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"

    async def test_non_numeric_price_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/api/properties", params={"minPrice": "cheap"})
        assert response.status_code == 400

    async def test_pending_filter_admin_only(
        self, client: AsyncClient, storage: MemoryStorage, host: User, admin_headers: dict, host_headers: dict
    ) -> None:
        pending = await make_property(storage, host, approved=False)

        response = await client.get("/api/properties", params={"isApproved": "false"}, headers=admin_headers)
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [str(pending.id)]

        response = await client.get("/api/properties", params={"isApproved": "false"}, headers=host_headers)
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# GET /api/properties/{id}
# ---------------------------------------------------------------------------


class TestGetProperty:
    async def test_detail_includes_host_and_rating(
        self, client: AsyncClient, listed_property: Property, host: User
    ) -> None:
        response = await client.get(f"/api/properties/{listed_property.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["host"]["id"] == str(host.id)
        assert data["host"]["firstName"] == host.first_name
        assert "email" not in data["host"]
        assert data["reviews"] == []
        assert data["avgRating"] == 0

    async def test_unknown_property(self, client: AsyncClient) -> None:
        response = await client.get(f"/api/properties/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    async def test_malformed_id(self, client: AsyncClient) -> None:
        response = await client.get("/api/properties/not-a-uuid")
        assert response.status_code == 400

    async def test_pending_hidden_from_public(
        self, client: AsyncClient, storage: MemoryStorage, host: User, host_headers: dict
    ) -> None:
        pending = await make_property(storage, host, approved=False)
        assert (await client.get(f"/api/properties/{pending.id}")).status_code == 404
        assert (await client.get(f"/api/properties/{pending.id}", headers=host_headers)).status_code == 200


# ---------------------------------------------------------------------------
# PUT /api/properties/{id}, /approve
# ---------------------------------------------------------------------------


class TestUpdateProperty:
    async def test_owner_updates(self, client: AsyncClient, listed_property: Property, host_headers: dict) -> None:
        response = await client.put(
            f"/api/properties/{listed_property.id}",
            json={"pricePerNight": 30000, "houseRules": "No smoking"},
            headers=host_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["pricePerNight"] == 30000
        assert data["houseRules"] == "No smoking"
        assert data["title"] == listed_property.title

    async def test_other_host_forbidden(
        self, client: AsyncClient, listed_property: Property, other_host_headers: dict
    ) -> None:
        response = await client.put(
            f"/api/properties/{listed_property.id}",
            json={"title": "Hijacked"},
            headers=other_host_headers,
        )
        assert response.status_code == 403
        assert listed_property.title == "Sunny Lekki Apartment"

    async def test_cannot_patch_approval(
        self, client: AsyncClient, storage: MemoryStorage, host: User, host_headers: dict
    ) -> None:
        pending = await make_property(storage, host, approved=False)
        response = await client.put(
            f"/api/properties/{pending.id}", json={"isApproved": True}, headers=host_headers
        )
        assert response.status_code == 400
        assert pending.is_approved is False

    async def test_keep_images_with_upload(
        self, client: AsyncClient, storage: MemoryStorage, host: User, host_headers: dict
    ) -> None:
        prop = await make_property(storage, host, images=["/uploads/old1.jpg", "/uploads/old2.jpg"])
        response = await client.put(
            f"/api/properties/{prop.id}",
            data={"keepImages": json.dumps(["/uploads/old2.jpg"])},
            files=[("images", ("new.webp", b"RIFF fake webp", "image/webp"))],
            headers=host_headers,
        )
        assert response.status_code == 200, response.text
        images = response.json()["images"]
        assert images[0] == "/uploads/old2.jpg"
        assert len(images) == 2
        assert images[1].endswith(".webp")


class TestApproveProperty:
    async def test_admin_approves(
        self, client: AsyncClient, storage: MemoryStorage, host: User, admin_headers: dict
    ) -> None:
        pending = await make_property(storage, host, approved=False)
        response = await client.put(f"/api/properties/{pending.id}/approve", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["isApproved"] is True

        listed = await client.get("/api/properties")
        assert [p["id"] for p in listed.json()] == [str(pending.id)]

    async def test_host_cannot_approve(
        self, client: AsyncClient, storage: MemoryStorage, host: User, host_headers: dict
    ) -> None:
        pending = await make_property(storage, host, approved=False)
        response = await client.put(f"/api/properties/{pending.id}/approve", headers=host_headers)
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# GET /api/host/properties
# ---------------------------------------------------------------------------


class TestHostProperties:
    async def test_lists_only_own_including_pending(
        self,
        client: AsyncClient,
        storage: MemoryStorage,
        host: User,
        other_host: User,
        host_headers: dict,
    ) -> None:
        mine = await make_property(storage, host, approved=False)
        await make_property(storage, other_host)
        response = await client.get("/api/host/properties", headers=host_headers)
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [str(mine.id)]
