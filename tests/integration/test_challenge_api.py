"""Integration tests for the challenge HTTP endpoints.

The app runs in-process through httpx's ASGI transport; the challenge
service is backed by the in-memory repository, so no database is needed.
"""

import pytest

BASE = "/api/v1/challenges"


# ===========================================
# LISTING AND DETAILS
# ===========================================


class TestListEndpoint:
    @pytest.mark.asyncio
    async def test_paginates_newest_first(self, async_client, repository, author_id):
        repository.seed_many(25, author_id)

        response = await async_client.get(BASE, params={"page": 2, "amount": 10})

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 10
        assert body[0]["url_name"] == "challenge-15"
        assert set(body[0]) == {
            "name",
            "url_name",
            "description",
            "author_name",
            "participant_count",
            "completed_count",
            "date_created",
            "views",
        }

    @pytest.mark.asyncio
    async def test_rejects_zero_amount(self, async_client):
        response = await async_client.get(BASE, params={"amount": 0})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_empty_listing(self, async_client):
        response = await async_client.get(BASE)

        assert response.status_code == 200
        assert response.json() == []


class TestDetailEndpoint:
    @pytest.mark.asyncio
    async def test_returns_detail_and_counts_view(self, async_client, seeded_challenge):
        first = await async_client.get(f"{BASE}/sort-it")
        second = await async_client.get(f"{BASE}/sort-it")

        assert first.status_code == 200
        assert first.json()["author_name"] == "alice"
        assert first.json()["views"] == 1
        assert second.json()["views"] == 2

    @pytest.mark.asyncio
    async def test_unknown_slug(self, async_client):
        response = await async_client.get(f"{BASE}/nope")

        assert response.status_code == 404
        assert response.json() == {"detail": "No such challenge found :("}


# ===========================================
# CREATION
# ===========================================


class TestCreateEndpoint:
    @pytest.mark.asyncio
    async def test_creates_challenge(self, authenticated_client, repository, user_id):
        response = await authenticated_client.post(
            BASE,
            json={"name": "Sort it", "url_name": "sort-it", "description": "Sort a list"},
        )

        assert response.status_code == 201
        assert response.json()["url_name"] == "sort-it"
        assert response.json()["type"] == "success"
        assert repository.challenges["sort-it"].author_id == user_id

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, authenticated_client, seeded_challenge):
        response = await authenticated_client.post(
            BASE,
            json={"name": "Other", "url_name": "sort-it"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "A challenge with such url name already exists!"

    @pytest.mark.asyncio
    async def test_malformed_slug(self, authenticated_client):
        response = await authenticated_client.post(
            BASE,
            json={"name": "Sort it", "url_name": "Sort It!"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_user(self, async_client):
        response = await async_client.post(BASE, json={"name": "Sort it", "url_name": "sort-it"})

        assert response.status_code == 401


# ===========================================
# PARTICIPATION
# ===========================================


class TestParticipationEndpoints:
    @pytest.mark.asyncio
    async def test_full_lifecycle(self, authenticated_client, seeded_challenge):
        joined = await authenticated_client.post(f"{BASE}/sort-it/participate")
        paused = await authenticated_client.post(f"{BASE}/sort-it/unparticipate")
        resumed = await authenticated_client.post(f"{BASE}/sort-it/participate")
        completed = await authenticated_client.post(f"{BASE}/sort-it/complete")

        assert [r.status_code for r in (joined, paused, resumed, completed)] == [200] * 4
        assert joined.json() == {
            "type": "success",
            "text": "You have successfully participated!",
            "url_name": "sort-it",
        }

        detail = (await authenticated_client.get(f"{BASE}/sort-it")).json()
        assert detail["participations"] == []
        assert detail["completed_by"] == ["bob"]

    @pytest.mark.asyncio
    async def test_participate_twice(self, authenticated_client, seeded_challenge):
        await authenticated_client.post(f"{BASE}/sort-it/participate")

        response = await authenticated_client.post(f"{BASE}/sort-it/participate")

        assert response.status_code == 400
        assert response.json()["detail"] == "You are already participating in this challenge."

    @pytest.mark.asyncio
    async def test_participate_after_completion(self, authenticated_client, seeded_challenge):
        await authenticated_client.post(f"{BASE}/sort-it/participate")
        await authenticated_client.post(f"{BASE}/sort-it/complete")

        response = await authenticated_client.post(f"{BASE}/sort-it/participate")

        assert response.status_code == 409
        assert response.json()["detail"] == "You have already completed this challenge!"

    @pytest.mark.asyncio
    async def test_unparticipate_without_participating(self, authenticated_client, seeded_challenge):
        response = await authenticated_client.post(f"{BASE}/sort-it/unparticipate")

        assert response.status_code == 409
        assert response.json()["detail"] == "You must participate in this challenge first!"

    @pytest.mark.asyncio
    async def test_complete_without_participating(self, authenticated_client, seeded_challenge):
        response = await authenticated_client.post(f"{BASE}/sort-it/complete")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_challenge(self, authenticated_client):
        response = await authenticated_client.post(f"{BASE}/nope/participate")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_storage_failure_is_opaque(self, authenticated_client, repository, seeded_challenge):
        repository.fail_writes = True

        response = await authenticated_client.post(f"{BASE}/sort-it/participate")

        assert response.status_code == 500
        assert "Storage" not in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_requires_user(self, async_client, seeded_challenge):
        response = await async_client.post(f"{BASE}/sort-it/participate")

        assert response.status_code == 401


class TestHealthEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, async_client):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, async_client):
        response = await async_client.get("/health/live", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
