"""
News and comment API tests
"""
import pytest
from httpx import AsyncClient

from app.auth import create_access_token


NEWS_FORM = {
    "title": "Civic space forum",
    "description": "Highlights from the regional civic space forum.",
    "read_time": "4 min",
    "tag": "Events",
}


async def create_news(client: AsyncClient, headers: dict, files=None, **overrides) -> dict:
    data = {**NEWS_FORM, **overrides}
    response = await client.post("/api/news/create", data=data, files=files, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def cover(name: str = "cover.png", content: bytes = b"\x89PNG cover"):
    return {"image": (name, content, "image/png")}


class TestNews:

    @pytest.mark.asyncio
    async def test_create_news_with_image(self, client: AsyncClient, auth_headers, news_store):
        news = await create_news(client, auth_headers, files=cover())

        assert news["title"] == "Civic space forum"
        assert news["author"] == "Hana Tesfaye"
        assert news["readTime"] == "4 min"
        assert news["image"].startswith("news/")
        assert news_store.resolve(news["image"]).read_bytes() == b"\x89PNG cover"

    @pytest.mark.asyncio
    async def test_unknown_staff_is_forbidden(self, client: AsyncClient, staff):
        headers = {"Authorization": f"Bearer {create_access_token(staff.id + 100)}"}

        response = await client.post("/api/news/create", data=NEWS_FORM, headers=headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Unauthorized access"

    @pytest.mark.asyncio
    async def test_non_image_upload_is_rejected(self, client: AsyncClient, auth_headers, news_store):
        files = {"image": ("notes.pdf", b"%PDF", "application/pdf")}

        response = await client.post("/api/news/create", data=NEWS_FORM, files=files, headers=auth_headers)

        assert response.status_code == 400
        assert await news_store.list_files() == []

    @pytest.mark.asyncio
    async def test_get_and_list_news(self, client: AsyncClient, auth_headers):
        news = await create_news(client, auth_headers)

        single = await client.get(f"/api/news/{news['id']}")
        listing = await client.get("/api/news/")

        assert single.status_code == 200
        assert single.json()["data"]["id"] == news["id"]
        assert [item["id"] for item in listing.json()["data"]] == [news["id"]]

    @pytest.mark.asyncio
    async def test_get_missing_news(self, client: AsyncClient):
        response = await client.get("/api/news/999")

        assert response.status_code == 404
        assert response.json()["message"] == "News not found"

    @pytest.mark.asyncio
    async def test_update_replaces_image(self, client: AsyncClient, auth_headers, news_store):
        news = await create_news(client, auth_headers, files=cover("cover.png"))

        response = await client.put(
            f"/api/news/{news['id']}",
            data={"tag": "Forum"},
            files=cover("cover-v2.png", b"\x89PNG second"),
            headers=auth_headers
        )

        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["tag"] == "Forum"
        assert updated["title"] == news["title"]
        assert updated["image"] != news["image"]
        assert [path for path, _ in await news_store.list_files()] == [updated["image"]]

    @pytest.mark.asyncio
    async def test_delete_removes_image_and_comments(self, client: AsyncClient, auth_headers, news_store):
        news = await create_news(client, auth_headers, files=cover())
        await client.post(
            f"/api/news/{news['id']}/comments",
            json={"name": "Abel", "email": "abel@example.org", "content": "Great summary"}
        )

        response = await client.delete(f"/api/news/{news['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert await news_store.list_files() == []
        assert (await client.get(f"/api/news/{news['id']}")).status_code == 404
        assert (await client.get(f"/api/news/{news['id']}/comments")).json()["data"] == []


class TestComments:

    @pytest.mark.asyncio
    async def test_public_comment_flow(self, client: AsyncClient, auth_headers):
        news = await create_news(client, auth_headers)

        created = await client.post(
            f"/api/news/{news['id']}/comments",
            json={"name": "Abel", "email": "abel@example.org", "content": "Great summary"}
        )
        assert created.status_code == 201
        comment = created.json()["data"]
        assert comment["newsId"] == news["id"]

        updated = await client.put(f"/api/news/comments/{comment['id']}", json={"content": "Edited"})
        assert updated.json()["data"]["content"] == "Edited"
        assert updated.json()["data"]["name"] == "Abel"

        listing = await client.get(f"/api/news/{news['id']}/comments")
        assert [c["content"] for c in listing.json()["data"]] == ["Edited"]

        deleted = await client.delete(f"/api/news/comments/{comment['id']}")
        assert deleted.status_code == 200
        assert (await client.get(f"/api/news/{news['id']}/comments")).json()["data"] == []

    @pytest.mark.asyncio
    async def test_comment_requires_all_fields(self, client: AsyncClient, auth_headers):
        news = await create_news(client, auth_headers)

        response = await client.post(f"/api/news/{news['id']}/comments", json={"name": "Abel"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_comment_on_missing_news(self, client: AsyncClient):
        response = await client.post(
            "/api/news/999/comments",
            json={"name": "Abel", "email": "abel@example.org", "content": "Hello"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_comment_update(self, client: AsyncClient, auth_headers):
        news = await create_news(client, auth_headers)
        created = await client.post(
            f"/api/news/{news['id']}/comments",
            json={"name": "Abel", "email": "abel@example.org", "content": "Hello"}
        )

        response = await client.put(f"/api/news/comments/{created.json()['data']['id']}", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "No data provided for update"

    @pytest.mark.asyncio
    async def test_staff_comment_uses_staff_identity(self, client: AsyncClient, auth_headers):
        news = await create_news(client, auth_headers)

        response = await client.post(
            f"/api/news/news/{news['id']}/comments",
            json={"content": "Thanks to all participants"},
            headers=auth_headers
        )

        assert response.status_code == 201
        comment = response.json()["data"]
        assert comment["name"] == "Hana Tesfaye"
        assert comment["email"] == "hana@office.example.org"
