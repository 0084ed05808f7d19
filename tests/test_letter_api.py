"""
Letter API tests
"""
import pytest
from httpx import AsyncClient

from app.auth import create_access_token


def letter_form(**overrides) -> dict:
    data = {
        "title": "Annual report submission",
        "summary": "Submit the 2024 annual report by the end of the month.",
        "type": "Announcement",
        "sendToAll": "false",
        "selectedCsos": "[5, 9]",
    }
    data.update(overrides)
    return data


async def submit_letter(client: AsyncClient, headers: dict, files=None, **overrides) -> dict:
    response = await client.post("/api/letters/submit", data=letter_form(**overrides), files=files, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestSubmitLetter:

    @pytest.mark.asyncio
    async def test_submit_letter(self, client: AsyncClient, auth_headers):
        response = await client.post("/api/letters/submit", data=letter_form(), headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Letter created successfully"
        data = body["data"]
        assert data["title"] == "Annual report submission"
        assert data["sendToAll"] is False
        assert data["createdBy"] == "Hana Tesfaye"
        assert data["recipients"]["totalCount"] == 2
        assert data["recipients"]["readCount"] == 0
        assert data["recipients"]["unreadCount"] == 2
        assert [item["id"] for item in data["selectedCsos"]] == [5, 9]

    @pytest.mark.asyncio
    async def test_submit_with_attachment(self, client: AsyncClient, auth_headers, letter_store):
        files = {"attachment": ("agenda.pdf", b"%PDF-1.4 agenda", "application/pdf")}

        data = await submit_letter(client, auth_headers, files=files)

        assert data["attachmentName"] == "agenda.pdf"
        assert data["attachmentMimetype"] == "application/pdf"
        assert letter_store.resolve(data["attachmentPath"]).read_bytes() == b"%PDF-1.4 agenda"

    @pytest.mark.asyncio
    async def test_submit_requires_token(self, client: AsyncClient):
        response = await client.post("/api/letters/submit", data=letter_form())

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Access denied. No token provided."}

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.post(
            "/api/letters/submit", data=letter_form(),
            headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_token_cookie_is_accepted(self, client: AsyncClient, staff):
        client.cookies.set("token", create_access_token(staff.id))

        response = await client.post("/api/letters/submit", data=letter_form())

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_missing_title(self, client: AsyncClient, auth_headers):
        form = letter_form()
        del form["title"]

        response = await client.post("/api/letters/submit", data=form, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "title" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_unknown_letter_type(self, client: AsyncClient, auth_headers):
        response = await client.post("/api/letters/submit", data=letter_form(type="Memo"), headers=auth_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_disallowed_attachment(self, client: AsyncClient, auth_headers, letter_store):
        files = {"attachment": ("setup.exe", b"MZ", "application/octet-stream")}

        response = await client.post("/api/letters/submit", data=letter_form(), files=files, headers=auth_headers)

        assert response.status_code == 400
        assert await letter_store.list_files() == []

    @pytest.mark.asyncio
    async def test_oversize_attachment_is_rejected(self, client: AsyncClient, auth_headers, letter_store):
        letter_store.max_size = 16
        files = {"attachment": ("agenda.pdf", b"%" * 64, "application/pdf")}

        response = await client.post("/api/letters/submit", data=letter_form(), files=files, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "File exceeds the 16 bytes limit"
        assert await letter_store.list_files() == []
        assert (await client.get("/api/letters/")).json()["data"] == []


class TestReadLetters:

    @pytest.mark.asyncio
    async def test_get_letter(self, client: AsyncClient, auth_headers):
        created = await submit_letter(client, auth_headers)

        response = await client.get(f"/api/letters/get/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_get_missing_letter(self, client: AsyncClient):
        response = await client.get("/api/letters/get/999")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Letter not found"}

    @pytest.mark.asyncio
    async def test_list_letters(self, client: AsyncClient, auth_headers):
        await submit_letter(client, auth_headers, title="First")
        await submit_letter(client, auth_headers, title="Second")

        response = await client.get("/api/letters/")

        assert response.status_code == 200
        titles = [letter["title"] for letter in response.json()["data"]]
        assert sorted(titles) == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_letters_for_cso(self, client: AsyncClient, auth_headers):
        targeted = await submit_letter(client, auth_headers, title="Targeted")
        broadcast = await submit_letter(client, auth_headers, title="Broadcast", sendToAll="true")
        await submit_letter(client, auth_headers, title="Other", selectedCsos="[12]")

        response = await client.get("/api/letters/cso/5", headers=auth_headers)

        assert response.status_code == 200
        letters = {letter["id"]: letter for letter in response.json()["data"]}
        assert set(letters) == {targeted["id"], broadcast["id"]}
        assert letters[broadcast["id"]]["isRead"] is False


class TestReadState:

    @pytest.mark.asyncio
    async def test_mark_read_then_fetch(self, client: AsyncClient, auth_headers):
        created = await submit_letter(client, auth_headers)

        response = await client.put(f"/api/letters/{created['id']}/mark-read/5", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["id"] == 5
        assert response.json()["data"]["read"] is True

        letter = (await client.get(f"/api/letters/get/{created['id']}")).json()["data"]
        assert letter["recipients"]["readCount"] == 1
        assert letter["recipients"]["unreadCount"] == 1
        entries = {item["id"]: item for item in letter["selectedCsos"]}
        assert entries[5]["read"] is True
        assert entries[5]["read_at"] is not None
        assert entries[9]["read"] is False

    @pytest.mark.asyncio
    async def test_mark_read_missing_letter(self, client: AsyncClient, auth_headers):
        response = await client.put("/api/letters/999/mark-read/5", headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_mark_read_on_broadcast(self, client: AsyncClient, auth_headers):
        created = await submit_letter(client, auth_headers, sendToAll="true")

        response = await client.put(f"/api/letters/{created['id']}/mark-read/5", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert "data" not in response.json() or response.json()["data"] is None

    @pytest.mark.asyncio
    async def test_unread_count(self, client: AsyncClient, auth_headers):
        first = await submit_letter(client, auth_headers)
        await submit_letter(client, auth_headers, selectedCsos="5")
        await submit_letter(client, auth_headers, sendToAll="true")
        await client.put(f"/api/letters/{first['id']}/mark-read/5", headers=auth_headers)

        response = await client.get("/api/letters/cso/5/unread-count", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {"csoId": 5, "unreadCount": 1}


class TestCsoAccess:

    @pytest.fixture
    def cso_headers(self) -> dict:
        return {"Authorization": f"Bearer {create_access_token(5, role='cso')}"}

    @pytest.mark.asyncio
    async def test_cso_can_mark_own_receipt(self, client: AsyncClient, auth_headers, cso_headers):
        created = await submit_letter(client, auth_headers)

        response = await client.put(f"/api/letters/{created['id']}/mark-read/5", headers=cso_headers)

        assert response.status_code == 200
        assert response.json()["data"]["read"] is True

    @pytest.mark.asyncio
    async def test_cso_cannot_mark_for_another_cso(self, client: AsyncClient, auth_headers, cso_headers):
        created = await submit_letter(client, auth_headers)

        response = await client.put(f"/api/letters/{created['id']}/mark-read/9", headers=cso_headers)

        assert response.status_code == 403
        assert response.json()["success"] is False
        letter = (await client.get(f"/api/letters/get/{created['id']}")).json()["data"]
        assert letter["recipients"]["readCount"] == 0

    @pytest.mark.asyncio
    async def test_cso_reads_only_own_inbox(self, client: AsyncClient, auth_headers, cso_headers):
        await submit_letter(client, auth_headers)

        own = await client.get("/api/letters/cso/5", headers=cso_headers)
        other = await client.get("/api/letters/cso/9", headers=cso_headers)
        count = await client.get("/api/letters/cso/9/unread-count", headers=cso_headers)

        assert own.status_code == 200
        assert len(own.json()["data"]) == 1
        assert other.status_code == 403
        assert count.status_code == 403

    @pytest.mark.asyncio
    async def test_staff_may_act_for_any_cso(self, client: AsyncClient, auth_headers):
        created = await submit_letter(client, auth_headers)

        response = await client.put(f"/api/letters/{created['id']}/mark-read/9", headers=auth_headers)

        assert response.status_code == 200


class TestModifyLetters:

    @pytest.mark.asyncio
    async def test_update_letter(self, client: AsyncClient, auth_headers):
        created = await submit_letter(client, auth_headers)
        await client.put(f"/api/letters/{created['id']}/mark-read/9", headers=auth_headers)

        response = await client.put(
            f"/api/letters/{created['id']}",
            data={"title": "Updated title", "selectedCsos": "[9, 12]"},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Updated title"
        assert data["summary"] == created["summary"]
        entries = {item["id"]: item for item in data["selectedCsos"]}
        assert list(entries) == [9, 12]
        assert entries[9]["read"] is True
        assert entries[12]["read"] is False

    @pytest.mark.asyncio
    async def test_update_missing_letter(self, client: AsyncClient, auth_headers):
        response = await client.put("/api/letters/999", data={"title": "x"}, headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_letter_removes_attachment(self, client: AsyncClient, auth_headers, letter_store):
        files = {"attachment": ("agenda.pdf", b"%PDF-1.4 agenda", "application/pdf")}
        created = await submit_letter(client, auth_headers, files=files)

        response = await client.delete(f"/api/letters/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Letter deleted successfully"
        assert await letter_store.list_files() == []
        assert (await client.get(f"/api/letters/get/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_requires_token(self, client: AsyncClient, auth_headers):
        created = await submit_letter(client, auth_headers)

        response = await client.delete(f"/api/letters/{created['id']}")

        assert response.status_code == 401
