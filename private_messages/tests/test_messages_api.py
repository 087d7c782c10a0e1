import pytest
from httpx import AsyncClient, ASGITransport

from private_messages.main import app
from private_messages.schemas.messages import MessageOut


def client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestMessagesAPI:
    """HTTP surface over the message lifecycle"""

    @pytest.mark.asyncio
    async def test_healthz(self):
        async with client() as ac:
            res = await ac.get('/healthz')
            assert res.status_code == 200
            assert res.json() == {'status': 'ok'}

    @pytest.mark.asyncio
    async def test_requires_token(self, message):
        async with client() as ac:
            res = await ac.get(f"/api/messages/{message.id}")
            assert res.status_code == 401
            res = await ac.get(f"/api/messages/{message.id}", headers={"Authorization": "Bearer nope"})
            assert res.status_code == 401

    @pytest.mark.asyncio
    async def test_send_and_read_flow(self, alice, bob, auth_headers):
        async with client() as ac:
            sent = await ac.post("/api/messages/", json={"recipient_id": bob.id, "content": "hello"}, headers=auth_headers(alice))
            assert sent.status_code == 200, sent.text
            msg = sent.json()
            assert msg["sender_id"] == alice.id
            assert msg["read_at"] is None

            # sender looking at it does not mark it read
            res = await ac.get(f"/api/messages/{msg['id']}", headers=auth_headers(alice))
            assert res.status_code == 200
            assert res.json()["read_at"] is None

            count = await ac.get("/api/messages/unread-count", headers=auth_headers(bob))
            assert count.json() == {"unread": 1}

            res = await ac.get(f"/api/messages/{msg['id']}", headers=auth_headers(bob))
            assert res.status_code == 200
            assert res.json()["read_at"] is not None

            count = await ac.get("/api/messages/unread-count", headers=auth_headers(bob))
            assert count.json() == {"unread": 0}

    @pytest.mark.asyncio
    async def test_foreign_and_missing_look_the_same(self, message, carol, auth_headers):
        async with client() as ac:
            foreign = await ac.get(f"/api/messages/{message.id}", headers=auth_headers(carol))
            missing = await ac.get("/api/messages/9999", headers=auth_headers(carol))
            assert foreign.status_code == missing.status_code == 404
            assert foreign.json() == missing.json()

            res = await ac.delete(f"/api/messages/{message.id}", headers=auth_headers(carol))
            assert res.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_from_both_sides(self, message, alice, bob, auth_headers):
        async with client() as ac:
            res = await ac.delete(f"/api/messages/{message.id}", headers=auth_headers(alice))
            assert res.status_code == 200
            assert res.json() == {"ok": True}

            sent = await ac.get("/api/messages/sent", headers=auth_headers(alice))
            assert sent.json() == []
            inbox = await ac.get("/api/messages/inbox", headers=auth_headers(bob))
            assert [m["id"] for m in inbox.json()] == [message.id]
            assert inbox.json()[0]["sender_deleted"] is True

            res = await ac.delete(f"/api/messages/{message.id}", headers=auth_headers(bob))
            assert res.status_code == 200

            res = await ac.get(f"/api/messages/{message.id}", headers=auth_headers(alice))
            assert res.status_code == 404

    @pytest.mark.asyncio
    async def test_inbox_unread_filter_and_dialog(self, alice, bob, auth_headers):
        async with client() as ac:
            ids = []
            for text in ("one", "two"):
                r = await ac.post("/api/messages/", json={"recipient_id": bob.id, "content": text}, headers=auth_headers(alice))
                assert r.status_code == 200
                ids.append(r.json()["id"])
            await ac.get(f"/api/messages/{ids[0]}", headers=auth_headers(bob))

            unread = await ac.get("/api/messages/inbox", params={"unread": "true"}, headers=auth_headers(bob))
            assert [m["content"] for m in unread.json()] == ["two"]

            dlg = await ac.get(f"/api/messages/dialog/{alice.id}", headers=auth_headers(bob))
            assert dlg.status_code == 200
            assert [m["content"] for m in dlg.json()] == ["one", "two"]


@pytest.mark.asyncio
async def test_message_out_reads_model_attributes(message):
    out = MessageOut.model_validate(message)
    assert out.id == message.id
    assert out.read_at is None
    assert out.sender_deleted is False
