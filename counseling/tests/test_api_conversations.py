from __future__ import annotations

from fastapi.testclient import TestClient


def _start(client: TestClient, email: str = "a@x.com") -> dict:
    resp = client.post(
        "/api/conversations",
        json={"visitor_name": "Wei", "visitor_email": email, "subject": "First session"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_one_conversation_per_email(client: TestClient) -> None:
    conversation = _start(client)

    resp = client.post("/api/conversations", json={"visitor_name": "Wei", "visitor_email": "a@x.com"})
    assert resp.status_code == 409
    assert resp.json()["detail"]["existing_conversation_id"] == conversation["id"]

    assert client.post("/api/conversations", json={"visitor_name": "Wei"}).status_code == 422


def test_visitor_and_admin_exchange_messages(client: TestClient, admin_headers: dict[str, str]) -> None:
    conversation = _start(client)
    url = f"/api/conversations/{conversation['id']}/messages"

    resp = client.post(
        url,
        json={"sender_type": "visitor", "sender_name": "Wei", "content": "Hello", "verify_email": "a@x.com"},
    )
    assert resp.status_code == 201
    assert resp.json()["is_from_admin"] is False

    resp = client.post(
        url,
        json={"sender_type": "admin", "sender_name": "Counselor", "content": "Hi Wei"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["is_from_admin"] is True

    thread = client.get(f"/api/conversations/{conversation['id']}", params={"verify_email": "a@x.com"}).json()
    assert [m["content"] for m in thread["messages"]] == ["Hello", "Hi Wei"]
    assert client.get("/api/conversations/by-email/a@x.com").json()["id"] == conversation["id"]


def test_message_permissions(client: TestClient) -> None:
    conversation = _start(client)
    url = f"/api/conversations/{conversation['id']}/messages"

    as_admin = client.post(url, json={"sender_type": "admin", "sender_name": "x", "content": "hi"})
    assert as_admin.status_code == 403

    wrong_email = client.post(
        url, json={"sender_type": "visitor", "sender_name": "x", "content": "hi", "verify_email": "b@x.com"}
    )
    assert wrong_email.status_code == 403
    assert wrong_email.json()["detail"]["code"] == "unauthorized"

    assert client.get(f"/api/conversations/{conversation['id']}").status_code == 403
    assert client.get("/api/conversations/by-email/b@x.com").status_code == 404
    assert client.post("/api/conversations/999/messages", json={"sender_name": "x", "content": "y"}).status_code == 404


def test_admin_reads_and_resolves(client: TestClient, admin_headers: dict[str, str]) -> None:
    older = _start(client, "a@x.com")
    newer = _start(client, "b@x.com")
    client.post(
        f"/api/conversations/{older['id']}/messages",
        json={"sender_name": "Wei", "content": "Are you there?", "verify_email": "a@x.com"},
    )

    assert client.get("/api/conversations").status_code == 401
    listed = client.get("/api/conversations", headers=admin_headers).json()
    assert {c["id"] for c in listed} == {older["id"], newer["id"]}

    assert client.post(f"/api/conversations/{older['id']}/read", headers=admin_headers).json() == {"success": True}
    thread = client.get(f"/api/conversations/{older['id']}", headers=admin_headers).json()
    assert all(m["is_read"] for m in thread["messages"])

    resolved = client.post(f"/api/conversations/{older['id']}/resolve", headers=admin_headers)
    assert resolved.status_code == 200
    assert resolved.json()["is_resolved"] is True
    assert client.post("/api/conversations/999/resolve", headers=admin_headers).status_code == 404
