import uuid
from datetime import timedelta

from tests.conftest import register, sign_in, verify
from whisperbox.api.utils import verify_token
from whisperbox.database.daos import AccountDao, MessageDao
from whisperbox.database.entities import Message, utcnow


def submit(client, content, username="alice"):
    return client.post(f"/inbox/{username}/messages", json={"content": content})


def contents(client):
    response = client.get("/inbox/messages")
    assert response.status_code == 200
    return [m["content"] for m in response.json()["messages"]]


def test_acceptance_defaults_to_true(client, alice):
    response = client.get("/inbox/acceptance")
    assert response.json() == {"success": True, "is_accepting_messages": True}


def test_closed_inbox_rejects_messages(client, alice, db):
    response = client.post("/inbox/acceptance", json={"accept_messages": False})
    assert response.status_code == 200
    assert response.json()["user"]["is_accepting_messages"] is False

    response = submit(client, "hi")
    assert response.status_code == 403
    assert response.json()["message"] == "User is not accepting messages"
    assert MessageDao.list_for_account(db, uuid.UUID(alice["id"])) == []
    assert client.get("/inbox/acceptance").json()["is_accepting_messages"] is False


def test_reopened_inbox_accepts_messages(client, alice):
    client.post("/inbox/acceptance", json={"accept_messages": False})
    client.post("/inbox/acceptance", json={"accept_messages": True})

    response = submit(client, "hi")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Message sent successfully"}
    assert contents(client) == ["hi"]


def test_acceptance_toggle_refreshes_session(client, alice, settings):
    response = client.post("/inbox/acceptance", json={"accept_messages": False})
    assert verify_token(response.cookies["token"], settings).is_accepting_messages is False


def test_submit_to_unknown_user_is_not_found(client):
    response = submit(client, "hello", username="ghost")
    assert response.status_code == 404


def test_submit_requires_content(client, alice):
    response = submit(client, "   ")
    assert response.status_code == 400


def test_messages_listed_newest_first(client, alice):
    submit(client, "m1")
    submit(client, "m2")
    assert contents(client) == ["m2", "m1"]


def test_list_sorts_by_created_at_not_insertion_order(db, client, alice):
    account_id = uuid.UUID(alice["id"])
    now = utcnow()
    for content, age in [("middle", 5), ("newest", 1), ("oldest", 9)]:
        db.add(Message(account_id=account_id, content=content, created_at=now - timedelta(minutes=age)))
    db.commit()

    assert [m.content for m in MessageDao.list_for_account(db, account_id)] == ["newest", "middle", "oldest"]
    assert contents(client) == ["newest", "middle", "oldest"]


def test_delete_removes_exactly_one_message(client, alice):
    submit(client, "m1")
    submit(client, "m2")
    messages = client.get("/inbox/messages").json()["messages"]
    m1 = next(m for m in messages if m["content"] == "m1")

    response = client.delete(f"/inbox/messages/{m1['id']}")
    assert response.status_code == 200
    assert contents(client) == ["m2"]

    response = client.delete(f"/inbox/messages/{m1['id']}")
    assert response.status_code == 404
    assert response.json()["message"] == "Message not found or already deleted"
    assert contents(client) == ["m2"]


def test_delete_unknown_or_malformed_id_is_not_found(client, alice):
    submit(client, "keep")
    assert client.delete(f"/inbox/messages/{uuid.uuid4()}").status_code == 404
    assert client.delete("/inbox/messages/not-a-uuid").status_code == 404
    assert contents(client) == ["keep"]


def test_cannot_delete_someone_elses_message(client, mailer, alice):
    register(client, username="bob", email="b@y.com")
    verify(client, mailer, "bob")
    submit(client, "for alice")

    sign_in(client)
    alice_message = client.get("/inbox/messages").json()["messages"][0]

    sign_in(client, identifier="bob")
    assert client.delete(f"/inbox/messages/{alice_message['id']}").status_code == 404

    sign_in(client)
    assert contents(client) == ["for alice"]


def test_owner_routes_require_session(client):
    assert client.get("/inbox/acceptance").status_code == 401
    assert client.post("/inbox/acceptance", json={"accept_messages": False}).status_code == 401
    assert client.get("/inbox/messages").status_code == 401
    assert client.delete(f"/inbox/messages/{uuid.uuid4()}").status_code == 401


def test_message_dao_remove_reports_rowcount(db, client, alice):
    account_id = uuid.UUID(alice["id"])
    message = MessageDao.append(db, account_id, "hello")
    db.commit()
    assert MessageDao.remove(db, account_id, message.id) == 1
    assert MessageDao.remove(db, account_id, message.id) == 0
    db.commit()
    assert AccountDao.get_by_id(db, account_id) is not None
