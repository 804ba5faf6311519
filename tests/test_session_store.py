from itsdangerous import Signer

from extensions import db
from models.session_record import SessionRecord
from session_store import DatabaseSessionInterface


def _cookie_value(resp):
    for header in resp.headers.getlist("Set-Cookie"):
        if header.startswith("session="):
            return header.split(";", 1)[0].split("=", 1)[1]
    return None


def test_cookie_carries_only_signed_id(app, client, user, login):
    value = _cookie_value(login(client))
    assert value is not None
    assert "username" not in value

    signer = Signer(app.secret_key, salt=DatabaseSessionInterface.salt)
    sid = signer.unsign(value).decode("utf-8")
    with app.app_context():
        assert db.session.get(SessionRecord, sid) is not None


def test_unsigned_id_is_rejected(app, client, user, login):
    value = _cookie_value(login(client))
    sid = value.rsplit(".", 1)[0]

    fresh = app.test_client(use_cookies=False)
    assert fresh.get("/session/me", headers={"Cookie": f"session={value}"}).status_code == 200
    resp = fresh.get("/session/me", headers={"Cookie": f"session={sid}"})
    assert resp.status_code == 401


def test_cookie_from_other_secret_is_rejected(app, client, user, login):
    login(client)
    with app.app_context():
        sid = SessionRecord.query.one().sid
    forged = Signer("other-secret", salt=DatabaseSessionInterface.salt).sign(sid).decode("utf-8")

    resp = app.test_client(use_cookies=False).get("/issues", headers={"Cookie": f"session={forged}"})
    assert resp.status_code == 401


def test_unmodified_session_sets_no_cookie(auth_client):
    resp = auth_client.get("/issues")
    assert resp.status_code == 200
    assert _cookie_value(resp) is None


def test_anonymous_requests_store_nothing(app, client):
    client.get("/issues")
    client.get("/users")
    with app.app_context():
        assert SessionRecord.query.count() == 0


def test_separate_clients_get_separate_sessions(app, user, login):
    first, second = app.test_client(), app.test_client()
    login(first)
    login(second)
    with app.app_context():
        assert SessionRecord.query.count() == 2

    first.post("/session/logout")
    assert first.get("/issues").status_code == 401
    assert second.get("/issues").status_code == 200
