# session_store.py: server-side sessions kept in the database, cookie carries only a signed id.
import secrets

from flask.json.tag import TaggedJSONSerializer
from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from werkzeug.datastructures import CallbackDict

from extensions import db
from models.session_record import SessionRecord


def generate_sid():
    return secrets.token_urlsafe(32)


class ServerSideSession(CallbackDict, SessionMixin):
    def __init__(self, initial=None, sid=None, new=False):
        def on_update(self):
            self.modified = True

        super().__init__(initial, on_update)
        self.sid = sid
        self.new = new
        self.modified = False
        self.previous_sid = None

    def regenerate(self):
        """Move the contents to a fresh sid; the old record is dropped on save."""
        if self.previous_sid is None:
            self.previous_sid = self.sid
        self.sid = generate_sid()
        self.modified = True


class DatabaseSessionInterface(SessionInterface):
    """Stores session contents in the ``http_sessions`` table.

    The cookie value is the session id signed with the app secret, so a
    client can neither read the session data nor guess another id.
    """

    salt = "issue-tracker-session"
    serializer = TaggedJSONSerializer()
    session_class = ServerSideSession

    def _get_signer(self, app):
        if not app.secret_key:
            return None
        return Signer(app.secret_key, salt=self.salt)

    def open_session(self, app, request):
        signer = self._get_signer(app)
        if signer is None:
            return None

        cookie = request.cookies.get(self.get_cookie_name(app))
        if cookie:
            try:
                sid = signer.unsign(cookie).decode("utf-8")
            except BadSignature:
                app.logger.info("Rejected session cookie with bad signature")
                sid = None
            if sid:
                record = db.session.get(SessionRecord, sid)
                if record is not None:
                    return self.session_class(self.serializer.loads(record.data), sid=sid)

        return self.session_class(sid=generate_sid(), new=True)

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)

        if session.previous_sid is not None:
            SessionRecord.query.filter_by(sid=session.previous_sid).delete()

        if not session:
            if session.modified:
                SessionRecord.query.filter_by(sid=session.sid).delete()
                db.session.commit()
                response.delete_cookie(name, domain=domain, path=path)
            return

        if not self.should_set_cookie(app, session):
            return

        record = db.session.get(SessionRecord, session.sid)
        if record is None:
            record = SessionRecord(sid=session.sid)
            db.session.add(record)
        record.data = self.serializer.dumps(dict(session))
        db.session.commit()

        signed = self._get_signer(app).sign(session.sid).decode("utf-8")
        response.set_cookie(
            name,
            signed,
            expires=self.get_expiration_time(app, session),
            httponly=self.get_cookie_httponly(app),
            domain=domain,
            path=path,
            secure=self.get_cookie_secure(app),
            samesite=self.get_cookie_samesite(app),
        )
