# models/session_record.py
from datetime import datetime

from extensions import db


class SessionRecord(db.Model):
    """One server-side session, keyed by the id carried in the session cookie."""

    __tablename__ = "http_sessions"
    sid = db.Column(db.String(64), primary_key=True)
    data = db.Column(db.Text, nullable=False, default="{}")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<SessionRecord {self.sid[:8]}>"
