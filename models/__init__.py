from models.user import User, normalize_email
from models.issue import Issue
from models.session_record import SessionRecord

__all__ = ["User", "Issue", "SessionRecord", "normalize_email"]
