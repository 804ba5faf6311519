# gate.py: request gate: protected paths need a session carrying a username.
from flask import current_app, request, session, url_for

UNAUTHORIZED_MESSAGE = "Unauthorized: please log in first"
LOGIN_ENDPOINT = "session.login"


def is_authenticated():
    return session.get("username") is not None


def _matches(path, prefixes):
    for prefix in prefixes:
        prefix = prefix.rstrip("/")
        if not prefix:
            continue
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def is_protected(path, endpoint=None):
    """Return True when ``path`` requires a logged-in session."""
    # login is never gated, whatever the configured paths say
    if endpoint == LOGIN_ENDPOINT or _matches(path, [url_for(LOGIN_ENDPOINT)]):
        return False
    cfg = current_app.config
    if _matches(path, cfg.get("GATE_EXCLUDED_PATHS", ())):
        return False
    return _matches(path, cfg.get("GATE_PROTECTED_PATHS", ()))


def session_gate():
    if request.method == "OPTIONS":
        return None
    if not is_protected(request.path, request.endpoint):
        return None
    if is_authenticated():
        return None
    current_app.logger.info("Gate rejected %s %s: no authenticated session", request.method, request.path)
    return UNAUTHORIZED_MESSAGE, 401


def register_session_gate(app):
    app.before_request(session_gate)
