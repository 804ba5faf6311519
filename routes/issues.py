# routes/issues.py
from flask import Blueprint, jsonify, current_app

from extensions import db
from models.issue import Issue
from models.user import User
from routes import json_body, text_field

issues_bp = Blueprint('issues', __name__, url_prefix='/issues')

_MISSING = object()


def _resolve_user(payload):
    """Map the ``user`` field of a request body to a User.

    Returns ``_MISSING`` when the body references a user id that does not
    exist, ``None`` to unassign.
    """
    if payload is None:
        return None
    user_id = payload.get("id") if isinstance(payload, dict) else payload
    if user_id in (None, ""):
        return None
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        return _MISSING
    user = db.session.get(User, user_id)
    return user if user is not None else _MISSING


@issues_bp.route("", methods=["GET"])
def list_issues():
    issues = Issue.query.order_by(Issue.id).all()
    return jsonify([issue.to_dict() for issue in issues])


@issues_bp.route("/<int:issue_id>", methods=["GET"])
def get_issue(issue_id):
    issue = db.session.get(Issue, issue_id)
    if issue is None:
        return jsonify({"error": "Issue not found"}), 404
    return jsonify(issue.to_dict())


@issues_bp.route("", methods=["POST"])
def create_issue():
    data = json_body()
    title = text_field(data, "title")
    if not title:
        return jsonify({"error": "Title is required."}), 400
    description = text_field(data, "description")
    status = text_field(data, "status") or "Open"

    user = _resolve_user(data.get("user"))
    if user is _MISSING:
        return jsonify({"error": "Unknown user."}), 400

    issue = Issue(
        title=title,
        description=description,
        status=status,
        user=user,
    )
    db.session.add(issue)
    db.session.commit()
    current_app.logger.info("Created issue %s", issue.id)
    return jsonify(issue.to_dict()), 201


@issues_bp.route("/<int:issue_id>", methods=["PUT"])
def update_issue(issue_id):
    issue = db.session.get(Issue, issue_id)
    if issue is None:
        return jsonify({"error": "Issue not found"}), 404

    data = json_body()
    title = text_field(data, "title")
    description = text_field(data, "description")
    status = text_field(data, "status")
    if "title" in data and not title:
        return jsonify({"error": "Title is required."}), 400
    user = _resolve_user(data.get("user")) if "user" in data else None
    if user is _MISSING:
        return jsonify({"error": "Unknown user."}), 400

    if title:
        issue.title = title
    if "description" in data:
        issue.description = description
    if status:
        issue.status = status
    if "user" in data:
        issue.user = user

    db.session.commit()
    return jsonify(issue.to_dict())


@issues_bp.route("/<int:issue_id>", methods=["DELETE"])
def delete_issue(issue_id):
    issue = db.session.get(Issue, issue_id)
    if issue is None:
        return jsonify({"error": "Issue not found"}), 404
    db.session.delete(issue)
    db.session.commit()
    current_app.logger.info("Deleted issue %s", issue_id)
    return "", 204
