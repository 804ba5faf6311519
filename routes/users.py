# routes/users.py
from flask import Blueprint, jsonify, current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from models.issue import Issue
from models.user import User, normalize_email
from routes import json_body, text_field

users_bp = Blueprint('users', __name__, url_prefix='/users')


@users_bp.route("", methods=["GET"])
def list_users():
    users = User.query.order_by(User.id).all()
    return jsonify([user.to_dict() for user in users])


@users_bp.route("/<int:user_id>", methods=["GET"])
def get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"error": "User not found"}), 404
    return jsonify(user.to_dict())


@users_bp.route("/<int:user_id>", methods=["PUT"])
def update_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"error": "User not found"}), 404

    data = json_body()
    # validate every field before touching the row
    changes = {}
    for key in ("name", "email", "role", "password"):
        if key in data:
            changes[key] = text_field(data, key, required=True)

    if "email" in changes:
        email = normalize_email(changes["email"])
        other = User.query.filter_by(email=email).first()
        if other is not None and other.id != user.id:
            return jsonify({"error": "Email already registered."}), 409
        user.email = email
    if "name" in changes:
        user.name = changes["name"]
    if "role" in changes:
        user.role = changes["role"]
    if "password" in changes:
        user.set_password(data["password"])

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.exception("Could not update user %s", user_id)
        return jsonify({"error": "Email already registered."}), 409
    return jsonify(user.to_dict())


@users_bp.route("/<int:user_id>", methods=["DELETE"])
def delete_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"error": "User not found"}), 404
    # keep the issues, drop the assignment
    Issue.query.filter_by(user_id=user.id).update({"user_id": None})
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("Deleted user %s", user_id)
    return "", 204
