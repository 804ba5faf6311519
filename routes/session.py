# routes/session.py
from flask import Blueprint, jsonify, session, current_app
from sqlalchemy.exc import IntegrityError

from extensions import db, limiter
from models.user import User, normalize_email
from routes import json_body, text_field

session_bp = Blueprint('session', __name__, url_prefix='/session')

LOGIN_OK = "Login successful"
LOGIN_FAILED = "Invalid email or password"


def login_rate_limit():
    return current_app.config["LOGIN_RATE_LIMIT"]


@session_bp.route("/login", methods=["POST"])
@limiter.limit(login_rate_limit)
def login():
    data = json_body()
    email = normalize_email(data.get("email"))
    password = data.get("password")
    if not isinstance(password, str):
        password = ""

    user = User.query.filter_by(email=email).first() if email else None
    current_app.logger.debug("Login attempt for: %s -> found: %s", email, bool(user))
    # unknown email and wrong password get the same answer
    if not user or not password or not user.check_password(password):
        current_app.logger.info("Login failed for: %s", email)
        return LOGIN_FAILED, 401

    # new sid on every login so a planted cookie never becomes authenticated
    session.regenerate()
    session['username'] = user.name
    return LOGIN_OK, 200


@session_bp.route("/logout", methods=["POST"])
def logout():
    session.clear()
    return "Logout successful", 200


@session_bp.route("/me", methods=["GET"])
def me():
    return jsonify({"username": session.get('username')})


@session_bp.route("/register", methods=["POST"])
def register():
    data = json_body()
    name = text_field(data, "name", default="")
    password = text_field(data, "password", default="")
    email = normalize_email(data.get("email"))

    if not name or not email or not password:
        return jsonify({"error": "Name, email and password are required."}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({"error": "Email already registered."}), 409

    # self-registration always gets the plain role; others come from `flask create-user`
    user = User(name=name, email=email, role="user")
    user.set_password(data["password"])
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "Email already registered."}), 409

    current_app.logger.info("Registered user %s", user.email)
    return jsonify(user.to_dict()), 201
