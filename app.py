# app.py: Flask app factory: config from env/.env, DB, server-side sessions, session gate, CLI.
import os
import logging

import click
from dotenv import load_dotenv
from flask import Flask, jsonify
from sqlalchemy.exc import IntegrityError

from extensions import db, migrate, limiter
from routes import FieldError
from gate import register_session_gate
from session_store import DatabaseSessionInterface

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env_list(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_bool(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def create_app(test_config=None):
    load_dotenv(dotenv_path=os.path.join(BASE_DIR, ".env"))

    # -----------------------
    # App and config
    # -----------------------
    app = Flask(__name__)
    app.config.from_mapping(
        # Secret signs the session id cookie
        SECRET_KEY=os.environ.get("FLASK_SECRET") or "dev-secret-change-me",
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URI", f"sqlite:///{os.path.join(BASE_DIR, 'app.db')}"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        SESSION_COOKIE_HTTPONLY=True,
        LOGIN_RATE_LIMIT=os.environ.get("LOGIN_RATE_LIMIT", "10 per minute"),
        RATELIMIT_ENABLED=_env_bool("RATELIMIT_ENABLED", True),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
        GATE_PROTECTED_PATHS=_env_list("GATE_PROTECTED_PATHS", ["/issues", "/users", "/session"]),
        GATE_EXCLUDED_PATHS=_env_list("GATE_EXCLUDED_PATHS", ["/session/login", "/session/register"]),
    )
    if test_config:
        app.config.from_mapping(test_config)

    # Logging
    app.logger.setLevel(app.config["LOG_LEVEL"].upper())

    # -----------------------
    # Extensions
    # -----------------------
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    app.session_interface = DatabaseSessionInterface()

    # models must be imported so the tables are known to create_all / migrate
    import models  # noqa: F401
    from routes.session import session_bp
    from routes.issues import issues_bp
    from routes.users import users_bp

    register_session_gate(app)
    app.register_blueprint(session_bp)
    app.register_blueprint(issues_bp)
    app.register_blueprint(users_bp)

    register_error_handlers(app)
    register_commands(app)

    app.logger.debug("App created with database %s", app.config["SQLALCHEMY_DATABASE_URI"])
    return app


# -----------------------
# Error handlers
# -----------------------
def register_error_handlers(app):
    @app.errorhandler(429)
    def too_many_requests(e):
        return "Too many login attempts, try again later", 429

    @app.errorhandler(FieldError)
    def field_error(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(IntegrityError)
    def integrity_error(e):
        db.session.rollback()
        app.logger.exception("Integrity error")
        return jsonify({"error": "Conflicting data."}), 409


# -----------------------
# CLI: flask init-db / create-user / reset-password
# -----------------------
def register_commands(app):
    from models.user import User, normalize_email

    @app.cli.command("init-db")
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("create-user")
    @click.option("--name", required=True)
    @click.option("--email", required=True)
    @click.option("--password", required=True)
    @click.option("--role", default="user", show_default=True)
    def create_user(name, email, password, role):
        """Create a user that can log in."""
        email = normalize_email(email)
        if User.query.filter_by(email=email).first():
            raise click.ClickException(f"User already exists: {email}")
        user = User(name=name.strip(), email=email, role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created user {user.id}: {user.email}")

    @app.cli.command("reset-password")
    @click.argument("email")
    @click.argument("password")
    def reset_password(email, password):
        """Set a new password for an existing user."""
        user = User.query.filter_by(email=normalize_email(email)).first()
        if not user:
            raise click.ClickException(f"User not found: {email}")
        user.set_password(password)
        db.session.commit()
        click.echo(f"Password reset successful for: {user.email}")


# -----------------------
# Startup: create DB tables and print registered routes
# -----------------------
if __name__ == "__main__":
    app = create_app()
    logging.getLogger('werkzeug').setLevel(logging.INFO)
    with app.app_context():
        db.create_all()
        print("\n=== Registered routes ===")
        for rule in app.url_map.iter_rules():
            print(f"{rule.endpoint:30} -> {rule.rule}")
        print("=========================\n")
    app.run(debug=True, port=8080)
