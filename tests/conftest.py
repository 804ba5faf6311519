import pytest

from app import create_app
from extensions import db
from models.user import User

TEST_CONFIG = {
    "TESTING": True,
    "SECRET_KEY": "test-secret",
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "RATELIMIT_ENABLED": False,
    "LOG_LEVEL": "DEBUG",
}


def make_app(**overrides):
    config = dict(TEST_CONFIG)
    config.update(overrides)
    app = create_app(config)
    with app.app_context():
        db.create_all()
    return app


@pytest.fixture
def app():
    app = make_app()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_factory():
    """Build extra apps with config overrides; torn down after the test."""
    created = []

    def factory(**overrides):
        app = make_app(**overrides)
        created.append(app)
        return app

    yield factory
    for app in created:
        with app.app_context():
            db.session.remove()
            db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    """A registered user: Ada / ada@example.com / s3cret."""
    with app.app_context():
        u = User(name="Ada", email="ada@example.com", role="admin")
        u.set_password("s3cret")
        db.session.add(u)
        db.session.commit()
        return u.to_dict()


def _login(client, email="ada@example.com", password="s3cret"):
    return client.post("/session/login", json={"email": email, "password": password})


@pytest.fixture
def login():
    return _login


@pytest.fixture
def auth_client(client, user):
    resp = _login(client)
    assert resp.status_code == 200
    return client
