import pytest
from fastapi.testclient import TestClient

from whisperbox.database.config.config import Settings
from whisperbox.database.core.mailer import DeliveryResult
from whisperbox.main import create_app


class FakeMailer:
    """Records verification codes instead of sending them."""

    def __init__(self):
        self.sent = []
        self.fail = False
        self.on_send = None

    async def send_verification_email(self, email, username, code):
        if self.on_send is not None:
            self.on_send(email, username)
        if self.fail:
            return DeliveryResult(False, "Failed to send verification email")
        self.sent.append({"email": email, "username": username, "code": code})
        return DeliveryResult(True, "Verification email sent successfully")

    def code_for(self, username):
        for entry in reversed(self.sent):
            if entry["username"] == username:
                return entry["code"]
        raise AssertionError(f"no code sent to {username}")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret-key",
        DATABASE_URL=f"sqlite:///{tmp_path / 'whisperbox.db'}",
        COOKIE_SECURE=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(settings, mailer):
    app = create_app(settings, mailer=mailer)
    yield app
    app.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db(app):
    session = app.state.sessionmaker()
    yield session
    session.close()


def register(client, username="alice", email="a@x.com", password="secret1"):
    return client.post("/accounts", json={"username": username, "email": email, "password": password})


def verify(client, mailer, username="alice"):
    return client.post("/accounts/verify", json={"username": username, "code": mailer.code_for(username)})


def sign_in(client, identifier="alice", password="secret1"):
    return client.post("/sessions", json={"identifier": identifier, "password": password})


@pytest.fixture
def alice(client, mailer):
    """A verified, signed-in account named alice."""
    assert register(client).status_code == 201
    assert verify(client, mailer).status_code == 200
    response = sign_in(client)
    assert response.status_code == 200
    return response.json()["user_details"]
