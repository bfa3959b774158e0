import structlog
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from finance_tracker.database import get_session
from finance_tracker.main import app
from finance_tracker.services.email import EmailService


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_unexpected_errors_are_opaque_and_still_logged():
    def broken_session():
        raise RuntimeError("database is on fire")
        yield  # pragma: no cover

    app.dependency_overrides[get_session] = broken_session
    process_logger = app.state.logger
    try:
        with capture_logs() as logs:
            app.state.logger = structlog.get_logger()
            client = TestClient(app, raise_server_exceptions=False)
            resp = client.post("/auth/login", json={"email": "a@example.com", "password": "secret123"})
    finally:
        app.state.logger = process_logger
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}
    assert "fire" not in resp.text

    [completed] = [e for e in logs if e["event"] == "request_completed"]
    assert completed["status_code"] == 500
    assert completed["path"] == "/auth/login"


def test_email_stub_logs_instead_of_sending():
    with capture_logs() as logs:
        EmailService(structlog.get_logger(), sender="bot@example.com").send(
            to="alice@example.com", subject="Hello", message="Hi there"
        )

    [event] = logs
    assert event["event"] == "email_sent"
    assert event["to"] == "alice@example.com"
    assert event["sender"] == "bot@example.com"
