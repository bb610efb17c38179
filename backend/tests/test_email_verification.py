"""Tests for the email verification endpoints."""

from app.constants import AuthProvider
from app.models.user import User
from tests.conftest import create_user


def _register(test_client, email="new@example.com", nick="newbie"):
    return test_client.post(
        "/api/auth/register",
        json={"email": email, "nick": nick, "password": "Secure123"},
    )


def test_verify_email_success(auth_client, mailer):
    test_client, db_session_maker = auth_client
    _register(test_client)
    token = mailer.send_verification_email.call_args.args[2]

    response = test_client.post("/api/auth/verify-email", json={"token": token})

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "new@example.com"
    db = db_session_maker()
    assert db.query(User).filter_by(email="new@example.com").one().email_verified is True
    db.close()


def test_verify_email_invalid_token(auth_client):
    test_client, _ = auth_client

    response = test_client.post("/api/auth/verify-email", json={"token": "invalid"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid or expired token"}


def test_verify_email_token_reuse(auth_client, mailer):
    test_client, _ = auth_client
    _register(test_client)
    token = mailer.send_verification_email.call_args.args[2]

    test_client.post("/api/auth/verify-email", json={"token": token})
    response = test_client.post("/api/auth/verify-email", json={"token": token})

    assert response.status_code == 400


def test_resend_verification(auth_client, mailer):
    test_client, _ = auth_client
    _register(test_client)
    first = mailer.send_verification_email.call_args.args[2]

    response = test_client.post("/api/auth/resend-verification", json={"email": "new@example.com"})

    assert response.status_code == 200
    second = mailer.send_verification_email.call_args.args[2]
    assert second != first
    assert test_client.post("/api/auth/verify-email", json={"token": first}).status_code == 400
    assert test_client.post("/api/auth/verify-email", json={"token": second}).status_code == 200


def test_resend_verification_unknown_email(auth_client):
    test_client, _ = auth_client

    response = test_client.post(
        "/api/auth/resend-verification", json={"email": "nobody@example.com"}
    )

    assert response.status_code == 404


def test_resend_verification_already_verified(auth_client):
    test_client, db_session_maker = auth_client
    create_user(db_session_maker, "done@example.com", "done")

    response = test_client.post("/api/auth/resend-verification", json={"email": "done@example.com"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Email already verified"}


def test_resend_verification_external_account(auth_client):
    test_client, db_session_maker = auth_client
    create_user(
        db_session_maker,
        "g@example.com",
        "guser",
        email_verified=False,
        provider=AuthProvider.GOOGLE,
    )

    response = test_client.post("/api/auth/resend-verification", json={"email": "g@example.com"})

    assert response.status_code == 400


def test_resend_verification_rate_limited(auth_client):
    test_client, _ = auth_client
    body = {"email": "nobody@example.com"}

    statuses = [
        test_client.post("/api/auth/resend-verification", json=body).status_code for _ in range(4)
    ]

    assert statuses == [404, 404, 404, 429]
