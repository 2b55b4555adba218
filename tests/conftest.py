"""Shared pytest fixtures: app, client and session helpers."""

from pathlib import Path
from typing import Any

import pytest
from flask import Flask
from flask.testing import FlaskClient

from app import create_app
from auth.config import AuthSettings
from auth.identity import HOST_BROWSER, session_user
from sms.config import SmsSettings

ALLOWED_DOMAIN = "flyonit.com.au"


@pytest.fixture
def auth_settings() -> AuthSettings:
    return AuthSettings(
        tenant_id="tenant-123",
        client_id="client-abc",
        client_secret="s3cret",
        redirect_uri="http://localhost/auth/callback",
        graph_scope="https://graph.microsoft.com/User.Read",
        app_uri="api://localhost/client-abc",
        allowed_email_domain=ALLOWED_DOMAIN,
    )


@pytest.fixture
def sms_settings() -> SmsSettings:
    return SmsSettings(
        twilio_account_sid="AC123",
        twilio_auth_token="token",
        twilio_from_number="+15005550006",
        local_gateway_url="http://192.168.1.20:8080",
        local_username="sms",
        local_password="pass",
        cloud_gateway_url="https://api.sms-gate.example/3rdparty/v1/message",
        cloud_username="cloud",
        cloud_password="cloudpass",
    )


@pytest.fixture
def app(auth_settings: AuthSettings, sms_settings: SmsSettings, tmp_path: Path) -> Flask:
    return create_app(
        test_config={
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            # Plain signed-cookie sessions keep the tests off the filesystem.
            "SESSION_TYPE": None,
            "SESSION_FILE_DIR": str(tmp_path / "sessions"),
            "SESSION_COOKIE_SECURE": False,
            "SESSION_COOKIE_SAMESITE": "Lax",
        },
        auth_settings=auth_settings,
        sms_settings=sms_settings,
    )


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()


def sign_in(client: FlaskClient, email: str, host: str = HOST_BROWSER, **profile: Any) -> None:
    """Put a signed-in user into the test client's session."""
    with client.session_transaction() as sess:
        sess["user"] = session_user(email, profile.get("displayName"), host, profile)
