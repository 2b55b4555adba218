"""
Authentication configuration.

All secrets are sourced from environment variables (recommended for Azure App
Service). This module validates presence of required settings and exposes a
single `init_auth(app)` entrypoint.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from flask import Flask

DEFAULT_GRAPH_SCOPE = "https://graph.microsoft.com/User.Read"
DEFAULT_ALLOWED_DOMAIN = "flyonit.com.au"


@dataclass(frozen=True)
class AuthSettings:
    """Configuration needed for Entra ID / MSAL auth."""

    tenant_id: str
    client_id: str
    client_secret: str
    redirect_uri: str
    graph_scope: str = DEFAULT_GRAPH_SCOPE
    app_uri: str = ""
    allowed_email_domain: str = DEFAULT_ALLOWED_DOMAIN
    login_scopes: list[str] = field(default_factory=lambda: ["User.Read"])

    @property
    def authority(self) -> str:
        return f"https://login.microsoftonline.com/{self.tenant_id}"

    @property
    def sso_resource(self) -> str:
        """Resource the Teams client asks an SSO token for."""
        return self.app_uri or f"api://{self.client_id}"


def load_auth_settings() -> AuthSettings:
    """
    Load auth settings from environment variables.

    Required:
      - AZURE_CLIENT_ID
      - AZURE_CLIENT_SECRET
      - AZURE_TENANT_ID
      - REDIRECT_URI

    Optional:
      - AZURE_API_SCOPE (default: Graph User.Read)
      - APP_URI (default: api://<client id>)
      - ALLOWED_EMAIL_DOMAIN (default: flyonit.com.au)
      - LOGIN_SCOPES (default: 'User.Read')
    """

    client_id = os.environ.get("AZURE_CLIENT_ID", "").strip()
    client_secret = os.environ.get("AZURE_CLIENT_SECRET", "").strip()
    tenant_id = os.environ.get("AZURE_TENANT_ID", "").strip()
    redirect_uri = os.environ.get("REDIRECT_URI", "").strip()

    missing = [
        k
        for k, v in [
            ("AZURE_CLIENT_ID", client_id),
            ("AZURE_CLIENT_SECRET", client_secret),
            ("AZURE_TENANT_ID", tenant_id),
            ("REDIRECT_URI", redirect_uri),
        ]
        if not v
    ]
    if missing:
        raise RuntimeError(
            "Missing required auth environment variables: "
            + ", ".join(missing)
            + ". Set them in Azure App Service Configuration (or your local env) before starting the app."
        )

    graph_scope = os.environ.get("AZURE_API_SCOPE", "").strip() or DEFAULT_GRAPH_SCOPE
    app_uri = os.environ.get("APP_URI", "").strip()
    allowed_email_domain = (
        os.environ.get("ALLOWED_EMAIL_DOMAIN", DEFAULT_ALLOWED_DOMAIN).strip().lower() or DEFAULT_ALLOWED_DOMAIN
    )

    scopes_raw = os.environ.get("LOGIN_SCOPES", "User.Read").strip()
    login_scopes = [s for s in scopes_raw.split() if s]

    return AuthSettings(
        tenant_id=tenant_id,
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uri,
        graph_scope=graph_scope,
        app_uri=app_uri,
        allowed_email_domain=allowed_email_domain,
        login_scopes=login_scopes,
    )


def init_auth(app: Flask, settings: AuthSettings | None = None) -> AuthSettings:
    """
    Validate and attach auth settings to Flask `app.config`.

    Returns the parsed `AuthSettings` for convenience.
    """

    settings = settings or load_auth_settings()
    app.config["AUTH_SETTINGS"] = settings
    return settings
