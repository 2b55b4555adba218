"""
MSAL helpers.

This wraps MSAL (Microsoft Authentication Library) setup for Entra ID
authentication. Browsers use the OAuth2 Authorization Code Flow; the Teams
tab exchanges its SSO token with the On-Behalf-Of flow (see `graph.obo`).
"""

from __future__ import annotations

import secrets
from typing import Any

import msal
from flask import Flask, current_app

from .config import AuthSettings


def auth_settings(app: Flask | None = None) -> AuthSettings:
    app = app or current_app  # type: ignore[assignment]
    settings = app.config.get("AUTH_SETTINGS")
    if not isinstance(settings, AuthSettings):
        raise RuntimeError("Auth settings not initialized. Call auth.config.init_auth(app) during app startup.")
    return settings


def build_msal_app(settings: AuthSettings | None = None) -> msal.ConfidentialClientApplication:
    """
    Create an MSAL confidential client app.

    Every call gets its own empty token cache, so no token outlives the
    request that acquired it.
    """

    s = settings or auth_settings()
    return msal.ConfidentialClientApplication(
        client_id=s.client_id,
        client_credential=s.client_secret,
        authority=s.authority,
        token_cache=msal.TokenCache(),
    )


def new_state_token() -> str:
    """Generate a cryptographically secure state token for CSRF protection."""

    return secrets.token_urlsafe(32)


def get_email_from_claims(claims: dict[str, Any] | None) -> str | None:
    """
    Extract an email/UPN-like identifier from ID token claims.

    Entra ID commonly uses:
      - preferred_username (often UPN/email)
      - email
      - upn
    """

    if not claims:
        return None
    for key in ("preferred_username", "email", "upn"):
        val = claims.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return None


def is_allowed_email(email: str | None, allowed_domain: str) -> bool:
    """True when `email` belongs to the organization's domain."""

    if not email:
        return False
    return email.strip().lower().endswith("@" + allowed_domain.lower())


def safe_next_url(target: str | None) -> str | None:
    """Return `target` only when it is a path on this site, else None."""

    # Browsers treat "//host" and "/\host" as other origins.
    if not isinstance(target, str) or not target.startswith("/"):
        return None
    if target.startswith("//") or target.startswith("/\\"):
        return None
    return target
