"""
On-Behalf-Of (OBO) exchange for Microsoft Graph.

The Teams client hands us a short-lived SSO assertion. We exchange it with
MSAL for a Graph access token, use that token for exactly one `GET /me`, and
drop it. Tokens are never cached between requests and never returned to the
client.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from auth.config import AuthSettings
from auth.msal_auth import build_msal_app

logger = logging.getLogger(__name__)

GRAPH_ME_URL = "https://graph.microsoft.com/v1.0/me"

# MSAL error codes meaning the user must go through interactive consent.
CONSENT_ERROR_CODES = frozenset({"invalid_grant", "interaction_required"})


class OboError(Exception):
    """Base class for On-Behalf-Of flow failures."""


class ConsentRequiredError(OboError):
    """The identity provider wants the user to consent interactively."""

    def __init__(self, error_code: str, description: str | None = None):
        super().__init__(description or error_code)
        self.error_code = error_code
        self.description = description


class TokenAcquisitionError(OboError):
    """No access token came back from the OBO exchange."""


class GraphRequestError(OboError):
    """Graph answered with a non-2xx status."""

    def __init__(self, status_code: int, text: str):
        super().__init__(f"Graph API error {status_code}: {text}")
        self.status_code = status_code
        self.text = text


def acquire_graph_token(settings: AuthSettings, sso_token: str) -> str:
    """
    Exchange `sso_token` for a Graph access token.

    Raises
    ------
    ConsentRequiredError
        MSAL reported `invalid_grant` or `interaction_required`.
    TokenAcquisitionError
        Any other outcome without an access token.
    """

    msal_app = build_msal_app(settings)
    result = msal_app.acquire_token_on_behalf_of(
        user_assertion=sso_token,
        scopes=[settings.graph_scope],
    )

    if isinstance(result, dict) and result.get("access_token"):
        return result["access_token"]

    result = result if isinstance(result, dict) else {}
    error = result.get("error")
    description = result.get("error_description")
    logger.warning(
        "OBO exchange failed: %s (correlation_id=%s)",
        error or "no_access_token",
        result.get("correlation_id"),
    )
    if error in CONSENT_ERROR_CODES:
        raise ConsentRequiredError(error, description)
    raise TokenAcquisitionError(f"{error or 'no_access_token'}: {description or 'no access token returned'}")


def fetch_me(access_token: str, timeout: int = 30) -> dict[str, Any]:
    """Call Graph `GET /me` once with `access_token`."""

    resp = requests.get(
        GRAPH_ME_URL,
        headers={"Authorization": "Bearer " + access_token},
        timeout=timeout,
    )
    if not resp.ok:
        logger.error("Graph API error %s: %s", resp.status_code, resp.text)
        raise GraphRequestError(resp.status_code, resp.text)
    return resp.json()


def get_profile_on_behalf_of(settings: AuthSettings, sso_token: str) -> dict[str, Any]:
    """Exchange the SSO token and return the caller's Graph profile."""

    access_token = acquire_graph_token(settings, sso_token)
    return fetch_me(access_token)
