"""
Auth routes (MSAL / Entra ID / Teams SSO).

Endpoints:
  - GET  /auth/login
  - GET  /auth/callback
  - GET  /auth/redirect
  - GET  /auth/logout
  - GET  /auth/start
  - POST /auth/teams

Implementation notes:
  - Browsers use MSAL Authorization Code Flow.
  - Inside Teams the tab posts its SSO token to /auth/teams, which runs the
    On-Behalf-Of exchange and reads the user from Graph.
  - Stores a minimal user profile in the server-side session.
  - Enforces the allowed email domain before any session is created.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import requests
from flask import Blueprint, jsonify, redirect, render_template, request, session, url_for

from graph.obo import OboError, fetch_me, get_profile_on_behalf_of
from graph.profile import graph_email, merge_profile
from graph.routes import obo_error_response

from .identity import HOST_BROWSER, HOST_TEAMS, session_user
from .msal_auth import (
    auth_settings,
    build_msal_app,
    get_email_from_claims,
    is_allowed_email,
    new_state_token,
    safe_next_url,
)

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _deny(email: str, allowed: str, in_teams: bool):
    session.clear()
    return (
        render_template("access_denied.html", email=email, allowed_domain=allowed, in_teams=in_teams),
        403,
    )


@auth_bp.get("/login")
def login():
    """
    Start the login flow by redirecting the user to Microsoft.

    Optional query param:
      - next: where to redirect after successful login
    """

    s = auth_settings()
    msal_app = build_msal_app()

    state = new_state_token()
    session["auth_state"] = state
    session["post_login_redirect"] = safe_next_url(request.args.get("next")) or url_for("dashboard.index")

    auth_url = msal_app.get_authorization_request_url(
        scopes=s.login_scopes,
        state=state,
        redirect_uri=s.redirect_uri,
        prompt="select_account",
    )
    return redirect(auth_url)


@auth_bp.get("/callback")
def callback():
    """Handle the OAuth2 redirect from Microsoft and create a local session."""

    # CSRF check
    expected_state = session.get("auth_state")
    received_state = request.args.get("state")
    if not expected_state or expected_state != received_state:
        session.clear()
        return "Authentication failed (invalid state). Please try again.", 400

    code = request.args.get("code")
    if not code:
        # Azure sends error params when login fails/cancelled.
        error = request.args.get("error")
        desc = request.args.get("error_description")
        session.clear()
        return f"Authentication failed: {error or 'unknown_error'}\n\n{desc or ''}", 400

    s = auth_settings()
    msal_app = build_msal_app()

    result = msal_app.acquire_token_by_authorization_code(
        code=code,
        scopes=s.login_scopes,
        redirect_uri=s.redirect_uri,
    )

    if not isinstance(result, dict) or "error" in result:
        result = result if isinstance(result, dict) else {}
        session.clear()
        return f"Authentication failed: {result.get('error')} - {result.get('error_description')}", 400

    claims = result.get("id_token_claims") or {}
    email = get_email_from_claims(claims)
    if not email:
        session.clear()
        return "Authentication failed: no email claim returned by identity provider.", 400

    allowed = s.allowed_email_domain
    if not is_allowed_email(email, allowed):
        # Deny and sign out of our app session (user can still be signed into Microsoft).
        logger.warning("Denied browser sign-in for %s: outside @%s", email, allowed)
        return _deny(email, allowed, in_teams=False)

    profile = {
        "displayName": claims.get("name") or email,
        "userPrincipalName": email,
        "id": claims.get("oid"),
        "tenantName": claims.get("tid"),
    }
    access_token = result.get("access_token")
    if access_token:
        try:
            profile = merge_profile(profile, fetch_me(access_token))
        except (OboError, requests.RequestException, ValueError) as exc:
            # The profile panel falls back to the ID token claims.
            logger.warning("Could not load Graph profile for %s: %s", email, exc)

    session["user"] = session_user(email, claims.get("name"), HOST_BROWSER, profile)
    session.pop("auth_state", None)

    next_url = safe_next_url(session.pop("post_login_redirect", None)) or url_for("dashboard.index")
    return redirect(next_url)


@auth_bp.get("/redirect")
def redirect_landing():
    """Post-login landing page; sends the user back to the dashboard."""

    return redirect(url_for("dashboard.index"))


@auth_bp.get("/logout")
def logout():
    """
    Clear the local session and redirect to Microsoft logout.

    This ensures users are fully signed out from Entra ID when desired.
    """

    s = auth_settings()
    session.clear()

    post_logout_redirect = url_for("dashboard.index", _external=True)
    logout_url = f"{s.authority}/oauth2/v2.0/logout?{urlencode({'post_logout_redirect_uri': post_logout_redirect})}"
    return redirect(logout_url)


@auth_bp.get("/start")
def start():
    """Teams authentication popup: fetch an SSO token and hand it back to the tab."""

    return render_template("auth_start.html", sso_resource=auth_settings().sso_resource)


@auth_bp.post("/teams")
def teams_sign_in():
    """Create a session from a Teams SSO token (OBO exchange + Graph `/me`)."""

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    sso_token = data.get("ssoToken")
    if not sso_token:
        return jsonify({"error": "SSO token is required"}), 400

    s = auth_settings()
    try:
        me = get_profile_on_behalf_of(s, sso_token)
    except Exception as exc:  # noqa: BLE001 - every failure is reported to the caller
        return obo_error_response(exc)

    email = graph_email(me)
    if not is_allowed_email(email, s.allowed_email_domain):
        logger.warning("Denied Teams sign-in for %s: outside @%s", email, s.allowed_email_domain)
        session.clear()
        return (
            jsonify(
                {
                    "error": "access_denied",
                    "message": f"Access is limited to @{s.allowed_email_domain} users only.",
                    "email": email,
                }
            ),
            403,
        )

    session["user"] = session_user(email, me.get("displayName"), HOST_TEAMS, merge_profile({}, me))
    return jsonify({"success": True, "redirect": url_for("dashboard.index")}), 200
