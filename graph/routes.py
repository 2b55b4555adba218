"""
Graph API routes.

Endpoints:
  - POST /api/graph/getGraphProfileOnBehalfOf

Implementation notes:
  - The Teams SSO token is exchanged server-side (OBO); the Graph token never
    leaves this process.
  - `invalid_grant` / `interaction_required` map to a 401 `consent_required`
    so the client can open the interactive consent popup.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from auth.msal_auth import auth_settings

from .obo import ConsentRequiredError, GraphRequestError, TokenAcquisitionError, get_profile_on_behalf_of

logger = logging.getLogger(__name__)

graph_bp = Blueprint("graph", __name__, url_prefix="/api/graph")


def obo_error_response(exc: Exception):
    """Translate an OBO/Graph failure into the JSON response the client expects."""

    if isinstance(exc, ConsentRequiredError):
        return (
            jsonify(
                {
                    "error": "consent_required",
                    "message": "User consent required for Graph permissions",
                }
            ),
            401,
        )
    if isinstance(exc, TokenAcquisitionError):
        return jsonify({"error": "Failed to acquire token"}), 401
    if isinstance(exc, GraphRequestError):
        return jsonify({"error": "Error calling Graph API", "details": exc.text}), exc.status_code

    logger.exception("OBO flow error")
    return jsonify({"error": "Internal server error", "message": str(exc) or "Unknown error"}), 500


@graph_bp.post("/getGraphProfileOnBehalfOf")
def get_graph_profile_on_behalf_of():
    """Exchange `ssoToken` for a Graph token and return `/me`."""

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    sso_token = data.get("ssoToken")
    if not sso_token:
        return jsonify({"error": "SSO token is required"}), 400

    try:
        profile = get_profile_on_behalf_of(auth_settings(), sso_token)
    except Exception as exc:  # noqa: BLE001 - every failure is reported to the caller
        return obo_error_response(exc)

    return jsonify(profile), 200
