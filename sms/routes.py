"""
SMS API routes.

Endpoints:
  - POST /api/send-sms   body: {to: str | [str], message: str, provider?: str}
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from .config import sms_settings
from .providers import ProviderConfigError, UnknownProviderError, get_provider

logger = logging.getLogger(__name__)

sms_bp = Blueprint("sms", __name__, url_prefix="/api")


@sms_bp.post("/send-sms")
def send_sms():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    to = data.get("to")
    message = data.get("message")

    if not to or not message:
        return jsonify({"error": "Phone number and message are required"}), 400

    destinations = to if isinstance(to, list) else [to]
    settings = sms_settings()
    provider_name = data.get("provider") or settings.default_provider

    try:
        provider = get_provider(provider_name, settings)
    except UnknownProviderError:
        return jsonify({"error": "Invalid SMS provider"}), 400

    try:
        result = provider.send([str(d) for d in destinations], message)
    except ProviderConfigError as exc:
        logger.error("SMS provider %s is not configured: %s", provider_name, exc)
        return jsonify({"error": str(exc)}), 500
    except Exception as exc:  # noqa: BLE001 - surfaced to the caller with details
        logger.exception("SMS sending error")
        return jsonify({"error": "Failed to send SMS", "details": str(exc)}), 500

    return jsonify({"success": True, **result, "provider": provider.name}), 200
