"""
Dashboard routes.

Every panel is gated by `domain_required`; the login page is the only thing
served to signed-out users.
"""

from __future__ import annotations

import logging

from flask import Blueprint, redirect, render_template, request, url_for

from auth.decorators import domain_required
from auth.identity import current_identity
from auth.msal_auth import auth_settings, safe_next_url
from sms.bulk import build_signature, compose_message, send_bulk
from sms.config import sms_settings
from sms.phone import dedupe_numbers
from sms.providers import PROVIDER_CHOICES, UnknownProviderError, get_provider

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint("dashboard", __name__)

MENU_ITEMS = [
    ("dashboard.chat", "Teams Chat"),
    ("dashboard.contacts", "Contact Profiles"),
    ("dashboard.sms", "SMS"),
    ("dashboard.users", "User Management"),
    ("dashboard.profile", "My Profile"),
]


@dashboard_bp.app_context_processor
def inject_menu():
    return {"menu_items": MENU_ITEMS}


@dashboard_bp.get("/")
def index():
    next_url = safe_next_url(request.args.get("next"))
    if current_identity() is None:
        s = auth_settings()
        return render_template(
            "login.html",
            next_url=next_url,
            allowed_domain=s.allowed_email_domain,
            sso_resource=s.sso_resource,
        )
    return redirect(next_url or url_for("dashboard.sms"))


def _signature() -> str:
    identity = current_identity()
    if identity is None:
        return build_signature(None, None)
    return build_signature(identity.name, identity.email)


@dashboard_bp.route("/sms", methods=["GET", "POST"])
@domain_required
def sms():
    settings = sms_settings()
    context = {
        "providers": PROVIDER_CHOICES,
        "selected_provider": settings.default_provider,
        "numbers": [],
        "message": "",
        "use_signature": False,
        "signature_preview": _signature(),
        "status": "idle",
        "error": None,
    }
    if request.method == "GET":
        return render_template("sms.html", **context)

    provider_name = request.form.get("provider") or settings.default_provider
    numbers = dedupe_numbers(request.form.get("numbers", "").splitlines())
    message = request.form.get("message", "")
    use_signature = request.form.get("signature") == "on"
    context.update(
        selected_provider=provider_name,
        numbers=numbers,
        message=message,
        use_signature=use_signature,
    )

    if not numbers:
        context.update(status="error", error="Please add at least one phone number")
        return render_template("sms.html", **context), 400
    if not message.strip():
        context.update(status="error", error="Please enter a message")
        return render_template("sms.html", **context), 400

    try:
        provider = get_provider(provider_name, settings)
    except UnknownProviderError:
        context.update(status="error", error="Invalid SMS provider selected")
        return render_template("sms.html", **context), 400

    outgoing = compose_message(message, _signature() if use_signature else None)
    result = send_bulk(provider, numbers, outgoing, max_workers=settings.max_workers)
    if not result.success:
        context.update(status="error", error=result.message)
        return render_template("sms.html", **context), 500

    logger.info("Sent SMS via %s to %d number(s)", provider.name, len(numbers))
    context.update(status="success", numbers=[], message="")
    return render_template("sms.html", **context)


@dashboard_bp.get("/profile")
@domain_required
def profile():
    identity = current_identity()
    return render_template("profile.html", identity=identity, profile=identity.profile if identity else {})


@dashboard_bp.get("/chat")
@domain_required
def chat():
    return render_template("placeholder.html", title="Teams Chat", feature="Chat Integration")


@dashboard_bp.get("/contacts")
@domain_required
def contacts():
    return render_template("placeholder.html", title="Contact Profiles", feature="Contact Management")


@dashboard_bp.get("/users")
@domain_required
def users():
    return render_template("placeholder.html", title="User Management", feature="User Management")
