"""
Route decorators for authentication/authorization.

- `domain_required`: user must be signed in with an allowed email domain.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Callable, TypeVar

from flask import redirect, render_template, request, session, url_for

from .identity import current_identity
from .msal_auth import auth_settings, is_allowed_email

F = TypeVar("F", bound=Callable[..., object])

logger = logging.getLogger(__name__)


def domain_required(fn: F) -> F:
    """Ensure user is signed in and their identifier ends with the allowed domain."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[no-untyped-def]
        identity = current_identity()
        if identity is None:
            return redirect(url_for("dashboard.index", next=request.path))

        allowed = auth_settings().allowed_email_domain
        if is_allowed_email(identity.email, allowed):
            return fn(*args, **kwargs)

        logger.warning("Denied %s (%s): outside @%s", identity.email, identity.host, allowed)
        # The Teams host owns its sign-in; only browser sessions are signed out.
        if not identity.in_teams:
            session.clear()
        return (
            render_template(
                "access_denied.html",
                email=identity.email,
                allowed_domain=allowed,
                in_teams=identity.in_teams,
            ),
            403,
        )

    return wrapper  # type: ignore[return-value]
