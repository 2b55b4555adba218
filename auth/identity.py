"""
Per-request identity context.

Whether the caller sits inside the Teams host or a plain browser, and who
they are, is resolved once per request from the session and stored on
`flask.g`. Views, decorators and templates read `current_identity()` instead
of re-deriving it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flask import Flask, g, session

HOST_TEAMS = "teams"
HOST_BROWSER = "browser"


@dataclass(frozen=True)
class Identity:
    email: str
    name: str
    host: str = HOST_BROWSER
    profile: dict[str, Any] = field(default_factory=dict)

    @property
    def in_teams(self) -> bool:
        return self.host == HOST_TEAMS


def session_user(email: str, name: str | None, host: str, profile: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the minimal user record kept in the server-side session."""

    return {
        "name": name or email,
        "email": email,
        "host": host,
        "profile": profile or {},
    }


def resolve_identity() -> Identity | None:
    user = session.get("user")
    if not isinstance(user, dict) or not user.get("email"):
        return None
    return Identity(
        email=user["email"],
        name=user.get("name") or user["email"],
        host=HOST_TEAMS if user.get("host") == HOST_TEAMS else HOST_BROWSER,
        profile=dict(user.get("profile") or {}),
    )


def current_identity() -> Identity | None:
    return g.get("identity")


def init_identity(app: Flask) -> None:
    """Register the request hook and template context for the identity."""

    @app.before_request
    def load_identity() -> None:
        g.identity = resolve_identity()

    @app.context_processor
    def inject_identity() -> dict[str, Any]:
        return {"current_user": current_identity()}
