"""
Flask web app for KAPCHA, a Microsoft Teams tab for bulk SMS.

This version is prepared for Azure App Service deployment and includes:
  - Microsoft Entra ID sign-in via MSAL, Teams SSO + On-Behalf-Of (see `auth/`)
  - Graph profile lookup on behalf of the Teams user (see `graph/`)
  - SMS sending through Twilio or an SMS gateway (see `sms/`)
  - Server-side sessions (filesystem) via Flask-Session
"""

from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_session import Session
from werkzeug.exceptions import MethodNotAllowed
from werkzeug.middleware.proxy_fix import ProxyFix

from auth.config import AuthSettings, init_auth
from auth.identity import init_identity
from auth.routes import auth_bp
from dashboard.routes import dashboard_bp
from graph.routes import graph_bp
from sms.config import SmsSettings, init_sms
from sms.routes import sms_bp

__version__ = "0.3.0"

logger = logging.getLogger(__name__)


def create_app(
    test_config: dict[str, Any] | None = None,
    auth_settings: AuthSettings | None = None,
    sms_settings: SmsSettings | None = None,
) -> Flask:
    """
    Build the Flask app.

    Configuration is read from the environment once, here, and attached to
    `app.config`; handlers never read the environment themselves.
    """

    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)

    # Respect proxy headers (Azure App Service sits behind a reverse proxy).
    # This makes url_for(..., _external=True) generate correct https URLs.
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)  # type: ignore[assignment]

    # ---- Security / Sessions ----
    # Server-side sessions (filesystem). Simple and adequate for a single-instance Web App.
    app.config.update(
        SECRET_KEY=os.environ.get("FLASK_SECRET_KEY", ""),
        SESSION_TYPE="filesystem",
        SESSION_PERMANENT=False,
        SESSION_USE_SIGNER=True,
        SESSION_COOKIE_HTTPONLY=True,
        # Teams loads the tab in an iframe, so the cookie must be cross-site.
        SESSION_COOKIE_SAMESITE="None",
        SESSION_COOKIE_SECURE=os.environ.get("FLASK_COOKIE_SECURE", "true").lower() == "true",
        SESSION_FILE_DIR=os.environ.get("FLASK_SESSION_DIR") or os.path.join(os.getcwd(), ".flask_session"),
    )
    if test_config:
        app.config.update(test_config)

    # Secrets must NOT be committed. In Azure App Service, set this in Configuration.
    if not app.config.get("SECRET_KEY"):
        raise RuntimeError(
            "Missing FLASK_SECRET_KEY. Set it as an environment variable in Azure App Service "
            "(Configuration) or in your local environment before starting."
        )

    if app.config.get("SESSION_TYPE") == "filesystem":
        os.makedirs(app.config["SESSION_FILE_DIR"], exist_ok=True)
    if app.config.get("SESSION_TYPE"):
        Session(app)

    # ---- Settings ----
    init_auth(app, auth_settings)
    init_sms(app, sms_settings)
    init_identity(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(graph_bp)
    app.register_blueprint(sms_bp)
    app.register_blueprint(dashboard_bp)

    @app.context_processor
    def inject_globals() -> dict[str, Any]:
        return {"current_year": date.today().year, "app_version": __version__}

    @app.errorhandler(MethodNotAllowed)
    def method_not_allowed(exc: MethodNotAllowed):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Method not allowed"}), 405
        return exc

    logger.info("KAPCHA v%s ready", __version__)
    return app


if __name__ == "__main__":
    create_app().run(debug=True, port=5050)
