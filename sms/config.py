"""
SMS provider configuration.

Environment variables (all optional; each provider checks its own settings
when it is used):
  - TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN / TWILIO_PHONE_NUMBER
  - LOCAL_SMS_GATEWAY_URL / LOCAL_SMS_USERNAME / LOCAL_SMS_PASSWORD
  - CLOUD_SMS_GATEWAY_URL / CLOUD_SMS_USERNAME / CLOUD_SMS_PASSWORD
  - SMS_DEFAULT_PROVIDER (default: twilio)
  - SMS_REQUEST_TIMEOUT (seconds, default: 30)
  - SMS_MAX_WORKERS (default: 8)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from flask import Flask, current_app


def _env(name: str, default: str = "") -> str:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip() or default


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True)
class SmsSettings:
    """Credentials and endpoints for every SMS provider."""

    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_from_number: str = ""
    local_gateway_url: str = ""
    local_username: str = ""
    local_password: str = ""
    cloud_gateway_url: str = ""
    cloud_username: str = ""
    cloud_password: str = ""
    default_provider: str = "twilio"
    request_timeout: int = 30
    max_workers: int = 8

    @staticmethod
    def from_env() -> "SmsSettings":
        return SmsSettings(
            twilio_account_sid=_env("TWILIO_ACCOUNT_SID"),
            twilio_auth_token=_env("TWILIO_AUTH_TOKEN"),
            twilio_from_number=_env("TWILIO_PHONE_NUMBER"),
            local_gateway_url=_env("LOCAL_SMS_GATEWAY_URL"),
            local_username=_env("LOCAL_SMS_USERNAME"),
            local_password=_env("LOCAL_SMS_PASSWORD"),
            cloud_gateway_url=_env("CLOUD_SMS_GATEWAY_URL"),
            cloud_username=_env("CLOUD_SMS_USERNAME"),
            cloud_password=_env("CLOUD_SMS_PASSWORD"),
            default_provider=_env("SMS_DEFAULT_PROVIDER", "twilio").lower(),
            request_timeout=_env_int("SMS_REQUEST_TIMEOUT", 30),
            max_workers=_env_int("SMS_MAX_WORKERS", 8),
        )


def init_sms(app: Flask, settings: SmsSettings | None = None) -> SmsSettings:
    """Attach SMS settings to `app.config`."""

    settings = settings or SmsSettings.from_env()
    app.config["SMS_SETTINGS"] = settings
    return settings


def sms_settings() -> SmsSettings:
    settings = current_app.config.get("SMS_SETTINGS")
    if not isinstance(settings, SmsSettings):
        raise RuntimeError("SMS settings not initialized. Call sms.config.init_sms(app) at startup.")
    return settings
