"""
SMS providers.

Each provider implements `send(destinations, message) -> dict` and checks its
own configuration when called. Adding a provider means adding a subclass and
registering it in `PROVIDERS`; the dispatch code does not change.

Environment-derived settings come from `sms.config.SmsSettings`.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

import requests
from requests.auth import HTTPBasicAuth
from twilio.rest import Client

from .config import SmsSettings
from .phone import normalize_phone_number

logger = logging.getLogger(__name__)


class SmsError(Exception):
    """Base class for SMS sending failures."""


class ProviderConfigError(SmsError):
    """A provider is missing the configuration it needs."""


class GatewayError(SmsError):
    """An HTTP SMS gateway answered with a non-2xx status."""


class UnknownProviderError(SmsError):
    """No provider is registered under the requested name."""


class SmsProvider(ABC):
    """Base class: one implementation per SMS vendor."""

    name = ""
    # True when one call can carry every destination.
    batch = False

    @abstractmethod
    def send(self, destinations: list[str], message: str) -> dict[str, Any]:
        """Deliver `message` to `destinations`; raise `SmsError` on failure."""


class TwilioProvider(SmsProvider):
    """Send through the Twilio Messages API, one message per destination."""

    name = "twilio"

    def __init__(self, account_sid: str, auth_token: str, from_number: str, client: Client | None = None):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> Client:
        with self._lock:
            if self._client is None:
                if not (self.account_sid and self.auth_token):
                    raise ProviderConfigError("Twilio credentials not configured")
                self._client = Client(self.account_sid, self.auth_token)
            return self._client

    def send(self, destinations: list[str], message: str) -> dict[str, Any]:
        client = self.client
        if not self.from_number:
            raise ProviderConfigError("Twilio phone number not configured")

        sids = []
        for to in destinations:
            result = client.messages.create(body=message, to=to, from_=self.from_number)
            logger.info("Twilio accepted message %s", result.sid)
            sids.append(result.sid)

        if len(sids) == 1:
            return {"messageId": sids[0]}
        return {"messageIds": sids}


class HttpGatewayProvider(SmsProvider):
    """
    POST `{"message", "phoneNumbers"}` as JSON to an SMS gateway.

    HTTP Basic authentication is sent only when both username and password
    are configured.
    """

    batch = True
    label = "SMS Gateway"

    def __init__(self, url: str, username: str = "", password: str = "", timeout: int = 30):
        self.url = url
        self.username = username
        self.password = password
        self.timeout = timeout

    def endpoint(self) -> str:
        return self.url

    def format_numbers(self, destinations: list[str]) -> list[str]:
        return list(destinations)

    def send(self, destinations: list[str], message: str) -> dict[str, Any]:
        if not self.url:
            raise ProviderConfigError(f"{self.label} URL not configured")

        auth = HTTPBasicAuth(self.username, self.password) if self.username and self.password else None
        resp = requests.post(
            self.endpoint(),
            json={"message": message, "phoneNumbers": self.format_numbers(destinations)},
            auth=auth,
            timeout=self.timeout,
        )
        if not resp.ok:
            logger.error("%s returned %s: %s", self.label, resp.status_code, resp.text)
            raise GatewayError(f"{self.label} error: {resp.text}")

        return {"result": resp.json()}


class LocalGatewayProvider(HttpGatewayProvider):
    """SMS Gateway app running on the local network."""

    name = "local"
    label = "Local SMS Gateway"

    def endpoint(self) -> str:
        return f"{self.url.rstrip('/')}/message"


class CloudGatewayProvider(HttpGatewayProvider):
    """
    Cloud-hosted SMS Gateway.

    Every destination is reformatted as an Australian international number,
    including numbers that are already foreign; see `normalize_phone_number`.
    """

    name = "cloud"
    label = "Cloud SMS Gateway"

    def format_numbers(self, destinations: list[str]) -> list[str]:
        return [normalize_phone_number(n) for n in destinations]


def _twilio(s: SmsSettings) -> SmsProvider:
    return TwilioProvider(s.twilio_account_sid, s.twilio_auth_token, s.twilio_from_number)


def _local(s: SmsSettings) -> SmsProvider:
    return LocalGatewayProvider(s.local_gateway_url, s.local_username, s.local_password, timeout=s.request_timeout)


def _cloud(s: SmsSettings) -> SmsProvider:
    return CloudGatewayProvider(s.cloud_gateway_url, s.cloud_username, s.cloud_password, timeout=s.request_timeout)


PROVIDERS: dict[str, Callable[[SmsSettings], SmsProvider]] = {
    "twilio": _twilio,
    "local": _local,
    "cloud": _cloud,
}

PROVIDER_CHOICES = [
    ("twilio", "Twilio", "Send SMS via Twilio API (requires account)"),
    ("local", "Local SMS Gateway", "Send via local SMS Gateway app on the same network"),
    ("cloud", "Cloud SMS Gateway", "Send via cloud-hosted SMS Gateway service"),
]


def get_provider(name: str, settings: SmsSettings) -> SmsProvider:
    """Build the provider registered under `name`."""

    factory = PROVIDERS.get(name) if isinstance(name, str) else None
    if factory is None:
        raise UnknownProviderError(f"Invalid SMS provider: {name}")
    return factory(settings)
