"""
Bulk SMS sending from the SMS panel.

Gateways take the whole destination list in one request. Per-destination
providers (Twilio) get one request per number, issued concurrently; the
batch only succeeds if every request does. Nothing already sent is rolled
back when another request fails.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .providers import SmsProvider

logger = logging.getLogger(__name__)

NO_SIGNATURE = "No signature available. Please sign in."


@dataclass
class BulkResult:
    success: bool
    results: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.success:
            return f"Sent to {len(self.results)} request(s)."
        return "Failed to send messages: " + ", ".join(self.errors)


def send_bulk(provider: SmsProvider, destinations: list[str], message: str, max_workers: int = 8) -> BulkResult:
    """Send `message` to every destination and report aggregate success."""

    if provider.batch:
        batches = [list(destinations)]
    else:
        batches = [[d] for d in destinations]

    results: list[dict[str, Any]] = []
    errors: list[str] = []

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(batches) or 1))) as pool:
        futures = [pool.submit(provider.send, batch, message) for batch in batches]
        # Wait for every request to settle before reporting.
        for batch, future in zip(batches, futures):
            try:
                results.append(future.result())
            except Exception as exc:  # noqa: BLE001 - collected into the aggregate error
                logger.error("%s send to %s failed: %s", provider.name, ", ".join(batch), exc)
                errors.append(str(exc) or exc.__class__.__name__)

    return BulkResult(success=not errors, results=results, errors=errors)


def build_signature(name: str | None, email: str | None, now: datetime | None = None) -> str:
    """Signature block appended to outgoing messages when the user opts in."""

    if not name and not email:
        return NO_SIGNATURE
    now = now or datetime.now()
    return f"{name or 'User'}\n{email or 'email@example.com'}\nSent at: {now.strftime('%d/%m/%Y, %I:%M:%S %p')}"


def compose_message(message: str, signature: str | None) -> str:
    if not signature:
        return message
    return message + "\n\n" + signature
