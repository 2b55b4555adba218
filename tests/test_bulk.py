"""Tests for bulk SMS sending and signatures."""

import threading
from datetime import datetime
from typing import Any

from sms.bulk import NO_SIGNATURE, build_signature, compose_message, send_bulk
from sms.providers import GatewayError, SmsProvider


class FakeProvider(SmsProvider):
    """Records calls; fails for destinations listed in `failing`."""

    name = "fake"

    def __init__(self, batch: bool = False, failing: dict[str, str] | None = None):
        self.batch = batch
        self.failing = failing or {}
        self.calls: list[list[str]] = []
        self._lock = threading.Lock()

    def send(self, destinations: list[str], message: str) -> dict[str, Any]:
        with self._lock:
            self.calls.append(list(destinations))
        for d in destinations:
            if d in self.failing:
                raise GatewayError(self.failing[d])
        return {"sent": list(destinations)}


class TestSendBulk:
    """Tests for send_bulk()."""

    def test_per_destination_fan_out(self) -> None:
        provider = FakeProvider()
        result = send_bulk(provider, ["0412", "0413", "0414"], "hi")

        assert result.success
        assert sorted(c[0] for c in provider.calls) == ["0412", "0413", "0414"]
        assert all(len(c) == 1 for c in provider.calls)
        assert len(result.results) == 3

    def test_batch_provider_gets_one_call(self) -> None:
        provider = FakeProvider(batch=True)
        result = send_bulk(provider, ["0412", "0413"], "hi")

        assert result.success
        assert provider.calls == [["0412", "0413"]]

    def test_one_failure_fails_the_batch(self) -> None:
        provider = FakeProvider(failing={"0413": "Twilio error: invalid number 0413"})
        result = send_bulk(provider, ["0412", "0413", "0414", "0415"], "hi", max_workers=4)

        assert not result.success
        assert result.errors == ["Twilio error: invalid number 0413"]
        assert result.message.startswith("Failed to send messages: ")
        assert "invalid number 0413" in result.message
        # Every request still went out; nothing is rolled back.
        assert len(provider.calls) == 4
        assert len(result.results) == 3

    def test_all_errors_are_concatenated(self) -> None:
        provider = FakeProvider(failing={"a": "first", "b": "second"})
        result = send_bulk(provider, ["a", "b"], "hi")

        assert result.message == "Failed to send messages: first, second"


class TestSignature:
    """Tests for build_signature() and compose_message()."""

    def test_signature_lines(self) -> None:
        when = datetime(2025, 3, 4, 14, 5, 6)
        sig = build_signature("Jo Citizen", "jo@flyonit.com.au", when)
        assert sig == "Jo Citizen\njo@flyonit.com.au\nSent at: 04/03/2025, 02:05:06 PM"

    def test_without_identity(self) -> None:
        assert build_signature(None, None) == NO_SIGNATURE

    def test_compose(self) -> None:
        assert compose_message("Hello", "Sig") == "Hello\n\nSig"
        assert compose_message("Hello", None) == "Hello"
