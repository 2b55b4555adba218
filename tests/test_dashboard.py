"""Tests for the SMS panel form."""

from unittest.mock import MagicMock, patch

from flask.testing import FlaskClient

from conftest import sign_in


def _twilio_create(failing: set[str]):
    def create(body: str, to: str, from_: str) -> MagicMock:
        if to in failing:
            raise RuntimeError(f"Unable to create record: The 'To' number {to} is not a valid phone number.")
        return MagicMock(sid=f"SM-{to}")

    return create


class TestSmsPanel:
    """Tests for POST /sms."""

    def test_requires_a_number(self, client: FlaskClient) -> None:
        sign_in(client, "jo@flyonit.com.au")
        resp = client.post("/sms", data={"provider": "twilio", "numbers": " \n", "message": "hi"})
        assert resp.status_code == 400
        assert "Please add at least one phone number" in resp.get_data(as_text=True)

    def test_invalid_provider(self, client: FlaskClient) -> None:
        sign_in(client, "jo@flyonit.com.au")
        resp = client.post("/sms", data={"provider": "fax", "numbers": "0412", "message": "hi"})
        assert resp.status_code == 400

    def test_bulk_twilio_success_dedupes(self, client: FlaskClient) -> None:
        sign_in(client, "jo@flyonit.com.au")
        with patch("sms.providers.Client") as client_cls:
            client_cls.return_value.messages.create.side_effect = _twilio_create(set())
            resp = client.post(
                "/sms",
                data={"provider": "twilio", "numbers": "0412000001\n0412000002\n0412000001", "message": "hi"},
            )

        assert resp.status_code == 200
        assert "Messages sent successfully!" in resp.get_data(as_text=True)
        sent_to = sorted(c.kwargs["to"] for c in client_cls.return_value.messages.create.call_args_list)
        assert sent_to == ["0412000001", "0412000002"]

    def test_bulk_twilio_one_failure_fails_batch(self, client: FlaskClient) -> None:
        sign_in(client, "jo@flyonit.com.au")
        with patch("sms.providers.Client") as client_cls:
            client_cls.return_value.messages.create.side_effect = _twilio_create({"0412000002"})
            resp = client.post(
                "/sms",
                data={"provider": "twilio", "numbers": "0412000001\n0412000002\n0412000003", "message": "hi"},
            )

        assert resp.status_code == 500
        body = resp.get_data(as_text=True)
        assert "Failed to send messages:" in body
        assert "0412000002 is not a valid phone number" in body
        assert client_cls.return_value.messages.create.call_count == 3

    def test_signature_is_appended(self, client: FlaskClient) -> None:
        sign_in(client, "jo@flyonit.com.au", displayName="Jo Citizen")
        ok = MagicMock(ok=True, status_code=200, text="")
        ok.json.return_value = {"id": "1"}
        with patch("sms.providers.requests.post", return_value=ok) as post:
            resp = client.post(
                "/sms",
                data={"provider": "cloud", "numbers": "0412345678", "message": "Gate 4", "signature": "on"},
            )

        assert resp.status_code == 200
        payload = post.call_args.kwargs["json"]
        assert payload["phoneNumbers"] == ["+61412345678"]
        assert payload["message"].startswith("Gate 4\n\nJo Citizen\njo@flyonit.com.au\nSent at: ")
