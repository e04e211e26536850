"""
Unit tests for the delivery client.

The provider is replaced with in-process fakes. Covers validation, payload
construction, success/failure normalisation and concurrent sends.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from mailer.config import MailerSettings, SenderIdentity
from mailer.models.email import EmailMessage, FailureKind, SendFailure, SendSuccess
from mailer.services.delivery import GENERIC_DELIVERY_ERROR, DeliveryClient
from mailer.services.providers import ProviderError


def _make_settings(**overrides) -> MailerSettings:
    values = {
        "api_key": "re_test_key",
        "sender": SenderIdentity(address="verification@smilefactory.co.zw", name="SmileFactory"),
    }
    values.update(overrides)
    return MailerSettings(**values)


def _make_message(**overrides) -> EmailMessage:
    values = {"recipient": "a@b.com", "subject": "s", "html_body": "<p>hi</p>"}
    values.update(overrides)
    return EmailMessage(**values)


def _make_client(provider) -> DeliveryClient:
    return DeliveryClient(_make_settings(), provider)


class TestValidation:
    """Missing or empty envelope fields fail without a provider call."""

    @pytest.mark.parametrize("field", ["recipient", "subject", "html_body"])
    @pytest.mark.parametrize("value", ["", None])
    def test_missing_field_is_validation_failure(self, field, value):
        provider = Mock()
        client = _make_client(provider)

        result = client.send(_make_message(**{field: value}))

        assert isinstance(result, SendFailure)
        assert result.kind is FailureKind.VALIDATION
        assert field in result.error_message
        provider.send.assert_not_called()

    def test_empty_recipient_example(self):
        provider = Mock()

        result = _make_client(provider).send(
            EmailMessage(recipient="", subject="x", html_body="y")
        )

        assert isinstance(result, SendFailure)
        assert result.is_validation_error
        provider.send.assert_not_called()

    def test_all_missing_fields_are_listed(self):
        result = _make_client(Mock()).send(EmailMessage())

        assert result.error_message == "Missing required fields: recipient, subject, html_body"

    def test_no_address_format_check(self):
        """Anything non-empty is handed to the provider."""
        provider = Mock()
        provider.send.return_value = {"id": "x1"}

        result = _make_client(provider).send(_make_message(recipient="not-an-address"))

        assert isinstance(result, SendSuccess)


class TestPayload:
    """What the provider receives."""

    def test_payload_uses_default_sender_and_text_fallback(self):
        provider = Mock()
        provider.send.return_value = {"id": "abc123"}

        _make_client(provider).send(_make_message(html_body="<h1>Hi</h1><p>Bye</p>"))

        provider.send.assert_called_once_with(
            {
                "from": "SmileFactory <verification@smilefactory.co.zw>",
                "to": ["a@b.com"],
                "subject": "s",
                "html": "<h1>Hi</h1><p>Bye</p>",
                "text": "Hi Bye",
            }
        )

    def test_sender_override_wins(self):
        provider = Mock()
        provider.send.return_value = {"id": "abc123"}

        _make_client(provider).send(_make_message(sender_override="Ops <ops@example.com>"))

        payload = provider.send.call_args[0][0]
        assert payload["from"] == "Ops <ops@example.com>"

    def test_sender_without_name_is_bare_address(self):
        provider = Mock()
        provider.send.return_value = {"id": "abc123"}
        settings = _make_settings(sender=SenderIdentity(address="bare@example.com", name=""))

        DeliveryClient(settings, provider).send(_make_message())

        assert provider.send.call_args[0][0]["from"] == "bare@example.com"


class TestProviderOutcome:
    """Provider responses and errors normalise to SendSuccess/SendFailure."""

    def test_success_returns_provider_id(self):
        provider = Mock()
        provider.send.return_value = {"id": "abc123"}

        result = _make_client(provider).send(_make_message())

        assert result == SendSuccess(provider_message_id="abc123")
        provider.send.assert_called_once()

    def test_provider_error_becomes_delivery_failure(self, caplog):
        provider = Mock()
        provider.send.side_effect = ProviderError("API key is invalid", status_code=401)

        with caplog.at_level("ERROR", logger="mailer.services.delivery"):
            result = _make_client(provider).send(_make_message())

        assert isinstance(result, SendFailure)
        assert result.kind is FailureKind.DELIVERY
        assert result.error_message == "API key is invalid"
        assert "API key is invalid" in caplog.text
        assert "status=401" in caplog.text

    def test_unexpected_exception_is_caught(self, caplog):
        provider = Mock()
        provider.send.side_effect = RuntimeError("socket exploded")

        with caplog.at_level("ERROR", logger="mailer.services.delivery"):
            result = _make_client(provider).send(_make_message())

        assert isinstance(result, SendFailure)
        assert result.kind is FailureKind.DELIVERY
        assert result.error_message == "socket exploded"
        assert "RuntimeError" in caplog.text

    def test_exception_without_text_gets_generic_message(self):
        provider = Mock()
        provider.send.side_effect = TimeoutError()

        result = _make_client(provider).send(_make_message())

        assert result.error_message == GENERIC_DELIVERY_ERROR

    def test_error_in_response_body(self):
        provider = Mock()
        provider.send.return_value = {"error": {"message": "Domain not verified"}}

        result = _make_client(provider).send(_make_message())

        assert isinstance(result, SendFailure)
        assert result.error_message == "Domain not verified"

    def test_response_without_id(self):
        provider = Mock()
        provider.send.return_value = {}

        result = _make_client(provider).send(_make_message())

        assert isinstance(result, SendFailure)
        assert result.kind is FailureKind.DELIVERY
        assert "message id" in result.error_message


class _BarrierProvider:
    """Fake provider that holds each call until both concurrent sends arrive."""

    def __init__(self, parties: int = 2):
        self.barrier = threading.Barrier(parties, timeout=5)

    def send(self, payload: dict) -> dict:
        self.barrier.wait()
        recipient = payload["to"][0]
        return {"id": f"id-{recipient}"}


class TestConcurrentSends:
    def test_two_sends_in_flight_return_their_own_results(self):
        client = _make_client(_BarrierProvider())
        messages = [
            _make_message(recipient="first@example.com"),
            _make_message(recipient="second@example.com"),
        ]

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(client.send, messages))

        assert results == [
            SendSuccess(provider_message_id="id-first@example.com"),
            SendSuccess(provider_message_id="id-second@example.com"),
        ]

    def test_failure_in_one_send_does_not_affect_the_other(self):
        class _Provider:
            def send(self, payload):
                if payload["to"][0] == "bad@example.com":
                    raise ProviderError("rejected")
                return {"id": "ok-1"}

        client = _make_client(_Provider())

        with ThreadPoolExecutor(max_workers=2) as pool:
            good = pool.submit(client.send, _make_message(recipient="good@example.com"))
            bad = pool.submit(client.send, _make_message(recipient="bad@example.com"))

        assert good.result() == SendSuccess(provider_message_id="ok-1")
        assert bad.result() == SendFailure(error_message="rejected")
