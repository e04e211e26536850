"""
Delivery client: validates an envelope and hands it to the email provider.

send() never raises. Every outcome comes back as a SendSuccess or SendFailure
so callers (the HTTP routes, scripts) only branch on data.
"""

import logging

from mailer.config import MailerSettings
from mailer.models.email import (
    EmailMessage,
    FailureKind,
    SendFailure,
    SendResult,
    SendSuccess,
)
from mailer.services.content import strip_html_to_plain_text
from mailer.services.providers import EmailProvider, ProviderError

logger = logging.getLogger(__name__)

GENERIC_DELIVERY_ERROR = "Email delivery failed"

_REQUIRED_FIELDS = ("recipient", "subject", "html_body")


class DeliveryClient:
    """
    Sends one EmailMessage per call through an EmailProvider.

    Holds only read-only settings and a provider; safe to share across
    concurrent requests.
    """

    def __init__(self, settings: MailerSettings, provider: EmailProvider):
        self.settings = settings
        self.provider = provider

    def build_payload(self, message: EmailMessage) -> dict:
        """Map an envelope onto the provider-neutral payload."""
        return {
            "from": message.sender_override or self.settings.sender.formatted(),
            "to": [message.recipient],
            "subject": message.subject,
            "html": message.html_body,
            "text": strip_html_to_plain_text(message.html_body),
        }

    def send(self, message: EmailMessage) -> SendResult:
        """
        Validate and send a single email.

        Returns:
            SendSuccess with the provider's message id, or SendFailure with
            kind=VALIDATION (nothing sent) or kind=DELIVERY (provider failed)
        """
        missing = [name for name in _REQUIRED_FIELDS if not getattr(message, name)]
        if missing:
            return SendFailure(
                error_message=f"Missing required fields: {', '.join(missing)}",
                kind=FailureKind.VALIDATION,
            )

        payload = self.build_payload(message)

        try:
            response = self.provider.send(payload)
        except ProviderError as exc:
            logger.error(
                f"Email provider rejected send to {message.recipient} "
                f"(status={exc.status_code}): {exc.message}"
            )
            return SendFailure(error_message=exc.message or GENERIC_DELIVERY_ERROR)
        except Exception as exc:
            logger.exception(f"Unexpected error sending email to {message.recipient}")
            return SendFailure(error_message=str(exc) or GENERIC_DELIVERY_ERROR)

        message_id = response.get("id") if isinstance(response, dict) else None
        if not message_id:
            error = response.get("error") if isinstance(response, dict) else None
            if isinstance(error, dict):
                error = error.get("message")
            logger.error(
                f"Email provider response for {message.recipient} had no message id: {response!r}"
            )
            return SendFailure(
                error_message=str(error) if error else "Email provider did not return a message id"
            )

        logger.info(f"Email sent to {message.recipient} (id={message_id})")
        return SendSuccess(provider_message_id=str(message_id))
