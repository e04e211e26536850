"""
Email sending API endpoints.

Endpoints:
  POST /send-email   — send a "welcome" or "custom" email
  POST /test-email   — send a welcome email to a test recipient

The routes only select content and map SendResult onto HTTP status codes:
  SendSuccess                    → 200
  SendFailure(kind=validation)   → 400
  SendFailure(kind=delivery)     → 500
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from mailer.config import MailerSettings, load_settings
from mailer.models.email import EmailContent, EmailMessage, SendFailure, SendResult
from mailer.models.email_request import SendEmailRequest, SendTestEmailRequest
from mailer.services.content import generate_welcome_email
from mailer.services.delivery import DeliveryClient
from mailer.services.providers import get_provider

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_settings() -> MailerSettings:
    return load_settings()


def get_delivery_client(settings: MailerSettings = Depends(get_settings)) -> DeliveryClient:
    """Build a DeliveryClient for the configured provider."""
    return DeliveryClient(settings, get_provider(settings))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _raise_for_failure(result: SendResult) -> None:
    """Raise the HTTPException matching a SendFailure; no-op on success."""
    if isinstance(result, SendFailure):
        status_code = 400 if result.is_validation_error else 500
        raise HTTPException(status_code=status_code, detail=result.error_message)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post(
    "/send-email",
    responses={
        200: {
            "description": "Email accepted by the provider",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": {
                            "id": "49a3999c-0ce1-4ea6-ab68-afcd6dc2e794",
                            "to": "jane@example.com",
                            "subject": "Welcome to SmileFactory!",
                        },
                    }
                }
            },
        },
        400: {"description": "Missing fields or unknown email type"},
        500: {"description": "Email provider rejected the send or was unreachable"},
    },
)
def send_email(
    request: SendEmailRequest,
    settings: MailerSettings = Depends(get_settings),
    delivery: DeliveryClient = Depends(get_delivery_client),
):
    """
    Send a welcome or custom email.

    Body: {"type": "welcome" | "custom", "data": {"to", "firstName"?, "subject"?, "html"?}}

    Custom emails require data.subject and data.html. Welcome emails ignore
    them and use the built-in template.
    """
    data = request.data
    if not request.type or data is None or not data.to:
        raise HTTPException(status_code=400, detail="Missing required fields: type, data.to")

    logger.info(f"send-email request: type={request.type} to={data.to}")

    if request.type == "welcome":
        content = generate_welcome_email(data.to, data.first_name, site_url=settings.site_url)
    elif request.type == "custom":
        if not data.subject or not data.html:
            raise HTTPException(
                status_code=400,
                detail="Custom emails require subject and html fields",
            )
        content = EmailContent(subject=data.subject, html=data.html)
    else:
        raise HTTPException(
            status_code=400,
            detail='Invalid email type. Use "welcome" or "custom"',
        )

    result = delivery.send(
        EmailMessage(recipient=data.to, subject=content.subject, html_body=content.html)
    )
    _raise_for_failure(result)

    return {
        "success": True,
        "data": {
            "id": result.provider_message_id,
            "to": data.to,
            "subject": content.subject,
        },
    }


@router.post("/test-email")
def send_test_email(
    request: Optional[SendTestEmailRequest] = None,
    settings: MailerSettings = Depends(get_settings),
    delivery: DeliveryClient = Depends(get_delivery_client),
):
    """
    Send the welcome email to a test address.

    Uses body.email, falling back to TEST_EMAIL_RECIPIENT.
    """
    request = request or SendTestEmailRequest()
    recipient = request.email or settings.test_recipient
    if not recipient:
        raise HTTPException(
            status_code=400,
            detail="No test recipient: pass email or set TEST_EMAIL_RECIPIENT",
        )

    content = generate_welcome_email(recipient, request.first_name, site_url=settings.site_url)
    result = delivery.send(
        EmailMessage(recipient=recipient, subject=content.subject, html_body=content.html)
    )
    _raise_for_failure(result)

    return {
        "success": True,
        "message": f"Test email sent to {recipient}",
        "data": {"id": result.provider_message_id},
    }
