"""
Outbound email provider adapters.

Each provider exposes one capability, ``send(payload) -> dict``, taking a
provider-neutral payload:

  from      str        — "Name <address>" or bare address
  to        list[str]  — recipients
  subject   str
  html      str
  text      str        — plain-text fallback

and returning the provider's JSON response, which must carry an ``id``.
Failures of any kind are raised as ProviderError.

Supported providers:
  - resend   (default; https://resend.com/docs/api-reference/emails/send-email)

Adding a new provider:
  1. Write a class with a send(payload: dict) -> dict method.
  2. Register a factory for it in _PROVIDERS.
  3. Set EMAIL_PROVIDER=<provider> in the environment.
"""

import logging
from typing import Callable, Optional, Protocol

import httpx

from mailer.config import DEFAULT_PROVIDER_TIMEOUT, DEFAULT_PROVIDER_URL, MailerSettings

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """The provider could not be reached or rejected the send."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class EmailProvider(Protocol):
    def send(self, payload: dict) -> dict:
        ...


# ---------------------------------------------------------------------------
# Resend
# ---------------------------------------------------------------------------

def _error_message_from_response(response: httpx.Response) -> str:
    """
    Pull a human-readable message out of a Resend error response.

    Resend error bodies look like:
      {"statusCode": 422, "name": "validation_error", "message": "..."}
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message:
            return message

    return f"Email provider returned HTTP {response.status_code}"


class ResendProvider:
    """
    Resend REST API client.

    A new httpx.Client is opened per call, so one instance can be shared by
    concurrent requests without sharing connection state.
    """

    name = "resend"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_PROVIDER_URL,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def send(self, payload: dict) -> dict:
        """
        POST the payload to Resend's /emails endpoint.

        Returns:
            Parsed JSON body, e.g. {"id": "49a3999c-0ce1-4ea6-ab68-afcd6dc2e794"}

        Raises:
            ProviderError: If no API key is configured, the request fails at
                the network level, or Resend answers with a 4xx/5xx status
        """
        if not self.api_key:
            raise ProviderError("Email provider API key is not configured (EMAIL_API_KEY)")

        url = f"{self.base_url}/emails"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.debug(f"POST {url} to={payload.get('to')}")

        try:
            with httpx.Client(transport=self._transport, timeout=self.timeout) as client:
                response = client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Could not reach email provider: {exc}") from exc

        if response.status_code >= 400:
            raise ProviderError(
                _error_message_from_response(response),
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderError("Email provider returned a non-JSON response") from exc

        if not isinstance(body, dict):
            raise ProviderError("Email provider returned an unexpected response")

        return body


# ---------------------------------------------------------------------------
# Registry and dispatcher
# ---------------------------------------------------------------------------

def _build_resend(settings: MailerSettings) -> EmailProvider:
    return ResendProvider(
        api_key=settings.api_key,
        base_url=settings.provider_url,
        timeout=settings.provider_timeout,
    )


_PROVIDERS: dict[str, Callable[[MailerSettings], EmailProvider]] = {
    "resend": _build_resend,
}


def get_provider(settings: MailerSettings, name: str | None = None) -> EmailProvider:
    """
    Build the provider named by the argument or by settings.provider.

    Priority:
      1. name argument (explicit, used in tests)
      2. settings.provider (EMAIL_PROVIDER env var, default "resend")

    Raises ValueError for unknown provider names.
    """
    resolved = (name or settings.provider or "resend").lower().strip()

    factory = _PROVIDERS.get(resolved)
    if factory is None:
        raise ValueError(
            f"Unknown email provider {resolved!r}. "
            f"Supported providers: {sorted(_PROVIDERS)}"
        )

    return factory(settings)
