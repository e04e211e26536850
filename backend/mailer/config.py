"""
Service configuration.
Reads provider credentials, sender identity and site URL from the environment.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_FROM_ADDRESS = "verification@smilefactory.co.zw"
DEFAULT_FROM_NAME = "SmileFactory"
DEFAULT_SITE_URL = "https://smilefactory.co.zw"
DEFAULT_PROVIDER = "resend"
DEFAULT_PROVIDER_URL = "https://api.resend.com"
DEFAULT_PROVIDER_TIMEOUT = 10.0


@dataclass(frozen=True)
class SenderIdentity:
    """Default 'from' identity used when a message carries no override."""

    address: str
    name: str

    def formatted(self) -> str:
        """Render as an RFC 5322 mailbox, e.g. ``SmileFactory <hi@example.com>``."""
        if not self.name:
            return self.address
        return f"{self.name} <{self.address}>"


@dataclass(frozen=True)
class MailerSettings:
    """
    Read-only configuration shared by every send.

    Instances are passed explicitly to the delivery client so that tests
    and multiple differently-configured clients can coexist.
    """

    api_key: Optional[str]
    sender: SenderIdentity
    site_url: str = DEFAULT_SITE_URL
    provider: str = DEFAULT_PROVIDER
    provider_url: str = DEFAULT_PROVIDER_URL
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    test_recipient: Optional[str] = None


def _parse_timeout(raw: Optional[str]) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_PROVIDER_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"EMAIL_PROVIDER_TIMEOUT must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"EMAIL_PROVIDER_TIMEOUT must be positive, got {raw!r}")
    return value


def load_settings() -> MailerSettings:
    """
    Build MailerSettings from environment variables.

    Environment variables
    ---------------------
    EMAIL_API_KEY            Provider credential. No default: a missing key
                             makes every send fail with a delivery error.
    EMAIL_FROM_ADDRESS       Default sender address.
    EMAIL_FROM_NAME          Default sender display name.
    SITE_URL                 Base URL linked from generated templates.
    EMAIL_PROVIDER           Provider registry key (default: "resend").
    EMAIL_PROVIDER_URL       Provider API base URL.
    EMAIL_PROVIDER_TIMEOUT   Seconds allowed per provider call (default: 10).
    TEST_EMAIL_RECIPIENT     Fallback recipient for POST /api/test-email.

    Raises:
        ValueError: If EMAIL_PROVIDER_TIMEOUT is not a positive number
    """
    return MailerSettings(
        api_key=os.getenv("EMAIL_API_KEY") or None,
        sender=SenderIdentity(
            address=os.getenv("EMAIL_FROM_ADDRESS", DEFAULT_FROM_ADDRESS),
            name=os.getenv("EMAIL_FROM_NAME", DEFAULT_FROM_NAME),
        ),
        site_url=os.getenv("SITE_URL", DEFAULT_SITE_URL).rstrip("/") or DEFAULT_SITE_URL,
        provider=os.getenv("EMAIL_PROVIDER", DEFAULT_PROVIDER).lower().strip(),
        provider_url=os.getenv("EMAIL_PROVIDER_URL", DEFAULT_PROVIDER_URL).rstrip("/"),
        provider_timeout=_parse_timeout(os.getenv("EMAIL_PROVIDER_TIMEOUT")),
        test_recipient=os.getenv("TEST_EMAIL_RECIPIENT") or None,
    )


def get_cors_origins() -> List[str]:
    """
    Build the list of allowed CORS origins.

    Read from the CORS_ORIGINS environment variable as a comma-separated list,
    e.g.:
        CORS_ORIGINS=https://smilefactory.co.zw,http://localhost:3000

    Defaults to ["*"] (any origin) when unset. Duplicates are removed while
    preserving order.
    """
    cors_env = os.getenv("CORS_ORIGINS", "").strip()
    if not cors_env:
        return ["*"]

    seen: set = set()
    origins: List[str] = []
    for origin in (o.strip() for o in cors_env.split(",")):
        if origin and origin not in seen:
            seen.add(origin)
            origins.append(origin)

    return origins or ["*"]
