"""
Provider-agnostic outbound email models.

EmailMessage is the envelope handed to the delivery client; SendSuccess and
SendFailure are the only shapes that come back out of it.
"""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


class EmailContent(BaseModel):
    """Generated subject/body pair for one email type."""

    subject: str
    html: str


class EmailMessage(BaseModel):
    """
    One email to send.

    Required fields may still be None or empty here: the delivery client
    reports those as validation failures rather than raising on construction.
    """

    model_config = ConfigDict(frozen=True)

    recipient: Optional[str] = None
    subject: Optional[str] = None
    html_body: Optional[str] = None
    sender_override: Optional[str] = None


class FailureKind(str, Enum):
    VALIDATION = "validation"
    DELIVERY = "delivery"


class SendSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: Literal[True] = True
    provider_message_id: str


class SendFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: Literal[False] = False
    error_message: str
    kind: FailureKind = FailureKind.DELIVERY

    @property
    def is_validation_error(self) -> bool:
        return self.kind is FailureKind.VALIDATION


SendResult = Union[SendSuccess, SendFailure]
