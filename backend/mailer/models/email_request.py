"""
Pydantic models for the /api/send-email and /api/test-email request bodies.

Field names follow the JSON the web frontend already sends (camelCase
``firstName``). Required-ness is checked by the router so that missing fields
produce a 400 with a readable message instead of a 422 validation dump.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EmailRequestData(BaseModel):
    """Recipient and optional content for a send-email request."""

    model_config = ConfigDict(populate_by_name=True)

    to: Optional[str] = None
    first_name: Optional[str] = Field(default=None, alias="firstName")
    subject: Optional[str] = None
    html: Optional[str] = None


class SendEmailRequest(BaseModel):
    """Request body for POST /api/send-email."""

    type: Optional[str] = None
    data: Optional[EmailRequestData] = None


class SendTestEmailRequest(BaseModel):
    """Request body for POST /api/test-email."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    first_name: str = Field(default="Test User", alias="firstName")
