"""
Email content generation.

Builds subject/HTML pairs for the built-in email types and derives a
plain-text fallback from HTML bodies.

Public API:
  generate_welcome_email(recipient_email, display_name, site_url) -> EmailContent
  strip_html_to_plain_text(html) -> str
"""

import re
from typing import Optional

from mailer.config import DEFAULT_SITE_URL
from mailer.models.email import EmailContent

WELCOME_SUBJECT = "Welcome to SmileFactory!"
DEFAULT_DISPLAY_NAME = "there"

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

# Placeholders: {display_name}, {site_url}. Filled with str.replace, not format().
_WELCOME_TEMPLATE = """\
<!DOCTYPE html>
<html>
  <body style="margin: 0; padding: 0;">
    <div style="max-width: 600px; margin: 0 auto; font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
      <div style="background: linear-gradient(135deg, #0D8A3E 0%, #0a6b31 100%); color: white; padding: 40px 30px; text-align: center; border-radius: 8px 8px 0 0;">
        <h1 style="margin: 0; font-size: 28px; font-weight: bold;">Welcome to SmileFactory!</h1>
        <p style="margin: 10px 0 0 0; font-size: 16px; opacity: 0.9;">We're excited to have you on board</p>
      </div>

      <div style="background: #f8f9fa; padding: 40px 30px; border-radius: 0 0 8px 8px;">
        <div style="background: white; padding: 30px; border-radius: 6px; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
          <h2 style="color: #0D8A3E; margin-top: 0;">Hello {display_name}!</h2>

          <p>Thank you for joining SmileFactory. We're thrilled to welcome you to our community of innovators and creators.</p>

          <div style="background: #e8f5e8; padding: 20px; border-radius: 6px; margin: 25px 0; border-left: 4px solid #0D8A3E;">
            <h3 style="margin-top: 0; color: #0D8A3E;">&#128640; What's Next?</h3>
            <ul style="margin: 10px 0; padding-left: 20px;">
              <li>Explore our platform features</li>
              <li>Connect with other members</li>
              <li>Start your first project</li>
              <li>Join our community discussions</li>
            </ul>
          </div>

          <div style="text-align: center; margin: 30px 0;">
            <a href="{site_url}"
               style="background-color: #0D8A3E; color: white; padding: 15px 30px;
                      text-decoration: none; border-radius: 6px; font-weight: bold;
                      display: inline-block;">
              Get Started Now
            </a>
          </div>

          <p style="color: #666; font-size: 14px; margin-bottom: 0;">
            If you have any questions, feel free to reach out to our support team. We're here to help!
          </p>
        </div>

        <div style="text-align: center; margin-top: 30px; color: #666; font-size: 14px;">
          <p>Best regards,<br><strong>The SmileFactory Team</strong></p>
          <p style="margin-top: 20px;">
            <a href="{site_url}" style="color: #0D8A3E; text-decoration: none;">{site_url}</a>
          </p>
        </div>
      </div>
    </div>
  </body>
</html>
"""


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------

def generate_welcome_email(
    recipient_email: str,
    display_name: Optional[str] = DEFAULT_DISPLAY_NAME,
    site_url: str = DEFAULT_SITE_URL,
) -> EmailContent:
    """
    Generate the welcome email for a newly registered user.

    The display name is interpolated as-is; callers that accept names from
    untrusted input and need escaping must do it before calling.

    Args:
        recipient_email: Recipient address (not part of the body today, kept
            so every generator shares the same call shape)
        display_name: Name used in the greeting. None, empty or
            whitespace-only names fall back to "there".
        site_url: Link target for the call-to-action and footer

    Returns:
        EmailContent with the fixed welcome subject and the rendered HTML
    """
    if not display_name or not display_name.strip():
        display_name = DEFAULT_DISPLAY_NAME

    # site_url first so a display name containing "{site_url}" stays literal
    html = _WELCOME_TEMPLATE.replace("{site_url}", site_url).replace(
        "{display_name}", display_name
    )
    return EmailContent(subject=WELCOME_SUBJECT, html=html)


def strip_html_to_plain_text(html: Optional[str]) -> str:
    """
    Reduce an HTML body to readable plain text for the text/plain part.

    Removes anything shaped like a tag, collapses whitespace to single spaces
    and trims. This is a regex strip, not a parser: text inside <script> or
    <style> blocks is kept, and a stray '<' without a closing '>' is left
    as-is.

    >>> strip_html_to_plain_text("<h1>Hi</h1><p>Bye</p>")
    'Hi Bye'
    """
    if not html:
        return ""
    text = _TAG_RE.sub(" ", html)
    return _WHITESPACE_RE.sub(" ", text).strip()
