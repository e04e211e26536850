#!/usr/bin/env python3
"""
Dev helper: send test emails through a running mailer backend.

Builds a /api/send-email request for each recipient and POST-s it to the
service, which renders the content and forwards it to the email provider.

Usage
-----
# Welcome email to one recipient, targeting localhost:8000
python scripts/send_test_email.py --to jane@example.com

# Personalised greeting
python scripts/send_test_email.py --to jane@example.com --first-name Jane

# Several recipients, paced 0.5s apart
python scripts/send_test_email.py --to a@example.com --to b@example.com --delay 0.5

# Custom email with an HTML body read from a file
python scripts/send_test_email.py --type custom --to jane@example.com \\
    --subject "Your account is ready" --html-file body.html

# Print the request bodies without sending
python scripts/send_test_email.py --to jane@example.com --dry-run

Environment / .env
------------------
TEST_EMAIL_RECIPIENT   Used when no --to is given.
MAILER_URL             Backend base URL (default: http://localhost:8000).
                       Overridden by --url flag.
"""

import argparse
import json
import os
import sys
import textwrap
import time
from pathlib import Path

import httpx
from dotenv import load_dotenv

_DEFAULT_CUSTOM_HTML = """\
<div style="max-width: 600px; margin: 0 auto; font-family: Arial, sans-serif;">
  <h2 style="color: #0D8A3E;">Test email</h2>
  <p>This is a custom test email sent from scripts/send_test_email.py.</p>
</div>
"""


# ---------------------------------------------------------------------------
# Request builders
# ---------------------------------------------------------------------------

def _build_welcome_request(to: str, first_name: str | None, **_: object) -> dict:
    data = {"to": to}
    if first_name:
        data["firstName"] = first_name
    return {"type": "welcome", "data": data}


def _build_custom_request(to: str, subject: str, html: str, **_: object) -> dict:
    return {"type": "custom", "data": {"to": to, "subject": subject, "html": html}}


_REQUEST_BUILDERS = {
    "welcome": _build_welcome_request,
    "custom": _build_custom_request,
}


# ---------------------------------------------------------------------------
# Pretty printer
# ---------------------------------------------------------------------------

def _print_response(response: httpx.Response) -> None:
    status = response.status_code
    symbol = "OK" if status == 200 else "FAIL"
    print(f"[{symbol}] HTTP {status}")
    try:
        print(json.dumps(response.json(), indent=2))
    except ValueError:
        print(response.text)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    # scripts/ lives one level below the project root
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    load_dotenv(project_root / "backend" / ".env")

    parser = argparse.ArgumentParser(
        prog="send_test_email.py",
        description=textwrap.dedent("""\
            Send welcome or custom test emails through the mailer backend.

            Reads TEST_EMAIL_RECIPIENT and MAILER_URL from the environment
            or a .env file in the project root.
        """),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/send_test_email.py --to jane@example.com
              python scripts/send_test_email.py --to a@example.com --to b@example.com
              python scripts/send_test_email.py --type custom --to jane@example.com --subject Hi
              python scripts/send_test_email.py --url http://localhost:3001 --dry-run
        """),
    )
    parser.add_argument(
        "--url",
        default=os.getenv("MAILER_URL", "http://localhost:8000"),
        help="Backend base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--type",
        dest="email_type",
        default="welcome",
        choices=list(_REQUEST_BUILDERS),
        help="Email type to send (default: welcome)",
    )
    parser.add_argument(
        "--to",
        action="append",
        default=None,
        metavar="ADDRESS",
        help="Recipient address. Repeat for several recipients.",
    )
    parser.add_argument(
        "--first-name",
        default=None,
        help='Greeting name for welcome emails (server default: "there")',
    )
    parser.add_argument(
        "--subject",
        default="Test email",
        help='Subject for custom emails (default: "Test email")',
    )
    parser.add_argument(
        "--html-file",
        default=None,
        metavar="PATH",
        help="HTML body for custom emails. A small sample body is used if omitted.",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=0.2,
        metavar="SECONDS",
        help="Pause between recipients (default: 0.2)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the request bodies without sending them.",
    )

    args = parser.parse_args()

    recipients = args.to or [r for r in [os.getenv("TEST_EMAIL_RECIPIENT")] if r]
    if not recipients:
        print(
            "ERROR: No recipient.\n"
            "Pass --to ADDRESS or set TEST_EMAIL_RECIPIENT in your environment or .env file.",
            file=sys.stderr,
        )
        return 1

    html = _DEFAULT_CUSTOM_HTML
    if args.html_file:
        html_path = Path(args.html_file)
        if not html_path.exists():
            print(f"ERROR: File not found: {html_path}", file=sys.stderr)
            return 1
        html = html_path.read_text()

    endpoint = f"{args.url.rstrip('/')}/api/send-email"
    builder = _REQUEST_BUILDERS[args.email_type]

    print(f"Type      : {args.email_type}")
    print(f"Endpoint  : {endpoint}")
    print(f"Recipients: {', '.join(recipients)}")

    failures = 0
    for index, recipient in enumerate(recipients):
        body = builder(
            to=recipient,
            first_name=args.first_name,
            subject=args.subject,
            html=html,
        )

        print(f"\n--> {recipient}")
        if args.dry_run:
            print("[DRY RUN] Request body:")
            print(json.dumps(body, indent=2))
            continue

        if index > 0 and args.delay > 0:
            time.sleep(args.delay)

        try:
            response = httpx.post(endpoint, json=body, timeout=30)
        except httpx.ConnectError:
            print(
                f"\nERROR: Could not connect to {endpoint}\n"
                "Is the backend running? Start it with:\n"
                "  cd backend && uvicorn mailer.main:app --reload",
                file=sys.stderr,
            )
            return 1
        except httpx.HTTPError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            failures += 1
            continue

        _print_response(response)
        if response.status_code != 200:
            failures += 1

    if not args.dry_run:
        print(f"\n{len(recipients) - failures}/{len(recipients)} sent")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
