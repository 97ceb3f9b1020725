"""Outbound email relay backed by the SendGrid REST API."""

from __future__ import annotations

import html
import json
import logging
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Category, CustomArg, Mail

from app.config import get_settings
from app.domain.entities import OutboundEmail
from app.domain.exceptions import RelayError

logger = logging.getLogger(__name__)

_FOOTER = "This email was sent from your practice management system."


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                field = item.get("field")
                if message and field:
                    messages.append(f"{message} (field: {field})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_failure(status_code: Any, details: str | None) -> str:
    if status_code and details:
        return f"SendGrid request failed with status {status_code}: {details}"
    if status_code:
        return f"SendGrid request failed with status {status_code}"
    if details:
        return f"SendGrid request failed: {details}"
    return "SendGrid request failed"


def render_email_html(message: OutboundEmail) -> str:
    """Render the HTML body shared by every notification template."""

    body = html.escape(message.body).replace("\n", "<br>")
    return "".join(
        (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">',
            f"<h2>{html.escape(message.subject)}</h2>",
            f'<div class="{html.escape(message.template_type)}">{body}</div>',
            f'<p style="color: #666; font-size: 12px;">{_FOOTER}</p>',
            "</div>",
        )
    )


def build_mail(message: OutboundEmail, *, sender: str, sender_name: str) -> Mail:
    mail = Mail(
        from_email=(sender, sender_name),
        to_emails=message.to,
        subject=message.subject,
        html_content=render_email_html(message),
    )
    mail.category = Category(message.template_type)
    if message.correlation_ids:
        mail.custom_arg = [
            CustomArg(key, str(value)) for key, value in message.correlation_ids.items()
        ]
    return mail


def send_email(message: OutboundEmail) -> None:
    """Send ``message`` through SendGrid, raising :class:`RelayError` on failure."""

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; email relay unavailable")
        raise RelayError("Email relay is not configured")

    mail = build_mail(
        message,
        sender=settings.sendgrid_sender,
        sender_name=settings.sendgrid_sender_name,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(mail)
    except Exception as exc:
        status_code = getattr(exc, "status_code", None)
        description = _describe_failure(
            status_code, _extract_sendgrid_error_details(getattr(exc, "body", None))
        )
        logger.error(description)
        raise RelayError(description, status_code=status_code) from exc

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        description = _describe_failure(
            status_code,
            _extract_sendgrid_error_details(getattr(response, "body", None)),
        )
        logger.error(description)
        raise RelayError(
            description,
            status_code=status_code if isinstance(status_code, int) else None,
        )

    logger.debug(
        "Email '%s' accepted by SendGrid with status %s", message.template_type, status_code
    )


__all__ = ["build_mail", "render_email_html", "send_email"]
