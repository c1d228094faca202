# wavy/services/mailer.py

import logging

import requests

from ..config import settings
from ..errors import EmailDeliveryError

logger = logging.getLogger(__name__)


def send_email(
    to: str | list[str],
    subject: str,
    html: str,
    attachments: list[dict] | None = None,
) -> bool:
    """
    Sends a transactional email through the Resend HTTP API.

    ``attachments`` items are ``{"filename": ..., "content": <base64>}``.
    Returns False when no API key is configured (the send is skipped),
    True once the provider accepted the message.
    Raises EmailDeliveryError if the provider rejects it.
    """
    if not settings.RESEND_API_KEY:
        logger.warning(f"RESEND_API_KEY not set, email not sent: {subject}")
        return False

    body = {
        "from": settings.EMAIL_FROM,
        "to": to if isinstance(to, list) else [to],
        "subject": subject,
        "html": html,
    }
    if attachments:
        body["attachments"] = attachments

    try:
        response = requests.post(
            settings.RESEND_API_URL,
            json=body,
            headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise EmailDeliveryError(f"Resend request failed: {e}") from e

    if not response.ok:
        raise EmailDeliveryError(f"Resend error {response.status_code}: {response.text[:500]}")

    logger.info(f"Email sent: {subject}")
    return True


def send_email_safely(
    to: str | list[str],
    subject: str,
    html: str,
    attachments: list[dict] | None = None,
) -> bool:
    """
    Same as send_email, for notifications that must not fail the request
    that triggered them. Delivery errors are logged and reported as False.
    """
    try:
        return send_email(to, subject, html, attachments)
    except EmailDeliveryError as e:
        logger.error(f"Email '{subject}' could not be delivered: {e}")
        return False
