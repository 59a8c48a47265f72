"""Transactional email via Resend (plain text only)."""
import logging
import time
from typing import Callable, Dict, Any

import resend

from leadflow.core.config import settings

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_BASE_SECONDS = 1.0


def build_roadmap_email(to: str, business_name: str, dashboard_url: str, roadmap_id: int) -> Dict[str, Any]:
    """Resend params for the roadmap-ready notification."""
    text = "\n".join([
        f"Hi {business_name} team,",
        "",
        "Your personalized scaling roadmap has been generated based on your assessment.",
        "",
        "What's inside:",
        "- Your Business Health Score breakdown",
        "- Personalized action plan",
        "- Growth potential projections",
        "- Week-by-week implementation roadmap",
        "- Warnings on the most common scaling mistakes",
        "",
        f"View Your Roadmap: {dashboard_url}",
        "",
        "Questions? Reply to this email and we will help.",
        "",
        'To unsubscribe, reply with "Unsubscribe" in the subject line.',
    ])
    return {
        "from": f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>",
        "to": [to],
        "reply_to": settings.EMAIL_REPLY_TO,
        "subject": f"{business_name} - Your Scaling Roadmap is Ready",
        "text": text,
        "headers": {
            "X-Entity-Ref-ID": f"roadmap-{roadmap_id}-{int(time.time() * 1000)}",
        },
    }


def send_roadmap_email(
    to: str,
    business_name: str,
    dashboard_url: str,
    roadmap_id: int,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Send the roadmap-ready email. Up to MAX_ATTEMPTS tries with 1s, 2s backoff.
    Returns False (never raises) when email is unconfigured or every attempt fails.
    """
    if not settings.RESEND_API_KEY:
        logger.debug("Resend not configured, skipping roadmap email")
        return False

    resend.api_key = settings.RESEND_API_KEY
    params = build_roadmap_email(to, business_name, dashboard_url, roadmap_id)

    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            result = resend.Emails.send(params)
            logger.info("📧 Roadmap email sent to %s (roadmap=%s, attempt=%d, id=%s)",
                        to, roadmap_id, attempt, (result or {}).get("id"))
            return True
        except Exception as e:
            logger.error("Email send attempt %d/%d failed: %s", attempt, MAX_ATTEMPTS, e)
            if attempt < MAX_ATTEMPTS:
                sleep(BACKOFF_BASE_SECONDS * 2 ** (attempt - 1))

    logger.error("❌ All %d email attempts failed for %s", MAX_ATTEMPTS, to)
    return False
