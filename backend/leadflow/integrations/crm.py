"""GoHighLevel inbound webhook: pushes quiz leads and funnel purchases into the CRM."""
import logging
from typing import Any, Dict, Optional

import httpx

from leadflow.core.config import settings
from leadflow.scoring.lead_score import lead_temperature

logger = logging.getLogger(__name__)

LEAD_SOURCE = "Titan Dashboard Quiz"
LEAD_TAG = "titan-quiz-lead"


def build_lead_payload(
    *,
    first_name: str,
    email: str,
    business_name: str,
    business_type: str,
    monthly_revenue: str,
    biggest_frustration: str,
    ninety_day_goal: str,
    overall_score: int,
    lead_score: int,
    top_strength: str,
    biggest_gap: str,
    dashboard_url: str,
    roadmap_id: int,
    phone: Optional[str] = None,
    website: Optional[str] = None,
    industry: Optional[str] = None,
) -> Dict[str, Any]:
    """Map a lead onto GHL contact fields. Custom field keys must match the GHL account config."""
    return {
        "first_name": first_name,
        "email": email,
        "phone": phone or "",
        "company_name": business_name,
        "website": website or "",
        "business_type": business_type,
        "industry": industry or "",
        "monthly_revenue": monthly_revenue,
        "biggest_frustration": biggest_frustration,
        "ninety_day_goal": ninety_day_goal,
        "overall_score": str(overall_score),
        "lead_score": str(lead_score),
        "top_strength": top_strength,
        "biggest_gap": biggest_gap,
        "dashboard_url": dashboard_url,
        "roadmap_id": str(roadmap_id),
        "tags": ",".join([LEAD_TAG, f"score-{lead_temperature(lead_score)}"]),
        "source": LEAD_SOURCE,
    }


# product slug -> GHL automation tag
PURCHASE_TAGS = {
    "fb-ads-course": "fb-ads-course-buyer",
    "ceo-vault": "vault-member",
    "strategy-session": "session-booked",
}


def build_purchase_payload(email: str, first_name: str, product_slug: str, amount_in_cents: int, order_id: int) -> Dict[str, Any]:
    return {
        "first_name": first_name,
        "email": email,
        "tags": PURCHASE_TAGS.get(product_slug, f"purchased-{product_slug}"),
        "purchase_product": product_slug,
        "purchase_amount": f"{amount_in_cents / 100:.2f}",
        "order_id": str(order_id),
        "source": "Sales Funnel",
    }


def post_to_webhook(body: Dict[str, Any], client: Optional[httpx.Client] = None) -> bool:
    """
    POST a JSON body to GHL_WEBHOOK_URL. Returns False when unconfigured, on a
    non-2xx response or on a transport error; never raises.
    """
    if not settings.GHL_WEBHOOK_URL:
        logger.debug("GHL webhook not configured, skipping")
        return False

    owns_client = client is None
    client = client or httpx.Client(timeout=settings.GHL_TIMEOUT_SECONDS)
    try:
        response = client.post(settings.GHL_WEBHOOK_URL, json=body)
        if response.is_error:
            logger.warning("GHL webhook returned %s: %s", response.status_code, response.text[:500])
            return False
        logger.info("✅ Pushed to GHL: %s", body.get("email"))
        return True
    except httpx.HTTPError as e:
        logger.error("❌ Failed to push to GHL: %s", e)
        return False
    finally:
        if owns_client:
            client.close()


def push_lead(payload: Dict[str, Any]) -> bool:
    return post_to_webhook(payload)


def push_purchase(email: str, first_name: str, product_slug: str, amount_in_cents: int, order_id: int) -> bool:
    return post_to_webhook(build_purchase_payload(email, first_name, product_slug, amount_in_cents, order_id))
