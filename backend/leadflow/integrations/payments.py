"""
Payment gateway backed by Stripe.

Routes depend on `get_payment_gateway` so tests can override it with a fake
that implements the same methods.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import stripe
from fastapi import HTTPException

from leadflow.core.config import settings

logger = logging.getLogger(__name__)

CURRENCY = "usd"


class PaymentError(RuntimeError):
    """Provider rejected a charge or could not be reached."""


@dataclass
class PaymentIntentResult:
    id: str
    status: str
    amount: int
    client_secret: Optional[str] = None
    payment_method_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


def _payment_method_id(intent: Any) -> Optional[str]:
    pm = intent.get("payment_method")
    if pm is None:
        return None
    return pm if isinstance(pm, str) else pm.get("id")


def _to_result(intent: Any) -> PaymentIntentResult:
    return PaymentIntentResult(
        id=intent["id"],
        status=intent["status"],
        amount=intent.get("amount") or 0,
        client_secret=intent.get("client_secret"),
        payment_method_id=_payment_method_id(intent),
    )


class StripeGateway:
    def __init__(self, api_key: str, webhook_secret: Optional[str] = None):
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def find_or_create_customer(self, email: str, name: str) -> str:
        try:
            existing = stripe.Customer.list(email=email, limit=1, api_key=self.api_key)
            if existing.data:
                return existing.data[0].id
            customer = stripe.Customer.create(email=email, name=name, api_key=self.api_key)
        except stripe.StripeError as e:
            raise PaymentError(str(e)) from e
        logger.info("Created Stripe customer %s", customer.id)
        return customer.id

    def create_checkout_intent(self, amount_in_cents: int, customer_id: str, metadata: Dict[str, str]) -> PaymentIntentResult:
        """On-session intent that saves the card for later one-click charges."""
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_in_cents,
                currency=CURRENCY,
                customer=customer_id,
                setup_future_usage="off_session",
                metadata=metadata,
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            raise PaymentError(str(e)) from e
        return _to_result(intent)

    def retrieve_intent(self, payment_intent_id: str) -> PaymentIntentResult:
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id, api_key=self.api_key)
        except stripe.StripeError as e:
            raise PaymentError(str(e)) from e
        return _to_result(intent)

    def charge_off_session(
        self,
        amount_in_cents: int,
        customer_id: str,
        payment_method_id: str,
        metadata: Dict[str, str],
    ) -> PaymentIntentResult:
        """Charge a saved card without the customer present. A decline comes back as a failed result."""
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_in_cents,
                currency=CURRENCY,
                customer=customer_id,
                payment_method=payment_method_id,
                off_session=True,
                confirm=True,
                metadata=metadata,
                api_key=self.api_key,
            )
        except stripe.CardError as e:
            logger.warning("Off-session charge declined: %s", e.user_message or e)
            declined_intent = getattr(e.error, "payment_intent", None) or {}
            return PaymentIntentResult(
                id=declined_intent.get("id", ""),
                status="failed",
                amount=amount_in_cents,
            )
        except stripe.StripeError as e:
            raise PaymentError(str(e)) from e
        return _to_result(intent)

    def construct_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Verify a webhook delivery. Raises ValueError on a bad payload or signature."""
        if not self.webhook_secret:
            raise ValueError("STRIPE_WEBHOOK_SECRET is not configured")
        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise ValueError("Invalid signature") from e


def get_payment_gateway() -> StripeGateway:
    """FastAPI dependency: configured gateway, or 503 when payments are not set up."""
    if not settings.STRIPE_SECRET_KEY:
        raise HTTPException(status_code=503, detail="Payments are not configured")
    return StripeGateway(settings.STRIPE_SECRET_KEY, settings.STRIPE_WEBHOOK_SECRET)
