"""Shared fixtures: in-memory database, API client and a fake payment gateway."""
import json
import os

# Settings are read at import time, so the environment must be set first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LLM_PROVIDER"] = "mock"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "1000"
os.environ["SEND_ROADMAP_EMAIL"] = "false"
os.environ.pop("GHL_WEBHOOK_URL", None)
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("STRIPE_SECRET_KEY", None)

import pytest
from fastapi.testclient import TestClient

from leadflow.core.rate_limit import reset_rate_limits
from leadflow.db.bootstrap import seed_default_products
from leadflow.db.session import Base, SessionLocal, engine
from leadflow.integrations.payments import PaymentIntentResult, get_payment_gateway
from leadflow.main import app

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}

QUIZ_SUBMISSION = {
    "firstName": "Dana",
    "businessName": "Smile Dental",
    "businessType": "Dental practice",
    "industry": "Health",
    "email": "dana@smiledental.com",
    "phone": "555-0100",
    "website": "",
    "monthlyRevenue": "$20K-$50K",
    "mainOffer": "Invisalign consultations",
    "offerConfidence": "Somewhat confident",
    "crmUsage": "Yes (barely touch it)",
    "leadResponseSpeed": "Within 1 hour",
    "missedLeads": "10-25%",
    "chatAgents": "No (manual responses)",
    "contentFrequency": "1-2x/week",
    "audienceSize": "2K-5K",
    "instagramHandle": "@smiledental",
    "monthlyAdBudget": "$1K-$3K",
    "ninetyDayGoal": "Hit $50K months",
    "biggestFrustration": "Not enough leads coming in",
}


class FakeGateway:
    """In-memory stand-in for StripeGateway."""

    def __init__(self):
        self.intents = {}
        self.off_session_charges = []
        self.decline_off_session = False

    def find_or_create_customer(self, email, name):
        return "cus_test"

    def create_checkout_intent(self, amount_in_cents, customer_id, metadata):
        intent_id = f"pi_checkout_{len(self.intents) + 1}"
        intent = PaymentIntentResult(
            id=intent_id,
            status="requires_payment_method",
            amount=amount_in_cents,
            client_secret=f"{intent_id}_secret",
        )
        self.intents[intent_id] = intent
        return intent

    def complete(self, intent_id, payment_method_id="pm_card_visa"):
        """Simulate the customer finishing payment in the browser."""
        intent = self.intents[intent_id]
        self.intents[intent_id] = PaymentIntentResult(
            id=intent_id,
            status="succeeded",
            amount=intent.amount,
            payment_method_id=payment_method_id,
        )

    def retrieve_intent(self, payment_intent_id):
        return self.intents[payment_intent_id]

    def charge_off_session(self, amount_in_cents, customer_id, payment_method_id, metadata):
        self.off_session_charges.append((amount_in_cents, customer_id, payment_method_id, metadata))
        intent_id = f"pi_oneclick_{len(self.off_session_charges)}"
        status = "failed" if self.decline_off_session else "succeeded"
        return PaymentIntentResult(id=intent_id, status=status, amount=amount_in_cents)

    def construct_event(self, payload, signature):
        if signature != "valid-signature":
            raise ValueError("Invalid signature")
        return json.loads(payload)


@pytest.fixture(autouse=True)
def reset_state():
    """Fresh schema, default products and an empty rate-limit store for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    seed_default_products(engine)
    reset_rate_limits()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def quiz_submission():
    return dict(QUIZ_SUBMISSION)


@pytest.fixture
def gateway():
    fake = FakeGateway()
    app.dependency_overrides[get_payment_gateway] = lambda: fake
    return fake
