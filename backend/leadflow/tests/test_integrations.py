"""Tests for email, CRM webhook and payment gateway helpers."""
import httpx
import pytest
import resend
from fastapi import HTTPException

from leadflow.core.config import settings
from leadflow.integrations import crm, email
from leadflow.integrations.payments import PaymentIntentResult, StripeGateway, get_payment_gateway


def test_roadmap_email_content():
    params = email.build_roadmap_email("dana@example.com", "Smile Dental", "https://app/dashboard/7", 7)

    assert params["to"] == ["dana@example.com"]
    assert params["subject"] == "Smile Dental - Your Scaling Roadmap is Ready"
    assert "https://app/dashboard/7" in params["text"]
    assert params["headers"]["X-Entity-Ref-ID"].startswith("roadmap-7-")


def test_email_skipped_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "RESEND_API_KEY", None)
    assert email.send_roadmap_email("dana@example.com", "Smile Dental", "url", 1) is False


def test_email_retries_with_backoff(monkeypatch):
    """Two failures then success: sleeps 1s then 2s."""
    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")
    outcomes = [RuntimeError("503"), RuntimeError("503"), {"id": "email_1"}]
    sent = []

    def fake_send(params):
        sent.append(params)
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    sleeps = []

    assert email.send_roadmap_email("dana@example.com", "Smile Dental", "url", 1, sleep=sleeps.append) is True
    assert len(sent) == 3
    assert sleeps == [1.0, 2.0]


def test_email_gives_up_after_three_attempts(monkeypatch):
    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")

    def always_fail(params):
        raise RuntimeError("down")

    monkeypatch.setattr(resend.Emails, "send", always_fail)
    sleeps = []

    assert email.send_roadmap_email("dana@example.com", "Smile Dental", "url", 1, sleep=sleeps.append) is False
    assert sleeps == [1.0, 2.0]


def _lead_payload(lead_score):
    return crm.build_lead_payload(
        first_name="Dana",
        email="dana@example.com",
        business_name="Smile Dental",
        business_type="Dental practice",
        monthly_revenue="$20K-$50K",
        biggest_frustration="Not enough leads coming in",
        ninety_day_goal="Hit $50K months",
        overall_score=53,
        lead_score=lead_score,
        top_strength="Lead Generation",
        biggest_gap="Conversion Process",
        dashboard_url="https://app/dashboard/1",
        roadmap_id=1,
    )


def test_lead_payload_tags_temperature():
    assert _lead_payload(85)["tags"] == "titan-quiz-lead,score-hot"
    assert _lead_payload(55)["tags"] == "titan-quiz-lead,score-warm"
    payload = _lead_payload(10)
    assert payload["tags"] == "titan-quiz-lead,score-cold"
    assert payload["source"] == "Titan Dashboard Quiz"
    assert payload["phone"] == ""
    assert payload["overall_score"] == "53"


def test_purchase_payload():
    payload = crm.build_purchase_payload("dana@example.com", "Dana", "ceo-vault", 99700, 12)
    assert payload["tags"] == "vault-member"
    assert payload["purchase_amount"] == "997.00"
    assert payload["order_id"] == "12"
    assert crm.build_purchase_payload("a@b.co", "A", "mystery", 100, 1)["tags"] == "purchased-mystery"


def test_crm_skipped_when_unconfigured(monkeypatch):
    monkeypatch.setattr(settings, "GHL_WEBHOOK_URL", None)
    assert crm.push_lead(_lead_payload(50)) is False


def test_crm_posts_json(monkeypatch):
    monkeypatch.setattr(settings, "GHL_WEBHOOK_URL", "https://hooks.example.com/ghl")
    received = []

    def handler(request):
        received.append(request)
        return httpx.Response(200, json={"ok": True})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        assert crm.post_to_webhook({"email": "dana@example.com"}, client=client) is True

    assert received[0].url == "https://hooks.example.com/ghl"
    assert received[0].method == "POST"


def test_crm_error_response_returns_false(monkeypatch):
    monkeypatch.setattr(settings, "GHL_WEBHOOK_URL", "https://hooks.example.com/ghl")
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="oops"))
    with httpx.Client(transport=transport) as client:
        assert crm.post_to_webhook({"email": "dana@example.com"}, client=client) is False


def test_crm_transport_error_returns_false(monkeypatch):
    monkeypatch.setattr(settings, "GHL_WEBHOOK_URL", "https://hooks.example.com/ghl")

    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        assert crm.post_to_webhook({"email": "dana@example.com"}, client=client) is False


def test_payment_intent_result():
    assert PaymentIntentResult(id="pi_1", status="succeeded", amount=100).succeeded
    assert not PaymentIntentResult(id="pi_1", status="requires_action", amount=100).succeeded


def test_gateway_unavailable_without_key(monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", None)
    with pytest.raises(HTTPException) as exc:
        get_payment_gateway()
    assert exc.value.status_code == 503


def test_webhook_requires_secret():
    with pytest.raises(ValueError):
        StripeGateway("sk_test").construct_event(b"{}", "sig")
