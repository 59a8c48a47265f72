"""Tests for funnel analytics."""
from datetime import datetime

import pytest

from leadflow.analytics.funnel import FUNNEL_STEPS, events_frame, funnel_steps, overview, paid_items_frame, revenue_by_period


def _events():
    at = datetime(2024, 1, 1, 12, 0)
    return events_frame([
        ("page_view", at),
        ("page_view", at),
        ("page_view", at),
        ("page_view", at),
        ("checkout_start", at),
        ("purchase", at),
        ("upsell_view", at),
        ("upsell_decline", at),
    ])


def _paid_items():
    return paid_items_frame([
        (19700, datetime(2024, 1, 1, 9, 0)),
        (99700, datetime(2024, 1, 3, 18, 30)),
        (19700, datetime(2024, 1, 8, 10, 0)),
        (29700, datetime(2024, 2, 2, 15, 0)),
    ])


def test_overview():
    """Views, purchases, revenue and conversion rate."""
    result = overview(_events(), _paid_items())

    assert result["total_views"] == 4
    assert result["total_purchases"] == 1
    assert result["total_revenue"] == 168800
    assert result["conversion_rate"] == pytest.approx(25.0)


def test_overview_empty():
    """No data: zeros, no division by zero."""
    result = overview(events_frame([]), paid_items_frame([]))
    assert result == {"total_views": 0, "total_purchases": 0, "total_revenue": 0, "conversion_rate": 0.0}


def test_funnel_steps_in_order():
    steps = funnel_steps(_events())

    assert [s["step"] for s in steps] == list(FUNNEL_STEPS)
    counts = {s["step"]: s["count"] for s in steps}
    assert counts["page_view"] == 4
    assert counts["checkout_start"] == 1
    assert counts["upsell_view"] == 1
    assert counts["downsell_accept"] == 0


def test_revenue_by_day():
    assert revenue_by_period(_paid_items(), "day") == [
        {"date": "2024-01-01", "revenue": 19700},
        {"date": "2024-01-03", "revenue": 99700},
        {"date": "2024-01-08", "revenue": 19700},
        {"date": "2024-02-02", "revenue": 29700},
    ]


def test_revenue_by_week():
    """Weeks start on Monday; 2024-01-01 is a Monday."""
    assert revenue_by_period(_paid_items(), "week") == [
        {"date": "2024-01", "revenue": 119400},
        {"date": "2024-02", "revenue": 19700},
        {"date": "2024-05", "revenue": 29700},
    ]


def test_revenue_by_month():
    assert revenue_by_period(_paid_items(), "month") == [
        {"date": "2024-01", "revenue": 139100},
        {"date": "2024-02", "revenue": 29700},
    ]


def test_revenue_empty_and_invalid():
    assert revenue_by_period(paid_items_frame([]), "day") == []
    with pytest.raises(ValueError):
        revenue_by_period(_paid_items(), "year")
