"""
Funnel analytics over event and paid-order-item frames.

Frames:
  events:     columns event_type (str), created_at (datetime)
  paid_items: columns amount_in_cents (int), created_at (datetime)
"""
from typing import Any, Dict, List

import pandas as pd

FUNNEL_STEPS = (
    "page_view",
    "checkout_start",
    "purchase",
    "upsell_view",
    "upsell_accept",
    "downsell_view",
    "downsell_accept",
)

# Week numbers start on Monday
PERIOD_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%Y-%W",
    "month": "%Y-%m",
}


def events_frame(rows: List[tuple]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=["event_type", "created_at"])


def paid_items_frame(rows: List[tuple]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=["amount_in_cents", "created_at"])


def _event_counts(events: pd.DataFrame) -> pd.Series:
    if events.empty:
        return pd.Series(dtype="int64")
    return events["event_type"].value_counts()


def overview(events: pd.DataFrame, paid_items: pd.DataFrame) -> Dict[str, Any]:
    counts = _event_counts(events)
    total_views = int(counts.get("page_view", 0))
    total_purchases = int(counts.get("purchase", 0))
    total_revenue = int(paid_items["amount_in_cents"].sum()) if not paid_items.empty else 0
    conversion_rate = (total_purchases / total_views * 100) if total_views else 0.0
    return {
        "total_views": total_views,
        "total_purchases": total_purchases,
        "total_revenue": total_revenue,
        "conversion_rate": conversion_rate,
    }


def funnel_steps(events: pd.DataFrame) -> List[Dict[str, Any]]:
    counts = _event_counts(events)
    return [{"step": step, "count": int(counts.get(step, 0))} for step in FUNNEL_STEPS]


def revenue_by_period(paid_items: pd.DataFrame, group_by: str) -> List[Dict[str, Any]]:
    """Paid revenue (cents) per period label, ascending by label."""
    if group_by not in PERIOD_FORMATS:
        raise ValueError(f"group_by must be one of {sorted(PERIOD_FORMATS)}")
    if paid_items.empty:
        return []

    df = paid_items.copy()
    df["period"] = pd.to_datetime(df["created_at"]).dt.strftime(PERIOD_FORMATS[group_by])
    grouped = df.groupby("period", sort=True)["amount_in_cents"].sum()
    return [{"date": period, "revenue": int(revenue)} for period, revenue in grouped.items()]
