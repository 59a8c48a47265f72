from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from leadflow.analytics.funnel import (
    events_frame,
    funnel_steps,
    overview,
    paid_items_frame,
    revenue_by_period,
)
from leadflow.core.security import require_admin
from leadflow.db.models import FunnelEvent, FunnelOrderItem, OrderItemStatus
from leadflow.db.session import get_db

router = APIRouter(dependencies=[Depends(require_admin)])


def _in_range(query, column, start_date: Optional[datetime], end_date: Optional[datetime]):
    if start_date:
        query = query.filter(column >= start_date)
    if end_date:
        query = query.filter(column <= end_date)
    return query


def _events(db: Session, start_date: Optional[datetime], end_date: Optional[datetime]):
    query = db.query(FunnelEvent.event_type, FunnelEvent.created_at)
    rows = _in_range(query, FunnelEvent.created_at, start_date, end_date).all()
    return events_frame([(event_type.value, created_at) for event_type, created_at in rows])


def _paid_items(db: Session, start_date: Optional[datetime], end_date: Optional[datetime]):
    query = db.query(FunnelOrderItem.amount_in_cents, FunnelOrderItem.created_at).filter(
        FunnelOrderItem.status == OrderItemStatus.PAID
    )
    rows = _in_range(query, FunnelOrderItem.created_at, start_date, end_date).all()
    return paid_items_frame([tuple(row) for row in rows])


@router.get("/admin/analytics/overview")
def analytics_overview(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
):
    return overview(_events(db, start_date, end_date), _paid_items(db, start_date, end_date))


@router.get("/admin/analytics/funnel")
def analytics_funnel(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
):
    return funnel_steps(_events(db, start_date, end_date))


@router.get("/admin/analytics/revenue")
def analytics_revenue(
    group_by: Literal["day", "week", "month"] = "day",
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
):
    return revenue_by_period(_paid_items(db, start_date, end_date), group_by)
