from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from leadflow.db.models import FunnelEvent, FunnelEventType, FunnelOrder
from leadflow.db.session import get_db

router = APIRouter()


class EventCreate(BaseModel):
    session_id: str = Field(min_length=1, max_length=100)
    event_type: FunnelEventType
    page_slug: str = Field(min_length=1, max_length=100)
    order_id: Optional[int] = None
    split_test_variant: Optional[str] = Field(default=None, max_length=100)


@router.post("/funnel/events")
def track_event(event: EventCreate, db: Session = Depends(get_db)):
    if event.order_id is not None and not db.query(FunnelOrder.id).filter(FunnelOrder.id == event.order_id).first():
        raise HTTPException(status_code=404, detail="Order not found")

    db.add(FunnelEvent(**event.model_dump()))
    db.commit()
    return {"success": True}
