import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leadflow.db.models import FunnelOrder, FunnelOrderItem, OrderItemStatus, OrderStatus
from leadflow.db.session import get_db
from leadflow.integrations.payments import StripeGateway, get_payment_gateway

logger = logging.getLogger(__name__)

router = APIRouter()


def mark_intent_paid(db: Session, payment_intent_id: str) -> None:
    """Mark the intent's items paid and recompute each affected order's total from paid items."""
    items = db.query(FunnelOrderItem).filter(FunnelOrderItem.stripe_payment_intent_id == payment_intent_id).all()
    for item in items:
        item.status = OrderItemStatus.PAID
    db.flush()

    for order_id in {item.order_id for item in items}:
        order = db.query(FunnelOrder).filter(FunnelOrder.id == order_id).first()
        order.total_in_cents = sum(i.amount_in_cents for i in order.items if i.status == OrderItemStatus.PAID)
        order.status = OrderStatus.COMPLETED


def mark_intent_failed(db: Session, payment_intent_id: str) -> None:
    db.query(FunnelOrderItem).filter(
        FunnelOrderItem.stripe_payment_intent_id == payment_intent_id
    ).update({FunnelOrderItem.status: OrderItemStatus.FAILED}, synchronize_session=False)


@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing signature")

    payload = await request.body()
    try:
        event = gateway.construct_event(payload, stripe_signature)
    except ValueError as e:
        logger.error("Stripe webhook verification failed: %s", e)
        raise HTTPException(status_code=400, detail="Invalid signature")

    event_type = event["type"]
    intent_id = event["data"]["object"]["id"]
    try:
        if event_type == "payment_intent.succeeded":
            mark_intent_paid(db, intent_id)
            logger.info("Payment succeeded via webhook: %s", intent_id)
        elif event_type == "payment_intent.payment_failed":
            mark_intent_failed(db, intent_id)
            logger.warning("Payment failed via webhook: %s", intent_id)
        else:
            logger.debug("Unhandled Stripe event type: %s", event_type)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error processing Stripe webhook %s", event_type)
        raise HTTPException(status_code=500, detail="Webhook processing failed")

    return {"received": True}
