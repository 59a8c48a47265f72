"""
Sales funnel: course checkout, then one-click vault upsell or strategy-session
downsell charged against the card saved at checkout.
"""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from leadflow.db.models import FunnelOrder, FunnelOrderItem, OrderItemStatus, OrderStatus, Product
from leadflow.db.session import get_db
from leadflow.integrations.crm import push_purchase
from leadflow.integrations.payments import PaymentError, StripeGateway, get_payment_gateway

logger = logging.getLogger(__name__)

router = APIRouter()

CHECKOUT_PRODUCT = "fb-ads-course"
UPSELL_PRODUCT = "ceo-vault"
DOWNSELL_PRODUCT = "strategy-session"


class CheckoutIntentRequest(BaseModel):
    email: EmailStr
    first_name: str = Field(min_length=1)


class CheckoutConfirmRequest(BaseModel):
    order_id: int
    payment_intent_id: str = Field(min_length=1)


class OneClickRequest(BaseModel):
    order_id: int


def _get_product(db: Session, slug: str) -> Product:
    product = db.query(Product).filter(Product.slug == slug, Product.active.is_(True)).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _get_order(db: Session, order_id: int) -> FunnelOrder:
    order = db.query(FunnelOrder).filter(FunnelOrder.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _payment_failed(e: PaymentError) -> HTTPException:
    logger.error("❌ Payment provider error: %s", e)
    return HTTPException(status_code=502, detail="Payment provider error. Please try again.")


@router.post("/funnel/checkout/intent")
def create_checkout_intent(
    request: CheckoutIntentRequest,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    """Start the course checkout; the card is saved for one-click upsells."""
    product = _get_product(db, CHECKOUT_PRODUCT)
    try:
        customer_id = gateway.find_or_create_customer(request.email, request.first_name)
        intent = gateway.create_checkout_intent(
            product.price_in_cents,
            customer_id,
            metadata={"productSlug": product.slug, "email": request.email, "firstName": request.first_name},
        )
    except PaymentError as e:
        raise _payment_failed(e)

    order = FunnelOrder(
        email=request.email,
        first_name=request.first_name,
        stripe_customer_id=customer_id,
        status=OrderStatus.PENDING,
        total_in_cents=0,
    )
    order.items.append(FunnelOrderItem(
        product_id=product.id,
        stripe_payment_intent_id=intent.id,
        amount_in_cents=product.price_in_cents,
        status=OrderItemStatus.PENDING,
    ))
    db.add(order)
    db.commit()
    db.refresh(order)

    return {"client_secret": intent.client_secret, "order_id": order.id, "amount": product.price_in_cents}


@router.post("/funnel/checkout/confirm")
def confirm_checkout(
    request: CheckoutConfirmRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    order = _get_order(db, request.order_id)
    item = db.query(FunnelOrderItem).filter(
        FunnelOrderItem.order_id == order.id,
        FunnelOrderItem.stripe_payment_intent_id == request.payment_intent_id,
    ).first()
    if not item:
        raise HTTPException(status_code=404, detail="Payment does not belong to this order")

    try:
        intent = gateway.retrieve_intent(request.payment_intent_id)
    except PaymentError as e:
        raise _payment_failed(e)
    if not intent.succeeded:
        raise HTTPException(status_code=400, detail="Payment not completed")

    if intent.payment_method_id:
        order.stripe_payment_method_id = intent.payment_method_id
    item.status = OrderItemStatus.PAID
    order.status = OrderStatus.COMPLETED
    order.total_in_cents = intent.amount or item.amount_in_cents
    db.commit()

    logger.info("💳 Order %s checkout confirmed (%s cents)", order.id, order.total_in_cents)
    background_tasks.add_task(
        push_purchase, order.email, order.first_name, CHECKOUT_PRODUCT, item.amount_in_cents, order.id
    )
    return {"success": True}


def _one_click_charge(
    order_id: int,
    product_slug: str,
    background_tasks: BackgroundTasks,
    db: Session,
    gateway: StripeGateway,
):
    order = _get_order(db, order_id)
    if not order.stripe_customer_id or not order.stripe_payment_method_id:
        raise HTTPException(status_code=400, detail="No payment method on file")
    product = _get_product(db, product_slug)

    try:
        intent = gateway.charge_off_session(
            product.price_in_cents,
            order.stripe_customer_id,
            order.stripe_payment_method_id,
            metadata={"productSlug": product.slug, "orderId": str(order.id)},
        )
    except PaymentError as e:
        raise _payment_failed(e)

    if intent.succeeded:
        status = OrderItemStatus.PAID
    elif intent.status == "failed":
        status = OrderItemStatus.FAILED
    else:
        status = OrderItemStatus.PENDING

    db.add(FunnelOrderItem(
        order_id=order.id,
        product_id=product.id,
        stripe_payment_intent_id=intent.id or None,
        amount_in_cents=product.price_in_cents,
        status=status,
    ))
    if intent.succeeded:
        order.total_in_cents = (order.total_in_cents or 0) + product.price_in_cents
    db.commit()

    if intent.succeeded:
        logger.info("💳 Order %s: %s charged", order.id, product.slug)
        background_tasks.add_task(
            push_purchase, order.email, order.first_name, product.slug, product.price_in_cents, order.id
        )
    else:
        logger.warning("Order %s: %s charge not completed (%s)", order.id, product.slug, intent.status)

    return {"success": intent.succeeded, "payment_intent_id": intent.id}


@router.post("/funnel/upsell")
def accept_upsell(
    request: OneClickRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    return _one_click_charge(request.order_id, UPSELL_PRODUCT, background_tasks, db, gateway)


@router.post("/funnel/downsell")
def accept_downsell(
    request: OneClickRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    return _one_click_charge(request.order_id, DOWNSELL_PRODUCT, background_tasks, db, gateway)


@router.get("/funnel/orders/{order_id}")
def get_order(order_id: int, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    return {
        "id": order.id,
        "email": order.email,
        "first_name": order.first_name,
        "status": order.status.value,
        "total_in_cents": order.total_in_cents,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "amount_in_cents": item.amount_in_cents,
                "status": item.status.value,
                "product_name": item.product.name,
                "product_slug": item.product.slug,
                "product_type": item.product.type.value,
            }
            for item in order.items
        ],
    }
