"""
Razorpay payment gateway integration - create order, verify payment, webhook
"""
import json
import time

import razorpay
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from resume_analyzer.app.core.config import PAYMENT_CURRENCY, PLAN_AMOUNTS, settings
from resume_analyzer.app.core.dependencies import get_current_user, get_db
from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.models.user import User
from resume_analyzer.app.services import payment_service

logger = get_logger("api.payment")
router = APIRouter()

PAID_EVENTS = {"payment.captured", "order.paid"}
FAILED_EVENTS = {"payment.failed"}


class CreateOrderRequest(BaseModel):
    plan_id: str  # daily | weekly | monthly


class CreateOrderResponse(BaseModel):
    order_id: str
    amount: int
    currency: str
    key_id: str


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    plan_id: str


def get_razorpay_client() -> razorpay.Client:
    return razorpay.Client(auth=(settings.razorpay_key_id, settings.razorpay_key_secret))


def _require_gateway() -> None:
    if not settings.razorpay_key_id or not settings.razorpay_key_secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment gateway is not configured",
        )


@router.post("/create-order", response_model=CreateOrderResponse)
def create_order(
    body: CreateOrderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a Razorpay order for the given plan and record it. Returns order_id for frontend checkout."""
    _require_gateway()

    amount = PLAN_AMOUNTS.get(body.plan_id)
    if not amount:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid plan_id: {body.plan_id}. Use: {', '.join(PLAN_AMOUNTS)}",
        )

    try:
        client = get_razorpay_client()
        receipt = f"sub_{body.plan_id}_{current_user.id}_{int(time.time())}"
        order = client.order.create(
            data={
                "amount": amount,
                "currency": PAYMENT_CURRENCY,
                "receipt": receipt,
                "notes": {"plan_id": body.plan_id, "user_id": str(current_user.id)},
            }
        )
        payment_service.record_order(db, current_user, order["id"], amount, body.plan_id)

        logger.info(
            "Razorpay order created order_id=%s plan=%s user_id=%s amount=%s",
            order["id"],
            body.plan_id,
            current_user.id,
            amount,
        )
        return CreateOrderResponse(
            order_id=order["id"],
            amount=amount,
            currency=PAYMENT_CURRENCY,
            key_id=settings.razorpay_key_id,
        )
    except razorpay.errors.BadRequestError as e:
        logger.warning("Razorpay create order failed: %s", str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("Razorpay create order error: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create payment order",
        )


@router.post("/verify")
def verify_payment(
    body: VerifyPaymentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Verify Razorpay payment signature, store it and activate the plan."""
    _require_gateway()

    if body.plan_id not in PLAN_AMOUNTS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid plan_id: {body.plan_id}",
        )

    payment = payment_service.get_by_order_id(db, body.razorpay_order_id)
    if not payment or payment.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    if payment.plan_id != body.plan_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Plan does not match order")

    try:
        get_razorpay_client().utility.verify_payment_signature(
            {
                "razorpay_order_id": body.razorpay_order_id,
                "razorpay_payment_id": body.razorpay_payment_id,
                "razorpay_signature": body.razorpay_signature,
            }
        )
    except razorpay.errors.SignatureVerificationError as e:
        logger.warning("Razorpay signature verification failed: %s", str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payment signature")
    except Exception as e:
        logger.exception("Razorpay verify error: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment verification failed",
        )

    payment_service.mark_paid(db, payment, body.razorpay_payment_id, body.razorpay_signature)
    return {
        "success": True,
        "message": "Payment verified successfully",
        "plan_id": body.plan_id,
        "payment_id": body.razorpay_payment_id,
    }


@router.post("/webhook")
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(default=None),
    db: Session = Depends(get_db),
):
    """Razorpay server-to-server events. Unknown orders are acknowledged and ignored."""
    if not settings.razorpay_webhook_secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment webhook is not configured",
        )
    if not x_razorpay_signature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing signature")

    raw = (await request.body()).decode("utf-8")
    try:
        get_razorpay_client().utility.verify_webhook_signature(
            raw, x_razorpay_signature, settings.razorpay_webhook_secret
        )
    except razorpay.errors.SignatureVerificationError:
        logger.warning("Razorpay webhook signature mismatch")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid webhook signature")

    try:
        event = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")

    event_type = event.get("event", "")
    entity = ((event.get("payload") or {}).get("payment") or {}).get("entity") or {}
    order_id = entity.get("order_id") or (
        ((event.get("payload") or {}).get("order") or {}).get("entity") or {}
    ).get("id")

    payment = payment_service.get_by_order_id(db, order_id) if order_id else None
    if not payment:
        logger.info("Razorpay webhook ignored event=%s order_id=%s", event_type, order_id)
        return {"status": "ignored"}

    if event_type in PAID_EVENTS:
        payment_service.mark_paid(db, payment, entity.get("id"))
    elif event_type in FAILED_EVENTS:
        payment_service.mark_failed(db, payment, entity.get("id"))
    else:
        logger.info("Razorpay webhook unhandled event=%s order_id=%s", event_type, order_id)
        return {"status": "ignored"}

    logger.info("Razorpay webhook processed event=%s order_id=%s", event_type, order_id)
    return {"status": "ok"}
