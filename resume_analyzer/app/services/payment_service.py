"""
Payment persistence - order rows and plan activation after Razorpay confirms payment.
"""
from sqlalchemy.orm import Session

from resume_analyzer.app.core.config import PAYMENT_CURRENCY
from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.models.payment import Payment
from resume_analyzer.app.models.user import User

logger = get_logger("services.payment")

STATUS_CREATED = "created"
STATUS_PAID = "paid"
STATUS_FAILED = "failed"


def record_order(db: Session, user: User, order_id: str, amount: int, plan_id: str) -> Payment:
    payment = Payment(
        user_id=user.id,
        razorpay_order_id=order_id,
        amount=amount,
        currency=PAYMENT_CURRENCY,
        payment_status=STATUS_CREATED,
        plan_id=plan_id,
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    return payment


def get_by_order_id(db: Session, order_id: str) -> Payment | None:
    return db.query(Payment).filter(Payment.razorpay_order_id == order_id).first()


def mark_paid(db: Session, payment: Payment, payment_id: str | None, signature: str | None = None) -> Payment:
    """Mark paid and move the owner onto the purchased plan. Safe to call twice."""
    if payment_id:
        payment.razorpay_payment_id = payment_id
    if signature:
        payment.razorpay_signature = signature
    payment.payment_status = STATUS_PAID

    user = db.query(User).filter(User.id == payment.user_id).first()
    if user:
        user.subscription_tier = payment.plan_id
    db.commit()
    db.refresh(payment)
    logger.info(
        "Payment marked paid order_id=%s payment_id=%s plan=%s user_id=%s",
        payment.razorpay_order_id,
        payment.razorpay_payment_id,
        payment.plan_id,
        payment.user_id,
    )
    return payment


def mark_failed(db: Session, payment: Payment, payment_id: str | None = None) -> Payment:
    if payment.payment_status == STATUS_PAID:
        # a late failure event must not downgrade a captured payment
        return payment
    if payment_id:
        payment.razorpay_payment_id = payment_id
    payment.payment_status = STATUS_FAILED
    db.commit()
    db.refresh(payment)
    logger.info("Payment marked failed order_id=%s", payment.razorpay_order_id)
    return payment
