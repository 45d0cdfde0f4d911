from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel, Field

from app.deps import get_current_user
from app.models.user import User
from app.services import notifications
from app.services import payments as payments_service

router = APIRouter()


class CreateOrderRequest(BaseModel):
    courses: list[str] = Field(default_factory=list)


class PaymentCallback(BaseModel):
    """Fields Razorpay checkout hands back to the browser, plus the purchased course ids."""
    razorpay_order_id: str | None = None
    razorpay_payment_id: str | None = None
    razorpay_signature: str | None = None
    courses: list[str] = Field(default_factory=list)


class PaymentSuccessEmailRequest(BaseModel):
    order_id: str | None = None
    payment_id: str | None = None
    amount: int | None = None  # paise


@router.post("/orders")
async def create_order(body: CreateOrderRequest, user: User = Depends(get_current_user)):
    """Create Razorpay order for the requested courses; frontend opens checkout with it."""
    order = await payments_service.create_order(user.id, body.courses)
    return {"success": True, "data": order}


@router.post("/verify")
async def verify_payment(body: PaymentCallback, user: User = Depends(get_current_user)):
    """Checkout callback: verify signature, enroll in the purchased courses."""
    result = await payments_service.verify_payment(
        user.id,
        body.razorpay_order_id,
        body.razorpay_payment_id,
        body.razorpay_signature,
        body.courses,
    )
    return {
        "success": True,
        "message": "Payment verified",
        "data": {"enrolled": result.enrolled, "skipped": result.skipped},
    }


@router.post("/success-email")
async def payment_success_email(body: PaymentSuccessEmailRequest, user: User = Depends(get_current_user)):
    """Mail the payment receipt to the current user."""
    await notifications.send_payment_success_email(user, body.amount, body.order_id, body.payment_id)
    return {"success": True, "message": "Payment email sent"}


@router.post("/webhook")
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(default=None, alias="X-Razorpay-Signature"),
):
    """Razorpay webhook: payment.captured / order.paid -> enroll from order notes (idempotent)."""
    body = await request.body()
    return await payments_service.handle_webhook(body, x_razorpay_signature)
