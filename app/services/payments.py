"""Razorpay checkout: order creation, callback verification, captured-payment webhook."""

import json
import secrets
import time
from typing import Any

import razorpay
from beanie import PydanticObjectId
from pymongo.errors import PyMongoError

from app.core.audit import log_event
from app.core.config import get_settings
from app.core.exceptions import BadRequestError, DeclinedError, OrderInitiationError
from app.core.logging import get_logger
from app.core.security import verify_payment_signature, verify_razorpay_webhook
from app.services import courses as courses_service
from app.services.enrollment import EnrollmentResult, enroll_student

log = get_logger(__name__)

CURRENCY = "INR"
PAISE_PER_RUPEE = 100
NOTE_VALUE_MAX_LEN = 256  # Razorpay limit per notes value


def get_razorpay_client() -> razorpay.Client:
    settings = get_settings()
    return razorpay.Client(auth=(settings.razorpay_key_id, settings.razorpay_key_secret))


def generate_receipt() -> str:
    """Unique per order request; Razorpay caps receipts at 40 chars."""
    return f"rcpt_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def _order_notes(user_id: PydanticObjectId, course_ids: list[str]) -> dict[str, str]:
    notes = {"user_id": str(user_id)}
    joined = ",".join(course_ids)
    if len(joined) <= NOTE_VALUE_MAX_LEN:
        notes["course_ids"] = joined
    return notes


async def create_order(user_id: PydanticObjectId, course_ids: list[str]) -> dict[str, Any]:
    """Price the courses and open a Razorpay order for the total; declines abort before the gateway call."""
    if not course_ids:
        raise DeclinedError("Please provide course IDs", code="MISSING_FIELDS")
    course_ids = courses_service.unique_course_ids(course_ids)
    total = 0
    for raw_id in course_ids:
        course = await courses_service.get_course(raw_id)
        if not course:
            raise DeclinedError("Could not find the course", code="COURSE_NOT_FOUND", details={"course_id": str(raw_id)})
        if user_id in course.students_enrolled:
            raise DeclinedError("Student is already enrolled", code="ALREADY_ENROLLED", details={"course_id": str(raw_id)})
        total += course.price

    settings = get_settings()
    if not settings.payments_configured:
        log.error("order_create_failed", user_id=str(user_id), reason="payments not configured")
        raise OrderInitiationError()
    options = {
        "amount": total * PAISE_PER_RUPEE,
        "currency": CURRENCY,
        "receipt": generate_receipt(),
        "notes": _order_notes(user_id, course_ids),
    }
    try:
        order = get_razorpay_client().order.create(options)
    except Exception as e:
        log.exception("order_create_failed", user_id=str(user_id), amount=options["amount"])
        raise OrderInitiationError() from e
    log.info("order_created", user_id=str(user_id), order_id=order["id"], amount=order["amount"])
    return {
        "order_id": order["id"],
        "amount": order["amount"],
        "currency": order["currency"],
        "receipt": order.get("receipt", options["receipt"]),
        "key_id": settings.razorpay_key_id,
    }


async def verify_payment(
    user_id: PydanticObjectId | None,
    order_id: str | None,
    payment_id: str | None,
    signature: str | None,
    course_ids: list[str] | None,
) -> EnrollmentResult:
    """Authenticate the checkout callback, then enroll. Any missing field or bad signature declines."""
    secret = get_settings().razorpay_key_secret
    if not course_ids or not user_id or not verify_payment_signature(order_id, payment_id, signature, secret):
        log.warning("payment_verification_failed", user_id=str(user_id), order_id=order_id, payment_id=payment_id)
        raise DeclinedError("Payment failed", code="PAYMENT_FAILED")
    course_ids = courses_service.unique_course_ids(course_ids)
    if not _matches_order(order_id, user_id, course_ids):
        log.warning("payment_order_mismatch", user_id=str(user_id), order_id=order_id, payment_id=payment_id)
        raise DeclinedError("Payment failed", code="PAYMENT_FAILED")
    log.info("payment_verified", user_id=str(user_id), order_id=order_id, payment_id=payment_id)
    result = await enroll_student(course_ids, user_id)
    await _audit(user_id, "payment_verified", payment_id, {"order_id": order_id, "enrolled": result.enrolled, "skipped": result.skipped})
    return result


async def handle_webhook(payload: bytes, signature: str | None) -> dict[str, str]:
    """Verify HMAC and enroll from order notes (payment.captured / order.paid). Idempotent with the callback."""
    settings = get_settings()
    if not settings.razorpay_webhook_secret:
        raise BadRequestError("Webhook secret not configured")
    if not verify_razorpay_webhook(payload, signature, settings.razorpay_webhook_secret):
        raise BadRequestError("Invalid webhook signature")
    try:
        data = json.loads(payload.decode("utf-8"))
    except ValueError as e:
        raise BadRequestError("Malformed webhook payload") from e
    event = data.get("event")
    if event not in ("payment.captured", "order.paid"):
        return {"status": "ignored"}
    body = data.get("payload", {})
    payment = body.get("payment", {}).get("entity", {})
    order_id = payment.get("order_id")
    notes = body.get("order", {}).get("entity", {}).get("notes") or payment.get("notes") or {}
    if not notes.get("course_ids") and order_id:
        notes = _fetch_order_notes(order_id)
    user_id = courses_service.parse_object_id(notes.get("user_id"))
    course_ids = [c for c in (notes.get("course_ids") or "").split(",") if c]
    if not user_id or not course_ids:
        log.warning("webhook_unattributed", event=event, order_id=order_id, payment_id=payment.get("id"))
        return {"status": "ignored"}
    result = await enroll_student(course_ids, user_id)
    await _audit(user_id, "payment_captured", payment.get("id"), {"order_id": order_id, "enrolled": result.enrolled, "skipped": result.skipped})
    return {"status": "ok"}


def _matches_order(order_id: str, user_id: PydanticObjectId, course_ids: list[str]) -> bool:
    """The signature covers only order and payment ids; the purchased courses come from the order notes."""
    notes = _fetch_order_notes(order_id)
    if notes.get("user_id") and notes["user_id"] != str(user_id):
        return False
    ordered = [c for c in (notes.get("course_ids") or "").split(",") if c]
    if not ordered:
        return True  # notes omitted for long lists, or the order could not be fetched
    return set(courses_service.unique_course_ids(ordered)) == set(course_ids)


def _fetch_order_notes(order_id: str) -> dict[str, Any]:
    if not get_settings().payments_configured:
        return {}
    try:
        order = get_razorpay_client().order.fetch(order_id)
    except Exception as e:
        log.warning("order_fetch_failed", order_id=order_id, error=str(e))
        return {}
    return order.get("notes") or {}


async def _audit(user_id: Any, event_type: str, payment_id: str | None, metadata: dict[str, Any]) -> None:
    try:
        await log_event(user_id, event_type, "payment", payment_id, metadata)
    except PyMongoError as e:
        log.warning("audit_write_failed", event_type=event_type, payment_id=payment_id, error=str(e))
