import hashlib
import hmac
from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from app.core.config import get_settings

SESSION_MAX_AGE = 7 * 24 * 3600  # 7 days


def get_session_serializer() -> URLSafeTimedSerializer:
    settings = get_settings()
    return URLSafeTimedSerializer(
        settings.secret_key,
        salt="studynotion-session",
        signer_kwargs={"key_derivation": "hmac", "digest_method": hashlib.sha256},
    )


def create_session_cookie(payload: dict[str, Any]) -> str:
    return get_session_serializer().dumps(payload)


def load_session_cookie(cookie_value: str) -> dict[str, Any] | None:
    serializer = get_session_serializer()
    try:
        return serializer.loads(cookie_value, max_age=SESSION_MAX_AGE)
    except (BadSignature, SignatureExpired):
        return None


def _hmac_sha256_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(
    order_id: str | None,
    payment_id: str | None,
    signature: str | None,
    secret: str | None,
) -> bool:
    """
    Check a checkout callback: signature must be hex HMAC-SHA256(secret, "order_id|payment_id").
    Any missing or empty input is a failed verification, not an error.
    """
    if not order_id or not payment_id or not signature or not secret:
        return False
    expected = _hmac_sha256_hex(secret, f"{order_id}|{payment_id}".encode("utf-8"))
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


def verify_razorpay_webhook(payload: bytes, signature: str | None, secret: str | None) -> bool:
    if not signature or not secret:
        return False
    return hmac.compare_digest(_hmac_sha256_hex(secret, payload).encode("ascii"), signature.encode("utf-8"))
