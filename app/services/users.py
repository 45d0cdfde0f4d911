from datetime import datetime

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from app.core.audit import log_event
from app.core.config import get_settings
from app.core.exceptions import BadRequestError, UnauthorizedError
from app.core.logging import get_logger
from app.models.user import User

log = get_logger(__name__)


def verify_google_id_token(token: str) -> dict:
    """Verify Google ID token; return decoded claims (sub, email, given_name, family_name, ...)."""
    settings = get_settings()
    try:
        return id_token.verify_oauth2_token(
            token,
            google_requests.Request(),
            settings.google_client_id,
        )
    except Exception as e:
        raise UnauthorizedError(f"Invalid Google token: {e}") from e


def _names_from_claims(claims: dict) -> tuple[str, str]:
    first = claims.get("given_name") or ""
    last = claims.get("family_name") or ""
    if not first and not last and claims.get("name"):
        first, _, last = claims["name"].partition(" ")
    return first, last


async def upsert_user_from_google(claims: dict) -> User:
    google_sub = claims.get("sub")
    if not google_sub:
        raise BadRequestError("Missing sub in token")
    email = claims.get("email") or ""
    first_name, last_name = _names_from_claims(claims)

    user = await User.find_one(User.google_sub == google_sub)
    if user:
        user.email = email
        user.first_name = first_name
        user.last_name = last_name
        user.last_login_at = datetime.utcnow()
        user.updated_at = datetime.utcnow()
        await user.save()
        log.info("user_login", user_id=str(user.id), email=user.email)
        await log_event(user.id, "user_login", "user", user.id, {"email": user.email})
    else:
        user = User(
            google_sub=google_sub,
            email=email,
            first_name=first_name,
            last_name=last_name,
            last_login_at=datetime.utcnow(),
        )
        await user.insert()
        log.info("user_created", user_id=str(user.id), email=user.email)
        await log_event(user.id, "user_created", "user", user.id, {"email": user.email})
    return user


async def invalidate_sessions(user: User) -> None:
    """Logout everywhere: cookies carry session_version, bumping it rejects them all."""
    user.session_version += 1
    user.updated_at = datetime.utcnow()
    await user.save()


def session_payload_for_user(user: User) -> dict:
    return {"user_id": str(user.id), "session_version": user.session_version}


def user_out(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role,
        "courses": [str(c) for c in user.courses],
    }
