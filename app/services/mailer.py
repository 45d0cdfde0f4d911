"""Outbound mail via the Gmail API (service account, domain-wide delegation)."""

import base64
from email.mime.text import MIMEText
from functools import lru_cache
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.core.config import get_settings
from app.core.logging import get_logger

log = get_logger(__name__)

GMAIL_SEND_SCOPES = ["https://www.googleapis.com/auth/gmail.send"]


class Mailer:
    """send(to, subject, html) -> True on ack; every failure is logged and returned as False."""

    def __init__(self, credentials_path: str, sender_address: str, sender_name: str = "StudyNotion"):
        self.credentials_path = credentials_path
        self.sender_address = sender_address
        self.sender_name = sender_name
        self._service = None

    def _get_service(self):
        if self._service is not None:
            return self._service
        path = Path(self.credentials_path)
        if not path.exists():
            raise FileNotFoundError(f"Mail credentials not found: {self.credentials_path}")
        credentials = service_account.Credentials.from_service_account_file(
            str(path),
            scopes=GMAIL_SEND_SCOPES,
        )
        self._service = build(
            "gmail",
            "v1",
            credentials=credentials.with_subject(self.sender_address),
            cache_discovery=False,
        )
        return self._service

    def _build_message(self, to: str, subject: str, body_html: str) -> dict:
        message = MIMEText(body_html, "html", "utf-8")
        message["From"] = f"{self.sender_name} <{self.sender_address}>"
        message["To"] = to
        message["Subject"] = subject
        return {"raw": base64.urlsafe_b64encode(message.as_bytes()).decode("ascii")}

    async def send(self, to: str, subject: str, body_html: str) -> bool:
        if not to:
            log.warning("mail_skipped", reason="missing recipient", subject=subject)
            return False
        try:
            service = self._get_service()
            resp = service.users().messages().send(
                userId="me",
                body=self._build_message(to, subject, body_html),
            ).execute()
        except (FileNotFoundError, ValueError, GoogleAuthError, HttpError, OSError) as e:
            log.warning("mail_send_failed", to=to, subject=subject, error=str(e))
            return False
        log.info("mail_sent", to=to, subject=subject, message_id=resp.get("id"))
        return True


@lru_cache
def get_mailer() -> Mailer:
    settings = get_settings()
    return Mailer(
        credentials_path=settings.mail_credentials_path,
        sender_address=settings.mail_sender_address,
        sender_name=settings.mail_sender_name,
    )
