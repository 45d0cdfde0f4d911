"""Email templates, Gmail mailer and notification dispatch."""

import base64
import email
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from beanie import PydanticObjectId

from app.core.exceptions import DeclinedError
from app.services.mail_templates import (
    course_enrollment_email,
    course_enrollment_subject,
    payment_success_email,
)
from app.services.mailer import Mailer


class TestTemplates:
    def test_enrollment_email_names_course_and_student(self):
        html = course_enrollment_email("Data Structures", "Asha Rao")
        assert "Data Structures" in html
        assert "Dear Asha Rao" in html
        assert "Course Registration Confirmation" in html

    def test_enrollment_email_escapes_user_supplied_text(self):
        html = course_enrollment_email("<script>alert(1)</script>", "Bob & Co")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "Bob &amp; Co" in html

    def test_enrollment_subject(self):
        assert course_enrollment_subject("Data Structures") == "Successfully Enrolled into Data Structures"

    def test_payment_email_shows_amount_and_ids(self):
        html = payment_success_email("Asha Rao", 2000, "order_1", "pay_1")
        assert "&#8377;2,000.00" in html
        assert "order_1" in html
        assert "pay_1" in html


class TestMailer:
    @pytest.mark.asyncio
    async def test_missing_credentials_returns_false(self, tmp_path):
        mailer = Mailer(str(tmp_path / "absent.json"), "noreply@studynotion.com")
        assert await mailer.send("asha@example.com", "Hi", "<p>Hi</p>") is False

    @pytest.mark.asyncio
    async def test_missing_recipient_returns_false(self):
        mailer = Mailer("/nonexistent.json", "noreply@studynotion.com")
        assert await mailer.send("", "Hi", "<p>Hi</p>") is False

    @pytest.mark.asyncio
    async def test_send_builds_raw_mime_message(self):
        mailer = Mailer("/fake.json", "noreply@studynotion.com", sender_name="StudyNotion")
        service = MagicMock()
        service.users.return_value.messages.return_value.send.return_value.execute.return_value = {"id": "msg_1"}

        with patch.object(Mailer, "_get_service", return_value=service):
            ok = await mailer.send("asha@example.com", "Payment Received", "<p>Thanks</p>")

        assert ok is True
        kwargs = service.users.return_value.messages.return_value.send.call_args.kwargs
        assert kwargs["userId"] == "me"
        msg = email.message_from_bytes(base64.urlsafe_b64decode(kwargs["body"]["raw"]))
        assert msg["To"] == "asha@example.com"
        assert msg["Subject"] == "Payment Received"
        assert msg["From"] == "StudyNotion <noreply@studynotion.com>"


@pytest.fixture
def mailer():
    m = MagicMock()
    m.send = AsyncMock(return_value=True)
    with patch("app.services.notifications.get_mailer", return_value=m):
        yield m


class TestNotifications:
    @pytest.mark.asyncio
    async def test_enrollment_email_sent_to_student(self, mailer, user_factory, course_factory):
        from app.services import notifications

        user = user_factory()
        course = course_factory(name="Data Structures")
        with patch("app.services.notifications.User.get", AsyncMock(return_value=user)), \
                patch("app.services.notifications.Course.get", AsyncMock(return_value=course)):
            assert await notifications.send_enrollment_email(user.id, course.id) is True

        to, subject, body = mailer.send.call_args.args
        assert to == user.email
        assert subject == "Successfully Enrolled into Data Structures"
        assert "Asha Rao" in body

    @pytest.mark.asyncio
    async def test_enrollment_email_skipped_for_missing_course(self, mailer, user_factory):
        from app.services import notifications

        user = user_factory()
        with patch("app.services.notifications.User.get", AsyncMock(return_value=user)), \
                patch("app.services.notifications.Course.get", AsyncMock(return_value=None)):
            assert await notifications.send_enrollment_email(user.id, PydanticObjectId()) is False
        mailer.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_payment_email_converts_paise(self, mailer, user_factory):
        from app.services import notifications

        await notifications.send_payment_success_email(user_factory(), 200000, "order_1", "pay_1")

        to, subject, body = mailer.send.call_args.args
        assert subject == "Payment Received"
        assert "&#8377;2,000.00" in body

    @pytest.mark.asyncio
    async def test_payment_email_failure_is_declined(self, mailer, user_factory):
        from app.services import notifications

        mailer.send.return_value = False
        with pytest.raises(DeclinedError) as exc_info:
            await notifications.send_payment_success_email(user_factory(), 50000, "order_1", "pay_1")
        assert exc_info.value.code == "EMAIL_FAILED"
        assert exc_info.value.message == "Could not send email"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount,order_id,payment_id", [(None, "o", "p"), (100, None, "p"), (100, "o", "")])
    async def test_payment_email_requires_all_details(self, mailer, user_factory, amount, order_id, payment_id):
        from app.services import notifications

        with pytest.raises(DeclinedError) as exc_info:
            await notifications.send_payment_success_email(user_factory(), amount, order_id, payment_id)
        assert exc_info.value.code == "MISSING_FIELDS"
        mailer.send.assert_not_awaited()
