"""HTML bodies for transactional emails (enrollment confirmation, payment receipt)."""

from html import escape

SUPPORT_ADDRESS = "info@studynotion.com"
DASHBOARD_URL = "https://studynotion-edtech-project.vercel.app/dashboard"

_BASE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <style>
    body {{ background-color: #ffffff; font-family: Arial, sans-serif; font-size: 16px; line-height: 1.4; color: #333333; margin: 0; padding: 0; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; text-align: center; }}
    .message {{ font-size: 18px; font-weight: bold; margin-bottom: 20px; }}
    .body {{ font-size: 16px; margin-bottom: 20px; }}
    .cta {{ display: inline-block; padding: 10px 20px; background-color: #FFD60A; color: #000000; text-decoration: none; border-radius: 5px; font-size: 16px; font-weight: bold; margin-top: 20px; }}
    .support {{ font-size: 14px; color: #999999; margin-top: 20px; }}
    .highlight {{ font-weight: bold; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="message">{title}</div>
    <div class="body">
{content}
    </div>
    <div class="support">If you have any questions or need assistance, please feel free to reach out to us at
      <a href="mailto:{support}">{support}</a>. We are here to help!</div>
  </div>
</body>
</html>
"""


def _render(title: str, content: str) -> str:
    return _BASE.format(title=escape(title), content=content, support=SUPPORT_ADDRESS)


def course_enrollment_email(course_name: str, name: str) -> str:
    content = (
        f"      <p>Dear {escape(name)},</p>\n"
        f"      <p>You have successfully registered for the course "
        f"<span class=\"highlight\">\"{escape(course_name)}\"</span>. "
        f"We are excited to have you as a participant!</p>\n"
        f"      <p>Please log in to your learning dashboard to access the course materials and start your learning journey.</p>\n"
        f"      <a class=\"cta\" href=\"{DASHBOARD_URL}\">Go to Dashboard</a>"
    )
    return _render("Course Registration Confirmation", content)


def payment_success_email(name: str, amount: float, order_id: str, payment_id: str) -> str:
    """amount is in major units (rupees), already converted from paise by the caller."""
    content = (
        f"      <p>Dear {escape(name)},</p>\n"
        f"      <p>We have received a payment of <span class=\"highlight\">&#8377;{amount:,.2f}</span>.</p>\n"
        f"      <p>Your Payment ID is <b>{escape(payment_id)}</b></p>\n"
        f"      <p>Your Order ID is <b>{escape(order_id)}</b></p>"
    )
    return _render("Course Payment Confirmation", content)


def course_enrollment_subject(course_name: str) -> str:
    return f"Successfully Enrolled into {course_name}"


PAYMENT_RECEIVED_SUBJECT = "Payment Received"
