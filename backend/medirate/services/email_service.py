"""
MediRate Admin Backend — Contact Email Service
================================================

What:  Relays a "Contact Us" form submission to the team inbox over SMTP.
How:   Builds a fixed HTML template, escaping every submitted value with
       html.escape, and sends it with smtplib (STARTTLS, then login) in
       Starlette's threadpool.
Who:   Called by /api/send-email.

Message layout:
    From:      "<first> <last>" <EMAIL_FROM>
    To:        EMAIL_TO
    Reply-To:  the submitter's address
    Subject:   Contact Us Form Submission: <first> <last>
"""

import email.errors
import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

import pydantic
from starlette.concurrency import run_in_threadpool

from medirate.config import settings
from medirate.exceptions import EmailDeliveryError, ValidationError
from medirate.schemas.contact import ContactRequest

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "email", "message")

# Values copied into From, Subject and Reply-To
HEADER_FIELDS = ("first_name", "last_name", "email")

CONTACT_TEMPLATE = """
<h3>Contact Us Form Submission</h3>
<p><strong>Name:</strong> {first_name} {last_name}</p>
<p><strong>Company:</strong> {company}</p>
<p><strong>Title:</strong> {title}</p>
<p><strong>Email:</strong> {email}</p>
<p><strong>Message:</strong></p>
<p>{message}</p>
"""


def render_contact_html(form: ContactRequest) -> str:
    values = {
        name: html.escape(getattr(form, name) or "")
        for name in ("first_name", "last_name", "company", "title", "email", "message")
    }
    # Line breaks in the message survive as <br>, after escaping
    values["message"] = values["message"].replace("\n", "<br>")
    return CONTACT_TEMPLATE.format(**values)


def build_contact_message(form: ContactRequest) -> MIMEMultipart:
    full_name = f"{form.first_name} {form.last_name}"
    msg = MIMEMultipart("alternative")
    msg["Subject"] = f"Contact Us Form Submission: {full_name}"
    msg["From"] = formataddr((full_name, settings.email_from))
    msg["To"] = settings.email_to
    msg["Reply-To"] = form.email
    msg.attach(MIMEText(render_contact_html(form), "html", "utf-8"))
    return msg


class EmailService:

    def parse_form(self, raw: bytes) -> ContactRequest:
        """Parses a JSON request body; anything that is not a JSON object is a 400."""
        try:
            return ContactRequest.model_validate_json(raw or b"{}")
        except pydantic.ValidationError as e:
            raise ValidationError(
                "Invalid request body", context={"errors": e.error_count()}
            ) from e

    def validate(self, form: ContactRequest) -> None:
        missing = [name for name in REQUIRED_FIELDS if not getattr(form, name)]
        if missing:
            raise ValidationError(
                "Required fields are missing.", context={"missing": missing}
            )
        unsafe = [
            name for name in HEADER_FIELDS
            if any(ch in (getattr(form, name) or "") for ch in "\r\n")
        ]
        if unsafe:
            raise ValidationError(
                "Line breaks are not allowed in name or email fields.",
                context={"fields": unsafe},
            )

    async def send_contact(self, form: ContactRequest) -> None:
        """
        Validates and sends one contact submission.

        Raises:
            ValidationError:    A required field is missing or a header value
                                contains a line break; nothing is sent
            EmailDeliveryError: Connection, TLS, auth or send failed
        """
        self.validate(form)
        # Serialized before connecting so header errors never reach the SMTP session
        try:
            raw = build_contact_message(form).as_string()
        except email.errors.MessageError as e:
            raise ValidationError("Invalid contact form headers.") from e
        try:
            await run_in_threadpool(self._deliver, raw)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending contact email: %s: %s", type(e).__name__, e)
            raise EmailDeliveryError(context={"error_type": type(e).__name__}) from e
        logger.info("Contact email relayed for %s", form.email)

    def _deliver(self, raw: str) -> None:
        with smtplib.SMTP(
            settings.smtp_host, settings.smtp_port, timeout=settings.http_timeout_seconds
        ) as server:
            server.starttls()
            if settings.smtp_user:
                server.login(settings.smtp_user, settings.smtp_pass)
            server.sendmail(settings.email_from, [settings.email_to], raw)


# ── Singleton Instance ────────────────────────────────────────────────────
email_service = EmailService()
