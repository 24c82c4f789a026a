"""
MediRate Admin Backend — Contact Email Tests
==============================================

What we test:
    ✅ Missing required fields → 400 with no SMTP connection
    ✅ Line breaks in header-bound fields → 400 with no SMTP connection
    ✅ Submitted text is HTML-escaped in the message body
    ✅ Headers: From carries the submitter's name, Reply-To their address
    ✅ SMTP failures → 500 "Failed to send email."
    ✅ Non-POST methods → 405 with Allow: POST
"""

import smtplib
from unittest.mock import patch

import pytest

from medirate.exceptions import EmailDeliveryError, ValidationError
from medirate.schemas.contact import ContactRequest
from medirate.services.email_service import (
    EmailService,
    build_contact_message,
    render_contact_html,
)

FORM = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "message": "Hello",
    "company": "Analytical Engines",
}


@pytest.fixture
def mock_smtp():
    with patch("medirate.services.email_service.smtplib.SMTP") as smtp_cls:
        yield smtp_cls


class TestContactTemplate:

    def test_user_text_is_escaped(self):
        form = ContactRequest(**{**FORM, "message": "<script>alert(1)</script>", "lastName": "O'Neil & Co"})
        body = render_contact_html(form)

        assert "<script>" not in body
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in body
        assert "O&#x27;Neil &amp; Co" in body

    def test_optional_fields_render_empty(self):
        body = render_contact_html(ContactRequest(**FORM))
        assert "<p><strong>Title:</strong> </p>" in body

    def test_headers(self):
        message = build_contact_message(ContactRequest(**FORM))

        assert message["Subject"] == "Contact Us Form Submission: Ada Lovelace"
        assert message["From"] == "Ada Lovelace <noreply@medirate.test>"
        assert message["To"] == "contact@medirate.test"
        assert message["Reply-To"] == "ada@example.com"


class TestEmailService:

    def setup_method(self):
        self.service = EmailService()

    @pytest.mark.asyncio
    async def test_missing_message_sends_nothing(self, mock_smtp):
        form = ContactRequest(**{**FORM, "message": ""})
        with pytest.raises(ValidationError) as exc_info:
            await self.service.send_contact(form)

        assert exc_info.value.context["missing"] == ["message"]
        mock_smtp.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_over_starttls(self, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value

        await self.service.send_contact(ContactRequest(**FORM))

        server.starttls.assert_called_once()
        sender, recipients, _ = server.sendmail.call_args.args
        assert sender == "noreply@medirate.test"
        assert recipients == ["contact@medirate.test"]

    @pytest.mark.asyncio
    async def test_smtp_failure_becomes_delivery_error(self, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value
        server.sendmail.side_effect = smtplib.SMTPRecipientsRefused({})

        with pytest.raises(EmailDeliveryError):
            await self.service.send_contact(ContactRequest(**FORM))

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_delivery_error(self, mock_smtp):
        mock_smtp.side_effect = ConnectionRefusedError()
        with pytest.raises(EmailDeliveryError):
            await self.service.send_contact(ContactRequest(**FORM))

    def test_parse_form_rejects_non_object(self):
        with pytest.raises(ValidationError):
            self.service.parse_form(b"[1, 2]")

    @pytest.mark.asyncio
    async def test_header_injection_rejected_before_connecting(self, mock_smtp):
        form = ContactRequest(**{**FORM, "firstName": "Eve\r\nBcc: victim@example.com"})
        with pytest.raises(ValidationError) as exc_info:
            await self.service.send_contact(form)

        assert exc_info.value.context["fields"] == ["first_name"]
        mock_smtp.assert_not_called()


class TestSendEmailRoute:

    @pytest.mark.asyncio
    async def test_success(self, test_client, mock_smtp):
        response = await test_client.post("/api/send-email", json=FORM)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Email sent successfully!"}

    @pytest.mark.asyncio
    async def test_missing_field_is_400(self, test_client, mock_smtp):
        body = {k: v for k, v in FORM.items() if k != "message"}
        response = await test_client.post("/api/send-email", json=body)

        assert response.status_code == 400
        assert response.json()["message"] == "Required fields are missing."
        mock_smtp.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
    async def test_non_post_is_405(self, test_client, mock_smtp, method):
        response = await test_client.request(method, "/api/send-email")

        assert response.status_code == 405
        assert response.headers["Allow"] == "POST"
        mock_smtp.assert_not_called()

    @pytest.mark.asyncio
    async def test_transport_failure_is_500(self, test_client, mock_smtp):
        mock_smtp.side_effect = OSError("unreachable")
        response = await test_client.post("/api/send-email", json=FORM)

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to send email."

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field, value",
        [
            ("firstName", "Eve\r\nBcc: victim@example.com"),
            ("lastName", "Smith\nBcc: victim@example.com"),
            ("email", "eve@example.com\r\nBcc: victim@example.com"),
        ],
    )
    async def test_line_break_in_header_field_is_400(self, test_client, mock_smtp, field, value):
        response = await test_client.post("/api/send-email", json={**FORM, field: value})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        mock_smtp.assert_not_called()

    @pytest.mark.asyncio
    async def test_line_breaks_in_message_are_kept(self, test_client, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value
        response = await test_client.post(
            "/api/send-email", json={**FORM, "message": "line one\r\nline two"}
        )

        assert response.status_code == 200
        server.sendmail.assert_called_once()
