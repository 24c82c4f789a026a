"""
MediRate Admin Backend — Diagnostics Service
==============================================

What:  Admin-only probes that exercise two collaborators end to end:
       the site's email verification endpoint and the Stripe account.
Who:   Called by /api/test-email-verification and /api/stripe/test.

Neither probe returns secrets. The Brevo and Stripe keys are reported
only as present or absent.
"""

import logging
from typing import Optional

import httpx
import stripe
from starlette.concurrency import run_in_threadpool

from medirate.config import settings
from medirate.exceptions import UpstreamServiceError, ValidationError
from medirate.schemas.diagnostics import EmailVerificationProbeResponse, StripeProbeResponse

logger = logging.getLogger(__name__)

STRIPE_SAMPLE_SIZE = 5


class DiagnosticsService:

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    async def probe_email_verification(self, email: Optional[str]) -> EmailVerificationProbeResponse:
        """Replays a verification request against the site and reports what came back."""
        if not email:
            raise ValidationError("Email is required", field="email")

        url = f"{settings.site_url.rstrip('/')}/api/email-verification/request"
        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout_seconds, transport=self.transport
            ) as client:
                response = await client.post(url, json={"email": email})
        except httpx.HTTPError as e:
            logger.error("Email verification probe failed: %s", str(e))
            raise UpstreamServiceError(
                "Email verification test failed",
                context={"url": url, "error_type": type(e).__name__},
            ) from e

        try:
            result = response.json()
        except ValueError:
            result = response.text

        return EmailVerificationProbeResponse(
            success=response.is_success,
            status=response.status_code,
            result=result,
            brevo_api_key_exists=bool(settings.brevo_api_key),
            environment=settings.environment,
        )

    async def probe_stripe(self) -> StripeProbeResponse:
        if not settings.stripe_secret_key:
            return StripeProbeResponse(configured=False)

        try:
            customers = await run_in_threadpool(
                stripe.Customer.list,
                limit=STRIPE_SAMPLE_SIZE,
                api_key=settings.stripe_secret_key,
            )
        except stripe.StripeError as e:
            logger.error("Stripe test failed: %s", type(e).__name__)
            raise UpstreamServiceError(
                "Stripe test failed", context={"error_type": type(e).__name__}
            ) from e

        emails = [customer.get("email") for customer in customers.data]
        logger.info("Stripe test listed %d customer(s)", len(emails))
        return StripeProbeResponse(
            configured=True,
            total_customers=len(emails),
            customer_emails=emails,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
diagnostics_service = DiagnosticsService()
