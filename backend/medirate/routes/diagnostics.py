"""
MediRate Admin Backend — Diagnostic Route Handlers
====================================================

What:  Admin-only probes used when debugging production configuration.

    POST /api/test-email-verification   replay a verification request
    GET  /api/stripe/test               list a few Stripe customers
"""

from fastapi import APIRouter, Depends

from medirate.auth import Identity, require_admin
from medirate.schemas.common import ErrorResponse
from medirate.schemas.diagnostics import (
    EmailVerificationProbeRequest,
    EmailVerificationProbeResponse,
    StripeProbeResponse,
)
from medirate.services.diagnostics_service import diagnostics_service

router = APIRouter(prefix="/api", tags=["Diagnostics"])

PROBE_ERRORS = {
    401: {"description": "No valid identity", "model": ErrorResponse},
    403: {"description": "Not an admin", "model": ErrorResponse},
    500: {"description": "Upstream call failed", "model": ErrorResponse},
}


@router.post(
    "/test-email-verification",
    response_model=EmailVerificationProbeResponse,
    responses=PROBE_ERRORS,
    summary="Probe the email verification flow",
)
async def test_email_verification(
    body: EmailVerificationProbeRequest,
    admin: Identity = Depends(require_admin),
) -> EmailVerificationProbeResponse:
    return await diagnostics_service.probe_email_verification(body.email)


@router.get(
    "/stripe/test",
    response_model=StripeProbeResponse,
    responses=PROBE_ERRORS,
    summary="Probe the Stripe account",
)
async def test_stripe(
    admin: Identity = Depends(require_admin),
) -> StripeProbeResponse:
    return await diagnostics_service.probe_stripe()
