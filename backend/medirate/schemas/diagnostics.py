"""
MediRate Admin Backend — Diagnostic Endpoint Schemas
======================================================

What:  Contracts for the admin-only probes of the email verification flow
       and the payments provider.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class EmailVerificationProbeRequest(BaseModel):
    email: Optional[str] = None


class EmailVerificationProbeResponse(BaseModel):
    success: bool
    status: int
    result: Any = None
    brevo_api_key_exists: bool = Field(alias="brevoApiKeyExists")
    environment: str

    model_config = {"populate_by_name": True}


class StripeProbeResponse(BaseModel):
    success: bool = True
    configured: bool
    total_customers: int = Field(default=0, alias="totalCustomers")
    customer_emails: List[Optional[str]] = Field(default_factory=list, alias="customerEmails")

    model_config = {"populate_by_name": True}
