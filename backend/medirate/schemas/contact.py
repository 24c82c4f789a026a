"""
MediRate Admin Backend — Contact Form Schemas
===============================================

What:  Body of the public "Contact Us" form relayed by /api/send-email.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ContactRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    message: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None

    model_config = {"populate_by_name": True}


class ContactResponse(BaseModel):
    success: bool = True
    message: str = "Email sent successfully!"
