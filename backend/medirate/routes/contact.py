"""
MediRate Admin Backend — Contact Form Route Handler
=====================================================

What:  /api/send-email relays the public "Contact Us" form by email.
How:   The route is registered for every verb so that anything but POST
       gets a 405 with an `Allow: POST` header from our own handler.
       The JSON body is parsed by EmailService rather than by FastAPI so
       the same code path serves every method.
"""

import logging

from fastapi import APIRouter, Request

from medirate.exceptions import MethodNotAllowedError
from medirate.schemas.common import ErrorResponse
from medirate.schemas.contact import ContactResponse
from medirate.services.email_service import email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Contact"])

ANY_METHOD = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route(
    "/send-email",
    methods=ANY_METHOD,
    response_model=ContactResponse,
    responses={
        400: {"description": "Required fields are missing", "model": ErrorResponse},
        405: {"description": "Only POST is accepted", "model": ErrorResponse},
        500: {"description": "Mail transport failed", "model": ErrorResponse},
    },
    summary="Relay a contact form submission",
)
async def send_email(request: Request) -> ContactResponse:
    if request.method != "POST":
        raise MethodNotAllowedError(allowed="POST")

    form = email_service.parse_form(await request.body())
    await email_service.send_contact(form)
    return ContactResponse()
