"""
MediRate Admin Backend — Admin Record Route Handlers
======================================================

What:  DELETE /api/admin/delete-bill, /delete-provider-alert and
       /delete-state-plan-amendment.
How:   `require_admin` runs first; the body is then handed to RecordService,
       which validates the key and issues one DELETE statement.
Who:   Called by the admin dashboard's rate development tables.

The body of a DELETE request is unusual but is what the dashboard sends.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from medirate.auth import Identity, require_admin
from medirate.database import get_db_session
from medirate.schemas.admin import DeleteBillRequest, DeleteByIdRequest
from medirate.schemas.common import ErrorResponse, MessageResponse
from medirate.services.record_service import record_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

ADMIN_ERRORS = {
    400: {"description": "Missing identifier", "model": ErrorResponse},
    401: {"description": "No valid identity", "model": ErrorResponse},
    403: {"description": "Not an admin", "model": ErrorResponse},
    500: {"description": "Delete failed", "model": ErrorResponse},
}


@router.delete(
    "/delete-bill",
    response_model=MessageResponse,
    responses=ADMIN_ERRORS,
    summary="Delete a tracked bill by URL",
)
async def delete_bill(
    body: DeleteBillRequest,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    message = await record_service.delete_bill(db, body.url)
    return MessageResponse(message=message)


@router.delete(
    "/delete-provider-alert",
    response_model=MessageResponse,
    responses=ADMIN_ERRORS,
    summary="Delete a provider alert by ID",
)
async def delete_provider_alert(
    body: DeleteByIdRequest,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    message = await record_service.delete_provider_alert(db, body.id)
    return MessageResponse(message=message)


@router.delete(
    "/delete-state-plan-amendment",
    response_model=MessageResponse,
    responses=ADMIN_ERRORS,
    summary="Delete a state plan amendment by ID",
)
async def delete_state_plan_amendment(
    body: DeleteByIdRequest,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    message = await record_service.delete_state_plan_amendment(db, body.id)
    return MessageResponse(message=message)
