"""
MediRate Admin Backend — User Role Route Handlers
===================================================

What:  POST /api/update-user-role   switch a user between `user` and
                                    `subscription_manager`
       GET  /api/user-role          the caller's role and landing page
       GET  /api/landing-redirect   just the landing page, never an error

Who:   The subscription settings screen (role update) and the dashboard
       shell, which sends subscription managers to /settings on load.

Note:  update-user-role is called by the subscription flow, not by the admin
       dashboard, so it is not admin-gated.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from medirate.auth import Identity, get_current_identity
from medirate.database import get_db_session
from medirate.schemas.common import ErrorResponse
from medirate.schemas.users import (
    LandingRedirectResponse,
    UpdateUserRoleRequest,
    UpdateUserRoleResponse,
    UserRoleResponse,
)
from medirate.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])


@router.post(
    "/update-user-role",
    response_model=UpdateUserRoleResponse,
    responses={
        400: {"description": "Missing field or invalid role", "model": ErrorResponse},
        404: {"description": "No user with that email", "model": ErrorResponse},
        500: {"description": "Update failed", "model": ErrorResponse},
    },
    summary="Update a user's role",
)
async def update_user_role(
    body: UpdateUserRoleRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UpdateUserRoleResponse:
    return await user_service.update_role(db, body.email, body.role)


@router.get(
    "/user-role",
    response_model=UserRoleResponse,
    responses={
        401: {"description": "No valid identity", "model": ErrorResponse},
        404: {"description": "No user row for the caller", "model": ErrorResponse},
    },
    summary="Get the caller's role",
)
async def get_user_role(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserRoleResponse:
    return await user_service.get_role(db, identity.email)


@router.get(
    "/landing-redirect",
    response_model=LandingRedirectResponse,
    summary="Where to send the caller after sign-in",
    description="`redirectTo` is null when the caller should stay on the default page.",
)
async def landing_redirect(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> LandingRedirectResponse:
    redirect_to = await user_service.landing_redirect(db, identity.email)
    return LandingRedirectResponse(redirect_to=redirect_to)
