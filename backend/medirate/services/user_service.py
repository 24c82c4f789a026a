"""
MediRate Admin Backend — User Role Service
============================================

What:  Reads and updates the role of a `User` row, and decides where a user
       lands after sign-in.
How:   Single-statement queries against the `User` table. The update uses
       UPDATE ... RETURNING so the response shows the stored row.
Who:   Called by /api/update-user-role, /api/user-role and
       /api/landing-redirect.

Concurrent role updates for the same email are last-write-wins.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from medirate.exceptions import DatabaseError, NotFoundError, ValidationError
from medirate.models.user import User
from medirate.schemas.users import (
    SUBSCRIPTION_MANAGER_LANDING,
    VALID_ROLES,
    UpdateUserRoleResponse,
    UserProjection,
    UserRoleResponse,
)

logger = logging.getLogger(__name__)


def landing_for_role(role: Optional[str]) -> Optional[str]:
    """None means "stay on the default landing page"."""
    if role == "subscription_manager":
        return SUBSCRIPTION_MANAGER_LANDING
    return None


class UserService:

    async def update_role(
        self, db: AsyncSession, email: Optional[str], role: Optional[str]
    ) -> UpdateUserRoleResponse:
        """
        Sets `Role` and `UpdatedAt` on the row whose `Email` matches.

        Raises:
            ValidationError: Missing email/role, or role not in VALID_ROLES
                             (checked before any statement runs)
            NotFoundError:   No row has that email
            DatabaseError:   Statement or commit failed
        """
        if not email or not role:
            raise ValidationError("Email and role are required", field="email" if not email else "role")
        if role not in VALID_ROLES:
            raise ValidationError(
                "Invalid role. Must be 'user' or 'subscription_manager'", field="role"
            )

        logger.info("Updating user role for %s to %s", email, role)
        try:
            result = await db.execute(
                update(User)
                .where(User.email == email)
                .values(role=role, updated_at=datetime.now(timezone.utc))
                .returning(User.user_id, User.email, User.role)
            )
            row = result.one_or_none()
            await db.commit()
        except Exception as e:
            logger.error("Error updating user role for %s: %s", email, str(e))
            raise DatabaseError(
                message="Failed to update user role",
                context={"error_type": type(e).__name__},
            ) from e

        if row is None:
            raise NotFoundError(resource="user", resource_id=email)

        user_id, stored_email, stored_role = row
        return UpdateUserRoleResponse(
            user=UserProjection(user_id=user_id, email=stored_email, role=stored_role)
        )

    async def get_role(self, db: AsyncSession, email: str) -> UserRoleResponse:
        try:
            result = await db.execute(select(User).where(User.email == email).limit(1))
            user = result.scalars().first()
        except Exception as e:
            logger.error("Error fetching user role for %s: %s", email, str(e))
            raise DatabaseError(
                message="Failed to fetch user role",
                context={"error_type": type(e).__name__},
            ) from e

        if user is None:
            raise NotFoundError(resource="user", resource_id=email)

        return UserRoleResponse(
            role=user.role,
            user_id=user.user_id,
            email=user.email,
            redirect_to=landing_for_role(user.role),
        )

    async def landing_redirect(self, db: AsyncSession, email: str) -> Optional[str]:
        """
        Where to send the user after sign-in.

        A failed lookup (no row, database down) is logged and treated as
        "no role", so sign-in is never blocked by this check.
        """
        try:
            role_info = await self.get_role(db, email)
        except Exception as e:
            logger.warning("Role lookup for landing redirect failed for %s: %s", email, str(e))
            return None
        return role_info.redirect_to


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
