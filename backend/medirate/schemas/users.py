"""
MediRate Admin Backend — User Role Schemas
============================================

What:  Contracts for the role update, role lookup and landing redirect
       endpoints. The user projection keeps the table's PascalCase keys
       (UserID, Email, Role) on the wire.
"""

from typing import Optional

from pydantic import BaseModel, Field

# Roles a user row may be switched to through the API
VALID_ROLES = ("user", "subscription_manager")

# Where a subscription manager is sent instead of the dashboard
SUBSCRIPTION_MANAGER_LANDING = "/settings"


class UpdateUserRoleRequest(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None


class UserProjection(BaseModel):
    user_id: int = Field(alias="UserID")
    email: str = Field(alias="Email")
    role: Optional[str] = Field(default=None, alias="Role")

    model_config = {"populate_by_name": True, "from_attributes": True}


class UpdateUserRoleResponse(BaseModel):
    success: bool = True
    message: str = "User role updated successfully"
    user: UserProjection


class UserRoleResponse(BaseModel):
    role: Optional[str] = None
    user_id: Optional[int] = Field(default=None, alias="userID")
    email: str
    redirect_to: Optional[str] = Field(default=None, alias="redirectTo")

    model_config = {"populate_by_name": True}


class LandingRedirectResponse(BaseModel):
    redirect_to: Optional[str] = Field(default=None, alias="redirectTo")

    model_config = {"populate_by_name": True}
