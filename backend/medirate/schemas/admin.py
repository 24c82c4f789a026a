"""
MediRate Admin Backend — Admin Record Request Schemas
=======================================================

What:  Bodies accepted by the DELETE /api/admin/* handlers.

Every identifying field is optional at the schema level so that a missing
key reaches the service, which answers with a field-specific 400 message
instead of FastAPI's generic 422 schema error.
"""

from typing import Optional

from pydantic import BaseModel, Field


class DeleteBillRequest(BaseModel):
    url: Optional[str] = Field(default=None, description="Source URL identifying the bill")


class DeleteByIdRequest(BaseModel):
    """Body for provider alert and state plan amendment deletes."""
    id: Optional[int] = Field(default=None, description="Row identifier")
