"""
MediRate Admin Backend — Document Management Schemas
======================================================

What:  Request/response contracts for the /api/documents endpoints.
How:   Field names follow the dashboard's camelCase JSON; Python attributes
       stay snake_case through aliases (populate_by_name lets services build
       the models with either spelling).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class BlobObject(BaseModel):
    """One object in the blob store, as returned by a listing."""
    url: str
    pathname: str
    size: int = 0
    uploaded_at: Optional[datetime] = Field(default=None, alias="uploadedAt")

    model_config = {"populate_by_name": True}


class BlobListPage(BaseModel):
    """One page of a prefix listing; `cursor` is None on the last page."""
    blobs: List[BlobObject] = Field(default_factory=list)
    cursor: Optional[str] = None
    has_more: bool = Field(default=False, alias="hasMore")

    model_config = {"populate_by_name": True}


class CreateFolderRequest(BaseModel):
    folder_name: Optional[str] = Field(default=None, alias="folderName")
    parent_path: Optional[str] = Field(default=None, alias="parentPath")

    model_config = {"populate_by_name": True}


class FolderInfo(BaseModel):
    """A synthesized folder: id and pathname are the placeholder path minus `/.gitkeep`."""
    id: str
    name: str
    pathname: str


class CreateFolderResponse(BaseModel):
    success: bool = True
    folder: FolderInfo


class DeleteDocumentRequest(BaseModel):
    pathname: Optional[str] = None


class DeleteDocumentResponse(BaseModel):
    success: bool = True
    deleted: int = Field(description="Number of blob objects removed")


class MoveDocumentRequest(BaseModel):
    file_id: Optional[str] = Field(default=None, alias="fileId")
    new_parent_id: Optional[str] = Field(default=None, alias="newParentId")
    remove_from_old_parent: bool = Field(default=True, alias="removeFromOldParent")

    model_config = {"populate_by_name": True}


class RenameDocumentRequest(BaseModel):
    file_id: Optional[str] = Field(default=None, alias="fileId")
    new_name: Optional[str] = Field(default=None, alias="newName")

    model_config = {"populate_by_name": True}


class UploadedBlob(BaseModel):
    url: str
    pathname: str


class UploadDocumentResponse(BaseModel):
    success: bool = True
    blob: UploadedBlob
