"""
MediRate Admin Backend — Document Library Route Handlers
==========================================================

What:  The admin document library API.

    GET  /api/documents                 one page of a prefix listing (any user)
    GET  /api/documents/download        stream one stored file back (any user)
    POST /api/documents/create-folder   placeholder object for an empty folder
    POST /api/documents/delete          one file, or a folder and its contents
    POST /api/documents/move            reparent a Drive item
    POST /api/documents/rename          rename a Drive item
    POST /api/documents/upload          multipart upload into a folder

How:   Every mutating handler depends on `require_admin`; each then makes a
       single DocumentService call and returns its result unchanged.
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from medirate.auth import Identity, get_current_identity, require_admin
from medirate.exceptions import ValidationError
from medirate.schemas.common import ErrorResponse, SuccessResponse
from medirate.schemas.documents import (
    BlobListPage,
    CreateFolderRequest,
    CreateFolderResponse,
    DeleteDocumentRequest,
    DeleteDocumentResponse,
    MoveDocumentRequest,
    RenameDocumentRequest,
    UploadDocumentResponse,
)
from medirate.services.document_service import document_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])

DOCUMENT_ERRORS = {
    400: {"description": "Missing or invalid field", "model": ErrorResponse},
    401: {"description": "No valid identity", "model": ErrorResponse},
    403: {"description": "Not an admin", "model": ErrorResponse},
    500: {"description": "Storage or Drive failure", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=BlobListPage,
    summary="List documents under a prefix",
)
async def list_documents(
    prefix: str = Query(default="", description="Pathname prefix, e.g. 'Texas/'"),
    cursor: str | None = Query(default=None, description="Cursor from the previous page"),
    limit: int | None = Query(default=None, ge=1, le=1000),
    identity: Identity = Depends(get_current_identity),
) -> BlobListPage:
    return await document_service.list_documents(prefix=prefix, cursor=cursor, limit=limit)


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = "".join(
        ch for ch in filename if ch.isascii() and ch.isprintable() and ch != '"'
    ).strip() or "document"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.get(
    "/download",
    response_class=StreamingResponse,
    responses={
        400: {"description": "Missing URL or not a document store address", "model": ErrorResponse},
        401: {"description": "No valid identity", "model": ErrorResponse},
        404: {"description": "The store has no such object", "model": ErrorResponse},
        500: {"description": "Storage unreachable", "model": ErrorResponse},
    },
    summary="Download a stored document",
)
async def download_document(
    url: str | None = Query(default=None, description="Blob URL from a listing"),
    identity: Identity = Depends(get_current_identity),
) -> StreamingResponse:
    download = await document_service.open_download(url)
    headers = {"Content-Disposition": content_disposition(download.filename)}
    if download.content_length:
        headers["Content-Length"] = download.content_length
    return StreamingResponse(
        download.iter_bytes(),
        media_type=download.content_type,
        headers=headers,
        background=BackgroundTask(download.aclose),
    )


@router.post(
    "/create-folder",
    response_model=CreateFolderResponse,
    responses=DOCUMENT_ERRORS,
    summary="Create an empty folder",
)
async def create_folder(
    body: CreateFolderRequest,
    admin: Identity = Depends(require_admin),
) -> CreateFolderResponse:
    return await document_service.create_folder(body.folder_name, body.parent_path)


@router.post(
    "/delete",
    response_model=DeleteDocumentResponse,
    responses=DOCUMENT_ERRORS,
    summary="Delete a file or a whole folder",
    description=(
        "An exact pathname match deletes that one object. Otherwise every object "
        "under `pathname/` is deleted. The response reports how many were removed."
    ),
)
async def delete_document(
    body: DeleteDocumentRequest,
    admin: Identity = Depends(require_admin),
) -> DeleteDocumentResponse:
    return await document_service.delete(body.pathname)


@router.post(
    "/move",
    response_model=SuccessResponse,
    responses=DOCUMENT_ERRORS,
    summary="Move a Drive file or folder under a new parent",
)
async def move_document(
    body: MoveDocumentRequest,
    admin: Identity = Depends(require_admin),
) -> SuccessResponse:
    await document_service.move(body.file_id, body.new_parent_id, body.remove_from_old_parent)
    return SuccessResponse()


@router.post(
    "/rename",
    response_model=SuccessResponse,
    responses=DOCUMENT_ERRORS,
    summary="Rename a Drive file or folder",
)
async def rename_document(
    body: RenameDocumentRequest,
    admin: Identity = Depends(require_admin),
) -> SuccessResponse:
    await document_service.rename(body.file_id, body.new_name)
    return SuccessResponse()


@router.post(
    "/upload",
    response_model=UploadDocumentResponse,
    responses=DOCUMENT_ERRORS,
    summary="Upload a file into a folder",
)
async def upload_document(
    file: UploadFile | None = File(default=None, description="File to store"),
    folder_path: str | None = Form(default=None, alias="folderPath"),
    admin: Identity = Depends(require_admin),
) -> UploadDocumentResponse:
    if file is None:
        raise ValidationError("No file provided", field="file")
    content = await file.read()
    return await document_service.upload(
        filename=file.filename,
        content=content,
        content_type=file.content_type,
        folder_path=folder_path,
    )
