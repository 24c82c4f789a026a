"""
MediRate Admin Backend — Document Library Service
===================================================

What:  Folder and file operations behind the admin document library.
How:   Blob-backed operations (create folder, delete, upload, list and
       download) go through BlobService; move and rename go through
       DriveService.
Who:   Called by the /api/documents route handlers.

Folder model:
    The blob store is flat. A pathname is a folder when no object has that
    exact pathname; its members are every object under `pathname + "/"`.

    create-folder "Reports" under "Texas/"  →  put  Texas/Reports/.gitkeep
    delete "Texas/Reports"                  →  list prefix "Texas/Reports"
                                               no exact hit → delete every
                                               object under "Texas/Reports/"

Delete is list-then-delete and not atomic. Objects are removed in batches;
when a batch fails the request fails, and the error context records how
many objects were already removed.
"""

import logging
from typing import List, Optional

from medirate.config import settings
from medirate.exceptions import BlobStorageError, ValidationError
from medirate.schemas.documents import (
    BlobListPage,
    BlobObject,
    CreateFolderResponse,
    DeleteDocumentResponse,
    FolderInfo,
    UploadDocumentResponse,
)
from medirate.services.blob_service import BlobDownload, BlobService, blob_service
from medirate.services.drive_service import DriveService, drive_service

logger = logging.getLogger(__name__)

FOLDER_PLACEHOLDER = ".gitkeep"


def join_path(parent: Optional[str], name: str) -> str:
    """Joins a folder path and a name, ignoring slashes around the parent."""
    parent = (parent or "").strip("/")
    return f"{parent}/{name}" if parent else name


def select_for_delete(blobs: List[BlobObject], pathname: str) -> List[BlobObject]:
    """
    Picks the objects a delete of `pathname` removes.

    An exact match means a single file; otherwise every object strictly
    under the folder. `a/bc.txt` is not inside folder `a/b`.
    """
    exact = [blob for blob in blobs if blob.pathname == pathname]
    if exact:
        return exact[:1]
    folder_prefix = pathname + "/"
    return [blob for blob in blobs if blob.pathname.startswith(folder_prefix)]


class DocumentService:

    def __init__(
        self,
        blobs: BlobService = blob_service,
        drive: DriveService = drive_service,
        delete_batch_size: Optional[int] = None,
    ):
        self.blobs = blobs
        self.drive = drive
        self.delete_batch_size = delete_batch_size or settings.blob_delete_batch_size

    async def create_folder(
        self, folder_name: Optional[str], parent_path: Optional[str] = None
    ) -> CreateFolderResponse:
        name = (folder_name or "").strip()
        if not name:
            raise ValidationError("Folder name is required", field="folderName")
        if "/" in name:
            raise ValidationError("Folder name cannot contain '/'", field="folderName")

        placeholder = join_path(parent_path, f"{name}/{FOLDER_PLACEHOLDER}")
        stored = await self.blobs.put(placeholder, b"", content_type="text/plain")

        folder_path = stored.pathname.removesuffix(f"/{FOLDER_PLACEHOLDER}")
        logger.info("Created folder %s", folder_path)
        return CreateFolderResponse(
            folder=FolderInfo(id=folder_path, name=name, pathname=folder_path)
        )

    async def delete(self, pathname: Optional[str]) -> DeleteDocumentResponse:
        """
        Deletes one file, or a folder and everything under it.

        Returns the number of objects removed; a pathname that matches
        nothing removes 0 and still succeeds.
        """
        target = (pathname or "").rstrip("/")
        if not target:
            raise ValidationError("pathname is required", field="pathname")

        candidates = await self.blobs.list_all(prefix=target)
        doomed = select_for_delete(candidates, target)

        deleted = 0
        for start in range(0, len(doomed), self.delete_batch_size):
            batch = doomed[start:start + self.delete_batch_size]
            try:
                await self.blobs.delete([blob.url for blob in batch])
            except BlobStorageError as e:
                e.context.update({"pathname": target, "deleted": deleted, "total": len(doomed)})
                logger.error(
                    "Delete of %s stopped after %d of %d object(s)", target, deleted, len(doomed)
                )
                raise
            deleted += len(batch)

        logger.info("Deleted %d object(s) for %s", deleted, target)
        return DeleteDocumentResponse(deleted=deleted)

    async def upload(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        folder_path: Optional[str] = None,
    ) -> UploadDocumentResponse:
        # Existing objects at the same pathname are overwritten
        if not filename:
            raise ValidationError("No file provided", field="file")

        pathname = join_path(folder_path, filename)
        stored = await self.blobs.put(
            pathname, content, content_type=content_type or "application/octet-stream"
        )
        logger.info("Uploaded %s (%d bytes)", stored.pathname, len(content))
        return UploadDocumentResponse(blob=stored)

    async def list_documents(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> BlobListPage:
        return await self.blobs.list_page(prefix=prefix, cursor=cursor, limit=limit)

    async def open_download(self, url: Optional[str]) -> BlobDownload:
        if not url:
            raise ValidationError("No URL provided", field="url")
        return await self.blobs.open_download(url)

    async def move(
        self,
        file_id: Optional[str],
        new_parent_id: Optional[str],
        remove_from_old_parent: bool = True,
    ) -> None:
        if not file_id or not new_parent_id:
            raise ValidationError("fileId and newParentId are required", field="fileId")
        await self.drive.move(file_id, new_parent_id, remove_from_old_parent)

    async def rename(self, file_id: Optional[str], new_name: Optional[str]) -> None:
        if not file_id or not new_name:
            raise ValidationError("fileId and newName are required", field="fileId")
        await self.drive.rename(file_id, new_name)


# ── Singleton Instance ────────────────────────────────────────────────────
document_service = DocumentService()
