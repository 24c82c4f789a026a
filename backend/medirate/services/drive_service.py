"""
MediRate Admin Backend — Google Drive Service
===============================================

What:  Moves and renames files or folders in the shared Drive document library.
How:   google-api-python-client `drive` v3 resource authenticated with the
       service account from settings. The client library is blocking, so
       each call runs in Starlette's threadpool.
Who:   Called by POST /api/documents/move and /api/documents/rename.

Move semantics (Drive has multi-parent files):
    1. files.get(fields="parents") reads the current parents
    2. files.update(addParents=new, removeParents=old) reparents in one call
    With remove_from_old_parent=False the file keeps its old parents too.
"""

import logging
from typing import Any, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from starlette.concurrency import run_in_threadpool

from medirate.config import settings
from medirate.exceptions import DriveServiceError

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]


class DriveService:
    """
    Wrapper over the Drive v3 `files` collection.

    The API resource is built on first use and reused; pass `client` to
    supply a prebuilt (or mocked) resource.
    """

    def __init__(self, client: Optional[Any] = None):
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not (settings.google_drive_client_email and settings.google_drive_private_key):
                raise DriveServiceError(
                    "Document service is not configured",
                    context={"reason": "missing_service_account"},
                )
            credentials = service_account.Credentials.from_service_account_info(
                {
                    "type": "service_account",
                    "project_id": settings.google_drive_project_id,
                    "client_email": settings.google_drive_client_email,
                    "private_key": settings.google_drive_private_key,
                    "token_uri": "https://oauth2.googleapis.com/token",
                },
                scopes=DRIVE_SCOPES,
            )
            self._client = build("drive", "v3", credentials=credentials, cache_discovery=False)
        return self._client

    async def move(
        self,
        file_id: str,
        new_parent_id: str,
        remove_from_old_parent: bool = True,
    ) -> None:
        def _move() -> None:
            files = self._get_client().files()
            current = files.get(
                fileId=file_id, fields="parents", supportsAllDrives=True
            ).execute()
            old_parents = ",".join(current.get("parents", []))

            update_args = {
                "fileId": file_id,
                "addParents": new_parent_id,
                "fields": "id, parents",
                "supportsAllDrives": True,
            }
            if remove_from_old_parent and old_parents:
                update_args["removeParents"] = old_parents
            files.update(**update_args).execute()

        await self._call("move", file_id, _move)
        logger.info("Moved Drive item %s under %s", file_id, new_parent_id)

    async def rename(self, file_id: str, new_name: str) -> None:
        def _rename() -> None:
            self._get_client().files().update(
                fileId=file_id,
                body={"name": new_name},
                fields="id, name",
                supportsAllDrives=True,
            ).execute()

        await self._call("rename", file_id, _rename)
        logger.info("Renamed Drive item %s", file_id)

    async def _call(self, operation: str, file_id: str, fn) -> None:
        try:
            await run_in_threadpool(fn)
        except DriveServiceError:
            raise
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            logger.error("Drive %s of %s failed (HTTP %s): %s", operation, file_id, status, e)
            raise DriveServiceError(
                context={"operation": operation, "file_id": file_id, "status": status}
            ) from e
        except Exception as e:
            logger.error("Drive %s of %s failed: %s", operation, file_id, str(e), exc_info=True)
            raise DriveServiceError(
                context={"operation": operation, "file_id": file_id, "error_type": type(e).__name__}
            ) from e


# ── Singleton Instance ────────────────────────────────────────────────────
drive_service = DriveService()
