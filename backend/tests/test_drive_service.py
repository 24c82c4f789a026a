"""
MediRate Admin Backend — Google Drive Service Tests
=====================================================

What we test:
    ✅ Move reads current parents, then adds the new one and removes the old
    ✅ Move can keep the old parents
    ✅ Rename updates only the name
    ✅ Drive API errors become DriveServiceError
"""

from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

from medirate.config import settings
from medirate.exceptions import DriveServiceError
from medirate.services.drive_service import DriveService


class TestDriveService:

    def setup_method(self):
        self.client = MagicMock()
        self.files = self.client.files.return_value
        self.files.get.return_value.execute.return_value = {"parents": ["old-1", "old-2"]}
        self.service = DriveService(client=self.client)

    @pytest.mark.asyncio
    async def test_move_replaces_parents(self):
        await self.service.move("file-1", "new-parent")

        self.files.get.assert_called_once_with(fileId="file-1", fields="parents", supportsAllDrives=True)
        kwargs = self.files.update.call_args.kwargs
        assert kwargs["addParents"] == "new-parent"
        assert kwargs["removeParents"] == "old-1,old-2"
        assert kwargs["supportsAllDrives"] is True

    @pytest.mark.asyncio
    async def test_move_can_keep_old_parents(self):
        await self.service.move("file-1", "new-parent", remove_from_old_parent=False)
        assert "removeParents" not in self.files.update.call_args.kwargs

    @pytest.mark.asyncio
    async def test_rename(self):
        await self.service.rename("file-1", "Renamed.pdf")

        kwargs = self.files.update.call_args.kwargs
        assert kwargs["fileId"] == "file-1"
        assert kwargs["body"] == {"name": "Renamed.pdf"}

    @pytest.mark.asyncio
    async def test_http_error_becomes_drive_service_error(self):
        response = httplib2.Response({"status": 404})
        self.files.update.return_value.execute.side_effect = HttpError(response, b"not found")

        with pytest.raises(DriveServiceError) as exc_info:
            await self.service.rename("missing", "x")
        assert exc_info.value.context["status"] == 404

    @pytest.mark.asyncio
    async def test_unconfigured_service_account(self, monkeypatch):
        monkeypatch.setattr(settings, "google_drive_client_email", "")
        with pytest.raises(DriveServiceError):
            await DriveService().rename("file-1", "x")
