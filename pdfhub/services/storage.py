"""
Object-store semantics on top of the GitHub Contents API.

    upload  → base64 + PUT  uploads/<millis>-<filename>
    list    → GET uploads/, files only
    delete  → GET (for the blob SHA) + DELETE, retried on conflict

Every method raises pdfhub.errors types; nothing here builds HTTP responses.
"""

import base64
import logging
import os
import time
from typing import Callable, Optional

from fastapi import UploadFile

from pdfhub.errors import DeleteConflict, NotFound, UpstreamFailure, ValidationError
from pdfhub.github import (
    DEFAULT_RAW_URL,
    GitHubAPIError,
    GitHubClient,
    GitHubConflict,
    GitHubNotFound,
    raw_url,
)
from pdfhub.schemas import DeleteResponse, StoredFile, UploadResponse
from pdfhub.services.provisioner import STORAGE_BRANCH, STORAGE_REPO

logger = logging.getLogger(__name__)

UPLOAD_FOLDER = "uploads"
PDF_MEDIA_TYPE = "application/pdf"
# GitHub rejects single files above 100 MiB
MAX_UPLOAD_BYTES = 100 * 1024 * 1024
DELETE_ATTEMPTS = 3


def validate_upload(content_type: Optional[str], size_bytes: int) -> None:
    """Type first, then size. Raises ValidationError."""
    if content_type != PDF_MEDIA_TYPE:
        raise ValidationError("Only PDF files allowed")

    if size_bytes > MAX_UPLOAD_BYTES:
        raise ValidationError("File too large (max 100MB)")


def _upload_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


def storage_path(filename: str, millis: int) -> str:
    # Browsers may send a full client path; only the final component is kept
    base = os.path.basename(filename.replace("\\", "/"))
    return f"{UPLOAD_FOLDER}/{millis}-{base}"


class ObjectStore:
    """One user's PDF store: the `uploads/` folder of <owner>/pdf-storage."""

    def __init__(
        self,
        client: GitHubClient,
        owner: str,
        raw_base_url: str = DEFAULT_RAW_URL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.owner = owner
        self.raw_base_url = raw_base_url
        self.clock = clock

    async def upload(self, file: Optional[UploadFile]) -> UploadResponse:
        if file is None:
            raise ValidationError("No file uploaded")

        try:
            validate_upload(file.content_type, _upload_size(file))

            filename = file.filename or "upload.pdf"
            content = await file.read()
            encoded = base64.b64encode(content).decode("ascii")
            path = storage_path(filename, int(self.clock() * 1000))

            try:
                await self.client.put_contents(
                    self.owner, STORAGE_REPO, path, encoded, message=f"Upload {filename}"
                )
            except GitHubAPIError as exc:
                logger.error("Upload of %s for %s failed: %s %r", path, self.owner, exc, exc.payload)
                raise UpstreamFailure("Upload failed") from exc
        finally:
            await file.close()

        logger.info("Uploaded %s for %s (%d bytes)", path, self.owner, len(content))
        return UploadResponse(
            success=True,
            url=raw_url(self.owner, STORAGE_REPO, STORAGE_BRANCH, path, base_url=self.raw_base_url),
        )

    async def list_files(self) -> list[StoredFile]:
        try:
            entries = await self.client.list_contents(self.owner, STORAGE_REPO, UPLOAD_FOLDER)
        except GitHubNotFound:
            # Folder is created by the first upload
            return []
        except GitHubAPIError as exc:
            logger.error("Listing files for %s failed: %s %r", self.owner, exc, exc.payload)
            raise UpstreamFailure("Failed to fetch files") from exc

        return [
            StoredFile(name=entry.name, path=entry.path, url=entry.download_url)
            for entry in entries
            if entry.type == "file"
        ]

    async def delete(self, file_name: Optional[str]) -> DeleteResponse:
        """
        Read the current SHA, then delete with it.

        GitHub answers a stale SHA with a conflict; the read is repeated up to
        DELETE_ATTEMPTS times. A file that vanishes after a conflict was taken
        by a concurrent delete and is reported as DeleteConflict, not success.
        """
        if not file_name:
            raise ValidationError("File name is required")
        if "/" in file_name or "\\" in file_name or file_name in (".", ".."):
            # Names address a single entry directly inside uploads/
            raise ValidationError("Invalid file name")

        path = f"{UPLOAD_FOLDER}/{file_name}"
        logger.info("Deleting %s for %s", path, self.owner)

        for attempt in range(1, DELETE_ATTEMPTS + 1):
            try:
                entry = await self.client.get_contents(self.owner, STORAGE_REPO, path)
            except GitHubNotFound as exc:
                if attempt == 1:
                    raise NotFound("File not found") from exc
                raise DeleteConflict("Failed to delete file") from exc
            except GitHubAPIError as exc:
                logger.error("Reading %s for %s failed: %s %r", path, self.owner, exc, exc.payload)
                raise UpstreamFailure("Failed to delete file") from exc

            try:
                result = await self.client.delete_contents(
                    self.owner, STORAGE_REPO, path, entry.sha, message=f"Delete {file_name}"
                )
            except GitHubConflict as exc:
                logger.warning(
                    "Delete of %s hit a conflict (attempt %d/%d): %s",
                    path, attempt, DELETE_ATTEMPTS, exc,
                )
                continue
            except GitHubNotFound as exc:
                # Gone between the read and the delete
                logger.warning("Delete of %s lost a race: %s", path, exc)
                raise DeleteConflict("Failed to delete file") from exc
            except GitHubAPIError as exc:
                logger.error("Deleting %s for %s failed: %s %r", path, self.owner, exc, exc.payload)
                raise UpstreamFailure("Failed to delete file") from exc

            return DeleteResponse(success=True, file=file_name, commit=result.commit)

        logger.error("Giving up deleting %s after %d conflicts", path, DELETE_ATTEMPTS)
        raise DeleteConflict("Failed to delete file")
