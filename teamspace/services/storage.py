"""Local storage for uploaded project files."""
import logging
import uuid
from pathlib import Path
from typing import Tuple

from fastapi import HTTPException, UploadFile, status

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml"}
DOCUMENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
SPREADSHEET_TYPES = {
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
ALLOWED_MIME_TYPES = IMAGE_TYPES | DOCUMENT_TYPES | SPREADSHEET_TYPES


def type_category(mime_type: str) -> str:
    if mime_type in IMAGE_TYPES:
        return "image"
    if mime_type in DOCUMENT_TYPES:
        return "document"
    if mime_type in SPREADSHEET_TYPES:
        return "spreadsheet"
    return "other"


def format_size(size: int) -> str:
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(units) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {units[exponent]}"


def file_extension(filename: str) -> str:
    return Path(filename or "").suffix.lstrip(".").lower() or "file"


def validate_upload(upload: UploadFile) -> None:
    if upload.content_type not in ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File type not allowed: {upload.content_type}",
        )


class LocalFileStorage:
    """Stores uploads under ``root/<project id>/`` with a unique file name."""

    storage_type = "local"

    def __init__(self, root, max_size: int, url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.max_size = max_size
        self.url_prefix = url_prefix.rstrip("/")

    async def save(self, project_id: int, upload: UploadFile) -> Tuple[str, str, str, int]:
        """Stream ``upload`` to disk and return ``(name, path, url, size)``.

        Aborts with 413 as soon as the size limit is exceeded.
        """
        project_dir = self.root / str(project_id)
        project_dir.mkdir(parents=True, exist_ok=True)

        suffix = Path(upload.filename or "").suffix.lower()
        unique_name = f"{uuid.uuid4().hex}{suffix}"
        target = project_dir / unique_name

        total_size = 0
        try:
            with open(target, "wb") as handle:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    total_size += len(chunk)
                    if total_size > self.max_size:
                        raise HTTPException(
                            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                            detail=f"File too large. Maximum size: {format_size(self.max_size)}",
                        )
                    handle.write(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise

        relative_path = f"{project_id}/{unique_name}"
        return unique_name, relative_path, f"{self.url_prefix}/{relative_path}", total_size

    def delete(self, relative_path: str) -> None:
        (self.root / relative_path).unlink(missing_ok=True)
