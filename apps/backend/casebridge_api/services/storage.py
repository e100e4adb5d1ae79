from pathlib import Path
from typing import AsyncIterator, Iterable, Optional, Set
from uuid import uuid4

import anyio

from casebridge.models import CaseFile
from casebridge.schemas import StoredFile
from casebridge_api.config import settings
import logging

__all__ = ["StorageService", "storage_service", "CHUNK_SIZE"]

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class StorageService:
    """Handle case file uploads and downloads on local disk"""

    def __init__(
        self,
        upload_dir: str,
        max_size: int,
        allowed_mime_types: Iterable[str],
    ):
        self.upload_dir = Path(upload_dir)
        self.max_size = max_size
        self.allowed_mime_types: Set[str] = {mime.lower() for mime in allowed_mime_types}

    def validate_file(self, filename: Optional[str], content_type: Optional[str], file_size: int) -> bool:
        """Validate file before it is stored"""
        if not filename:
            logger.warning("[storage] Upload without filename")
            return False

        mimetype = (content_type or "").lower()
        if mimetype not in self.allowed_mime_types:
            logger.warning(f"[storage] Invalid file type: {mimetype or 'unknown'}")
            return False

        if file_size > self.max_size:
            logger.warning(f"[storage] File too large: {file_size} bytes (max {self.max_size})")
            return False

        return True

    def save_file(self, original_name: str, mimetype: str, file_content: bytes) -> StoredFile:
        """
        Save uploaded file to disk under a generated unique name
        Returns: description of the stored file
        """
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            filename = f"{uuid4().hex}{Path(original_name).suffix.lower()}"
            file_path = self.upload_dir / filename
            file_path.write_bytes(file_content)

            logger.info(f"[storage] Saved file: {file_path}")
            return StoredFile(
                original_name=original_name,
                filename=filename,
                path=str(file_path),
                mimetype=mimetype,
                size=len(file_content),
            )
        except OSError as e:
            logger.error(f"[storage] Failed to save file: {e}")
            raise

    def delete_file(self, file_path: str) -> None:
        """Delete file from disk"""
        path = Path(file_path)
        if path.exists():
            path.unlink()
            logger.info(f"[storage] Deleted file: {file_path}")

    def resolve_path(self, case_file: CaseFile) -> Path:
        """Location of a stored case file; older rows only carry the filename"""
        if case_file.path:
            return Path(case_file.path).resolve()
        return (self.upload_dir / case_file.filename).resolve()

    async def stream(self, path: Path, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Yield file content in chunks; the handle is closed however iteration ends"""
        async with await anyio.open_file(path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk


storage_service = StorageService(
    settings.UPLOAD_DIR,
    settings.MAX_UPLOAD_SIZE,
    settings.allowed_mime_types,
)
