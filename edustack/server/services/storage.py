"""
Local media storage for uploaded images and videos.

Files land in ``<UPLOAD_DIR>/<kind>/<epoch millis>-<random hex>-<safe name>`` and are
addressed as ``<UPLOAD_BASE_URL>/<kind>/<stored name>``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from edustack.core.errors import BadRequestError
from edustack.core.identifiers import epoch_millis, short_token
from edustack.core.logging_config import get_logger
from edustack.core.models.io.uploads import UploadedFile
from edustack.server.core.config import settings

logger = get_logger(__name__)

ALLOWED_MEDIA_PREFIXES = ("image/", "video/")
_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(name: Optional[str]) -> str:
    """Basename of ``name`` with anything outside ``[A-Za-z0-9._-]`` replaced by ``_``."""
    base = Path(name or "").name
    cleaned = _UNSAFE_NAME.sub("_", base).strip("._")
    return cleaned or "file"


class MediaStorage:
    def __init__(self, directory: str, base_url: str, max_bytes: int):
        self.directory = Path(directory)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    async def save(self, upload: Optional[UploadFile], kind: str) -> UploadedFile:
        """
        Validate and store one uploaded file.

        Args:
            upload: The multipart file, or None when the field was missing
            kind: Sub-directory to store under (``images``, ``videos``, ``files``)

        Raises:
            BadRequestError: missing or empty file, wrong media type, too large
        """
        if upload is None or not upload.filename:
            raise BadRequestError("No file uploaded")
        mimetype = upload.content_type or ""
        if not mimetype.startswith(ALLOWED_MEDIA_PREFIXES):
            raise BadRequestError("Only image and video files are allowed")

        content = await upload.read(self.max_bytes + 1)
        if not content:
            raise BadRequestError("No file uploaded")
        if len(content) > self.max_bytes:
            raise BadRequestError(f"File too large (limit {self.max_bytes} bytes)")

        stored_name = f"{epoch_millis()}-{short_token()}-{safe_filename(upload.filename)}"
        target = self.directory / kind / stored_name
        await run_in_threadpool(self._write, target, content)
        logger.info(f"Stored upload {target} ({len(content)} bytes, {mimetype})")
        return UploadedFile(
            url=f"{self.base_url}/{kind}/{stored_name}",
            filename=upload.filename,
            size=len(content),
            mimetype=mimetype,
        )

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)


def get_media_storage() -> MediaStorage:
    uploads = settings.uploads
    return MediaStorage(uploads.directory, uploads.base_url, uploads.max_bytes)
