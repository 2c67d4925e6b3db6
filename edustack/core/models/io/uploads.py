"""
Upload I/O models.
"""

from __future__ import annotations

from typing import List

from .common import IOModel


class UploadedFile(IOModel):
    url: str
    filename: str
    size: int
    mimetype: str


class UploadedFiles(IOModel):
    files: List[UploadedFile]
