"""Uploaded file handles and upload status marker."""

import mimetypes
import os
from enum import StrEnum
from typing import BinaryIO

from pydantic import BaseModel, ConfigDict
from python_multipart.multipart import File

UPLOAD_STATUS_KEY = "up_upload_status"


class UploadState(StrEnum):
    """Outcome of multipart parsing for a request."""

    SUCCESS = "success"
    FAILURE = "failure"


class UploadStatus(BaseModel):
    """Upload outcome paired with the maximum file size in effect (-1 when unlimited)."""

    model_config = ConfigDict(frozen=True)

    status: UploadState
    max_size: int

    @property
    def succeeded(self) -> bool:
        return self.status is UploadState.SUCCESS


class UploadedFile:
    """One multipart file part with a non-empty original filename."""

    __slots__ = ("field_name", "filename", "content_type", "_file", "__weakref__")

    def __init__(self, field_name: str, filename: str, file: File) -> None:
        self.field_name = field_name
        self.filename = filename
        self.content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        self._file = file

    @property
    def size(self) -> int:
        return self._file.size

    @property
    def in_memory(self) -> bool:
        return self._file.in_memory

    @property
    def path(self) -> str | None:
        """Location of the spooled temp file, None while the part is held in memory."""
        if self._file.in_memory or self._file.actual_file_name is None:
            return None
        return os.fsdecode(self._file.actual_file_name)

    @property
    def file_object(self) -> BinaryIO:
        return self._file.file_object

    def open(self) -> BinaryIO:
        """Return the underlying file object rewound to the start."""
        fileobj = self._file.file_object
        fileobj.seek(0)
        return fileobj

    def read(self) -> bytes:
        return self.open().read()

    def __repr__(self) -> str:
        return f"UploadedFile(field_name={self.field_name!r}, filename={self.filename!r}, size={self.size})"
