"""Multipart detection and parsing for channel requests."""

import os
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path

from python_multipart.exceptions import FormParserError
from python_multipart.multipart import (
    Field,
    File,
    FormParser,
    MultipartParser,
    MultipartState,
    parse_options_header,
)

from portal_params.core.errors import MultipartParsingError, UploadSizeExceededError
from portal_params.core.logger import LogIcon, logger
from portal_params.core.settings import Settings
from portal_params.events.temp_files import TempFileTracker
from portal_params.models.request import PortalRequest
from portal_params.models.upload import UploadedFile

CHUNK_SIZE = 64 * 1024


@dataclass
class MultipartParsingResult:
    files: dict[str, list[UploadedFile]] = field(default_factory=dict)
    fields: dict[str, list[str]] = field(default_factory=dict)


class MultipartResolver:
    """Parses multipart request bodies into uploaded-file handles and string fields.

    Parts whose disk spool outlives parsing are registered with ``tracker`` so
    they are reclaimed once nothing references the handle any more.
    """

    def __init__(
        self,
        tracker: TempFileTracker,
        default_encoding: str = "ISO-8859-1",
        max_file_size: int = -1,
        max_request_size: int = -1,
        max_in_memory_size: int = 10240,
        upload_dir: Path | None = None,
    ) -> None:
        self.tracker = tracker
        self.default_encoding = default_encoding
        self.max_file_size = max_file_size
        self.max_request_size = max_request_size
        self.max_in_memory_size = max_in_memory_size
        self.upload_dir = upload_dir

    @classmethod
    def from_settings(cls, settings: Settings, tracker: TempFileTracker) -> "MultipartResolver":
        return cls(
            tracker,
            default_encoding=settings.DEFAULT_ENCODING,
            max_file_size=settings.UPLOAD_MAX_FILE_SIZE,
            max_request_size=settings.UPLOAD_MAX_REQUEST_SIZE,
            max_in_memory_size=settings.UPLOAD_MAX_IN_MEMORY_SIZE,
            upload_dir=settings.UPLOAD_DIR,
        )

    @staticmethod
    def is_multipart(request: PortalRequest) -> bool:
        return request.method.upper() == "POST" and request.mime_type.startswith("multipart/")

    def determine_encoding(self, request: PortalRequest) -> str:
        """Request charset, falling back to the configured default."""
        return request.character_encoding or self.default_encoding

    def parse(self, request: PortalRequest, encoding: str) -> MultipartParsingResult:
        """Parse the request body. Raises MultipartParsingError carrying any fields read so far."""
        result = MultipartParsingResult()
        # every file part the parser opens, including one cut off mid-stream
        opened: list[File] = []
        parts: list[File] = []

        class RecordedFile(File):
            def __init__(self, file_name, field_name=None, config=None) -> None:
                super().__init__(file_name, field_name, config or {})
                opened.append(self)

        def on_field(part: Field) -> None:
            name = (part.field_name or b"").decode(encoding)
            value = (part.value or b"").decode(encoding)
            result.fields.setdefault(name, []).append(value)

        def on_file(part: File) -> None:
            parts.append(part)
            if self.max_file_size >= 0 and part.size > self.max_file_size:
                raise UploadSizeExceededError("File", part.size, self.max_file_size)

        try:
            if self.max_request_size >= 0 and len(request.body) > self.max_request_size:
                raise UploadSizeExceededError("Request", len(request.body), self.max_request_size)

            _, options = parse_options_header(request.content_type)
            parser = FormParser(
                request.mime_type,
                on_field,
                on_file,
                boundary=options.get(b"boundary"),
                FileClass=RecordedFile,
                config=self._config(),
            )
            stream = BytesIO(request.body)
            while chunk := stream.read(CHUNK_SIZE):
                parser.write(chunk)
            parser.finalize()

            if not isinstance(parser.parser, MultipartParser) or parser.parser.state != MultipartState.END:
                raise FormParserError("Multipart body ended before the closing boundary")

            for part in parts:
                self._absorb(part, encoding, result)
        except (FormParserError, UploadSizeExceededError, ValueError, LookupError) as ex:
            for part in opened:
                self._discard(part)
            result.files.clear()
            raise MultipartParsingError(f"Failed to parse multipart request: {ex}", partial=result) from ex

        logger.debug(
            "Parsed multipart request",
            icon=LogIcon.UPLOAD,
            files=sum(len(v) for v in result.files.values()),
            fields=len(result.fields),
        )
        return result

    def _config(self) -> dict:
        config = {
            "MAX_MEMORY_FILE_SIZE": self.max_in_memory_size,
            "UPLOAD_DELETE_TMP": False,
        }
        if self.upload_dir is not None:
            config["UPLOAD_DIR"] = str(self.upload_dir)
        return config

    def _absorb(self, part: File, encoding: str, result: MultipartParsingResult) -> None:
        """Turn a file part into an UploadedFile, dropping parts submitted without a filename."""
        filename = (part.file_name or b"").decode(encoding)
        if not filename:
            self._discard(part)
            return

        field_name = (part.field_name or b"").decode(encoding)
        uploaded = UploadedFile(field_name, filename, part)
        self.tracker.track(uploaded, part.file_object, uploaded.path)
        result.files.setdefault(field_name, []).append(uploaded)

    @staticmethod
    def _discard(part: File) -> None:
        path = None if part.in_memory or part.actual_file_name is None else Path(os.fsdecode(part.actual_file_name))
        part.close()
        if path is not None:
            path.unlink(missing_ok=True)
