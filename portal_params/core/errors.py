"""Exceptions and error reporting for channel request processing."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from portal_params.core.logger import LogIcon, logger

if TYPE_CHECKING:
    from portal_params.processing.multipart import MultipartParsingResult


class PortalParamsError(Exception):
    """Base exception for request parameter processing."""


class LayoutLookupError(PortalParamsError):
    """An fname could not be mapped to a subscribe id in the user's layout."""

    def __init__(self, fname: str, reason: str = "unknown fname") -> None:
        self.fname = fname
        super().__init__(f"Unable to get subscribe ID for fname={fname!r}: {reason}")


class UploadError(PortalParamsError):
    """Base exception for multipart upload failures."""


class UploadSizeExceededError(UploadError):
    """A request body or a single uploaded file is over its configured limit."""

    def __init__(self, what: str, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"{what} size {size} exceeds the configured maximum of {limit} bytes")


class MultipartParsingError(UploadError):
    """Multipart parsing failed. Carries whatever was extracted before the failure."""

    def __init__(self, message: str, partial: MultipartParsingResult) -> None:
        self.partial = partial
        super().__init__(message)


class ProcessingIncompleteError(PortalParamsError):
    """Request parameter processors did not all complete within the allowed passes."""

    def __init__(self, pending: list[str], passes: int) -> None:
        self.pending = pending
        self.passes = passes
        super().__init__(f"Processors still pending after {passes} passes: {', '.join(pending)}")


class ErrorCategory(StrEnum):
    """Severity categories accepted by an error reporter."""

    BUG = "bug"
    GENERAL = "general"
    USER = "user"


class ErrorReporter(Protocol):
    def report(self, category: ErrorCategory, exc: BaseException) -> None: ...


class LoggingErrorReporter:
    """Reports errors to the structured log."""

    def report(self, category: ErrorCategory, exc: BaseException) -> None:
        logger.error(
            f"Unhandled {category.value} error: {type(exc).__name__}",
            icon=LogIcon.ERROR,
            category=category.value,
            error=str(exc),
            exc_info=exc,
        )
