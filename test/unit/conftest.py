"""Test fixtures for portal-params unit tests."""

from dataclasses import dataclass, field

import pytest

from portal_params.core.errors import ErrorCategory
from portal_params.core.lifespan import State
from portal_params.events.temp_files import TempFileTracker
from portal_params.models.request import PortalRequest
from portal_params.processing.managers import (
    RequestChannelParameterManager,
    StaticLayoutManager,
    StaticUserInstanceManager,
)
from portal_params.processing.multipart import MultipartResolver
from portal_params.processing.parameters import ChannelRequestParameterProcessor
from portal_params.processing.portlet import RequestPortletParameterManager
from portal_params.processing.target import TargetResolver

BOUNDARY = "----portalparamsboundary"
MULTIPART_CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request."""

    _data: dict = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key.lower(), default)


@dataclass
class MockQueryParams:
    """Mock QueryParams object for Robyn Request."""

    _data: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, list[str]]:
        return self._data


@dataclass
class MockUrl:
    path: str = "/"


@dataclass
class MockRequest:
    """Mock Request object for Robyn."""

    query_params: MockQueryParams = field(default_factory=MockQueryParams)
    headers: MockHeaders = field(default_factory=MockHeaders)
    body: str | bytes = b""
    method: str = "GET"
    url: MockUrl = field(default_factory=MockUrl)


# -----------------------------------------------------------------------------
# Multipart bodies
# -----------------------------------------------------------------------------


def field_part(name: str, value: str, encoding: str = "utf-8") -> bytes:
    return (
        f"--{BOUNDARY}\r\n"
        f'Content-Disposition: form-data; name="{name}"\r\n'
        "\r\n"
    ).encode(encoding) + value.encode(encoding) + b"\r\n"


def file_part(name: str, filename: str, data: bytes, content_type: str = "text/plain") -> bytes:
    return (
        f"--{BOUNDARY}\r\n"
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n"
        "\r\n"
    ).encode() + data + b"\r\n"


def multipart_body(*parts: bytes) -> bytes:
    return b"".join(parts) + f"--{BOUNDARY}--\r\n".encode()


# -----------------------------------------------------------------------------
# Collaborators
# -----------------------------------------------------------------------------


class RecordingErrorReporter:
    """Error reporter that remembers what it was given."""

    def __init__(self) -> None:
        self.reports: list[tuple[ErrorCategory, BaseException]] = []

    def report(self, category: ErrorCategory, exc: BaseException) -> None:
        self.reports.append((category, exc))


@pytest.fixture
def tracker() -> TempFileTracker:
    tracker = TempFileTracker().arm()
    yield tracker
    tracker.drain()


@pytest.fixture
def layout() -> StaticLayoutManager:
    return StaticLayoutManager({"weather": "u12l1n5", "news": "u12l1n7"})


@pytest.fixture
def resolver(layout: StaticLayoutManager) -> TargetResolver:
    return TargetResolver(StaticUserInstanceManager(layout))


@pytest.fixture
def multipart(tracker: TempFileTracker) -> MultipartResolver:
    return MultipartResolver(tracker)


@pytest.fixture
def error_reporter() -> RecordingErrorReporter:
    return RecordingErrorReporter()


@pytest.fixture
def channel_parameters() -> RequestChannelParameterManager:
    return RequestChannelParameterManager()


@pytest.fixture
def portlet_parameters() -> RequestPortletParameterManager:
    return RequestPortletParameterManager()


@pytest.fixture
def processor(
    portlet_parameters: RequestPortletParameterManager,
    channel_parameters: RequestChannelParameterManager,
    resolver: TargetResolver,
    multipart: MultipartResolver,
    error_reporter: RecordingErrorReporter,
) -> ChannelRequestParameterProcessor:
    return ChannelRequestParameterProcessor(
        portlet_parameters=portlet_parameters,
        channel_parameters=channel_parameters,
        target_resolver=resolver,
        multipart=multipart,
        error_reporter=error_reporter,
    )


@pytest.fixture
def make_request():
    """Factory fixture to create portal requests."""

    def _make(
        parameters: dict[str, list[str]] | None = None,
        path: str = "/render/tag.idempotent.render.userLayoutRootNode.uP",
        method: str = "GET",
        content_type: str | None = None,
        body: bytes = b"",
    ) -> PortalRequest:
        headers = {"Content-Type": content_type} if content_type else {}
        return PortalRequest(method=method, path=path, headers=headers, parameters=parameters or {}, body=body)

    return _make


@pytest.fixture
def make_multipart_request(make_request):
    def _make(
        *parts: bytes,
        parameters: dict[str, list[str]] | None = None,
        charset: str | None = None,
        terminated: bool = True,
    ):
        content_type = MULTIPART_CONTENT_TYPE + (f"; charset={charset}" if charset else "")
        return make_request(
            parameters=parameters,
            method="POST",
            content_type=content_type,
            body=multipart_body(*parts) if terminated else b"".join(parts),
        )

    return _make


# -----------------------------------------------------------------------------
# State fixture
# -----------------------------------------------------------------------------


@pytest.fixture
def test_state() -> State:
    """Create a test state container."""
    state = State()
    yield state
    state.clear()
