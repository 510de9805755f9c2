"""Request-scoped view of an inbound HTTP request."""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl

from python_multipart.multipart import parse_options_header
from robyn import Request

from portal_params.core.settings import settings as st
from portal_params.models.url import UrlPathSpec

FORM_URLENCODED = "application/x-www-form-urlencoded"


@dataclass(slots=True)
class PortalRequest:
    """Container-independent request: parameters, raw body and request attributes.

    The body is held as bytes so every processing pass can re-read it.
    ``attributes`` carries state committed by processors for the lifetime of
    the request.
    """

    method: str = "GET"
    path: str = "/"
    headers: dict[str, str] = field(default_factory=dict)
    parameters: dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""
    attributes: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def mime_type(self) -> str:
        """Content type without parameters, lower-cased."""
        mime, _ = parse_options_header(self.content_type)
        return mime.decode("latin-1").lower()

    @property
    def character_encoding(self) -> str | None:
        """Charset declared on the Content-Type header, if any."""
        _, options = parse_options_header(self.content_type)
        charset = options.get(b"charset")
        return charset.decode("latin-1") if charset else None

    @property
    def url_spec(self) -> UrlPathSpec:
        return UrlPathSpec.from_path(self.path)

    def get_parameter(self, name: str) -> str | None:
        """First value of a parameter, None when absent."""
        values = self.parameters.get(name)
        return values[0] if values else None

    @classmethod
    def from_robyn(cls, request: Request) -> "PortalRequest":
        """Build from a Robyn request: query parameters plus url-encoded form fields."""
        parameters: dict[str, list[str]] = {
            name: list(values) for name, values in request.query_params.to_dict().items()
        }

        headers = {}
        for name in ("content-type", "content-length"):
            value = request.headers.get(name)
            if value is not None:
                headers[name] = value

        body = request.body
        if isinstance(body, str):
            body = body.encode("utf-8")

        portal_request = cls(
            method=str(request.method).upper(),
            path=request.url.path,
            headers=headers,
            parameters=parameters,
            body=body or b"",
        )

        if portal_request.method == "POST" and portal_request.mime_type == FORM_URLENCODED:
            encoding = portal_request.character_encoding or st.DEFAULT_ENCODING
            try:
                text = portal_request.body.decode(encoding, errors="replace")
            except LookupError:
                text = portal_request.body.decode(st.DEFAULT_ENCODING, errors="replace")
            pairs = parse_qsl(text, keep_blank_values=True)
            for name, value in pairs:
                parameters.setdefault(name, []).append(value)

        return portal_request
