"""Collaborators that channel processing reads from and commits to."""

from collections.abc import Mapping
from typing import Protocol

from portal_params.core.errors import LayoutLookupError
from portal_params.core.logger import LogIcon, logger
from portal_params.models.core import ChannelRequest, ParameterBag
from portal_params.models.request import PortalRequest

CHANNEL_REQUEST_ATTRIBUTE = "portal_params.channel_request"


class ChannelParameterManager(Protocol):
    def set_no_channel_parameters(self, request: PortalRequest) -> None: ...

    def set_channel_parameters(self, request: PortalRequest, channel_id: str, parameters: ParameterBag) -> None: ...

    def is_resolved(self, request: PortalRequest) -> bool: ...


class RequestChannelParameterManager:
    """Keeps the channel outcome as a request attribute. First commit wins."""

    def set_no_channel_parameters(self, request: PortalRequest) -> None:
        self._commit(request, ChannelRequest())

    def set_channel_parameters(self, request: PortalRequest, channel_id: str, parameters: ParameterBag) -> None:
        self._commit(request, ChannelRequest(channel_id, parameters))

    def is_resolved(self, request: PortalRequest) -> bool:
        return CHANNEL_REQUEST_ATTRIBUTE in request.attributes

    def get_channel_request(self, request: PortalRequest) -> ChannelRequest | None:
        return request.attributes.get(CHANNEL_REQUEST_ATTRIBUTE)

    def _commit(self, request: PortalRequest, channel_request: ChannelRequest) -> None:
        if self.is_resolved(request):
            logger.warning(
                "Channel parameters already set for request",
                icon=LogIcon.WARNING,
                channel_id=channel_request.channel_id,
            )
            return
        request.attributes[CHANNEL_REQUEST_ATTRIBUTE] = channel_request


class UserLayoutManager(Protocol):
    def get_subscribe_id(self, fname: str) -> str:
        """Map an fname to a subscribe id. Raises LayoutLookupError."""
        ...


class UserInstanceManager(Protocol):
    def get_layout_manager(self, request: PortalRequest) -> UserLayoutManager: ...


class StaticLayoutManager:
    """Layout backed by a fixed fname -> subscribe id mapping."""

    def __init__(self, fnames: Mapping[str, str] | None = None) -> None:
        self._fnames = dict(fnames or {})

    def get_subscribe_id(self, fname: str) -> str:
        try:
            return self._fnames[fname]
        except KeyError:
            raise LayoutLookupError(fname) from None


class StaticUserInstanceManager:
    """Every request shares one layout."""

    def __init__(self, layout_manager: UserLayoutManager) -> None:
        self._layout_manager = layout_manager

    def get_layout_manager(self, request: PortalRequest) -> UserLayoutManager:
        return self._layout_manager
