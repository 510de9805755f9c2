"""Portlet targeting gate consulted before channel parameter processing."""

from typing import Protocol

from portal_params.core.logger import LogIcon, logger
from portal_params.models.core import Resolution
from portal_params.models.request import PortalRequest

PORTLET_TARGET_PARAM = "pltc_target"
PORTLET_TARGET_ATTRIBUTE = "portal_params.portlet_target"


class PortletParameterManager(Protocol):
    def get_targeted_portlet_window_id(self, request: PortalRequest) -> Resolution:
        """Targeted portlet window, or PENDING while portlet processing has not run."""
        ...


class RequestPortletParameterManager:
    """Portlet target stored as a request attribute once portlet processing has run."""

    def get_targeted_portlet_window_id(self, request: PortalRequest) -> Resolution:
        if PORTLET_TARGET_ATTRIBUTE not in request.attributes:
            return Resolution.pending()
        window_id = request.attributes[PORTLET_TARGET_ATTRIBUTE]
        return Resolution.targeted(window_id) if window_id is not None else Resolution.untargeted()

    def set_targeted_portlet_window_id(self, request: PortalRequest, window_id: str | None) -> None:
        request.attributes[PORTLET_TARGET_ATTRIBUTE] = window_id


class PortletRequestParameterProcessor:
    """Records which portlet window, if any, the request targets."""

    def __init__(self, portlet_parameters: RequestPortletParameterManager) -> None:
        self.portlet_parameters = portlet_parameters

    def process_parameters(self, request: PortalRequest) -> bool:
        window_id = request.get_parameter(PORTLET_TARGET_PARAM) or None
        self.portlet_parameters.set_targeted_portlet_window_id(request, window_id)
        if window_id is not None:
            logger.debug("Request targets portlet", icon=LogIcon.PORTLET, window_id=window_id)
        return True
