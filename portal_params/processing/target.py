"""Resolution of the channel targeted by a request."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from portal_params.core.errors import LayoutLookupError
from portal_params.core.logger import LogIcon, logger
from portal_params.models.request import PortalRequest
from portal_params.processing.managers import UserInstanceManager

FNAME_PARAM = "uP_fname"
CHANNEL_TARGET_PARAM = "uP_channelTarget"
HELP_TARGET_PARAM = "uP_help_target"
ABOUT_TARGET_PARAM = "uP_about_target"
EDIT_TARGET_PARAM = "uP_edit_target"
DETACH_TARGET_PARAM = "uP_detach_target"

ROUTING_PARAMETERS = frozenset(
    {
        CHANNEL_TARGET_PARAM,
        FNAME_PARAM,
        HELP_TARGET_PARAM,
        ABOUT_TARGET_PARAM,
        EDIT_TARGET_PARAM,
        DETACH_TARGET_PARAM,
    }
)


class ProbeKind(StrEnum):
    FOUND = "found"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Probe:
    """Result of one lookup strategy."""

    kind: ProbeKind
    value: str | None = None
    error: Exception | None = None

    @classmethod
    def of(cls, value: str | None) -> "Probe":
        return cls(ProbeKind.FOUND, value) if value is not None else cls(ProbeKind.ABSENT)

    @classmethod
    def failed(cls, error: Exception) -> "Probe":
        return cls(ProbeKind.FAILED, error=error)


ProbeFn = Callable[[PortalRequest], Probe]


def parameter_probe(name: str) -> ProbeFn:
    """Probe reading a routing parameter directly."""

    def _probe(request: PortalRequest) -> Probe:
        return Probe.of(request.get_parameter(name))

    _probe.__name__ = f"param:{name}"
    return _probe


def target_node_probe(request: PortalRequest) -> Probe:
    return Probe.of(request.url_spec.target_node_id)


def method_node_probe(request: PortalRequest) -> Probe:
    """Method node from the URL, skipped when it addresses the whole layout."""
    spec = request.url_spec
    return Probe.of(None if spec.is_root else spec.method_node_id)


class TargetResolver:
    """Determines the targeted channel id through a fixed-priority chain of probes.

    The fname probe comes first so a base action URL can carry ``uP_fname`` to
    direct all of its query parameters at the named channel, whatever other
    routing parameters are present.
    """

    def __init__(self, user_instances: UserInstanceManager) -> None:
        self._user_instances = user_instances
        self.probes: tuple[ProbeFn, ...] = (
            self._fname_probe,
            parameter_probe(CHANNEL_TARGET_PARAM),
            parameter_probe(HELP_TARGET_PARAM),
            parameter_probe(ABOUT_TARGET_PARAM),
            parameter_probe(EDIT_TARGET_PARAM),
            parameter_probe(DETACH_TARGET_PARAM),
            target_node_probe,
            method_node_probe,
        )

    def _fname_probe(self, request: PortalRequest) -> Probe:
        fname = request.get_parameter(FNAME_PARAM)
        if fname is None:
            return Probe.of(None)
        layout = self._user_instances.get_layout_manager(request)
        try:
            return Probe.of(layout.get_subscribe_id(fname))
        except LayoutLookupError as ex:
            return Probe.failed(ex)

    def resolve(self, request: PortalRequest) -> str | None:
        """Return the targeted channel id, None if no channel is targeted."""
        target_channel_id = None
        for probe in self.probes:
            result = probe(request)
            if result.kind is ProbeKind.FAILED:
                logger.error(str(result.error), icon=LogIcon.LAYOUT, error=repr(result.error))
                continue
            if result.kind is ProbeKind.FOUND:
                target_channel_id = result.value
                break

        logger.debug("Resolved channel target", icon=LogIcon.ROUTING, target_channel_id=target_channel_id)
        return target_channel_id
