"""Core models for request/response handling."""

from dataclasses import dataclass
from enum import StrEnum

from portal_params.models.upload import UPLOAD_STATUS_KEY, UploadedFile, UploadStatus

ParameterValue = str | UploadedFile | UploadStatus
ParameterBag = dict[str, list[ParameterValue]]


class ResolutionState(StrEnum):
    TARGETED = "targeted"
    UNTARGETED = "untargeted"
    PENDING = "pending"


@dataclass(frozen=True, slots=True)
class Resolution:
    """Three-valued lookup result: a target, no target, or not determined yet."""

    state: ResolutionState
    target: str | None = None

    @classmethod
    def targeted(cls, target: str) -> "Resolution":
        return cls(ResolutionState.TARGETED, target)

    @classmethod
    def untargeted(cls) -> "Resolution":
        return cls(ResolutionState.UNTARGETED)

    @classmethod
    def pending(cls) -> "Resolution":
        return cls(ResolutionState.PENDING)

    @property
    def is_targeted(self) -> bool:
        return self.state is ResolutionState.TARGETED

    @property
    def is_pending(self) -> bool:
        return self.state is ResolutionState.PENDING


class ChannelRequest:
    """Resolved channel target and its parameter bag, as handed to handlers."""

    __slots__ = ("channel_id", "parameters")

    def __init__(self, channel_id: str | None = None, parameters: ParameterBag | None = None) -> None:
        self.channel_id = channel_id
        self.parameters = parameters if parameters is not None else {}

    def __bool__(self) -> bool:
        return self.channel_id is not None

    def __contains__(self, name: str) -> bool:
        return name in self.parameters

    def __repr__(self) -> str:
        return f"ChannelRequest(channel_id={self.channel_id!r}, parameters={sorted(self.parameters)})"

    def get(self, name: str) -> ParameterValue | None:
        """First value of a parameter."""
        values = self.parameters.get(name)
        return values[0] if values else None

    def get_all(self, name: str) -> list[ParameterValue]:
        return list(self.parameters.get(name, []))

    def strings(self) -> dict[str, list[str]]:
        """Only the plain string-valued parameters."""
        return {
            name: [v for v in values if isinstance(v, str)]
            for name, values in self.parameters.items()
            if any(isinstance(v, str) for v in values)
        }

    def files(self) -> dict[str, list[UploadedFile]]:
        return {
            name: [v for v in values if isinstance(v, UploadedFile)]
            for name, values in self.parameters.items()
            if any(isinstance(v, UploadedFile) for v in values)
        }

    @property
    def upload_status(self) -> UploadStatus | None:
        status = self.get(UPLOAD_STATUS_KEY)
        return status if isinstance(status, UploadStatus) else None
