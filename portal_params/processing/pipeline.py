"""Runs request parameter processors until each reports completion."""

from collections.abc import Sequence
from typing import Protocol

from portal_params.core.errors import ProcessingIncompleteError
from portal_params.core.logger import LogIcon, logger
from portal_params.models.request import PortalRequest


class RequestParameterProcessor(Protocol):
    def process_parameters(self, request: PortalRequest) -> bool:
        """Return False to be called again on a later pass."""
        ...


class RequestProcessingPipeline:
    """Calls each processor once per pass, re-invoking those that deferred."""

    def __init__(self, processors: Sequence[RequestParameterProcessor], max_passes: int = 10) -> None:
        if max_passes < 1:
            raise ValueError("max_passes must be at least 1")
        self.processors = list(processors)
        self.max_passes = max_passes

    def process(self, request: PortalRequest) -> None:
        pending = list(self.processors)

        for current_pass in range(1, self.max_passes + 1):
            pending = [p for p in pending if not p.process_parameters(request)]
            if not pending:
                return
            logger.debug(
                "Deferring request parameter processors",
                icon=LogIcon.RETRY,
                current_pass=current_pass,
                pending=[type(p).__name__ for p in pending],
            )

        raise ProcessingIncompleteError([type(p).__name__ for p in pending], self.max_passes)
