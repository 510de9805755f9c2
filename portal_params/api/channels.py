"""Channel rendering endpoints."""

from pydantic import BaseModel

from portal_params.core.errors import LoggingErrorReporter
from portal_params.core.logger import LogIcon, logger
from portal_params.core.router import Router
from portal_params.core.settings import Settings
from portal_params.core.settings import settings as st
from portal_params.events.temp_files import TempFileTracker, temp_files
from portal_params.models.core import ChannelRequest
from portal_params.processing.managers import (
    RequestChannelParameterManager,
    StaticLayoutManager,
    StaticUserInstanceManager,
)
from portal_params.processing.multipart import MultipartResolver
from portal_params.processing.parameters import ChannelRequestParameterProcessor
from portal_params.processing.pipeline import RequestProcessingPipeline
from portal_params.processing.portlet import PortletRequestParameterProcessor, RequestPortletParameterManager
from portal_params.processing.target import TargetResolver


def build_pipeline(
    settings: Settings,
    tracker: TempFileTracker,
    channel_parameters: RequestChannelParameterManager,
) -> RequestProcessingPipeline:
    """Channel processing ahead of portlet processing; the channel processor defers until the portlet target is known."""
    portlet_parameters = RequestPortletParameterManager()
    channel_processor = ChannelRequestParameterProcessor(
        portlet_parameters=portlet_parameters,
        channel_parameters=channel_parameters,
        target_resolver=TargetResolver(StaticUserInstanceManager(StaticLayoutManager(settings.CHANNEL_FNAMES))),
        multipart=MultipartResolver.from_settings(settings, tracker),
        error_reporter=LoggingErrorReporter(),
    )
    return RequestProcessingPipeline(
        [channel_processor, PortletRequestParameterProcessor(portlet_parameters)],
        max_passes=settings.MAX_PROCESSING_PASSES,
    )


channel_parameters = RequestChannelParameterManager()
router = Router(
    __file__,
    prefix="/",
    pipeline=build_pipeline(st, temp_files, channel_parameters),
    channel_parameters=channel_parameters,
)


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


def describe_channel(channel: ChannelRequest) -> dict:
    """JSON-safe summary of a resolved channel request."""
    status = channel.upload_status
    return {
        "channel_id": channel.channel_id,
        "parameters": channel.strings(),
        "files": {
            name: [{"filename": f.filename, "content_type": f.content_type, "size": f.size} for f in files]
            for name, files in channel.files().items()
        },
        "upload_status": status.model_dump(mode="json") if status else None,
    }


@router.get("/health")
async def health_check() -> HealthResponse:
    logger.info("Health check requested", icon=LogIcon.HEALTHCHECK)
    return HealthResponse(status="healthy", service=st.API_NAME, version=st.API_VERSION)


@router.get("/render/:file")
async def render_channel(channel: ChannelRequest):
    return describe_channel(channel)


@router.post("/render/:file")
async def submit_channel(channel: ChannelRequest):
    return describe_channel(channel)
