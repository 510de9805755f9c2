"""Channel request parameter processing.

Runs on any request that does not explicitly target a portlet. Works out the
targeted channel and gathers its parameters, including multipart uploads, so
channel rendering sees one uniform parameter bag.
"""

from portal_params.core.errors import ErrorCategory, ErrorReporter, MultipartParsingError
from portal_params.core.logger import LogIcon, logger
from portal_params.models.core import ParameterBag
from portal_params.models.request import PortalRequest
from portal_params.models.upload import UPLOAD_STATUS_KEY, UploadState, UploadStatus
from portal_params.processing.managers import ChannelParameterManager
from portal_params.processing.multipart import MultipartResolver
from portal_params.processing.portlet import PortletParameterManager
from portal_params.processing.target import ROUTING_PARAMETERS, TargetResolver


class ChannelRequestParameterProcessor:
    def __init__(
        self,
        portlet_parameters: PortletParameterManager,
        channel_parameters: ChannelParameterManager,
        target_resolver: TargetResolver,
        multipart: MultipartResolver,
        error_reporter: ErrorReporter,
    ) -> None:
        self.portlet_parameters = portlet_parameters
        self.channel_parameters = channel_parameters
        self.target_resolver = target_resolver
        self.multipart = multipart
        self.error_reporter = error_reporter

    def process_parameters(self, request: PortalRequest) -> bool:
        """Commit the channel target and parameters for ``request``.

        Returns False, committing nothing, while portlet targeting has not
        run yet; the caller retries on a later pass. Once an outcome is
        committed, further calls return True and change nothing.
        """
        if self.channel_parameters.is_resolved(request):
            return True

        portlet_target = self.portlet_parameters.get_targeted_portlet_window_id(request)
        if portlet_target.is_pending:
            logger.debug("Waiting on portlet parameter processing", icon=LogIcon.RETRY)
            return False

        is_portlet_request = portlet_target.is_targeted
        if is_portlet_request:
            logger.debug(
                "Request targets a portlet, channel parameters will not be processed",
                icon=LogIcon.PORTLET,
                window_id=portlet_target.target,
            )

        target_channel_id = self.target_resolver.resolve(request)
        if target_channel_id is None:
            self.channel_parameters.set_no_channel_parameters(request)
            return True

        channel_parameters: ParameterBag = {}

        if is_portlet_request:
            self.channel_parameters.set_channel_parameters(request, target_channel_id, channel_parameters)
            return True

        if self.multipart.is_multipart(request):
            channel_parameters.update(self._collect_multipart(request))

        channel_parameters.update(request.parameters)
        channel_parameters = {
            name: list(values) for name, values in channel_parameters.items() if name not in ROUTING_PARAMETERS
        }

        self.channel_parameters.set_channel_parameters(request, target_channel_id, channel_parameters)
        logger.debug(
            "Channel parameters set",
            icon=LogIcon.CHANNEL,
            channel_id=target_channel_id,
            parameters=len(channel_parameters),
        )
        return True

    def _collect_multipart(self, request: PortalRequest) -> ParameterBag:
        """Uploaded files, multipart fields and the upload status marker."""
        collected: ParameterBag = {}
        encoding = self.multipart.determine_encoding(request)

        try:
            result = self.multipart.parse(request, encoding)
            collected.update(result.files)
            collected.update(result.fields)
            status = UploadState.SUCCESS
        except MultipartParsingError as ex:
            logger.warning(
                "Failed to parse multipart upload, processing will continue but not all parameters may be available",
                icon=LogIcon.WARNING,
                error=str(ex),
            )
            collected.update(ex.partial.fields)
            status = UploadState.FAILURE
            self.error_reporter.report(ErrorCategory.BUG, ex)

        collected[UPLOAD_STATUS_KEY] = [UploadStatus(status=status, max_size=self.multipart.max_file_size)]
        return collected
