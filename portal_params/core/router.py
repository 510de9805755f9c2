"""Router with channel parameter injection and response handling."""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any

import orjson
from pydantic import BaseModel
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod

from portal_params.core.errors import ProcessingIncompleteError
from portal_params.core.logger import LogIcon, logger
from portal_params.models.core import ChannelRequest
from portal_params.models.request import PortalRequest
from portal_params.processing.managers import RequestChannelParameterManager
from portal_params.processing.pipeline import RequestProcessingPipeline


def parse_endpoint_signature(sig: inspect.Signature) -> set[str]:
    """Names of the handler parameters that take the resolved ChannelRequest."""
    return {name for name, param in sig.parameters.items() if param.annotation is ChannelRequest}


def parse_request_channel(
    channel_params: set[str],
    request: PortalRequest,
    kwargs: dict[str, Any],
    pipeline: RequestProcessingPipeline,
    channel_parameters: RequestChannelParameterManager,
) -> Response | None:
    """Run parameter processing and hand the resolved ChannelRequest to the handler."""
    if not channel_params:
        return None

    try:
        pipeline.process(request)
    except ProcessingIncompleteError as ex:
        logger.warning("Request parameter processing incomplete", icon=LogIcon.WARNING, pending=ex.pending)
        return Response(
            status_code=503,
            headers={"content-type": "application/json"},
            description=orjson.dumps({"error": "processing_incomplete", "pending": ex.pending}).decode(),
        )

    channel_request = channel_parameters.get_channel_request(request)
    if channel_request is None:
        channel_request = ChannelRequest()
    for param_name in channel_params:
        kwargs[param_name] = channel_request

    return None


def parse_response(result: Any) -> Response:
    """Convert handler result to Response."""
    match result:
        case Response():
            return result
        case BaseModel():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=result.model_dump_json(indent=4),
            )
        case dict():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=orjson.dumps(result).decode(),
            )
        case _:
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={},
                description=str(result),
            )


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
    HttpMethod.HEAD,
    HttpMethod.OPTIONS,
    HttpMethod.TRACE,
    HttpMethod.CONNECT,
)


def _create_method_wrapper(original_method: Callable, router: "Router") -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            channel_params = parse_endpoint_signature(sig)
            has_request_param = "request" in sig.parameters

            if channel_params and router.pipeline is None:
                raise TypeError(f"{handler.__name__} takes a ChannelRequest but the router has no pipeline")

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                if channel_params and (
                    error := parse_request_channel(
                        channel_params,
                        PortalRequest.from_robyn(request),
                        h_kwargs,
                        router.pipeline,
                        router.channel_parameters,
                    )
                ):
                    return error

                # Pass request to handler only if it declared it
                if has_request_param:
                    h_kwargs["request"] = request

                result = await handler(**h_kwargs)
                return parse_response(result)

            # Build signature: always include request for Robyn injection
            new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
            for name, param in sig.parameters.items():
                if name == "request" or name in channel_params:
                    continue
                new_params.append(param)

            wrapped_handler.__signature__ = sig.replace(parameters=new_params)  # type: ignore[attr-defined]
            return decorator(wrapped_handler)

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """SubRouter with ChannelRequest injection and response handling."""

    def __init__(
        self,
        *args,
        pipeline: RequestProcessingPipeline | None = None,
        channel_parameters: RequestChannelParameterManager | None = None,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.pipeline = pipeline
        self.channel_parameters = channel_parameters or RequestChannelParameterManager()
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        """Wrap HTTP methods with channel injection."""
        for method in HTTP_METHODS:
            method_name = str(method).split(".")[-1].lower()
            if hasattr(self, method_name):
                setattr(self, method_name, _create_method_wrapper(getattr(self, method_name), self))
