"""Tests for custom router with channel injection and response handling."""

import inspect

import orjson
import pytest
from pydantic import BaseModel
from robyn import Response

from portal_params.core.router import (
    parse_endpoint_signature,
    parse_request_channel,
    parse_response,
)
from portal_params.models.core import ChannelRequest
from portal_params.processing.managers import RequestChannelParameterManager
from portal_params.processing.pipeline import RequestProcessingPipeline


# -----------------------------------------------------------------------------
# Test Models
# -----------------------------------------------------------------------------


class SampleModel(BaseModel):
    """Sample Pydantic model for testing."""

    name: str
    value: int


class CommittingProcessor:
    def __init__(self, manager: RequestChannelParameterManager, channel_id: str | None) -> None:
        self.manager = manager
        self.channel_id = channel_id

    def process_parameters(self, request) -> bool:
        if self.channel_id is None:
            self.manager.set_no_channel_parameters(request)
        else:
            self.manager.set_channel_parameters(request, self.channel_id, {"a": ["1"]})
        return True


class NeverReadyProcessor:
    def process_parameters(self, request) -> bool:
        return False


# -----------------------------------------------------------------------------
# parse_endpoint_signature Tests
# -----------------------------------------------------------------------------


class TestParseEndpointSignature:
    def test_no_channel_parameters(self) -> None:
        async def handler(request, global_dependencies, body: dict) -> None:
            pass

        assert parse_endpoint_signature(inspect.signature(handler)) == set()

    def test_channel_request_annotation(self) -> None:
        async def handler(channel: ChannelRequest, other: ChannelRequest, name: str) -> None:
            pass

        assert parse_endpoint_signature(inspect.signature(handler)) == {"channel", "other"}


# -----------------------------------------------------------------------------
# parse_request_channel Tests
# -----------------------------------------------------------------------------


class TestParseRequestChannel:
    def test_injects_committed_channel(self, make_request) -> None:
        manager = RequestChannelParameterManager()
        pipeline = RequestProcessingPipeline([CommittingProcessor(manager, "C")])
        kwargs: dict = {}

        error = parse_request_channel({"channel", "other"}, make_request(), kwargs, pipeline, manager)

        assert error is None
        assert kwargs["channel"] is kwargs["other"]
        assert kwargs["channel"].channel_id == "C"
        assert kwargs["channel"].get("a") == "1"

    def test_injects_empty_channel_when_untargeted(self, make_request) -> None:
        manager = RequestChannelParameterManager()
        pipeline = RequestProcessingPipeline([CommittingProcessor(manager, None)])
        kwargs: dict = {}

        parse_request_channel({"channel"}, make_request(), kwargs, pipeline, manager)

        assert isinstance(kwargs["channel"], ChannelRequest)
        assert not kwargs["channel"]

    def test_incomplete_processing_returns_503(self, make_request) -> None:
        manager = RequestChannelParameterManager()
        pipeline = RequestProcessingPipeline([NeverReadyProcessor()], max_passes=2)
        kwargs: dict = {}

        error = parse_request_channel({"channel"}, make_request(), kwargs, pipeline, manager)

        assert isinstance(error, Response)
        assert error.status_code == 503
        assert orjson.loads(error.description)["pending"] == ["NeverReadyProcessor"]
        assert "channel" not in kwargs

    def test_no_channel_params_skips_processing(self, make_request) -> None:
        pipeline = RequestProcessingPipeline([NeverReadyProcessor()], max_passes=1)
        assert parse_request_channel(set(), make_request(), {}, pipeline, RequestChannelParameterManager()) is None


# -----------------------------------------------------------------------------
# parse_response Tests
# -----------------------------------------------------------------------------


class TestParseResponse:
    def test_response_passthrough(self) -> None:
        original = Response(status_code=201, headers={}, description="created")
        assert parse_response(original) is original

    def test_pydantic_model_to_json(self) -> None:
        result = parse_response(SampleModel(name="test", value=123))

        assert result.status_code == 200
        assert result.headers["content-type"] == "application/json"
        assert "123" in result.description

    def test_dict_to_json(self) -> None:
        result = parse_response({"key": "value"})

        assert result.headers["content-type"] == "application/json"
        assert "value" in result.description

    @pytest.mark.parametrize("input_val", [SampleModel(name="x", value=1), {"a": 1}, "text", 123])
    def test_always_returns_response(self, input_val) -> None:
        assert isinstance(parse_response(input_val), Response)
