"""Tests for the portal request adapter."""

from conftest import MockHeaders, MockQueryParams, MockRequest, MockUrl

from portal_params.models.request import PortalRequest


class TestPortalRequest:
    def test_headers_are_lower_cased(self) -> None:
        request = PortalRequest(headers={"Content-Type": "text/plain"})
        assert request.content_type == "text/plain"

    def test_character_encoding(self) -> None:
        request = PortalRequest(headers={"content-type": "multipart/form-data; boundary=b; charset=UTF-8"})
        assert request.character_encoding == "UTF-8"
        assert request.mime_type == "multipart/form-data"

    def test_no_content_type(self) -> None:
        request = PortalRequest()
        assert request.character_encoding is None
        assert request.mime_type == ""

    def test_parameter_accessors(self) -> None:
        request = PortalRequest(parameters={"a": ["1", "2"], "empty": []})
        assert request.get_parameter("a") == "1"
        assert request.get_parameter("empty") is None
        assert request.get_parameter("missing") is None

    def test_url_spec(self) -> None:
        request = PortalRequest(path="/render/tag.t.render.n7.uP")
        assert request.url_spec.method_node_id == "n7"


class TestFromRobyn:
    def test_query_parameters_and_path(self) -> None:
        robyn_request = MockRequest(
            query_params=MockQueryParams({"uP_channelTarget": ["n1"], "b": ["2", "3"]}),
            url=MockUrl("/render/tag.t.render.userLayoutRootNode.uP"),
        )

        request = PortalRequest.from_robyn(robyn_request)

        assert request.method == "GET"
        assert request.parameters == {"uP_channelTarget": ["n1"], "b": ["2", "3"]}
        assert request.path == "/render/tag.t.render.userLayoutRootNode.uP"
        assert request.body == b""
        assert request.attributes == {}

    def test_urlencoded_form_is_merged_after_query(self) -> None:
        robyn_request = MockRequest(
            method="POST",
            query_params=MockQueryParams({"a": ["q"]}),
            headers=MockHeaders({"content-type": "application/x-www-form-urlencoded"}),
            body="a=form&b=x+y&c=",
        )

        request = PortalRequest.from_robyn(robyn_request)

        assert request.parameters == {"a": ["q", "form"], "b": ["x y"], "c": [""]}

    def test_multipart_body_is_kept_raw(self) -> None:
        body = b"--b\r\n\xff\xfe"
        robyn_request = MockRequest(
            method="POST",
            headers=MockHeaders({"content-type": "multipart/form-data; boundary=b", "content-length": str(len(body))}),
            body=body,
        )

        request = PortalRequest.from_robyn(robyn_request)

        assert request.body == body
        assert request.parameters == {}
        assert request.headers["content-length"] == str(len(body))

    def test_string_body_is_encoded(self) -> None:
        request = PortalRequest.from_robyn(MockRequest(method="POST", body="héllo"))
        assert request.body == "héllo".encode()
