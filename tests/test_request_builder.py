import pytest

from swagger_adapter.errors import BodyParseError, UnresolvedPathParameterError
from swagger_adapter.models import ApiKeyAuth, BearerAuth, NoAuth, OperationDescriptor, OperationRequest
from swagger_adapter.request_builder import RequestBuilder


GET_POST = OperationDescriptor(path="/users/{id}/posts/{postId}", method="GET")
CREATE_PET = OperationDescriptor(path="/pets", method="POST")


def _item(**kwargs):
    return OperationRequest.model_validate(kwargs)


class TestUrl:
    def test_full_url_with_path_and_query(self):
        item = _item(
            pathParameters=[{"name": "id", "value": "42"}, {"name": "postId", "value": "7"}],
            queryParameters=[{"name": "expand", "value": "true"}, {"name": "", "value": "x"}],
        )
        request = RequestBuilder(NoAuth()).build("https://api.example.com/v1", GET_POST, item)
        assert request.method == "GET"
        assert request.url == "https://api.example.com/v1/users/42/posts/7?expand=true"

    def test_query_component_omitted_without_pairs(self):
        request = RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, _item())
        assert request.url == "https://api.example.com/pets"

    def test_unresolved_placeholder_preserved_by_default(self):
        item = _item(pathParameters=[{"name": "id", "value": "42"}])
        request = RequestBuilder(NoAuth()).build("https://api.example.com", GET_POST, item)
        assert request.url == "https://api.example.com/users/42/posts/{postId}"

    def test_unresolved_placeholder_rejected_when_strict(self):
        item = _item(pathParameters=[{"name": "id", "value": "42"}])
        builder = RequestBuilder(NoAuth(), strict_path_parameters=True)
        with pytest.raises(UnresolvedPathParameterError) as exc_info:
            builder.build("https://api.example.com", GET_POST, item)
        assert "postId" in str(exc_info.value)

    def test_api_key_query_appended_after_user_query(self):
        item = _item(queryParameters=[{"name": "key", "value": "user"}])
        builder = RequestBuilder(ApiKeyAuth(location="query", name="key", value="secret"))
        request = builder.build("https://api.example.com", CREATE_PET, item)
        assert request.url == "https://api.example.com/pets?key=user&key=secret"


class TestHeaders:
    def test_default_content_type(self):
        request = RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, _item())
        assert request.headers == {"Content-Type": "application/json"}

    def test_custom_headers_later_duplicates_win(self):
        item = _item(
            headers=[
                {"name": "X-Env", "value": "dev"},
                {"name": "content-type", "value": "application/vnd.api+json"},
                {"name": "X-Env", "value": "prod"},
            ]
        )
        request = RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, item)
        assert request.headers == {"content-type": "application/vnd.api+json", "X-Env": "prod"}

    def test_auth_takes_precedence_over_custom_header(self):
        item = _item(headers=[{"name": "Authorization", "value": "Bearer user"}])
        request = RequestBuilder(BearerAuth(token="configured")).build(
            "https://api.example.com", CREATE_PET, item
        )
        assert request.headers["Authorization"] == "Bearer configured"


class TestBody:
    def test_json_body_parsed(self):
        item = _item(sendBody=True, body='{"name": "Rex"}')
        request = RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, item)
        assert request.body_mode == "json"
        assert request.body == {"name": "Rex"}
        assert request.headers["Content-Type"] == "application/json"

    def test_structured_json_body_passes_through(self):
        item = _item(sendBody=True, body=[1, 2])
        request = RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, item)
        assert request.body == [1, 2]

    def test_malformed_json_body(self):
        item = _item(sendBody=True, body='{"name": ')
        with pytest.raises(BodyParseError):
            RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, item)

    def test_raw_body_switches_to_text(self):
        item = _item(sendBody=True, bodyContentType="raw", body="hello {world")
        request = RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, item)
        assert request.body == "hello {world"
        assert request.headers["Content-Type"] == "text/plain"

    def test_form_urlencoded_body(self):
        item = _item(sendBody=True, bodyContentType="form-urlencoded", body='{"name": "Rex Jr", "age": 3}')
        request = RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, item)
        assert request.body == "name=Rex+Jr&age=3"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_form_body_must_be_object(self):
        item = _item(sendBody=True, bodyContentType="form-urlencoded", body="[1]")
        with pytest.raises(BodyParseError):
            RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, item)

    def test_body_ignored_without_send_flag(self):
        item = _item(sendBody=False, body="not json")
        request = RequestBuilder(NoAuth()).build("https://api.example.com", CREATE_PET, item)
        assert request.body is None

    def test_body_ignored_for_get(self):
        item = _item(
            sendBody=True,
            body="not json",
            pathParameters=[{"name": "id", "value": "1"}, {"name": "postId", "value": "2"}],
        )
        request = RequestBuilder(NoAuth()).build("https://api.example.com", GET_POST, item)
        assert request.body is None
        assert request.body_mode is None


class TestOptions:
    def test_per_call_timeout_wins(self):
        item = _item(options={"timeout": 500})
        request = RequestBuilder(NoAuth(), timeout_ms=3000).build("https://a.test", CREATE_PET, item)
        assert request.timeout_ms == 500

    def test_credential_timeout_then_default(self):
        assert RequestBuilder(NoAuth(), timeout_ms=3000).build("https://a.test", CREATE_PET, _item()).timeout_ms == 3000
        assert RequestBuilder(NoAuth()).build("https://a.test", CREATE_PET, _item()).timeout_ms == 10000

    def test_flags_are_copied(self):
        item = _item(options={"fullResponse": True, "ignoreResponseCode": True, "followRedirects": False})
        request = RequestBuilder(NoAuth(), verify_tls=False).build("https://a.test", CREATE_PET, item)
        assert request.full_response is True
        assert request.ignore_response_code is True
        assert request.follow_redirects is False
        assert request.verify_tls is False
