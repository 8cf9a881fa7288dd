# tests/dispatch/test_dispatcher.py
"""
logsh/dispatch/dispatcher.py, logsh/dispatch/client.py 단위 테스트

요청 구성, 응답 분류, 멱등 요청 재시도 테스트.
"""

import pytest
import requests

from logsh.auth.cache import ApiKeyCredential
from logsh.auth.session import ActiveContext
from logsh.auth.types import AuthMethod
from logsh.dispatch.client import build_http_session, request_timeout
from logsh.dispatch.dispatcher import DispatchResponse, Dispatcher, RequestDescriptor, decode_body
from logsh.dispatch.errors import ClientError, ServerError, TransportFailureError, UnauthorizedError
from logsh.dispatch.retry import RetryPolicy


@pytest.fixture
def context(registry):
    profile = registry.get("prod")
    return ActiveContext(profile, profile.accounts["acc-2"], ApiKeyCredential("key"))


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def dispatcher(mock_http, sleeps):
    return Dispatcher(mock_http, policy=RetryPolicy(max_attempts=3), sleep=sleeps.append, clock=lambda: 0.0)


# =============================================================================
# HTTP 세션 / 요청 기술
# =============================================================================


class TestHttpSession:
    def test_default_headers(self):
        session = build_http_session(user_agent="logsh/test", hostname="host-1")
        assert session.headers["User-Agent"] == "logsh/test"
        assert session.headers["x-ls-hostname"] == "host-1"
        assert session.get_adapter("https://example.com").max_retries.total == 0

    def test_request_timeout(self):
        assert request_timeout(300.0) == (10.0, 300.0)
        assert request_timeout(3.0) == (3.0, 3.0)


class TestRequestDescriptor:
    """RequestDescriptor 테스트"""

    def test_get_is_idempotent(self):
        assert RequestDescriptor.get("/whoami").is_idempotent is True

    def test_query_post_is_idempotent(self):
        assert RequestDescriptor.query("/search/a/kusto", {"query": "x"}).is_idempotent is True

    def test_upload_is_not_idempotent(self):
        request = RequestDescriptor.upload("/inflow/a", b"data")
        assert request.is_idempotent is False
        assert request.read_timeout == 300.0

    def test_plain_post_is_not_idempotent(self):
        assert RequestDescriptor("POST", "/x").is_idempotent is False

    def test_delete_is_not_idempotent(self):
        request = RequestDescriptor.delete("/accounts/acc-7")
        assert request.method == "DELETE"
        assert request.is_idempotent is False

    def test_url_for(self):
        assert RequestDescriptor.get("whoami").url_for("https://a.example.com/") == "https://a.example.com/whoami"

    def test_default_read_timeout(self, monkeypatch):
        monkeypatch.setenv("LOGSH_QUERY_TIMEOUT", "12")
        assert RequestDescriptor.get("/whoami").read_timeout == 12.0


class TestDecodeBody:
    def test_json(self, make_response):
        assert decode_body(make_response(200, {"a": 1})) == {"a": 1}

    def test_text(self, make_response):
        assert decode_body(make_response(200, text="plain")) == "plain"

    def test_empty(self, make_response):
        assert decode_body(make_response(204)) is None


# =============================================================================
# 실행
# =============================================================================


class TestExecute:
    """Dispatcher.execute 테스트"""

    def test_success(self, dispatcher, context, mock_http, make_response, calls):
        mock_http.request.return_value = make_response(200, {"userId": "u1"})

        response = dispatcher.execute(context, RequestDescriptor.get("/whoami", params={"a": "b"}))

        assert isinstance(response, DispatchResponse)
        assert response.status == 200
        assert response.body == {"userId": "u1"}

        method, url, kwargs = calls(mock_http)[0]
        assert (method, url) == ("GET", "https://prod.example.com/whoami")
        assert kwargs["headers"]["Authorization"] == "Bearer key"
        assert kwargs["params"] == {"a": "b"}
        assert kwargs["verify"] is True
        assert kwargs["timeout"] == (10.0, 30.0)

    def test_extra_headers_and_body(self, dispatcher, context, mock_http, make_response, calls):
        mock_http.request.return_value = make_response(200)

        dispatcher.execute(
            context,
            RequestDescriptor.upload("/inflow/acc-2", b"gz", headers={"Content-Encoding": "gzip"}, timeout=5),
        )

        kwargs = calls(mock_http)[0][2]
        assert kwargs["data"] == b"gz"
        assert kwargs["headers"]["Content-Encoding"] == "gzip"
        assert kwargs["headers"]["Authorization"] == "Bearer key"
        assert kwargs["timeout"] == (5, 5)

    def test_server_error_retried_until_exhausted(self, dispatcher, context, mock_http, make_response, sleeps):
        """멱등 요청의 503은 3회 시도 후 ServerError"""
        mock_http.request.return_value = make_response(503, text="unavailable")

        with pytest.raises(ServerError) as exc_info:
            dispatcher.execute(context, RequestDescriptor.get("/whoami"))

        assert mock_http.request.call_count == 3
        assert len(sleeps) == 2
        assert exc_info.value.status == 503
        assert exc_info.value.connection == "prod"
        assert exc_info.value.account == "acc-2"

    def test_non_idempotent_not_retried(self, dispatcher, context, mock_http, make_response, sleeps):
        mock_http.request.return_value = make_response(503)

        with pytest.raises(ServerError):
            dispatcher.execute(context, RequestDescriptor.upload("/inflow/acc-2", b"x"))

        assert mock_http.request.call_count == 1
        assert sleeps == []

    def test_transient_then_success(self, dispatcher, context, mock_http, make_response):
        mock_http.request.side_effect = [requests.ConnectionError("reset"), make_response(200, {"ok": True})]

        response = dispatcher.execute(context, RequestDescriptor.get("/whoami"))

        assert response.body == {"ok": True}
        assert mock_http.request.call_count == 2

    def test_transport_failure_exhausted(self, dispatcher, context, mock_http):
        mock_http.request.side_effect = requests.ReadTimeout("slow")

        with pytest.raises(TransportFailureError) as exc_info:
            dispatcher.execute(context, RequestDescriptor.query("/search/acc-2/kusto", {"query": "x"}))

        assert mock_http.request.call_count == 3
        assert isinstance(exc_info.value.cause, requests.ReadTimeout)

    def test_unauthorized_not_retried(self, dispatcher, context, mock_http, make_response):
        mock_http.request.return_value = make_response(401)

        with pytest.raises(UnauthorizedError):
            dispatcher.execute(context, RequestDescriptor.get("/whoami"))

        assert mock_http.request.call_count == 1

    def test_client_error_not_retried(self, dispatcher, context, mock_http, make_response):
        mock_http.request.return_value = make_response(404, {"message": "no such account"})

        with pytest.raises(ClientError) as exc_info:
            dispatcher.execute(context, RequestDescriptor.get("/users/x/accounts"))

        assert mock_http.request.call_count == 1
        assert exc_info.value.body == {"message": "no such account"}

    def test_insecure_connection(self, registry, mock_http, make_response, calls):
        registry.add("lab", "https://lab.local", insecure_skip_verify=True)
        profile = registry.get("lab")
        account = registry.add_account("lab", "acc", None, AuthMethod.API_KEY)
        mock_http.request.return_value = make_response(200)

        Dispatcher(mock_http).execute(ActiveContext(profile, account, ApiKeyCredential("k")), RequestDescriptor.get("/"))

        assert calls(mock_http)[0][2]["verify"] is False
