"""Tests for credential extraction and access guard redirect targets."""

from starlette.requests import Request

from helpers.request_utils import (
    get_client_ip,
    get_presented_credential,
    resolve_redirect_target,
)

RESTRICTED = "http://testserver/api/admin/administrators"
TRUSTED = ["http://localhost:3000"]


def make_request(headers: dict[str, str] | None = None, client=("10.0.0.1", 1234)):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/admin/administrators",
        "headers": [
            (key.lower().encode(), value.encode())
            for key, value in (headers or {}).items()
        ],
        "client": client,
    }
    return Request(scope)


class TestPresentedCredential:
    """Tests for get_presented_credential"""

    def test_bearer_header(self) -> None:
        request = make_request({"Authorization": "Bearer abc.def"})
        assert get_presented_credential(request) == "abc.def"

    def test_cookie(self) -> None:
        request = make_request({"Cookie": "access_token=from-cookie"})
        assert get_presented_credential(request) == "from-cookie"

    def test_header_preferred_over_cookie(self) -> None:
        request = make_request(
            {"Authorization": "Bearer header", "Cookie": "access_token=cookie"}
        )
        assert get_presented_credential(request) == "header"

    def test_non_bearer_scheme_ignored(self) -> None:
        request = make_request({"Authorization": "Basic dXNlcjpwYXNz"})
        assert get_presented_credential(request) is None

    def test_nothing_presented(self) -> None:
        assert get_presented_credential(make_request()) is None


class TestClientIp:
    """Tests for get_client_ip"""

    def test_forwarded_for_first_hop(self) -> None:
        request = make_request({"X-Forwarded-For": "203.0.113.5, 10.0.0.2"})
        assert get_client_ip(request) == "203.0.113.5"

    def test_direct_client(self) -> None:
        assert get_client_ip(make_request()) == "10.0.0.1"


class TestResolveRedirectTarget:
    """Tests for resolve_redirect_target"""

    def test_no_referrer(self) -> None:
        assert resolve_redirect_target(None, RESTRICTED, TRUSTED) == "/"
        assert resolve_redirect_target("", RESTRICTED, TRUSTED) == "/"

    def test_trusted_origin(self) -> None:
        referrer = "http://localhost:3000/questions/calculus-help"
        assert resolve_redirect_target(referrer, RESTRICTED, TRUSTED) == referrer

    def test_same_origin(self) -> None:
        referrer = "http://testserver/api/questions"
        assert resolve_redirect_target(referrer, RESTRICTED, []) == referrer

    def test_foreign_origin(self) -> None:
        referrer = "https://evil.example/phish"
        assert resolve_redirect_target(referrer, RESTRICTED, TRUSTED) == "/"

    def test_port_matters(self) -> None:
        referrer = "http://localhost:4000/"
        assert resolve_redirect_target(referrer, RESTRICTED, TRUSTED) == "/"

    def test_script_scheme(self) -> None:
        referrer = "javascript:alert(1)"
        assert resolve_redirect_target(referrer, RESTRICTED, TRUSTED) == "/"

    def test_relative_referrer(self) -> None:
        assert resolve_redirect_target("/questions", RESTRICTED, TRUSTED) == "/"

    def test_restricted_page_itself(self) -> None:
        referrer = RESTRICTED + "/"
        assert resolve_redirect_target(referrer, RESTRICTED, TRUSTED) == "/"

    def test_custom_default(self) -> None:
        assert (
            resolve_redirect_target(None, RESTRICTED, TRUSTED, default="/login")
            == "/login"
        )
