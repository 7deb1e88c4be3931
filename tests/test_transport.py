"""Tests for the request executor.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made.
- ``ResponseBuffer`` is swapped for a subclass that records every instance,
  so tests can check that failed calls release the buffer they created.
- The transfer deadline clock (``neogities.transport._clock``) is patched to
  simulate a slow body without sleeping.
"""

from __future__ import annotations

import itertools
from unittest.mock import patch

import httpx
import pytest
import respx

from neogities import transport
from neogities.buffer import ResponseBuffer
from neogities.config import Settings
from neogities.errors import (
    AuthError,
    HTTPStatusError,
    OutOfMemoryError,
    RequestTimeout,
    TransportError,
)
from neogities.transport import MultipartPart, RequestSpec, execute


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_URL = "https://neocities.org/api/info"


def _cfg(**overrides) -> Settings:
    values = dict(
        base_url="https://neocities.org",
        api_key="",
        user_agent="neogities-tests",
        connect_timeout=10.0,
        transfer_timeout=60.0,
        max_response_bytes=1024,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def buffers(monkeypatch) -> list[ResponseBuffer]:
    """Record every ResponseBuffer the executor creates."""
    created: list[ResponseBuffer] = []

    class _Tracked(ResponseBuffer):
        def __init__(self, *args, **kwargs) -> None:
            super().__init__(*args, **kwargs)
            created.append(self)

    monkeypatch.setattr(transport, "ResponseBuffer", _Tracked)
    return created


# ---------------------------------------------------------------------------
# RequestSpec
# ---------------------------------------------------------------------------

class TestRequestSpec:
    def test_plain_spec_is_get(self) -> None:
        assert RequestSpec(url=_URL).method == "GET"

    def test_form_body_is_post(self) -> None:
        assert RequestSpec(url=_URL, form_body="a=b").method == "POST"

    def test_parts_are_post(self) -> None:
        assert RequestSpec(url=_URL, parts=[MultipartPart("a", "b")]).method == "POST"

    def test_form_body_and_parts_are_exclusive(self) -> None:
        with pytest.raises(ValueError):
            RequestSpec(url=_URL, form_body="a=b", parts=[MultipartPart("a", "b")])


# ---------------------------------------------------------------------------
# Client policy
# ---------------------------------------------------------------------------

class TestClientPolicy:
    def test_redirects_disabled_and_timeouts_applied(self) -> None:
        with transport._client(_cfg(connect_timeout=3.0, transfer_timeout=7.0)) as client:
            assert client.follow_redirects is False
            assert client.timeout.connect == 3.0
            assert client.timeout.read == 7.0

    def test_redirect_is_not_followed(self, buffers) -> None:
        with respx.mock:
            respx.get(_URL).mock(
                return_value=httpx.Response(
                    302, headers={"Location": "https://evil.example/steal"}, text="moved"
                )
            )
            status, buf = execute(RequestSpec(url=_URL, api_key="KEY"), cfg=_cfg())

        assert status == 302
        assert buf.text() == "moved"
        buf.release()


# ---------------------------------------------------------------------------
# Headers and bodies
# ---------------------------------------------------------------------------

class TestRequestAssembly:
    def test_bearer_header_sent(self) -> None:
        with respx.mock:
            route = respx.get(_URL).mock(return_value=httpx.Response(200, text="{}"))
            _, buf = execute(RequestSpec(url=_URL, api_key="s3cret"), cfg=_cfg())
            buf.release()

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer s3cret"
        assert request.headers["User-Agent"] == "neogities-tests"

    def test_no_auth_header_without_key(self) -> None:
        with respx.mock:
            route = respx.get(_URL).mock(return_value=httpx.Response(200, text="{}"))
            _, buf = execute(RequestSpec(url=_URL, api_key=""), cfg=_cfg())
            buf.release()

        assert "Authorization" not in route.calls.last.request.headers

    def test_long_token_is_sent_whole(self) -> None:
        token = "k" * 4096
        with respx.mock:
            route = respx.get(_URL).mock(return_value=httpx.Response(200, text="{}"))
            _, buf = execute(RequestSpec(url=_URL, api_key=token), cfg=_cfg())
            buf.release()

        assert route.calls.last.request.headers["Authorization"] == f"Bearer {token}"

    def test_token_with_newline_rejected_before_sending(self) -> None:
        with respx.mock(assert_all_called=False) as respx_mock:
            route = respx_mock.get(_URL).mock(return_value=httpx.Response(200, text="{}"))
            with pytest.raises(AuthError):
                execute(RequestSpec(url=_URL, api_key="abc\r\nX-Evil: 1"), cfg=_cfg())

        assert not route.called

    @pytest.mark.parametrize("token", ["cl\u00e9", "\u043a\u043b\u044e\u0447", "key\u2603"])
    def test_non_ascii_token_rejected_before_sending(self, buffers, token: str) -> None:
        with respx.mock(assert_all_called=False) as respx_mock:
            route = respx_mock.get(_URL).mock(return_value=httpx.Response(200, text="{}"))
            with pytest.raises(AuthError):
                execute(RequestSpec(url=_URL, api_key=token), cfg=_cfg())

        assert not route.called
        assert all(buf.released for buf in buffers)

    def test_form_body_posted(self) -> None:
        url = "https://neocities.org/api/delete"
        with respx.mock:
            route = respx.post(url).mock(return_value=httpx.Response(200, text="ok"))
            _, buf = execute(RequestSpec(url=url, form_body="filenames[]=a.txt&"), cfg=_cfg())
            buf.release()

        request = route.calls.last.request
        assert request.content == b"filenames[]=a.txt&"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_multipart_parts_read_from_files(self, tmp_path) -> None:
        url = "https://neocities.org/api/upload"
        local = tmp_path / "page.html"
        local.write_bytes(b"<h1>hi</h1>")

        with respx.mock:
            route = respx.post(url).mock(return_value=httpx.Response(200, text="ok"))
            parts = [MultipartPart(name="site/index.html", path=str(local))]
            _, buf = execute(RequestSpec(url=url, parts=parts), cfg=_cfg())
            buf.release()

        request = route.calls.last.request
        body = request.read()
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="site/index.html"' in body
        assert b'filename="page.html"' in body
        assert b"<h1>hi</h1>" in body

    def test_missing_part_file_is_transport_error(self, tmp_path) -> None:
        url = "https://neocities.org/api/upload"
        parts = [MultipartPart(name="x", path=str(tmp_path / "nope.txt"))]
        with respx.mock(assert_all_called=False) as respx_mock:
            route = respx_mock.post(url).mock(return_value=httpx.Response(200, text="ok"))
            with pytest.raises(TransportError):
                execute(RequestSpec(url=url, parts=parts), cfg=_cfg())

        assert not route.called


# ---------------------------------------------------------------------------
# Outcome classification
# ---------------------------------------------------------------------------

class TestOutcome:
    def test_success_returns_owned_buffer(self, buffers) -> None:
        with respx.mock:
            respx.get(_URL).mock(return_value=httpx.Response(200, text="hello"))
            status, buf = execute(RequestSpec(url=_URL), cfg=_cfg())

        assert status == 200
        assert buf is buffers[0]
        assert not buf.released
        assert buf.getvalue() == b"hello"
        assert buf.data == b"hello\x00"

    @pytest.mark.parametrize("status", [400, 401, 404, 500, 503])
    def test_error_status_raises_and_releases(self, buffers, status: int) -> None:
        with respx.mock:
            respx.get(_URL).mock(return_value=httpx.Response(status, text="secret error body"))
            with pytest.raises(HTTPStatusError) as info:
                execute(RequestSpec(url=_URL), cfg=_cfg())

        assert info.value.status_code == status
        assert isinstance(info.value, TransportError)
        assert buffers[0].released

    def test_connect_error_is_transport_error(self, buffers) -> None:
        with respx.mock:
            respx.get(_URL).mock(side_effect=httpx.ConnectError)
            with pytest.raises(TransportError):
                execute(RequestSpec(url=_URL), cfg=_cfg())

        assert buffers[0].released

    def test_connect_timeout_is_request_timeout(self, buffers) -> None:
        with respx.mock:
            respx.get(_URL).mock(side_effect=httpx.ConnectTimeout)
            with pytest.raises(RequestTimeout):
                execute(RequestSpec(url=_URL), cfg=_cfg())

        assert buffers[0].released

    def test_slow_transfer_hits_deadline(self, buffers) -> None:
        ticks = itertools.chain([0.0], itertools.repeat(1000.0))
        with respx.mock:
            respx.get(_URL).mock(return_value=httpx.Response(200, text="slow body"))
            with patch("neogities.transport._clock", side_effect=ticks):
                with pytest.raises(RequestTimeout):
                    execute(RequestSpec(url=_URL), cfg=_cfg(transfer_timeout=60.0))

        assert buffers[0].released

    def test_oversized_body_aborts_with_out_of_memory(self, buffers) -> None:
        with respx.mock:
            respx.get(_URL).mock(return_value=httpx.Response(200, text="x" * 64))
            with pytest.raises(OutOfMemoryError):
                execute(RequestSpec(url=_URL), cfg=_cfg(max_response_bytes=16))

        assert buffers[0].released

    def test_stream_error_is_transport_error(self, buffers) -> None:
        with respx.mock:
            respx.get(_URL).mock(side_effect=httpx.StreamConsumed())
            with pytest.raises(TransportError):
                execute(RequestSpec(url=_URL), cfg=_cfg())

        assert buffers[0].released

    def test_unexpected_error_still_releases_buffer(self, buffers) -> None:
        with respx.mock:
            respx.get(_URL).mock(side_effect=RuntimeError("transport exploded"))
            with pytest.raises(RuntimeError):
                execute(RequestSpec(url=_URL), cfg=_cfg())

        assert buffers[0].released
