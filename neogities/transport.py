"""Request executor: performs one HTTP call and classifies the outcome.

Policy applied to every request:

* TLS certificate and hostname verification are always on.
* Redirects are never followed, so a bearer token is only ever sent to the
  host named in the request URL.
* Connection establishment and the whole transfer are bounded by
  ``settings.connect_timeout`` and ``settings.transfer_timeout``.
* The body is streamed into a :class:`ResponseBuffer`; on any failure the
  buffer is released here and never reaches the caller.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, Sequence

import httpx

from neogities.buffer import ResponseBuffer
from neogities.config import Settings, settings
from neogities.errors import (
    AuthError,
    HTTPStatusError,
    OutOfMemoryError,
    RequestTimeout,
    TransportError,
)

logger = logging.getLogger(__name__)

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_clock = time.monotonic


@dataclass(frozen=True)
class MultipartPart:
    """One form field whose body is the content of a local file."""

    name: str
    path: str


@dataclass
class RequestSpec:
    """Everything needed to perform a single request."""

    url: str
    api_key: Optional[str] = None
    form_body: Optional[str] = None
    parts: Optional[Sequence[MultipartPart]] = None

    def __post_init__(self) -> None:
        if self.form_body is not None and self.parts is not None:
            raise ValueError("A request carries either a form body or multipart parts, not both")

    @property
    def method(self) -> str:
        if self.form_body is not None or self.parts is not None:
            return "POST"
        return "GET"


# ---------------------------------------------------------------------------
# Request assembly
# ---------------------------------------------------------------------------

def _auth_header(api_key: str) -> str:
    """Return the ``Authorization`` header value for *api_key*.

    Raises:
        AuthError: If the token contains non-ASCII, whitespace or control
            characters, which cannot appear in a single header value.
    """
    if not api_key.isascii() or any(ch.isspace() or not ch.isprintable() for ch in api_key):
        raise AuthError("API key contains characters that cannot be sent in a header")
    return f"Bearer {api_key}"


def _build_headers(spec: RequestSpec, cfg: Settings) -> dict[str, str]:
    headers = {"User-Agent": cfg.user_agent}
    if spec.api_key:
        headers["Authorization"] = _auth_header(spec.api_key)
    if spec.form_body is not None:
        headers["Content-Type"] = _FORM_CONTENT_TYPE
    return headers


def _read_parts(parts: Sequence[MultipartPart]) -> list[tuple[str, tuple[str, bytes]]]:
    """Load every part file into memory as an ``httpx`` ``files`` entry.

    Raises:
        TransportError: If a part file cannot be read.
    """
    files = []
    for part in parts:
        try:
            with open(part.path, "rb") as fh:
                payload = fh.read()
        except OSError as exc:
            raise TransportError(f"Cannot read upload file {part.path!r}: {exc}") from exc
        files.append((part.name, (os.path.basename(part.path), payload)))
    return files


def _client(cfg: Settings) -> httpx.Client:
    return httpx.Client(
        verify=True,
        follow_redirects=False,
        timeout=httpx.Timeout(cfg.transfer_timeout, connect=cfg.connect_timeout),
    )


def _stream_into(
    buffer: ResponseBuffer,
    spec: RequestSpec,
    headers: dict[str, str],
    content: Optional[bytes],
    files: Optional[list],
    cfg: Settings,
) -> int:
    """Send the request, stream the body into *buffer* and return the status.

    Every failure is mapped onto the package's error kinds.
    """
    deadline = _clock() + cfg.transfer_timeout
    try:
        with _client(cfg) as client:
            with client.stream(
                spec.method,
                spec.url,
                headers=headers,
                content=content,
                files=files,
            ) as response:
                for chunk in response.iter_bytes():
                    if _clock() > deadline:
                        raise RequestTimeout(
                            f"Transfer from {spec.url} exceeded {cfg.transfer_timeout}s"
                        )
                    buffer.append(chunk)
                return response.status_code
    except httpx.TimeoutException as exc:
        raise RequestTimeout(f"Request to {spec.url} timed out: {exc}") from exc
    except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
        raise TransportError(f"Request to {spec.url} failed: {exc}") from exc
    except UnicodeError as exc:
        raise TransportError(f"Request to {spec.url} could not be encoded: {exc}") from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def execute(spec: RequestSpec, *, cfg: Settings | None = None) -> tuple[int, ResponseBuffer]:
    """Perform the request described by *spec*.

    Args:
        spec: The request to send.
        cfg: Settings to use; defaults to the module-level ``settings``.

    Returns:
        ``(status_code, buffer)`` for any status below 400.  The caller owns
        the buffer and must release it.

    Raises:
        RequestTimeout: If connecting or the whole transfer takes too long.
        HTTPStatusError: If the server answers with a status >= 400.
        TransportError: For any other connection, TLS or request failure.
        OutOfMemoryError: If the response body cannot be buffered.
        AuthError: If the API key cannot be placed in a header.
    """
    cfg = cfg or settings
    headers = _build_headers(spec, cfg)
    files = _read_parts(spec.parts) if spec.parts is not None else None
    content = spec.form_body.encode("utf-8") if spec.form_body is not None else None

    buffer = ResponseBuffer(max_size=cfg.max_response_bytes)
    logger.debug("%s %s", spec.method, spec.url)

    try:
        status_code = _stream_into(buffer, spec, headers, content, files, cfg)
    except BaseException:
        buffer.release()
        raise

    logger.debug("%s %s -> %d (%d bytes)", spec.method, spec.url, status_code, buffer.length)

    if status_code >= 400:
        buffer.release()
        raise HTTPStatusError(
            f"{spec.method} {spec.url} returned HTTP {status_code}",
            status_code=status_code,
        )

    return status_code, buffer
