"""The four remote operations of the Neocities API.

Each function performs exactly one request with no retries.  ``info`` and
``list_files`` decode the JSON body into a record; ``delete`` and ``upload``
hand back the server's response text verbatim.

Example::

    from neogities import api

    site = api.info("mysite")
    print(site.hits, site.tags)

    listing = api.list_files(api_key, path="images")
    api.upload(api_key, [("build/index.html", "index.html")])
"""

from __future__ import annotations

from typing import Optional, Sequence
from urllib.parse import quote

import httpx

from neogities.config import Settings, settings
from neogities.decode import decode_file_list, decode_site_info, parse_json
from neogities.errors import AuthError
from neogities.models import FileList, SiteInfo
from neogities.transport import MultipartPart, RequestSpec, execute


def _require_key(api_key: Optional[str], operation: str) -> str:
    if not api_key:
        raise AuthError(f"'{operation}' requires an API key")
    return api_key


def _url(cfg: Settings, endpoint: str, **params: Optional[str]) -> str:
    query = {k: v for k, v in params.items() if v is not None}
    return str(httpx.URL(cfg.endpoint(endpoint), params=query or None))


def _fetch_text(spec: RequestSpec, cfg: Settings) -> str:
    _, buffer = execute(spec, cfg=cfg)
    with buffer:
        return buffer.text()


def delete_body(filenames: Sequence[str]) -> str:
    """Encode *filenames* as repeated ``filenames[]=<name>&`` pairs.

    Names are percent-encoded so reserved characters (``&``, ``=``, spaces)
    cannot break the form; ``/`` is left as-is for nested paths.
    """
    return "".join(f"filenames[]={quote(name, safe='/')}&" for name in filenames)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def info(sitename: Optional[str] = None, *, cfg: Settings | None = None) -> SiteInfo:
    """Return public information about *sitename* (``GET /api/info``).

    No credentials are sent.

    Raises:
        TransportError: On network failure or an HTTP status >= 400.
        ProtocolError: If the body is not a successful ``info`` envelope.
    """
    cfg = cfg or settings
    spec = RequestSpec(url=_url(cfg, "/api/info", sitename=sitename))
    return decode_site_info(parse_json(_fetch_text(spec, cfg)))


def list_files(
    api_key: Optional[str],
    path: Optional[str] = None,
    *,
    cfg: Settings | None = None,
) -> FileList:
    """List the files of the authenticated site (``GET /api/list``).

    Args:
        api_key: Bearer token of the site.
        path: Restrict the listing to this directory.

    Raises:
        AuthError: If *api_key* is empty.
        TransportError: On network failure or an HTTP status >= 400.
        ProtocolError: If ``files`` is missing or an entry has no ``path``.
    """
    cfg = cfg or settings
    key = _require_key(api_key, "list")
    spec = RequestSpec(url=_url(cfg, "/api/list", path=path), api_key=key)
    return decode_file_list(parse_json(_fetch_text(spec, cfg)))


def delete(
    api_key: Optional[str],
    filenames: Sequence[str],
    *,
    cfg: Settings | None = None,
) -> str:
    """Delete *filenames* from the site (``POST /api/delete``).

    Returns:
        The raw response text.
    """
    cfg = cfg or settings
    key = _require_key(api_key, "delete")
    spec = RequestSpec(
        url=_url(cfg, "/api/delete"),
        api_key=key,
        form_body=delete_body(filenames),
    )
    return _fetch_text(spec, cfg)


def upload(
    api_key: Optional[str],
    files: Sequence[tuple[str, str]],
    *,
    cfg: Settings | None = None,
) -> str:
    """Upload local files to the site (``POST /api/upload``).

    Args:
        api_key: Bearer token of the site.  Checked before anything is read
            or sent.
        files: ``(local_path, remote_name)`` pairs.  The remote name becomes
            the form field name and the file content the part body.

    Returns:
        The raw response text.
    """
    cfg = cfg or settings
    key = _require_key(api_key, "upload")
    spec = RequestSpec(
        url=_url(cfg, "/api/upload"),
        api_key=key,
        parts=[MultipartPart(name=remote, path=local) for local, remote in files],
    )
    return _fetch_text(spec, cfg)
