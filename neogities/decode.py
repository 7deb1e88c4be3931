"""JSON decoding of API response bodies into typed records."""

from __future__ import annotations

import json
from typing import Any

from neogities.errors import ProtocolError
from neogities.models import FileList, SiteInfo


def parse_json(body: str) -> Any:
    """Parse *body* into a JSON value tree.

    Raises:
        ProtocolError: If *body* is not valid JSON.
    """
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"Response is not valid JSON: {exc}") from exc


def _get(obj: Any, key: str) -> Any:
    return obj.get(key) if isinstance(obj, dict) else None


def _optional_string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _integer(value: Any) -> int:
    # bool is an int subclass but not a JSON integer
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def decode_site_info(root: Any) -> SiteInfo:
    """Build a :class:`SiteInfo` from an ``/api/info`` response tree.

    Non-string entries in ``tags`` are dropped rather than kept as ``None``.

    Raises:
        ProtocolError: If ``result`` is not ``"success"`` or ``info`` is not
            an object.
    """
    if _get(root, "result") != "success":
        raise ProtocolError("Response result is not 'success'")
    info = _get(root, "info")
    if not isinstance(info, dict):
        raise ProtocolError("Response has no 'info' object")

    tags = info.get("tags")
    return SiteInfo(
        sitename=_optional_string(info.get("sitename")),
        created_at=_optional_string(info.get("created_at")),
        last_updated=_optional_string(info.get("last_updated")),
        domain=_optional_string(info.get("domain")),
        hits=_integer(info.get("hits")),
        tags=[t for t in tags if isinstance(t, str)] if isinstance(tags, list) else [],
    )


def decode_file_list(root: Any) -> FileList:
    """Build a :class:`FileList` from an ``/api/list`` response tree.

    Raises:
        ProtocolError: If ``files`` is missing or not an array, or any entry
            lacks a string ``path``.
    """
    files = _get(root, "files")
    if not isinstance(files, list):
        raise ProtocolError("Response has no 'files' array")

    paths = []
    for index, entry in enumerate(files):
        path = _get(entry, "path")
        if not isinstance(path, str):
            raise ProtocolError(f"File entry {index} has no string 'path'")
        paths.append(path)
    return FileList(paths=paths)
