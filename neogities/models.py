"""Typed records produced by the JSON-decoding operations.

These are plain Python objects.  Each owns its nested values and exposes a
``release()`` that resets every field, which is safe to call on a record
that was only partly filled in.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class SiteInfo:
    sitename: str | None = None
    created_at: str | None = None
    last_updated: str | None = None
    domain: str | None = None
    hits: int = 0
    tags: list[str] = field(default_factory=list)

    def release(self) -> None:
        self.sitename = None
        self.created_at = None
        self.last_updated = None
        self.domain = None
        self.hits = 0
        self.tags = []


@dataclass
class FileList:
    paths: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.paths)

    def release(self) -> None:
        self.paths = []
