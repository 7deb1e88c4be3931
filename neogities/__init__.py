"""neogities: client for the Neocities static hosting API.

Public re-exports so callers can write::

    from neogities import info, list_files, upload
    from neogities import NeocitiesError
"""

__version__ = "0.1.0"

from neogities.api import delete, info, list_files, upload
from neogities.buffer import ResponseBuffer
from neogities.errors import (
    AuthError,
    HTTPStatusError,
    NeocitiesError,
    OutOfMemoryError,
    ProtocolError,
    RequestTimeout,
    TransportError,
)
from neogities.models import FileList, SiteInfo

__all__ = [
    "__version__",
    "info",
    "list_files",
    "delete",
    "upload",
    "ResponseBuffer",
    "SiteInfo",
    "FileList",
    "NeocitiesError",
    "TransportError",
    "RequestTimeout",
    "HTTPStatusError",
    "OutOfMemoryError",
    "ProtocolError",
    "AuthError",
]
