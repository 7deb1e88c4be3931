"""Growable byte buffer that accumulates a streamed response body."""

from __future__ import annotations

from types import TracebackType

from neogities.errors import OutOfMemoryError

_TERMINATOR = b"\x00"


class ResponseBuffer:
    """Append-only byte buffer, always NUL-terminated.

    ``length`` counts the meaningful bytes; the trailing terminator is kept
    so ``data`` can be handed to anything expecting a C-style string.

    Args:
        max_size: Upper bound on ``length``.  ``0`` means no bound beyond
            what the interpreter can allocate.
    """

    def __init__(self, max_size: int = 0) -> None:
        self._data: bytearray | None = bytearray(_TERMINATOR)
        self._length = 0
        self._max_size = max_size

    # ------------------------------------------------------------------
    # Growth
    # ------------------------------------------------------------------
    def append(self, chunk: bytes) -> None:
        """Append *chunk*, keeping the terminator at the end.

        Raises:
            OutOfMemoryError: If the buffer cannot grow to hold *chunk*, or
                has already been released.
        """
        if self._data is None:
            raise OutOfMemoryError("Response buffer has been released")
        if not chunk:
            return

        new_length = self._length + len(chunk)
        if self._max_size and new_length > self._max_size:
            raise OutOfMemoryError(
                f"Response body exceeds {self._max_size} bytes"
            )
        try:
            # Overwrite the old terminator, then re-terminate.
            self._data[self._length:] = chunk
            self._data += _TERMINATOR
        except MemoryError as exc:
            raise OutOfMemoryError(
                f"Could not grow response buffer to {new_length} bytes"
            ) from exc
        self._length = new_length

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def length(self) -> int:
        return self._length

    @property
    def data(self) -> bytes:
        """Raw storage including the trailing terminator."""
        if self._data is None:
            return b""
        return bytes(self._data)

    @property
    def released(self) -> bool:
        return self._data is None

    def getvalue(self) -> bytes:
        """Return the meaningful bytes (without the terminator)."""
        if self._data is None:
            return b""
        return bytes(self._data[: self._length])

    def text(self) -> str:
        """Decode the body as UTF-8, replacing undecodable bytes."""
        return self.getvalue().decode("utf-8", errors="replace")

    # ------------------------------------------------------------------
    # Disposal
    # ------------------------------------------------------------------
    def release(self) -> None:
        """Drop the owned storage.  Further calls are no-ops."""
        self._data = None
        self._length = 0

    def __enter__(self) -> ResponseBuffer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        state = "released" if self._data is None else f"length={self._length}"
        return f"<ResponseBuffer {state}>"
