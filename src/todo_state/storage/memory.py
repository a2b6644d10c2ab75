"""Session-scoped in-memory storage backend."""

from typing import Any

from loguru import logger

from todo_state.errors import StorageError
from todo_state.storage import codec


class InMemoryStorage:
    """Keep encoded values in a dict for the lifetime of the process.

    Values go through the JSON codec on the way in and out, so the store never
    shares references with its callers and only JSON-representable state is
    accepted, the same as with a durable backend.

    An optional ``max_bytes`` quota caps the total UTF-8 size of the stored
    payloads. A write that would exceed it fails and the previous value for
    that key is kept.
    """

    def __init__(self, *, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        try:
            return codec.decode(raw)
        except ValueError:
            logger.warning("Corrupt data for key {!r}, ignoring it", key)
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            raw = codec.encode(value)
        except (TypeError, ValueError) as e:
            raise StorageError(key, f"cannot encode value: {e}") from e

        if self.max_bytes is not None:
            used = self.size_bytes() - _size(self._data.get(key, ""))
            if used + _size(raw) > self.max_bytes:
                msg = f"quota of {self.max_bytes} bytes exceeded"
                raise StorageError(key, msg)

        self._data[key] = raw
        logger.debug("Stored {!r} ({} bytes)", key, _size(raw))

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[str]:
        return sorted(self._data)

    def size_bytes(self) -> int:
        """Total UTF-8 size of all stored payloads."""
        return sum(_size(raw) for raw in self._data.values())

    def put_raw(self, key: str, raw: str) -> None:
        """Store already-serialized text as-is, bypassing the codec."""
        self._data[key] = raw


def _size(raw: str) -> int:
    return len(raw.encode("utf-8"))
