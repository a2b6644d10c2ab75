"""Durable storage backend keeping one JSON file per key."""

import os
import re
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger

from todo_state.errors import InvalidKeyError, StorageError
from todo_state.storage import codec

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
_SUFFIX = ".json"


class JsonFileStorage:
    """Store each key as ``<key>.json`` inside a directory.

    - Files are only rewritten when their contents change.
    - Writes go to a temporary file which then replaces the target, so a
      crash mid-write never leaves a truncated file behind.
    - The directory is created on the first write.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser().resolve()
        logger.debug("JSON file storage ready, directory {}", self.directory)

    def path_for(self, key: str) -> Path:
        """Return the file holding key.

        Raises:
            InvalidKeyError: If key is not a simple file name.
        """
        if not _KEY_RE.match(key) or key.startswith("."):
            msg = "Invalid storage key, expected a plain file name"
            raise InvalidKeyError(key, msg)
        return self.directory / (key + _SUFFIX)

    def get(self, key: str) -> Any | None:
        path = self.path_for(key)
        try:
            contents = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError):
            logger.opt(exception=True).warning("Cannot read {}, ignoring it", path)
            return None
        try:
            return codec.decode(contents)
        except ValueError:
            logger.warning("Corrupt JSON in {}, ignoring it", path)
            return None

    def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        try:
            contents = codec.encode(value) + "\n"
        except (TypeError, ValueError) as e:
            raise StorageError(key, f"cannot encode value: {e}") from e

        try:
            if path.read_text(encoding="utf-8") == contents:
                logger.debug("Unchanged {}, not writing", path)
                return
        except (FileNotFoundError, UnicodeDecodeError):
            pass
        except OSError as e:
            raise StorageError(key, str(e)) from e

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(contents)
                Path(tmp_name).replace(path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(key, str(e)) from e
        logger.debug("Wrote {}", path)

    def remove(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(key, str(e)) from e

    def clear(self) -> None:
        for key in self.keys():
            self.remove(key)

    def keys(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            p.name.removesuffix(_SUFFIX)
            for p in self.directory.glob("*" + _SUFFIX)
            if _KEY_RE.match(p.name.removesuffix(_SUFFIX)) and not p.name.startswith(".")
        )
