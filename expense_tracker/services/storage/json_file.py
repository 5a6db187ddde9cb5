"""
JSON File Storage Implementation

Each key is kept in its own `<key>.json` file inside a data directory.

TRADEOFFS:
- Every write replaces the whole file (fine for a personal expense list)
- No cross-process locking; one process owns the directory
- Writes go through a temp file and os.replace, so readers see either
  the old value or the new one, never half of each
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.config import StorageSettings
from expense_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


class JsonFileStorage(KeyValueStorageInterface):
    """
    File-backed key-value storage.

    Blocking file I/O runs in a worker thread. Transient OSErrors are
    retried with exponential backoff before being surfaced.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        retry_attempts: int = 3,
        retry_wait_seconds: float = 0.1,
    ):
        self._directory = Path(directory)
        self._retry_attempts = retry_attempts
        self._retry_wait_seconds = retry_wait_seconds

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "JsonFileStorage":
        return cls(
            directory=settings.data_dir,
            retry_attempts=settings.retry_attempts,
            retry_wait_seconds=settings.retry_wait_seconds,
        )

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """File that holds the value for a key."""
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(
                multiplier=self._retry_wait_seconds,
                max=self._retry_wait_seconds * 10,
            ),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    # -------------------------------------------------------------------------
    # Blocking helpers (run in a worker thread)
    # -------------------------------------------------------------------------

    def _read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            for attempt in self._retrying():
                with attempt:
                    try:
                        return path.read_text(encoding="utf-8")
                    except FileNotFoundError:
                        return None
        except OSError as e:
            raise StorageReadError(f"Failed to read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise StorageReadError(f"Stored data in {path} is not valid UTF-8") from e

    def _write_once(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{path.stem}_", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise

    def _write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            for attempt in self._retrying():
                with attempt:
                    self._write_once(path, value)
        except OSError as e:
            raise StorageWriteError(f"Failed to write {path}: {e}") from e
        logger.debug("storage_write", key=key, path=str(path), size=len(value))

    def _remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {path}: {e}") from e

    # -------------------------------------------------------------------------
    # Async interface
    # -------------------------------------------------------------------------

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)
