"""Disk-backed read-through cache with TTL and fresh-file invalidation."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import time
import zlib
from collections.abc import Callable, Iterable
from datetime import timedelta
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET: Any = object()


class CacheManager(Generic[T]):
    """Caches one value of type ``value_type`` in a compressed file at ``path``.

    The file is fresh when it is younger than ``fresh_duration`` (if set) and
    none of ``fresh_files`` has a newer modification time. Stale, missing or
    unreadable files cause ``compute`` to run again.

        cm = CacheManager(cache_dir / "remote_versions.json.z", list[str],
                          fresh_duration=timedelta(days=1),
                          fresh_files=[plugin_path / "bin" / "list-all"])
        versions = cm.get_or_try_init(fetch_remote_versions)
    """

    def __init__(
        self,
        path: Path,
        value_type: Any,
        fresh_duration: timedelta | None = None,
        fresh_files: Iterable[Path] = (),
    ) -> None:
        self.path = Path(path)
        self.fresh_duration = fresh_duration
        self.fresh_files = [Path(f) for f in fresh_files]
        self._adapter: TypeAdapter[T] = TypeAdapter(value_type)
        self._value: T = _UNSET
        self._lock = threading.Lock()

    def get_or_try_init(self, compute: Callable[[], T]) -> T:
        with self._lock:
            if self._value is not _UNSET:
                return self._value
            if self.is_fresh():
                cached = self._parse()
                if cached is not _UNSET:
                    self._value = cached
                    return cached
            value = compute()
            self._write(value)
            self._value = value
            return value

    def is_fresh(self) -> bool:
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return False
        if self.fresh_duration is not None:
            if time.time() - mtime >= self.fresh_duration.total_seconds():
                logger.debug("cache is stale (expired): %s", self.path)
                return False
        for fresh_file in self.fresh_files:
            try:
                if fresh_file.stat().st_mtime > mtime:
                    logger.debug("cache is stale (%s is newer): %s", fresh_file, self.path)
                    return False
            except FileNotFoundError:
                continue
        return True

    def clear(self) -> None:
        with self._lock:
            self._value = _UNSET
            self.path.unlink(missing_ok=True)

    def _parse(self) -> T:
        try:
            data = zlib.decompress(self.path.read_bytes())
            return self._adapter.validate_json(data)
        except (OSError, zlib.error, ValidationError) as e:
            logger.debug("ignoring unreadable cache %s: %s", self.path, e)
            return _UNSET

    def _write(self, value: T) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f"{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(zlib.compress(self._adapter.dump_json(value)))
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise
        logger.debug("wrote cache %s", self.path)
