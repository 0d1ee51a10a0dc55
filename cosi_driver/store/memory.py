"""
In-process directory store for development and testing.
"""

import itertools
import logging
import threading
from contextlib import contextmanager

from cosi_driver.deadline import Deadline, lock_timeout
from cosi_driver.exceptions import (
    AlreadyExistsError,
    DeadlineExceededError,
    NotFoundError,
    VersionConflictError,
)
from cosi_driver.store.base import DirectoryStore, Entry, join_path

logger = logging.getLogger(__name__)


class MemoryDirectoryStore(DirectoryStore):
    """
    Directory store kept in a dict.

    Versions come from a monotonically increasing counter, so two writes of
    the same content still produce different versions.

    Example:
        store = MemoryDirectoryStore()
        store.create("/etc/iam", "identity.json", b"{}")
        entry = store.lookup("/etc/iam", "identity.json")
    """

    def __init__(self):
        self._entries: dict[str, Entry] = {}
        self._lock = threading.Lock()
        self._versions = itertools.count(1)

    @contextmanager
    def _locked(self, deadline: Deadline | None):
        if not self._lock.acquire(timeout=lock_timeout(deadline)):
            raise DeadlineExceededError("Timed out waiting for the memory store lock")
        try:
            yield
        finally:
            self._lock.release()

    def _next_version(self) -> str:
        return str(next(self._versions))

    def lookup(self, directory, name, deadline=None):
        with self._locked(deadline):
            entry = self._entries.get(join_path(directory, name))
            return entry.model_copy() if entry else None

    def create(self, directory, name, content=b"", is_directory=False, deadline=None):
        path = join_path(directory, name)
        with self._locked(deadline):
            if path in self._entries:
                raise AlreadyExistsError(
                    f"Entry '{path}' already exists", details={"path": path}
                )
            entry = Entry(
                name=name,
                content=b"" if is_directory else content,
                is_directory=is_directory,
                version=self._next_version(),
            )
            self._entries[path] = entry
            logger.debug("created entry", extra={"path": path, "version": entry.version})
            return entry.model_copy()

    def update(self, directory, name, content, deadline=None):
        path = join_path(directory, name)
        with self._locked(deadline):
            current = self._require(path)
            return self._write(path, current, content)

    def update_if_unchanged(self, directory, name, expected_version, content, deadline=None):
        path = join_path(directory, name)
        with self._locked(deadline):
            current = self._require(path)
            if current.version != expected_version:
                raise VersionConflictError(
                    f"Entry '{path}' changed since it was read",
                    details={
                        "path": path,
                        "expected": expected_version,
                        "actual": current.version,
                    },
                )
            return self._write(path, current, content)

    def delete(self, directory, name, deadline=None):
        path = join_path(directory, name)
        with self._locked(deadline):
            self._require(path)
            prefix = path.rstrip("/") + "/"
            for key in [k for k in self._entries if k == path or k.startswith(prefix)]:
                del self._entries[key]

    def _require(self, path: str) -> Entry:
        entry = self._entries.get(path)
        if entry is None:
            raise NotFoundError(f"Entry '{path}' not found", details={"path": path})
        return entry

    def _write(self, path: str, current: Entry, content: bytes) -> Entry:
        entry = current.model_copy(update={"content": content, "version": self._next_version()})
        self._entries[path] = entry
        return entry.model_copy()

    def __len__(self) -> int:
        return len(self._entries)
