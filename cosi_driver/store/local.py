"""
Directory store backed by the local filesystem.
"""

import hashlib
import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path

from cosi_driver.deadline import Deadline, lock_timeout
from cosi_driver.exceptions import (
    AlreadyExistsError,
    DeadlineExceededError,
    NotFoundError,
    UnavailableError,
    VersionConflictError,
)
from cosi_driver.store.base import DirectoryStore, Entry, join_path

logger = logging.getLogger(__name__)

DIRECTORY_VERSION = "directory"


def content_version(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


class LocalDirectoryStore(DirectoryStore):
    """
    Directory store rooted at ``base_path``.

    Store paths map onto the filesystem below the base path
    (``/etc/iam/identity.json`` -> ``<base_path>/etc/iam/identity.json``).
    File versions are content hashes and writes go through a temporary
    file and ``os.replace``. The compare-and-swap lock is per process, so
    only one driver process may share a base path.

    Example:
        store = LocalDirectoryStore(base_path="./data")
    """

    def __init__(self, base_path: str = "./data", create_dirs: bool = True):
        self.base_path = Path(base_path)
        self._lock = threading.Lock()

        if create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, directory: str, name: str) -> Path:
        return self.base_path / join_path(directory, name).lstrip("/")

    @contextmanager
    def _locked(self, deadline: Deadline | None):
        if not self._lock.acquire(timeout=lock_timeout(deadline)):
            raise DeadlineExceededError("Timed out waiting for the local store lock")
        try:
            yield
        except OSError as e:
            raise UnavailableError(
                f"Local store I/O failed: {e}", details={"base_path": str(self.base_path)}
            ) from e
        finally:
            self._lock.release()

    def _read(self, path: Path, name: str) -> Entry | None:
        if path.is_dir():
            return Entry(name=name, is_directory=True, version=DIRECTORY_VERSION)
        if not path.exists():
            return None
        content = path.read_bytes()
        return Entry(name=name, content=content, version=content_version(content))

    def _write_atomic(self, path: Path, content: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def lookup(self, directory, name, deadline=None):
        with self._locked(deadline):
            return self._read(self._path(directory, name), name)

    def create(self, directory, name, content=b"", is_directory=False, deadline=None):
        path = self._path(directory, name)
        with self._locked(deadline):
            if path.exists():
                raise AlreadyExistsError(
                    f"Entry '{path}' already exists", details={"path": str(path)}
                )
            path.parent.mkdir(parents=True, exist_ok=True)
            if is_directory:
                path.mkdir()
            else:
                self._write_atomic(path, content)
            logger.debug("created entry", extra={"path": str(path)})
            return self._read(path, name)

    def update(self, directory, name, content, deadline=None):
        path = self._path(directory, name)
        with self._locked(deadline):
            self._require(path, name)
            self._write_atomic(path, content)
            return self._read(path, name)

    def update_if_unchanged(self, directory, name, expected_version, content, deadline=None):
        path = self._path(directory, name)
        with self._locked(deadline):
            current = self._require(path, name)
            if current.version != expected_version:
                raise VersionConflictError(
                    f"Entry '{path}' changed since it was read",
                    details={"path": str(path)},
                )
            self._write_atomic(path, content)
            return self._read(path, name)

    def delete(self, directory, name, deadline=None):
        path = self._path(directory, name)
        with self._locked(deadline):
            entry = self._require(path, name)
            if entry.is_directory:
                shutil.rmtree(path)
            else:
                path.unlink()

    def _require(self, path: Path, name: str) -> Entry:
        entry = self._read(path, name)
        if entry is None:
            raise NotFoundError(f"Entry '{path}' not found", details={"path": str(path)})
        return entry

    def __repr__(self) -> str:
        return f"LocalDirectoryStore(base_path='{self.base_path}')"
