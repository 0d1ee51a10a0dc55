"""
Directory store abstraction.

A directory store is a path-addressed blob store: entries live in a
directory and are either files with content or directories. It backs the
identity document and, for the filer backend, the buckets themselves.
"""

from abc import ABC, abstractmethod
import posixpath

from pydantic import BaseModel

from cosi_driver.deadline import Deadline


class Entry(BaseModel):
    """A single directory entry as returned by a store."""

    name: str
    content: bytes = b""
    is_directory: bool = False
    version: str = ""


def join_path(directory: str, name: str) -> str:
    """Normalized absolute path of ``name`` inside ``directory``."""
    return posixpath.normpath(posixpath.join("/", directory, name))


class DirectoryStore(ABC):
    """
    Base class for directory store adapters.

    Every method accepts an optional Deadline and must not block past it.
    Transport failures are raised as UnavailableError.
    """

    @abstractmethod
    def lookup(
        self, directory: str, name: str, deadline: Deadline | None = None
    ) -> Entry | None:
        """
        Fetch an entry.

        Returns:
            The entry, or None if it does not exist
        """
        pass

    @abstractmethod
    def create(
        self,
        directory: str,
        name: str,
        content: bytes = b"",
        is_directory: bool = False,
        deadline: Deadline | None = None,
    ) -> Entry:
        """
        Create an entry that must not exist yet.

        Raises:
            AlreadyExistsError: If the entry already exists
        """
        pass

    @abstractmethod
    def update(
        self,
        directory: str,
        name: str,
        content: bytes,
        deadline: Deadline | None = None,
    ) -> Entry:
        """
        Overwrite an existing file entry unconditionally.

        Raises:
            NotFoundError: If the entry does not exist
        """
        pass

    @abstractmethod
    def update_if_unchanged(
        self,
        directory: str,
        name: str,
        expected_version: str,
        content: bytes,
        deadline: Deadline | None = None,
    ) -> Entry:
        """
        Overwrite a file entry only if its version is still ``expected_version``.

        Raises:
            VersionConflictError: If another writer changed the entry
            NotFoundError: If the entry does not exist
        """
        pass

    @abstractmethod
    def delete(
        self, directory: str, name: str, deadline: Deadline | None = None
    ) -> None:
        """
        Delete an entry.

        Raises:
            NotFoundError: If the entry does not exist
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
