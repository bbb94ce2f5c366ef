"""Platform handle protocols consumed by the ingestion engine.

These mirror what a drop target receives from the host: entries that are
either files or directories, directory readers that hand out children one
page at a time, drop items that may or may not expose an entry, and plain
file handles.
"""
from __future__ import annotations

from typing import Any, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class FileHandle(Protocol):
    """A plain file: the flat fallback list and the picker both yield these."""

    name: str
    size: int


@runtime_checkable
class PickedFile(FileHandle, Protocol):
    # Empty or None unless the picker was in folder mode
    relative_path: Optional[str]


class DirectoryReader(Protocol):
    async def read_entries(self) -> List["Entry"]:
        """Return the next page of children; an empty list means exhausted."""
        ...


class Entry(Protocol):
    name: str
    is_file: bool
    is_directory: bool

    async def file(self) -> FileHandle:
        """Resolve the underlying file handle (leaf entries only)."""
        ...

    def create_reader(self) -> DirectoryReader:
        """Return a stateful listing cursor (directory entries only)."""
        ...


class DropItem(Protocol):
    def get_as_entry(self) -> Optional[Entry]:
        ...


def supports_entries(item: Any) -> bool:
    """True when ``item`` exposes the structured-entry capability at all."""
    return callable(getattr(item, "get_as_entry", None))


def content_of(handle: Any) -> Any:
    """Opaque content reference carried by a file handle."""
    return getattr(handle, "content", handle)
