"""Data model shared by the ingestion components."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .constants import PATH_SEPARATOR


class UploadMode(str, Enum):
    """Which picker is offered and which validation policy applies."""

    FILE = "file"
    FOLDER = "folder"


class SessionState(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(eq=False)
class FileDescriptor:
    """One file the user intends to upload.

    ``relative_path`` is the slash-separated path from the root of a dropped
    or picked folder down to and including the file itself. It is ``None``
    when the file arrived without folder context, in which case ``name`` is
    authoritative.

    Descriptors compare by identity; use :attr:`identity_key` for
    deduplication.
    """

    name: str
    relative_path: Optional[str] = None
    size_bytes: int = 0
    content_handle: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        # Pickers report "" for files selected without a folder
        if not self.relative_path:
            self.relative_path = None

    @property
    def identity_key(self) -> str:
        return self.relative_path if self.relative_path is not None else self.name

    @property
    def leaf_name(self) -> str:
        if self.relative_path is None:
            return self.name
        return self.relative_path.rsplit(PATH_SEPARATOR, 1)[-1]

    @property
    def has_folder_context(self) -> bool:
        return self.relative_path is not None and PATH_SEPARATOR in self.relative_path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "relative_path": self.relative_path,
            "identity_key": self.identity_key,
            "size_bytes": int(self.size_bytes),
        }


class SelectionSet:
    """Ordered descriptors, unique by identity key."""

    def __init__(self, descriptors: Iterable[FileDescriptor] = ()) -> None:
        self._items: Dict[str, FileDescriptor] = {}
        for descriptor in descriptors:
            self._items.setdefault(descriptor.identity_key, descriptor)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[FileDescriptor]:
        return iter(list(self._items.values()))

    def __bool__(self) -> bool:
        return bool(self._items)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, FileDescriptor):
            key = key.identity_key
        return key in self._items

    def __repr__(self) -> str:
        return f"SelectionSet({list(self._items)!r})"

    def get(self, key: str) -> Optional[FileDescriptor]:
        return self._items.get(key)

    def keys(self) -> List[str]:
        return list(self._items)

    def descriptors(self) -> Tuple[FileDescriptor, ...]:
        return tuple(self._items.values())

    def total_bytes(self) -> int:
        return sum(int(d.size_bytes) for d in self._items.values())

    def add(self, descriptor: FileDescriptor) -> bool:
        """Append ``descriptor`` unless its key is taken; return whether it was added."""
        key = descriptor.identity_key
        if key in self._items:
            return False
        self._items[key] = descriptor
        return True

    def remove(self, key: str) -> FileDescriptor:
        try:
            return self._items.pop(key)
        except KeyError:
            raise KeyError(f"No selected file with key {key!r}") from None

    def clear(self) -> None:
        self._items.clear()

    def copy(self) -> "SelectionSet":
        return SelectionSet(self._items.values())


@dataclass
class TraversalTask:
    """A pending entry and the path prefix its descriptors will carry."""

    entry: Any
    path_prefix: str = ""
