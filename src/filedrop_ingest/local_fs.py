"""Local filesystem implementation of the drop and picker handles."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .constants import DEFAULT_PAGE_SIZE


class LocalFile:
    """Plain file handle; ``content`` is the path on disk."""

    def __init__(self, path: Path, relative_path: Optional[str] = None) -> None:
        self.path = Path(path)
        self.name = self.path.name
        self.size = self.path.stat().st_size if self.path.is_file() else 0
        self.relative_path = relative_path
        self.content = self.path

    def __repr__(self) -> str:
        return f"LocalFile({str(self.path)!r})"


class LocalFileEntry:
    is_file = True
    is_directory = False

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.name = self.path.name

    async def file(self) -> LocalFile:
        return await asyncio.to_thread(LocalFile, self.path)

    def create_reader(self) -> "LocalDirectoryReader":
        raise NotADirectoryError(str(self.path))


class LocalDirectoryReader:
    """Hands out directory children ``page_size`` at a time, then an empty page."""

    def __init__(self, path: Path, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.path = path
        self.page_size = page_size
        self._pending: Optional[List[Path]] = None

    async def read_entries(self) -> List["LocalFileEntry | LocalDirectoryEntry"]:
        if self._pending is None:
            self._pending = await asyncio.to_thread(self._list)
        page, self._pending = self._pending[: self.page_size], self._pending[self.page_size :]
        return [entry_for(child, self.page_size) for child in page]

    def _list(self) -> List[Path]:
        with os.scandir(self.path) as it:
            return sorted((Path(e.path) for e in it), key=lambda p: p.name)


class LocalDirectoryEntry:
    is_file = False
    is_directory = True

    def __init__(self, path: Path, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.path = Path(path)
        self.name = self.path.name
        self.page_size = page_size

    async def file(self) -> LocalFile:
        raise IsADirectoryError(str(self.path))

    def create_reader(self) -> LocalDirectoryReader:
        return LocalDirectoryReader(self.path, self.page_size)


def entry_for(path: Path, page_size: int = DEFAULT_PAGE_SIZE) -> "LocalFileEntry | LocalDirectoryEntry":
    if path.is_dir():
        return LocalDirectoryEntry(path, page_size)
    return LocalFileEntry(path)


class LocalDropItem:
    def __init__(self, path: Path, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.path = Path(path)
        self.page_size = page_size

    def get_as_entry(self) -> "LocalFileEntry | LocalDirectoryEntry | None":
        if not self.path.exists():
            return None
        return entry_for(self.path, self.page_size)


def drop_payload(paths: Iterable[Path], page_size: int = DEFAULT_PAGE_SIZE) -> Tuple[List[LocalDropItem], List[LocalFile]]:
    """Build a drop of ``paths``: one item per path and the index-aligned flat list."""

    items: List[LocalDropItem] = []
    flat_files: List[LocalFile] = []
    for path in paths:
        path = Path(path)
        items.append(LocalDropItem(path, page_size))
        flat_files.append(LocalFile(path))
    return items, flat_files


def picked_files(paths: Iterable[Path]) -> List[LocalFile]:
    """Emulate the native picker: files as-is, folders expanded with relative paths."""

    picked: List[LocalFile] = []
    for path in paths:
        path = Path(path)
        if not path.is_dir():
            picked.append(LocalFile(path))
            continue
        children = sorted(
            (p for p in path.rglob("*") if p.is_file()),
            key=lambda p: p.relative_to(path).as_posix(),
        )
        for child in children:
            relpath = f"{path.name}/{child.relative_to(path).as_posix()}"
            picked.append(LocalFile(child, relative_path=relpath))
    return picked
