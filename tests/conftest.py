"""Pytest fixtures and in-memory drop handles for file-drop ingestion tests."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import pytest

from filedrop_ingest.params import IngestParams
from filedrop_ingest.session import IngestionController


class FakeFile:
    """Plain file handle as found in the flat list or a picker result."""

    def __init__(self, name: str, size: int = 1, relative_path: Optional[str] = None) -> None:
        self.name = name
        self.size = size
        self.relative_path = relative_path
        self.content = f"content:{relative_path or name}"


class FakeFileEntry:
    is_file = True
    is_directory = False

    def __init__(self, name: str, size: int = 1, fail: bool = False) -> None:
        self.name = name
        self.size = size
        self.fail = fail

    async def file(self) -> FakeFile:
        await asyncio.sleep(0)
        if self.fail:
            raise OSError("permission denied")
        return FakeFile(self.name, self.size)

    def create_reader(self) -> Any:
        raise NotADirectoryError(self.name)


class FakeReader:
    def __init__(self, directory: "FakeDirectoryEntry") -> None:
        self.directory = directory
        self.offset = 0
        self.calls = 0

    async def read_entries(self) -> List[Any]:
        await asyncio.sleep(0)
        self.calls += 1
        if self.directory.fail_after_pages is not None and self.calls > self.directory.fail_after_pages:
            raise OSError("listing failed")
        page = self.directory.children[self.offset : self.offset + self.directory.page_size]
        self.offset += len(page)
        return list(page)


class FakeDirectoryEntry:
    is_file = False
    is_directory = True

    def __init__(
        self,
        name: str,
        children: List[Any],
        page_size: int = 2,
        fail_after_pages: Optional[int] = None,
    ) -> None:
        self.name = name
        self.children = children
        self.page_size = page_size
        self.fail_after_pages = fail_after_pages
        self.readers: List[FakeReader] = []

    async def file(self) -> FakeFile:
        raise IsADirectoryError(self.name)

    def create_reader(self) -> FakeReader:
        reader = FakeReader(self)
        self.readers.append(reader)
        return reader


class FakeItem:
    """Drop item that may or may not hand out an entry."""

    def __init__(self, entry: Optional[Any]) -> None:
        self.entry = entry

    def get_as_entry(self) -> Optional[Any]:
        return self.entry


class LegacyItem:
    """Drop item from a host without the entry capability."""


Tree = Dict[str, Union[int, "Tree"]]


def build_entry(name: str, node: Union[int, Tree], page_size: int = 2) -> Any:
    """Build an entry from ``{"dir": {"file.txt": size}}`` style nesting."""
    if isinstance(node, int):
        return FakeFileEntry(name, node)
    children = [build_entry(child, sub, page_size) for child, sub in node.items()]
    return FakeDirectoryEntry(name, children, page_size=page_size)


def run(coro: Any) -> Any:
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo CLI logging setup so ``caplog`` sees package records in every test."""
    yield
    package_logger = logging.getLogger("filedrop_ingest")
    package_logger.handlers.clear()
    package_logger.propagate = True


@pytest.fixture
def fast_params() -> IngestParams:
    """Params with no waiting on the simulated progress or completion delay."""
    return IngestParams(progress_interval=0.0, completion_delay=0.0)


class RecordingUploader:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[List[str]] = []

    async def upload(self, selection: Any) -> None:
        await asyncio.sleep(0)
        self.calls.append([d.identity_key for d in selection])
        if self.fail:
            raise ConnectionError("server returned 500")


class GatedUploader(RecordingUploader):
    """Uploader that stays in flight until ``released`` is set."""

    def __init__(self, fail: bool = False) -> None:
        super().__init__(fail=fail)
        self.released = False

    async def upload(self, selection: Any) -> None:
        while not self.released:
            await asyncio.sleep(0.001)
        await super().upload(selection)


@pytest.fixture
def uploader() -> RecordingUploader:
    return RecordingUploader()


@pytest.fixture
def controller(uploader: RecordingUploader, fast_params: IngestParams) -> IngestionController:
    return IngestionController(uploader, params=fast_params)


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """On-disk ``proj`` folder with a nested file and a Finder artifact."""
    root = tmp_path / "proj"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_text("alpha", encoding="utf-8")
    (root / "sub" / "b.txt").write_text("bravo!", encoding="utf-8")
    (root / "sub" / ".DS_Store").write_bytes(b"\x00\x00")
    return root
