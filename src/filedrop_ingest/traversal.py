"""Recursive enumeration of dropped entries into leaf file descriptors."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .constants import PATH_SEPARATOR
from .entries import Entry, content_of
from .errors import ErrorCode, TraversalFailure
from .logging_utils import get_logger
from .models import FileDescriptor, TraversalTask


logger = get_logger(__name__)


@dataclass
class _Node:
    """Placeholder keeping discovery order while siblings resolve concurrently."""

    descriptor: Optional[FileDescriptor] = None
    children: List["_Node"] = field(default_factory=list)


_Pending = Tuple[TraversalTask, _Node]


def _flatten(root: _Node) -> List[FileDescriptor]:
    result: List[FileDescriptor] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.descriptor is not None:
            result.append(node.descriptor)
        stack.extend(reversed(node.children))
    return result


class EntryTraversal:
    """Walk an entry handle and collect every file beneath it.

    The tree is expanded one level at a time from an explicit work list, so
    depth is not limited by the interpreter stack. All tasks of a level run
    concurrently; the pages of a single directory are read one after another
    because the reader is a stateful cursor.

    Failures never propagate: an unreadable file is skipped, a directory whose
    listing fails contributes nothing. Each one is logged and kept in
    :attr:`failures`.
    """

    def __init__(self) -> None:
        self.failures: List[TraversalFailure] = []

    async def traverse(self, entry: Entry, path_prefix: str = "") -> List[FileDescriptor]:
        root = _Node()
        level: List[_Pending] = [(TraversalTask(entry, path_prefix), root)]
        while level:
            expanded = await asyncio.gather(*(self._expand_guarded(task, node) for task, node in level))
            level = [pending for batch in expanded for pending in batch]
        return _flatten(root)

    async def _expand_guarded(self, task: TraversalTask, node: _Node) -> List[_Pending]:
        # A malformed handle must not abort its siblings
        try:
            return await self._expand(task, node)
        except Exception as exc:
            name = getattr(task.entry, "name", None) or "<unnamed>"
            self._record(task.path_prefix + str(name), exc, ErrorCode.ENTRY_UNREADABLE)
            node.children.clear()
            return []

    async def _expand(self, task: TraversalTask, node: _Node) -> List[_Pending]:
        entry = task.entry
        path = task.path_prefix + entry.name

        if entry.is_file:
            try:
                handle = await entry.file()
            except Exception as exc:
                self._record(path, exc, ErrorCode.ENTRY_UNREADABLE)
                return []
            node.descriptor = FileDescriptor(
                name=getattr(handle, "name", None) or entry.name,
                relative_path=path,
                size_bytes=int(getattr(handle, "size", 0) or 0),
                content_handle=content_of(handle),
            )
            return []

        if entry.is_directory:
            try:
                children = await self._read_all(entry)
            except Exception as exc:
                self._record(path, exc, ErrorCode.LISTING_FAILED)
                return []
            prefix = path + PATH_SEPARATOR
            pending: List[_Pending] = []
            for child in children:
                child_node = _Node()
                node.children.append(child_node)
                pending.append((TraversalTask(child, prefix), child_node))
            return pending

        logger.debug("Skipping %s: neither a file nor a directory", path)
        return []

    async def _read_all(self, entry: Entry) -> List[Entry]:
        # One call may return only part of the listing; read until a page is empty
        reader = entry.create_reader()
        children: List[Entry] = []
        while True:
            page = await reader.read_entries()
            if not page:
                break
            children.extend(page)
        logger.debug("Listed %d entries under %s", len(children), entry.name)
        return children

    def _record(self, path: str, exc: Exception, code: str) -> None:
        failure = TraversalFailure(path, str(exc) or exc.__class__.__name__, code=code)
        self.failures.append(failure)
        logger.warning("Skipped %s (%s): %s", path, code, failure.reason)
