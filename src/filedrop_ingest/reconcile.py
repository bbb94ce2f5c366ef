"""Reconcile structured drop entries with the flat file list of the same drop."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Union

from .entries import DropItem, FileHandle, content_of, supports_entries
from .logging_utils import get_logger
from .models import FileDescriptor
from .traversal import EntryTraversal


logger = get_logger(__name__)


@dataclass
class Resolved:
    index: int
    descriptors: List[FileDescriptor] = field(default_factory=list)


@dataclass
class Unresolved:
    index: int


ItemResult = Union[Resolved, Unresolved]


def leaf_descriptor(handle: FileHandle) -> FileDescriptor:
    """Descriptor for a plain file with no folder context."""
    return FileDescriptor(
        name=handle.name,
        relative_path=None,
        size_bytes=int(getattr(handle, "size", 0) or 0),
        content_handle=content_of(handle),
    )


class FallbackReconciler:
    """Merge the structured and the flat view of one drop.

    Items that yield an entry are walked with :class:`EntryTraversal`; any
    index that did not resolve falls back to the flat file at the same index,
    so nothing is lost and nothing is counted twice.
    """

    def __init__(self, traversal: Optional[EntryTraversal] = None) -> None:
        self.traversal = traversal or EntryTraversal()

    async def resolve_items(self, items: Sequence[DropItem]) -> List[ItemResult]:
        # Entries are taken up front: hosts only hand them out while the drop event is live
        entries = [item.get_as_entry() if supports_entries(item) else None for item in items]
        walked = await asyncio.gather(
            *(self.traversal.traverse(entry, "") for entry in entries if entry is not None)
        )

        results: List[ItemResult] = []
        walked_iter = iter(walked)
        for index, entry in enumerate(entries):
            if entry is None:
                logger.debug("Drop item %d exposes no entry", index)
                results.append(Unresolved(index))
            else:
                results.append(Resolved(index, next(walked_iter)))
        return results

    async def reconcile(
        self,
        items: Sequence[DropItem],
        flat_files: Sequence[FileHandle],
    ) -> List[FileDescriptor]:
        if not any(supports_entries(item) for item in items):
            logger.info("Entries unavailable for this drop; using %d flat files", len(flat_files))
            return [leaf_descriptor(handle) for handle in flat_files]

        resolved: List[FileDescriptor] = []
        resolved_indexes: Set[int] = set()
        for result in await self.resolve_items(items):
            if isinstance(result, Resolved):
                resolved.extend(result.descriptors)
                resolved_indexes.add(result.index)

        fallback = [
            leaf_descriptor(handle)
            for index, handle in enumerate(flat_files)
            if index not in resolved_indexes
        ]
        if fallback:
            logger.info("Recovered %d dropped files from the flat list", len(fallback))
        return resolved + fallback
