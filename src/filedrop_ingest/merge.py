"""Merge an ingested batch into the current selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import FileDescriptor, SelectionSet


@dataclass
class MergeResult:
    selection: SelectionSet
    added: int
    skipped: int


def identity_key(descriptor: FileDescriptor) -> str:
    return descriptor.identity_key


def merge_selection(existing: SelectionSet, incoming: Iterable[FileDescriptor]) -> MergeResult:
    """Append the descriptors of ``incoming`` whose key is not yet selected.

    The existing entries keep their order and their instances; collisions,
    including repeats inside ``incoming``, are dropped (first seen wins).
    ``existing`` is not modified.
    """

    merged = existing.copy()
    added = 0
    skipped = 0
    for descriptor in incoming:
        if merged.add(descriptor):
            added += 1
        else:
            skipped += 1
    return MergeResult(selection=merged, added=added, skipped=skipped)
