"""Structured entries and the flat file list are reconciled per item index."""
from __future__ import annotations

from filedrop_ingest.reconcile import FallbackReconciler, Resolved, Unresolved
from tests.conftest import FakeFile, FakeFileEntry, FakeItem, LegacyItem, build_entry, run


def test_degraded_path_uses_flat_files_without_paths() -> None:
    items = [LegacyItem(), LegacyItem()]
    flat = [FakeFile("a.txt", 3), FakeFile("b.txt", 4)]

    descriptors = run(FallbackReconciler().reconcile(items, flat))

    assert [(d.name, d.relative_path, d.size_bytes) for d in descriptors] == [
        ("a.txt", None, 3),
        ("b.txt", None, 4),
    ]


def test_unresolved_index_falls_back_to_its_flat_file() -> None:
    items = [
        FakeItem(build_entry("proj", {"a.txt": 1})),
        FakeItem(None),
        FakeItem(FakeFileEntry("c.txt")),
    ]
    flat = [FakeFile("proj", 0), FakeFile("photo.heic", 9), FakeFile("c.txt")]

    descriptors = run(FallbackReconciler().reconcile(items, flat))

    keys = [d.identity_key for d in descriptors]
    assert keys == ["proj/a.txt", "c.txt", "photo.heic"]
    fallback = [d for d in descriptors if d.name == "photo.heic"]
    assert len(fallback) == 1
    assert fallback[0].relative_path is None
    assert fallback[0].size_bytes == 9


def test_resolved_items_are_not_counted_twice() -> None:
    items = [FakeItem(FakeFileEntry("a.txt")), FakeItem(FakeFileEntry("b.txt"))]
    flat = [FakeFile("a.txt"), FakeFile("b.txt")]

    descriptors = run(FallbackReconciler().reconcile(items, flat))

    assert [d.relative_path for d in descriptors] == ["a.txt", "b.txt"]


def test_flat_files_beyond_the_item_list_are_kept() -> None:
    items = [FakeItem(FakeFileEntry("a.txt"))]
    flat = [FakeFile("a.txt"), FakeFile("extra.txt")]

    descriptors = run(FallbackReconciler().reconcile(items, flat))

    assert [d.identity_key for d in descriptors] == ["a.txt", "extra.txt"]


def test_resolve_items_tags_each_index() -> None:
    items = [FakeItem(FakeFileEntry("a.txt")), FakeItem(None)]

    results = run(FallbackReconciler().resolve_items(items))

    assert isinstance(results[0], Resolved)
    assert results[0].index == 0
    assert [d.relative_path for d in results[0].descriptors] == ["a.txt"]
    assert results[1] == Unresolved(1)
