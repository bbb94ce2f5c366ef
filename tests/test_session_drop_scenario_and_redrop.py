"""Drop ingestion through the session: artifacts, re-drops and stale traversals."""
from __future__ import annotations

import asyncio

from filedrop_ingest.models import SessionState, UploadMode
from tests.conftest import FakeFile, FakeItem, LegacyItem, build_entry, run


def _proj_drop():
    entry = build_entry("proj", {"a.txt": 5, "sub": {"b.txt": 6, ".DS_Store": 1}})
    return [FakeItem(entry)], [FakeFile("proj", 0)]


def test_proj_drop_yields_two_files_without_ds_store(controller) -> None:
    controller.set_mode(UploadMode.FOLDER)
    items, flat = _proj_drop()

    result = run(controller.ingest_drop(items, flat))

    assert result is not None
    keys = {d.relative_path for d in controller.selection}
    assert keys == {"proj/a.txt", "proj/sub/b.txt"}
    assert len(controller.selection) == 2
    assert controller.state is SessionState.SELECTING


def test_dropping_the_same_folder_twice_is_idempotent(controller) -> None:
    controller.set_mode(UploadMode.FOLDER)

    run(controller.ingest_drop(*_proj_drop()))
    first = controller.selection
    second_result = run(controller.ingest_drop(*_proj_drop()))

    assert second_result.added == 0
    assert [d.identity_key for d in controller.selection] == [d.identity_key for d in first]
    assert all(a is b for a, b in zip(controller.selection, first))


def test_plain_files_drop_in_file_mode(controller) -> None:
    items = [LegacyItem(), LegacyItem()]
    flat = [FakeFile("x.txt"), FakeFile(".DS_Store")]

    run(controller.ingest_drop(items, flat))

    assert [d.identity_key for d in controller.selection] == ["x.txt"]


def test_traversal_results_are_discarded_after_close(controller) -> None:
    controller.set_mode(UploadMode.FOLDER)
    items, flat = _proj_drop()

    async def scenario():
        pending = asyncio.ensure_future(controller.ingest_drop(items, flat))
        await asyncio.sleep(0)
        controller.close()
        return await pending

    result = run(scenario())

    assert result is None
    assert controller.selection == ()
    assert controller.state is SessionState.CANCELLED


def test_traversal_results_are_discarded_after_mode_switch(controller) -> None:
    controller.set_mode(UploadMode.FOLDER)
    items, flat = _proj_drop()

    async def scenario():
        pending = asyncio.ensure_future(controller.ingest_drop(items, flat))
        await asyncio.sleep(0)
        controller.set_mode(UploadMode.FILE)
        return await pending

    assert run(scenario()) is None
    assert controller.selection == ()


def test_unreadable_entries_are_reported_not_raised(controller) -> None:
    from tests.conftest import FakeDirectoryEntry, FakeFileEntry

    controller.set_mode(UploadMode.FOLDER)
    entry = FakeDirectoryEntry("p", [FakeFileEntry("ok.txt"), FakeFileEntry("bad.txt", fail=True)])

    run(controller.ingest_drop([FakeItem(entry)], []))

    assert [d.identity_key for d in controller.selection] == ["p/ok.txt"]
    assert [f.path for f in controller.last_failures] == ["p/bad.txt"]
