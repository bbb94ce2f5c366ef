"""Folder content is rejected as a whole in single-file mode."""
from __future__ import annotations

import pytest

from filedrop_ingest.errors import ErrorCode, ExitCode, PolicyViolation, SessionStateError
from filedrop_ingest.models import SessionState, UploadMode
from tests.conftest import FakeFile, FakeItem, build_entry, run


def _folder_batch():
    return [FakeItem(build_entry("proj", {"a.txt": 1, "b.txt": 1}))], []


def test_folder_drop_in_file_mode_is_rejected_and_selection_unchanged(controller) -> None:
    controller.ingest_picker([FakeFile("keep.txt")])
    before = controller.selection

    with pytest.raises(PolicyViolation) as excinfo:
        run(controller.ingest_drop(*_folder_batch()))

    assert excinfo.value.code == ErrorCode.POLICY_VIOLATION
    assert excinfo.value.exit_code == ExitCode.POLICY_VIOLATION
    assert sorted(excinfo.value.offending) == ["proj/a.txt", "proj/b.txt"]
    assert controller.selection == before


def test_same_batch_succeeds_after_switching_to_folder_mode(controller) -> None:
    with pytest.raises(PolicyViolation):
        run(controller.ingest_drop(*_folder_batch()))

    controller.set_mode("folder")
    run(controller.ingest_drop(*_folder_batch()))

    assert controller.mode is UploadMode.FOLDER
    assert {d.identity_key for d in controller.selection} == {"proj/a.txt", "proj/b.txt"}


def test_folder_picker_files_in_file_mode_are_rejected(controller) -> None:
    picked = [FakeFile("a.txt", relative_path="proj/a.txt"), FakeFile("b.txt", relative_path="")]

    with pytest.raises(PolicyViolation):
        controller.ingest_picker(picked)

    assert controller.selection == ()
    assert controller.state is SessionState.IDLE


def test_loose_file_drop_is_allowed_in_file_mode(controller) -> None:
    from tests.conftest import FakeFileEntry

    run(controller.ingest_drop([FakeItem(FakeFileEntry("solo.txt"))], []))

    assert [d.relative_path for d in controller.selection] == ["solo.txt"]


def test_mode_switch_clears_the_selection(controller) -> None:
    controller.ingest_picker([FakeFile("a.txt"), FakeFile("b.txt")])

    controller.set_mode(UploadMode.FOLDER)

    assert controller.selection == ()
    assert controller.state is SessionState.IDLE


def test_ingest_after_close_is_refused(controller) -> None:
    controller.close()

    with pytest.raises(SessionStateError):
        controller.ingest_picker([FakeFile("a.txt")])

    controller.open()
    controller.ingest_picker([FakeFile("a.txt")])
    assert len(controller.selection) == 1
