"""Ingestion session: owns the selection from open to close.

Both input paths end in the same pipeline: artifact filter, mode policy,
merge into the selection. The drop path first reconciles the structured and
flat views of the drop and walks every dropped directory.

State machine::

    idle -> selecting -> uploading -> completed -> idle
                             |
                             +-> failed -> selecting
    any state -> cancelled (close), cancelled -> idle (open)
"""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, Protocol, Sequence, Tuple, Union

from .artifacts import SystemArtifactFilter
from .entries import DropItem, FileHandle, PickedFile, content_of
from .errors import (
    EmptySelectionError,
    PolicyViolation,
    SessionStateError,
    TraversalFailure,
    UploadFailure,
)
from .logging_utils import get_logger
from .merge import MergeResult, merge_selection
from .models import FileDescriptor, SelectionSet, SessionState, UploadMode
from .params import IngestParams
from .progress import ProgressTicker, ProgressTracker
from .reconcile import FallbackReconciler
from .traversal import EntryTraversal


logger = get_logger(__name__)

StateObserver = Callable[[SessionState], None]

_INGESTABLE = (SessionState.IDLE, SessionState.SELECTING)


class Uploader(Protocol):
    async def upload(self, selection: SelectionSet) -> None:
        """Transfer ``selection``; raising means the upload was rejected."""
        ...


def picked_descriptor(handle: PickedFile) -> FileDescriptor:
    return FileDescriptor(
        name=handle.name,
        relative_path=getattr(handle, "relative_path", None) or None,
        size_bytes=int(getattr(handle, "size", 0) or 0),
        content_handle=content_of(handle),
    )


class IngestionController:
    def __init__(
        self,
        uploader: Uploader,
        params: Optional[IngestParams] = None,
        on_complete: Optional[Callable[[], None]] = None,
        artifact_filter: Optional[SystemArtifactFilter] = None,
    ) -> None:
        self.params = params or IngestParams()
        self.uploader = uploader
        self.on_complete = on_complete
        self.artifact_filter = artifact_filter or SystemArtifactFilter(self.params.artifact_policy())
        self.progress = ProgressTracker()
        self.last_failures: List[TraversalFailure] = []
        self._observers: List[StateObserver] = []
        self._selection = SelectionSet()
        self._mode = self.params.default_mode
        self._state = SessionState.IDLE
        self._ticker: Optional[ProgressTicker] = None
        # Set once the running upload has fully resolved; drops finishing mid-upload wait on it
        self._upload_settled: Optional[asyncio.Event] = None
        # Bumped whenever the selection is discarded; stale drops compare against it
        self._generation = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def mode(self) -> UploadMode:
        return self._mode

    @property
    def selection(self) -> Tuple[FileDescriptor, ...]:
        return self._selection.descriptors()

    def subscribe(self, observer: StateObserver) -> None:
        self._observers.append(observer)

    # Lifecycle

    def open(self) -> None:
        self._discard()
        self._set_state(SessionState.IDLE)

    def close(self) -> None:
        """Close or cancel the surface, dropping the selection and any in-flight results."""
        if self._state is not SessionState.COMPLETED:
            logger.info("Session cancelled with %d selected files", len(self._selection))
        self._discard()
        self._set_state(SessionState.CANCELLED)

    cancel = close

    def set_mode(self, mode: Union[UploadMode, str]) -> None:
        if self._state is SessionState.UPLOADING:
            raise SessionStateError("Cannot switch upload mode while uploading")
        self._discard(keep_mode=True)
        self._mode = UploadMode(mode)
        self._set_state(SessionState.IDLE)

    # Ingestion

    def ingest_picker(self, files: Sequence[PickedFile]) -> MergeResult:
        self._require_ingestable()
        return self._accept([picked_descriptor(handle) for handle in files], source="picker")

    async def ingest_drop(
        self,
        items: Sequence[DropItem],
        flat_files: Sequence[FileHandle] = (),
    ) -> Optional[MergeResult]:
        """Ingest a drop; returns ``None`` when the selection was reset before traversal finished.

        A drop that finishes while an upload is running is held until the
        upload resolves. After a failed upload it joins the kept selection;
        after a successful one it goes away with the completion reset.
        """
        self._require_ingestable()
        generation = self._generation
        traversal = EntryTraversal()
        batch = await FallbackReconciler(traversal).reconcile(items, flat_files)

        settled = self._upload_settled
        if settled is not None and generation == self._generation:
            logger.debug("Holding %d dropped files until the upload resolves", len(batch))
            await settled.wait()

        if generation != self._generation or self._state not in _INGESTABLE:
            logger.info("Discarding %d dropped files: selection was reset during traversal", len(batch))
            return None
        self.last_failures = list(traversal.failures)
        if traversal.failures:
            logger.warning("%d dropped entries could not be read", len(traversal.failures))
        return self._accept(batch, source="drop")

    def remove(self, key: str) -> FileDescriptor:
        if self._state is not SessionState.SELECTING:
            raise SessionStateError(f"Cannot remove files while {self._state.value}")
        removed = self._selection.remove(key)
        if not self._selection:
            self._set_state(SessionState.IDLE)
        return removed

    def _accept(self, batch: List[FileDescriptor], source: str) -> MergeResult:
        batch = self.artifact_filter.filter_artifacts(batch)
        self._check_mode(batch)
        result = merge_selection(self._selection, batch)
        self._selection = result.selection
        logger.info(
            "Ingested %s batch: %d added, %d already selected, %d total",
            source,
            result.added,
            result.skipped,
            len(self._selection),
        )
        if self._selection:
            self._enter_selecting()
        else:
            self.progress.reset()
            self._set_state(SessionState.IDLE)
        return result

    def _check_mode(self, batch: List[FileDescriptor]) -> None:
        if self._mode is not UploadMode.FILE:
            return
        offending = [d.relative_path for d in batch if d.has_folder_context]
        if offending:
            logger.warning("Rejected batch of %d files: folder content in file mode", len(batch))
            raise PolicyViolation(
                f"{len(offending)} of {len(batch)} files belong to a folder, "
                "which cannot be added in single-file mode",
                offending=offending,
            )

    # Upload

    async def confirm_upload(self) -> None:
        """Hand the selection to the uploader.

        On success the session reports completion, waits
        ``completion_delay`` seconds and resets to idle. On failure the
        selection is kept, the session returns to selecting and
        :class:`UploadFailure` is raised.
        """
        if self._state in _INGESTABLE and not self._selection:
            raise EmptySelectionError("Nothing selected to upload", hint="Pick or drop files first")
        if self._state is not SessionState.SELECTING:
            raise SessionStateError(f"Cannot upload while {self._state.value}")

        settled = self._upload_settled = asyncio.Event()
        try:
            await self._run_upload()
        finally:
            settled.set()
            if self._upload_settled is settled:
                self._upload_settled = None

    async def _run_upload(self) -> None:
        generation = self._generation
        selection = self._selection.copy()
        self.progress.reset()
        self._set_state(SessionState.UPLOADING)
        self._ticker = ProgressTicker(
            self.progress,
            step=self.params.progress_step,
            interval=self.params.progress_interval,
            cap=self.params.progress_cap,
        )
        self._ticker.start()
        logger.info("Uploading %d files (%d bytes)", len(selection), selection.total_bytes())

        try:
            await self.uploader.upload(selection)
        except Exception as exc:
            self._stop_ticker()
            logger.error("Upload of %d files failed: %s", len(selection), exc)
            if generation == self._generation:
                self._set_state(SessionState.FAILED)
                self._enter_selecting()
            raise UploadFailure() from exc
        self._stop_ticker()

        if generation != self._generation:
            logger.info("Upload finished after the session was closed")
            self._notify_complete()
            return

        self.progress.complete()
        self._set_state(SessionState.COMPLETED)
        self._notify_complete()
        await asyncio.sleep(self.params.completion_delay)
        if generation == self._generation and self._state is SessionState.COMPLETED:
            self._discard()
            self._set_state(SessionState.IDLE)

    # Internals

    def _notify_complete(self) -> None:
        if self.on_complete is not None:
            self.on_complete()

    def _require_ingestable(self) -> None:
        if self._state not in _INGESTABLE:
            raise SessionStateError(f"Cannot add files while {self._state.value}")

    def _enter_selecting(self) -> None:
        self.progress.reset()
        self._set_state(SessionState.SELECTING)

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

    def _discard(self, keep_mode: bool = False) -> None:
        self._generation += 1
        if self._upload_settled is not None:
            self._upload_settled.set()
        self._stop_ticker()
        self._selection = SelectionSet()
        self.progress.reset()
        self.last_failures = []
        if not keep_mode:
            self._mode = self.params.default_mode

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        logger.debug("Session state %s -> %s", self._state.value, state.value)
        self._state = state
        for observer in list(self._observers):
            observer(state)
