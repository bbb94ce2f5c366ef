"""Upload collaborators usable from the CLI."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path, PurePosixPath

from .logging_utils import get_logger
from .models import FileDescriptor, SelectionSet


logger = get_logger(__name__)


class DirectoryUploader:
    """Copy the selection under ``target_dir``, keeping each file's relative path."""

    def __init__(self, target_dir: Path) -> None:
        self.target_dir = Path(target_dir)

    def destination(self, descriptor: FileDescriptor) -> Path:
        relative = PurePosixPath(descriptor.identity_key)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Refusing to write outside the target: {descriptor.identity_key}")
        return self.target_dir.joinpath(*relative.parts)

    async def upload(self, selection: SelectionSet) -> None:
        for descriptor in selection:
            await asyncio.to_thread(self._copy, descriptor)
        logger.info("Copied %d files into %s", len(selection), self.target_dir)

    def _copy(self, descriptor: FileDescriptor) -> None:
        source = Path(descriptor.content_handle)
        destination = self.destination(descriptor)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
        logger.debug("Copied %s -> %s", source, destination)
