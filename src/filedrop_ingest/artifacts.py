"""Filter for OS-generated marker files (Finder metadata, thumbnail caches, sync markers)."""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional

from .constants import DEFAULT_ARTIFACT_NAMES
from .models import FileDescriptor


class ArtifactPolicy:
    """Set of leaf names treated as OS artifacts. Matching is exact and case-sensitive."""

    def __init__(self, names: Iterable[str] = DEFAULT_ARTIFACT_NAMES) -> None:
        self._names: FrozenSet[str] = frozenset(names)

    @property
    def names(self) -> FrozenSet[str]:
        return self._names

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def extended(self, extra: Iterable[str]) -> "ArtifactPolicy":
        return ArtifactPolicy(self._names | frozenset(extra))


DEFAULT_POLICY = ArtifactPolicy()


class SystemArtifactFilter:
    def __init__(self, policy: Optional[ArtifactPolicy] = None) -> None:
        self.policy = policy or DEFAULT_POLICY

    def is_artifact(self, descriptor: FileDescriptor) -> bool:
        return descriptor.leaf_name in self.policy

    def filter_artifacts(self, descriptors: Iterable[FileDescriptor]) -> List[FileDescriptor]:
        """Return descriptors in order, without artifacts."""
        return [d for d in descriptors if not self.is_artifact(d)]
