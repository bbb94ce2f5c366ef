"""Manifest writer, upload form layout and selection preview."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from jsonschema import Draft202012Validator

from .constants import MANIFEST_SCHEMA_PATH, MANIFEST_SCHEMA_VERSION, PREVIEW_LIMIT
from .models import FileDescriptor


def manifest_record(index: int, descriptor: FileDescriptor) -> Dict[str, Any]:
    return {"schema_version": MANIFEST_SCHEMA_VERSION, "index": index, **descriptor.to_dict()}


def _manifest_line(record: dict) -> str:
    return json.dumps(record, ensure_ascii=False, sort_keys=True)


def write_manifest(descriptors: Iterable[FileDescriptor], path: Path) -> int:
    """Write one JSON line per descriptor, in selection order; return the count."""

    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", encoding="utf-8", newline="\n") as f:
        for index, descriptor in enumerate(descriptors):
            f.write(_manifest_line(manifest_record(index, descriptor)) + "\n")
            count += 1
    return count


def read_manifest(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    with MANIFEST_SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return Draft202012Validator(json.load(f))


def validate_record(record: Dict[str, Any]) -> Tuple[bool, List[str]]:
    errors = [error.message for error in _validator().iter_errors(record)]
    return len(errors) == 0, errors


def build_upload_form(descriptors: Iterable[FileDescriptor], target_path: str = "") -> Dict[str, Any]:
    """Multipart field layout expected by the upload endpoint.

    ``relativePaths`` runs parallel to ``files``; an empty string marks a
    file without folder context.
    """

    files = list(descriptors)
    return {
        "files": [d.content_handle for d in files],
        "relativePaths": json.dumps([d.relative_path or "" for d in files], ensure_ascii=False),
        "targetPath": target_path,
    }


def preview_lines(descriptors: Iterable[FileDescriptor], limit: int = PREVIEW_LIMIT) -> List[str]:
    files = list(descriptors)
    lines = [d.identity_key for d in files[:limit]]
    if len(files) > limit:
        lines.append(f"... and {len(files) - limit} more")
    return lines
