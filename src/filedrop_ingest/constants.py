"""Constants and naming conventions for file-drop ingestion."""
from __future__ import annotations

from pathlib import Path

PATH_SEPARATOR = "/"

DEFAULT_MANIFEST_NAME = "manifest.jsonl"
MANIFEST_SCHEMA_VERSION = "filedrop.manifest.v1"

SCHEMAS_DIR = Path(__file__).parent / "schemas"
MANIFEST_SCHEMA_PATH = SCHEMAS_DIR / "manifest.v1.schema.json"

# OS-generated marker files, matched exactly against the leaf name
DEFAULT_ARTIFACT_NAMES = frozenset(
    {
        # macOS Finder
        ".DS_Store",
        ".localized",
        "Icon\r",
        # Windows Explorer
        "Thumbs.db",
        "ehthumbs.db",
        "desktop.ini",
        # sync clients
        ".dropbox",
        ".dropbox.attr",
        ".sync",
    }
)

# Chromium hands out directory listings in pages of 100 entries
DEFAULT_PAGE_SIZE = 100

# Simulated upload progress (percent / seconds)
PROGRESS_START = 0
PROGRESS_STEP = 10
PROGRESS_INTERVAL = 0.1
PROGRESS_CAP = 90
PROGRESS_COMPLETE = 100
COMPLETION_DELAY = 0.5

PREVIEW_LIMIT = 10
