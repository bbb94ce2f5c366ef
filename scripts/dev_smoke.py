#!/usr/bin/env python3
"""Quick smoke test for local development.

Builds a small project folder (with OS artifacts), drops it through the
installed ``filedrop-ingest`` CLI into a scratch target and prints what landed.
"""
from __future__ import annotations

import json
import subprocess
import sys
import tempfile
from pathlib import Path


def build_tree(tmp_path: Path) -> Path:
    """Create ``demo/`` with nested files plus Finder and Explorer artifacts."""
    print("Building demo tree...")
    root = tmp_path / "demo"
    (root / "src" / "pkg").mkdir(parents=True)
    (root / "README.md").write_text("# demo\n", encoding="utf-8")
    (root / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
    (root / "src" / "pkg" / "util.py").write_text("X = 1\n", encoding="utf-8")
    (root / ".DS_Store").write_bytes(b"\x00")
    (root / "src" / "Thumbs.db").write_bytes(b"\x00")
    return root


def run_drop(root: Path, target: Path, manifest: Path) -> dict | None:
    """Drop ``root`` in folder mode and return the JSON report."""
    print("Running drop...")
    result = subprocess.run(
        [
            "filedrop-ingest",
            "drop",
            str(root),
            "--mode",
            "folder",
            "--target",
            str(target),
            "--out",
            str(manifest),
            "--json",
        ],
        capture_output=True,
        text=True,
    )

    if result.returncode != 0:
        print(f"ERROR: drop failed ({result.returncode}): {result.stderr}")
        return None

    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError:
        print("ERROR: Failed to parse drop output")
        return None


def print_summary(report: dict, target: Path, manifest: Path) -> None:
    print("\n=== Summary ===")
    print(f"mode: {report.get('mode')}")
    print(f"files: {report.get('count')} ({report.get('total_bytes')} bytes)")
    print(f"uploaded: {report.get('uploaded')}")
    print(f"manifest: {manifest} ({len(manifest.read_text(encoding='utf-8').splitlines())} lines)")

    print("\nUploaded files:")
    for f in sorted(target.rglob("*")):
        if f.is_file():
            print(f"  {f.relative_to(target).as_posix()} ({f.stat().st_size} bytes)")


def main() -> int:
    """Main entry point."""
    with tempfile.TemporaryDirectory() as tmpdir:
        tmp_path = Path(tmpdir)
        root = build_tree(tmp_path)
        target = tmp_path / "uploaded"
        manifest = tmp_path / "manifest.jsonl"

        report = run_drop(root, target, manifest)
        if report is None:
            return 1
        if report.get("count") != 3:
            print(f"ERROR: expected 3 files, got {report.get('count')}")
            return 1

        print_summary(report, target, manifest)

    print("\nSmoke test passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
