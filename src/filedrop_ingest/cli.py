"""Command-line interface for file-drop ingestion."""
from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import typer

from .config import ConfigError
from .constants import DEFAULT_MANIFEST_NAME
from .errors import ERROR_TO_EXIT_CODE, ErrorCode, ExitCode, FileDropError, IngestError, TraversalFailure
from .local_fs import drop_payload, picked_files
from .logging_utils import get_logger, setup_logging
from .manifest import preview_lines, write_manifest
from .models import FileDescriptor, SelectionSet, UploadMode
from .params import IngestParams, load_config_params, load_default_params, merge_params
from .session import IngestionController
from .uploaders import DirectoryUploader

app = typer.Typer(help="File-drop ingestion CLI")
logger = get_logger(__name__)


class _NoUpload:
    async def upload(self, selection: SelectionSet) -> None:
        raise RuntimeError("No upload target configured")


def _load_params(config: Optional[Path], cli_overrides: Dict[str, Any]) -> IngestParams:
    try:
        default_params, _ = load_default_params()
        config_overrides = load_config_params(config)
        params, sources = merge_params(default_params, config_overrides, cli_overrides)
    except ConfigError as exc:
        typer.echo(f"Failed to load config: {exc}", err=True)
        raise typer.Exit(code=ExitCode.INVALID_PARAMS)
    logger.debug("Resolved params %s (sources: %s)", params.to_dict(), sources)
    return params


def _check_inputs(paths: Sequence[Path]) -> List[Path]:
    missing = [p for p in paths if not p.exists()]
    if missing:
        for path in missing:
            typer.echo(f"ERROR: input not found: {path}", err=True)
        raise typer.Exit(code=ExitCode.INPUT_NOT_FOUND)
    return [p.resolve() for p in paths]


def _report(
    controller: IngestionController,
    selected: Sequence[FileDescriptor],
    failures: Sequence[TraversalFailure],
    params: IngestParams,
    json_output: bool,
    uploaded: bool,
    errors: List[IngestError],
) -> None:
    skipped = [failure.to_error().to_dict() for failure in failures]
    if json_output:
        report = {
            "mode": controller.mode.value,
            "count": len(selected),
            "total_bytes": sum(int(d.size_bytes) for d in selected),
            "files": [d.to_dict() for d in selected],
            "skipped_entries": skipped,
            "uploaded": uploaded,
            "errors": [err.to_dict() for err in errors],
        }
        typer.echo(json.dumps(report, ensure_ascii=False, sort_keys=True, indent=2))
        return

    typer.echo(f"{len(selected)} file(s) selected ({controller.mode.value} mode)")
    for line in preview_lines(selected, params.preview_limit):
        typer.echo(f"  {line}")
    for entry in skipped:
        typer.echo(f"WARNING: skipped {entry['message']}", err=True)
    if uploaded:
        typer.echo("upload: OK")


def _write_out(selected: Sequence[FileDescriptor], out: Path) -> Optional[IngestError]:
    manifest_path = out / DEFAULT_MANIFEST_NAME if out.is_dir() else out
    try:
        count = write_manifest(selected, manifest_path)
    except OSError as exc:
        logger.error("Cannot write manifest %s: %s", manifest_path, exc)
        return IngestError(
            code=ErrorCode.OUTPUT_NOT_WRITABLE,
            message=f"Cannot write manifest to {manifest_path}: {exc}",
            hint="Choose a writable --out location",
        )
    logger.info("Wrote %d manifest lines to %s", count, manifest_path)
    return None


async def _confirm(controller: IngestionController, target: Optional[Path]) -> List[IngestError]:
    if target is None:
        return []
    try:
        await controller.confirm_upload()
    except FileDropError as exc:
        return [exc.to_error()]
    return []


def _finish(
    controller: IngestionController,
    params: IngestParams,
    target: Optional[Path],
    out: Optional[Path],
    json_output: bool,
    selected: Sequence[FileDescriptor],
    failures: Sequence[TraversalFailure],
    errors: List[IngestError],
) -> None:
    uploaded = target is not None and not errors
    if out is not None:
        write_error = _write_out(selected, out)
        if write_error is not None:
            errors = [*errors, write_error]
    _report(controller, selected, failures, params, json_output, uploaded, errors)
    for err in errors:
        hint = f" (hint: {err.hint})" if err.hint else ""
        typer.echo(f"ERROR: {err.message}{hint}", err=True)
    if errors:
        raise typer.Exit(code=ERROR_TO_EXIT_CODE.get(errors[0].code, ExitCode.GENERAL_FAILED))
    raise typer.Exit(code=ExitCode.SUCCESS)


def _controller(params: IngestParams, target: Optional[Path]) -> IngestionController:
    uploader = DirectoryUploader(target) if target is not None else _NoUpload()
    return IngestionController(uploader, params=params)


@app.command()
def drop(
    paths: List[Path] = typer.Argument(..., help="Files and folders to drop"),
    mode: Optional[UploadMode] = typer.Option(None, "--mode", help="Upload mode: file or folder"),
    out: Optional[Path] = typer.Option(None, "--out", help="Manifest path (or directory for manifest.jsonl)"),
    target: Optional[Path] = typer.Option(None, "--target", help="Upload the selection into this directory"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Entries per directory listing page"),
    extra_artifact: Optional[List[str]] = typer.Option(None, "--ignore-name", help="Extra artifact leaf name"),
    json_output: bool = typer.Option(False, "--json", help="Print the selection as JSON"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
) -> None:
    """Ingest files and folders the way a drag-and-drop onto the upload surface would."""

    setup_logging(verbose=verbose, log_file=log_file)
    params = _load_params(
        config,
        {
            "default_mode": mode.value if mode else None,
            "page_size": page_size,
            "artifact_names_extra": extra_artifact or None,
        },
    )
    inputs = _check_inputs(paths)
    controller = _controller(params, target)
    items, flat_files = drop_payload(inputs, params.page_size)

    async def _flow() -> tuple:
        await controller.ingest_drop(items, flat_files)
        selected, failures = controller.selection, controller.last_failures
        return selected, failures, await _confirm(controller, target)

    try:
        selected, failures, errors = asyncio.run(_flow())
    except FileDropError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=exc.exit_code)
    _finish(controller, params, target, out, json_output, selected, failures, errors)


@app.command()
def pick(
    paths: List[Path] = typer.Argument(..., help="Files, or folders when in folder mode"),
    mode: Optional[UploadMode] = typer.Option(None, "--mode", help="Upload mode: file or folder"),
    out: Optional[Path] = typer.Option(None, "--out", help="Manifest path (or directory for manifest.jsonl)"),
    target: Optional[Path] = typer.Option(None, "--target", help="Upload the selection into this directory"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    json_output: bool = typer.Option(False, "--json", help="Print the selection as JSON"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
) -> None:
    """Ingest files the way the native file or folder picker would."""

    setup_logging(verbose=verbose)
    params = _load_params(config, {"default_mode": mode.value if mode else None})
    inputs = _check_inputs(paths)
    controller = _controller(params, target)

    async def _flow() -> tuple:
        controller.ingest_picker(picked_files(inputs))
        selected, failures = controller.selection, controller.last_failures
        return selected, failures, await _confirm(controller, target)

    try:
        selected, failures, errors = asyncio.run(_flow())
    except FileDropError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=exc.exit_code)
    _finish(controller, params, target, out, json_output, selected, failures, errors)


def main(argv: Optional[list[str]] = None) -> int:
    """Entrypoint for console script."""

    argv = argv if argv is not None else sys.argv[1:]
    app(prog_name="filedrop-ingest", args=list(argv))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
