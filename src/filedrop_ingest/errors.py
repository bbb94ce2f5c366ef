"""Unified error model and error code constants for file-drop ingestion."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


# Error codes (string constants)
class ErrorCode:
    """Error code constants for structured error reporting."""

    # Traversal errors (recovered locally)
    ENTRY_UNREADABLE = "entry_unreadable"
    LISTING_FAILED = "listing_failed"

    # Input errors
    INPUT_NOT_FOUND = "input_not_found"
    EMPTY_SELECTION = "empty_selection"

    # Policy errors
    POLICY_VIOLATION = "policy_violation"

    # Session errors
    INVALID_STATE = "invalid_state"

    # Upload errors
    UPLOAD_FAILED = "upload_failed"

    # Parameter errors
    INVALID_PARAMS = "invalid_params"

    # Output errors
    OUTPUT_NOT_WRITABLE = "output_not_writable"

    # Internal errors
    INTERNAL_ERROR = "internal_error"


# Exit codes (int constants)
class ExitCode:
    """Exit code constants for the CLI."""

    SUCCESS = 0
    GENERAL_FAILED = 1
    INPUT_NOT_FOUND = 10
    OUTPUT_NOT_WRITABLE = 11
    INVALID_PARAMS = 13
    POLICY_VIOLATION = 30
    EMPTY_SELECTION = 31
    UPLOAD_FAILED = 40
    INTERNAL_ERROR = 99


# Mapping from error code to exit code
ERROR_TO_EXIT_CODE: Dict[str, int] = {
    ErrorCode.ENTRY_UNREADABLE: ExitCode.SUCCESS,  # Recovered, logged only
    ErrorCode.LISTING_FAILED: ExitCode.SUCCESS,  # Recovered, logged only
    ErrorCode.INPUT_NOT_FOUND: ExitCode.INPUT_NOT_FOUND,
    ErrorCode.EMPTY_SELECTION: ExitCode.EMPTY_SELECTION,
    ErrorCode.POLICY_VIOLATION: ExitCode.POLICY_VIOLATION,
    ErrorCode.INVALID_STATE: ExitCode.GENERAL_FAILED,
    ErrorCode.UPLOAD_FAILED: ExitCode.UPLOAD_FAILED,
    ErrorCode.INVALID_PARAMS: ExitCode.INVALID_PARAMS,
    ErrorCode.OUTPUT_NOT_WRITABLE: ExitCode.OUTPUT_NOT_WRITABLE,
    ErrorCode.INTERNAL_ERROR: ExitCode.INTERNAL_ERROR,
}


class FileDropError(Exception):
    """Base exception for ingestion errors surfaced to the caller."""

    code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message

    @property
    def exit_code(self) -> int:
        return ERROR_TO_EXIT_CODE.get(self.code, ExitCode.GENERAL_FAILED)

    def to_error(self) -> "IngestError":
        return IngestError(code=self.code, message=self.message, hint=self.hint)


class TraversalFailure(FileDropError):
    """A leaf could not be resolved or a directory listing failed.

    Contained to its subtree: recorded and logged by the traversal, never
    propagated to the caller.
    """

    code = ErrorCode.LISTING_FAILED

    def __init__(self, path: str, reason: str, code: str = ErrorCode.LISTING_FAILED) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
        self.code = code


class PolicyViolation(FileDropError):
    """Ingested batch conflicts with the active upload mode."""

    code = ErrorCode.POLICY_VIOLATION

    def __init__(self, message: str, offending: Optional[List[str]] = None) -> None:
        super().__init__(message, hint="Switch to folder mode to upload folder contents")
        self.offending = list(offending or [])


class UploadFailure(FileDropError):
    """The upload collaborator rejected the selection."""

    code = ErrorCode.UPLOAD_FAILED

    def __init__(self, message: str = "Upload failed") -> None:
        super().__init__(message, hint="The selection was kept; retry the upload")


class SessionStateError(FileDropError):
    """Operation not permitted in the current session state."""

    code = ErrorCode.INVALID_STATE


class EmptySelectionError(SessionStateError):
    """Upload confirmed with nothing selected."""

    code = ErrorCode.EMPTY_SELECTION


@dataclass
class IngestError:
    """Structured error entry for JSON reports."""

    code: str
    message: str
    hint: Optional[str] = None
    detail: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {"code": self.code, "message": self.message}
        if self.hint is not None:
            result["hint"] = self.hint
        if self.detail is not None:
            result["detail"] = self.detail
        return result
