"""Error taxonomy for archive ingestion.

Every failure raised by the pipeline is an :class:`ArchiveError` tagged with an
:class:`ErrorKind`. Fatal kinds abort ingestion; recoverable kinds are turned
into :class:`ArchiveWarning` records and attached to the result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence


class ErrorKind(Enum):
    """Category of an archive failure."""
    CONTAINER = "container"
    VALIDATION = "validation"
    FORMAT_REPAIR = "format_repair"
    FILE_MISSING = "file_missing"
    MEDIA_RESOLUTION = "media_resolution"
    MISSING_OPTIONAL_FILE = "missing_optional_file"

    @property
    def fatal(self) -> bool:
        return self not in (ErrorKind.MEDIA_RESOLUTION, ErrorKind.MISSING_OPTIONAL_FILE)


class ArchiveError(Exception):
    """Failure while reading, validating or parsing an archive."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        file_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
        errors: Sequence[str] = (),
        warnings: Sequence[str] = (),
        **context: Any
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.file_name = file_name
        self.cause = cause
        self.errors = list(errors)
        self.warnings = list(warnings)
        self.context: Dict[str, Any] = context

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} ({self.cause})"
        return self.message

    def __repr__(self) -> str:
        return f"ArchiveError(kind={self.kind.value!r}, message={self.message!r}, file_name={self.file_name!r})"

    @classmethod
    def container(cls, message: str, file_name: Optional[str] = None,
                  cause: Optional[BaseException] = None, operation: str = "read") -> 'ArchiveError':
        return cls(ErrorKind.CONTAINER, message, file_name=file_name, cause=cause, operation=operation)

    @classmethod
    def missing(cls, path: str) -> 'ArchiveError':
        return cls(ErrorKind.FILE_MISSING, f"File not found in archive: {path}", file_name=path)

    @classmethod
    def format_repair(cls, file_name: str, reason: str,
                      cause: Optional[BaseException] = None) -> 'ArchiveError':
        return cls(ErrorKind.FORMAT_REPAIR, f"Failed to parse {file_name}: {reason}",
                   file_name=file_name, cause=cause)

    @classmethod
    def validation(cls, errors: Sequence[str], warnings: Sequence[str] = ()) -> 'ArchiveError':
        return cls(ErrorKind.VALIDATION, f"Invalid Twitter archive: {'; '.join(errors)}",
                   errors=errors, warnings=warnings)

    def to_warning(self, record_id: Optional[str] = None) -> 'ArchiveWarning':
        """Downgrade a recoverable error into a warning entry."""
        if self.kind.fatal:
            raise ValueError(f"{self.kind.value} errors cannot be downgraded to warnings")
        return ArchiveWarning(kind=self.kind, message=self.message,
                              path=self.file_name, record_id=record_id)


@dataclass(frozen=True)
class ArchiveWarning:
    """A recovered problem; ingestion continued with degraded output."""
    kind: ErrorKind
    message: str
    path: Optional[str] = None
    record_id: Optional[str] = None


def describe_failure(error: ArchiveError) -> str:
    """Render a single user-facing report for a failed ingestion."""
    kind = error.kind
    if kind is ErrorKind.VALIDATION:
        lines = ["The archive failed validation:"]
        lines += [f"  error: {e}" for e in error.errors]
        lines += [f"  warning: {w}" for w in error.warnings]
        return "\n".join(lines)
    elif kind is ErrorKind.FORMAT_REPAIR:
        return f"Could not read data file {error.file_name}: {error}"
    elif kind is ErrorKind.FILE_MISSING:
        return f"Required file missing from archive: {error.file_name}"
    elif kind is ErrorKind.CONTAINER:
        operation = error.context.get("operation", "read")
        target = f" ({error.file_name})" if error.file_name else ""
        return f"ZIP {operation} failed{target}: {error}"
    elif kind in (ErrorKind.MEDIA_RESOLUTION, ErrorKind.MISSING_OPTIONAL_FILE):
        return f"Warning: {error}"
    raise ValueError(f"Unhandled error kind: {kind}")
