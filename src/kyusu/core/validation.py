"""Structural checks run before any archive data is parsed.

Two independent tiers:

* :func:`validate_zip_structure` looks at raw bytes only: the local file
  header signature and the End Of Central Directory record.
* :func:`validate_archive_structure` looks at the entry listing of an opened
  archive and checks for the files a Twitter export must contain.
"""

import logging
import os
import struct
from typing import BinaryIO, Iterable, Optional, Tuple

from ..config import ArchiveConfig
from ..errors import ArchiveError
from ..models import ValidationResult
from .container import ArchiveSource

logger = logging.getLogger(__name__)

LOCAL_FILE_HEADER = b"PK\x03\x04"
EOCD_SIGNATURE = b"PK\x05\x06"
EOCD_MIN_SIZE = 22


def _read_file_ends(handle: BinaryIO, scan_size: int) -> Tuple[int, bytes, bytes]:
    position = handle.tell()
    handle.seek(0, os.SEEK_END)
    size = handle.tell()
    handle.seek(0)
    head = handle.read(4)
    handle.seek(max(0, size - scan_size))
    tail = handle.read()
    handle.seek(position)
    return size, head, tail


def _source_ends(source: ArchiveSource, scan_size: int) -> Tuple[int, bytes, bytes]:
    """Return (size, first four bytes, final ``scan_size`` bytes) of a source."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        size = len(source)
        return size, bytes(source[:4]), bytes(source[max(0, size - scan_size):])
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as f:
            return _read_file_ends(f, scan_size)
    return _read_file_ends(source, scan_size)


def validate_zip_structure(source: ArchiveSource,
                           config: Optional[ArchiveConfig] = None) -> ValidationResult:
    """Binary-level sanity check of a ZIP archive."""
    config = config or ArchiveConfig()
    errors = []
    warnings = []
    has_valid_header = False
    has_valid_footer = False
    entry_count = 0

    try:
        size, head, tail = _source_ends(source, config.eocd_scan_size)
    except OSError as e:
        return ValidationResult(is_valid=False, errors=(f"Validation error: {e}",))

    if size < config.min_archive_size:
        return ValidationResult(
            is_valid=False,
            errors=("File too small to be a valid ZIP archive",),
            file_size=size,
        )

    if head == LOCAL_FILE_HEADER:
        has_valid_header = True
    elif head == EOCD_SIGNATURE:
        warnings.append("ZIP starts with central directory signature (unusual but valid)")
    else:
        signature = struct.unpack("<I", head)[0]
        errors.append(f"Invalid ZIP signature: 0x{signature:X}")

    # The EOCD record is at least 22 bytes, so the signature cannot start later than that.
    index = tail.rfind(EOCD_SIGNATURE, 0, len(tail) - EOCD_MIN_SIZE + len(EOCD_SIGNATURE))
    if index >= 0:
        has_valid_footer = True
        entry_count = struct.unpack_from("<H", tail, index + 10)[0]
    else:
        errors.append("End of Central Directory signature not found")

    if has_valid_footer and entry_count == 0:
        warnings.append("ZIP appears to contain no files")
    if entry_count > config.max_expected_entries:
        warnings.append(f"Very large number of files detected: {entry_count}")

    return ValidationResult(
        is_valid=not errors,
        errors=tuple(errors),
        warnings=tuple(warnings),
        estimated_entry_count=entry_count,
        file_size=size,
        has_valid_header=has_valid_header,
        has_valid_footer=has_valid_footer,
    )


def validate_archive_structure(paths: Iterable[str],
                               config: Optional[ArchiveConfig] = None) -> ValidationResult:
    """Check that an archive listing looks like a Twitter export."""
    config = config or ArchiveConfig()
    paths = set(paths)
    errors = []
    warnings = []

    if not any(p.startswith(config.data_root) for p in paths):
        errors.append(
            "No data directory found in ZIP archive. This may not be a valid Twitter archive."
        )
        return ValidationResult(is_valid=False, errors=tuple(errors))

    tweet_paths = [config.data_path(name) for name in config.tweet_files]
    if not any(p in paths for p in tweet_paths):
        expected = " or ".join(f"'{p}'" for p in tweet_paths)
        errors.append(f"No tweet data file found. Expected {expected}.")

    missing = [p for p in config.auxiliary_files if p not in paths]
    if missing:
        warnings.append(f"Missing some expected files: {', '.join(missing)}")

    return ValidationResult(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))


def assert_valid(result: ValidationResult) -> None:
    """Raise if ``result`` is invalid, otherwise log its warnings."""
    if not result.is_valid:
        logger.error(f"Archive validation failed: {'; '.join(result.errors)}")
        raise ArchiveError.validation(result.errors, result.warnings)
    for warning in result.warnings:
        logger.warning(warning)


def format_validation_report(result: ValidationResult) -> str:
    """Human readable summary of a validation result."""
    lines = ["ZIP Validation Report:"]
    if result.file_size is not None:
        lines.append(f"File size: {result.file_size / 1024 / 1024:.2f} MB")
    lines.append(f"Valid header: {result.has_valid_header}")
    lines.append(f"Valid footer: {result.has_valid_footer}")
    lines.append(f"Estimated file count: {result.estimated_entry_count}")
    lines.append(f"Overall valid: {result.is_valid}")
    if result.errors:
        lines.append("")
        lines.append("Errors:")
        lines.extend(f"- {e}" for e in result.errors)
    if result.warnings:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(f"- {w}" for w in result.warnings)
    return "\n".join(lines)
