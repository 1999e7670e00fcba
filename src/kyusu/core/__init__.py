from .container import Blob, ZipArchive
from .envelope import Many, Single, load_records, parse_envelope
from .validation import (assert_valid, format_validation_report,
                         validate_archive_structure, validate_zip_structure)

__all__ = [
    'Blob', 'ZipArchive', 'Single', 'Many', 'parse_envelope', 'load_records',
    'assert_valid', 'format_validation_report', 'validate_archive_structure',
    'validate_zip_structure',
]
