from .config import ArchiveConfig
from .errors import ArchiveError, ArchiveWarning, ErrorKind, describe_failure
from .models import IngestionResult, Progress, Stage, UserProfile, ValidationResult
from .core.container import Blob, ZipArchive
from .core.pipeline import ArchivePipeline, ingest_archive, ingest_archive_sync, validate_archive
from .media.entries import EagerMedia, LazyMedia
from .tweets.tweet import Tweet
from .tweets.threads import ThreadResult, get_thread, thread_chain

__all__ = [
    'ArchiveConfig',
    'ArchiveError',
    'ArchiveWarning',
    'ErrorKind',
    'describe_failure',
    'IngestionResult',
    'Progress',
    'Stage',
    'UserProfile',
    'ValidationResult',
    'Blob',
    'ZipArchive',
    'ArchivePipeline',
    'ingest_archive',
    'ingest_archive_sync',
    'validate_archive',
    'EagerMedia',
    'LazyMedia',
    'Tweet',
    'ThreadResult',
    'get_thread',
    'thread_chain',
]
