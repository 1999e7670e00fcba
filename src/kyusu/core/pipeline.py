"""Ingestion pipeline: validate, parse and resolve a Twitter archive."""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from ..config import ArchiveConfig
from ..errors import ArchiveError, ArchiveWarning
from ..models import IngestionResult, MediaProgress, Progress, Stage, ValidationResult
from ..tweets.resolver import TweetResolver, media_entities
from ..tweets.tweet import Tweet
from .container import ArchiveSource, ZipArchive
from .envelope import load_records
from .profile import load_user
from .validation import assert_valid, validate_archive_structure, validate_zip_structure

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Progress], None]


class ArchivePipeline:
    """Runs one ingestion from raw archive to :class:`IngestionResult`.

    Records are processed strictly in order. The archive handle is closed when
    :meth:`run` returns or raises; lazy media reopen the source when read later.
    """

    def __init__(self, config: Optional[ArchiveConfig] = None,
                 lazy_media: Optional[bool] = None,
                 on_progress: Optional[ProgressCallback] = None):
        self.config = config or ArchiveConfig()
        self.lazy_media = self.config.lazy_media if lazy_media is None else lazy_media
        self.on_progress = on_progress

    def _emit(self, stage: Stage, current: int = 0, total: int = 0,
              media_current: int = 0, media_total: int = 0) -> None:
        if self.on_progress is None:
            return
        progress = Progress(stage=stage, current=current, total=total,
                            media=MediaProgress(current=media_current, total=media_total))
        try:
            self.on_progress(progress)
        except Exception as e:
            logger.warning(f"Progress callback failed at stage {stage.value}: {e}")

    async def run(self, source: ArchiveSource) -> IngestionResult:
        self._emit(Stage.VALIDATION, 0, 1)
        binary = validate_zip_structure(source, self.config)
        assert_valid(binary)

        archive = await ZipArchive.open(source)
        try:
            logical = validate_archive_structure(archive.list_paths(), self.config)
            validation = binary.merge(logical)
            # binary warnings were logged above; a failure still reports both tiers
            assert_valid(logical if logical.is_valid else validation)
            self._emit(Stage.VALIDATION, 1, 1)

            warnings: List[ArchiveWarning] = []
            self._emit(Stage.PROFILE, 0, 1)
            user = await load_user(archive, self.config, warnings, lazy=self.lazy_media)
            self._emit(Stage.PROFILE, 1, 1)

            tweets = await self._load_tweets(archive, user.account_id, warnings)
            self._emit(Stage.FINALIZING, len(tweets), len(tweets))
            logger.info(f"Loaded {len(tweets)} tweets with {len(warnings)} warnings")
            return IngestionResult(user=user, tweets=tweets, validation=validation,
                                   warnings=warnings)
        finally:
            await archive.close()

    def _tweets_path(self, archive: ZipArchive) -> str:
        for name in self.config.tweet_files:
            path = self.config.data_path(name)
            if archive.exists(path):
                return path
        raise ArchiveError.missing(self.config.data_path(self.config.tweet_files[0]))

    async def _load_tweets(self, archive: ZipArchive, account_id: Optional[str],
                           warnings: List[ArchiveWarning]) -> List[Tweet]:
        path = self._tweets_path(archive)
        base_name = path.rsplit('/', 1)[-1].rsplit('.', 1)[0]
        media_dir = self.config.data_path(f"{base_name}{self.config.media_dir_suffix}")

        raw_tweets: List[Dict[str, Any]] = load_records(await archive.read_text(path), path)
        if not all(isinstance(t, dict) for t in raw_tweets):
            raise ArchiveError.format_repair(path, "Tweet data is not in expected array format")

        total = len(raw_tweets)
        media_total = sum(len(media_entities(t)) for t in raw_tweets)
        resolver = TweetResolver(archive, raw_tweets, account_id, media_dir,
                                 config=self.config, lazy_media=self.lazy_media)

        processed = 0
        media_processed = 0

        def emit() -> None:
            self._emit(Stage.TWEETS, processed, total, media_processed, media_total)

        def media_done() -> None:
            nonlocal media_processed
            media_processed += 1
            if media_processed == media_total or media_processed % self.config.media_progress_interval == 0:
                emit()

        emit()
        tweets = []
        for data in raw_tweets:
            tweets.append(await resolver.resolve(data, on_media_processed=media_done))
            processed += 1
            if processed == total or processed % self.config.record_progress_interval == 0:
                emit()
            if processed % self.config.yield_interval == 0:
                await asyncio.sleep(0)
        emit()

        warnings.extend(resolver.warnings)
        return tweets


async def ingest_archive(source: ArchiveSource, config: Optional[ArchiveConfig] = None, *,
                         lazy_media: Optional[bool] = None,
                         on_progress: Optional[ProgressCallback] = None) -> IngestionResult:
    """Validate and load a Twitter archive.

    Args:
        source: ZIP archive as bytes, a filesystem path or a binary file object.
        config: Archive layout and pipeline settings.
        lazy_media: Defer reading media until ``materialize()`` is called.
        on_progress: Receives :class:`Progress` updates at bounded intervals.

    Raises:
        ArchiveError: for container, validation and format failures.
    """
    pipeline = ArchivePipeline(config, lazy_media=lazy_media, on_progress=on_progress)
    return await pipeline.run(source)


def ingest_archive_sync(source: ArchiveSource, config: Optional[ArchiveConfig] = None, *,
                        lazy_media: Optional[bool] = None,
                        on_progress: Optional[ProgressCallback] = None) -> IngestionResult:
    """Blocking wrapper around :func:`ingest_archive`."""
    return asyncio.run(ingest_archive(source, config, lazy_media=lazy_media,
                                      on_progress=on_progress))


def validate_archive(source: ArchiveSource,
                     config: Optional[ArchiveConfig] = None) -> ValidationResult:
    """Run both validation tiers without loading any data."""
    async def _validate() -> ValidationResult:
        binary = validate_zip_structure(source, config)
        if not binary.is_valid:
            return binary
        async with await ZipArchive.open(source) as archive:
            return binary.merge(validate_archive_structure(archive.list_paths(), config))
    return asyncio.run(_validate())
