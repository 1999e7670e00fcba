"""Resolve tweet media entities to files inside the archive."""

import logging
import mimetypes
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from ..core.container import ZipArchive
from ..errors import ArchiveError, ArchiveWarning, ErrorKind
from .entries import EagerMedia, LazyMedia, MediaEntry

logger = logging.getLogger(__name__)

VIDEO_TYPES = ('video', 'animated_gif')
DEFAULT_IMAGE_TYPE = 'image/jpeg'
VIDEO_MIME_TYPE = 'video/mp4'


def url_basename(url: str) -> str:
    """Last path segment of a URL, without query string or fragment."""
    return urlparse(url).path.rsplit('/', 1)[-1]


def guess_mime_type(filename: str, default: str = DEFAULT_IMAGE_TYPE) -> str:
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or default


def media_name_and_type(entity: Dict[str, Any]) -> Tuple[str, str]:
    """Return the on-disk name and MIME type for a media entity.

    Videos and GIFs are stored under the name of their first video variant,
    photos under the name of their ``media_url``.
    """
    if not isinstance(entity, dict):
        raise ValueError(f"expected an object, got {type(entity).__name__}")

    if entity.get('type') in VIDEO_TYPES:
        video_info = entity.get('video_info') or {}
        variants = video_info.get('variants') if isinstance(video_info, dict) else None
        first = variants[0] if isinstance(variants, list) and variants else None
        if not isinstance(first, dict) or not isinstance(first.get('url'), str):
            raise ValueError("video entity has no variants")
        return url_basename(first['url']), VIDEO_MIME_TYPE

    media_url = entity.get('media_url') or entity.get('media_url_https')
    if not isinstance(media_url, str):
        raise ValueError("photo entity has no media_url")
    name = url_basename(media_url)
    return name, guess_mime_type(name)


async def resolve_media_links(
    archive: ZipArchive,
    tweet_id: str,
    media_entities: List[Dict[str, Any]],
    media_dir: str,
    lazy: bool = False,
    on_media_processed: Optional[Callable[[], None]] = None,
    warnings: Optional[List[ArchiveWarning]] = None,
) -> List[MediaEntry]:
    """Load the media files of one tweet.

    Args:
        archive: Open archive to read from.
        tweet_id: Tweet the media belongs to; files are named ``{id}-{name}``.
        media_entities: ``extended_entities.media`` of the tweet.
        media_dir: Folder holding the tweet media, e.g. ``data/tweets_media``.
        lazy: Return :class:`LazyMedia` wrappers instead of reading now.
        on_media_processed: Called once per entity, resolved or not.
        warnings: Collects a warning for each attachment that was skipped.

    Missing or unreadable files are skipped, never fatal.
    """
    resolved = []
    for entity in media_entities:
        try:
            entry = await _resolve_entity(archive, tweet_id, entity, media_dir, lazy)
        except ArchiveError as e:
            _skip(tweet_id, e.file_name, str(e), warnings)
        except ValueError as e:
            _skip(tweet_id, None, f"Malformed media entity: {e}", warnings)
        else:
            resolved.append(entry)
        finally:
            if on_media_processed is not None:
                on_media_processed()
    return resolved


async def _resolve_entity(archive: ZipArchive, tweet_id: str, entity: Dict[str, Any],
                          media_dir: str, lazy: bool) -> MediaEntry:
    media_name, mime_type = media_name_and_type(entity)
    filename = f"{tweet_id}-{media_name}"
    path = f"{media_dir}/{filename}"
    media_type = entity.get('type', 'photo')

    if lazy:
        if not archive.exists(path):
            raise ArchiveError.missing(path)
        return LazyMedia(type=media_type, filename=filename, mime_type=mime_type,
                         archive_path=path, archive=archive)

    blob = await archive.read_binary(path, mime_type)
    return EagerMedia(type=media_type, data=blob, filename=filename, mime_type=mime_type)


def _skip(tweet_id: str, path: Optional[str], reason: str,
          warnings: Optional[List[ArchiveWarning]]) -> None:
    message = f"Skipping missing media for tweet {tweet_id}: {reason}"
    logger.warning(message)
    if warnings is not None:
        warnings.append(ArchiveWarning(kind=ErrorKind.MEDIA_RESOLUTION, message=message,
                                       path=path, record_id=tweet_id))
