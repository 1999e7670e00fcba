"""Load the archive owner's account and profile."""

import logging
from typing import Any, Dict, List, Optional

from ..config import ArchiveConfig
from ..errors import ArchiveError, ArchiveWarning, ErrorKind
from ..media.entries import EagerMedia, LazyMedia, MediaEntry
from ..media.resolver import guess_mime_type, url_basename
from ..models import UserProfile
from .container import ZipArchive
from .envelope import Single, parse_envelope

logger = logging.getLogger(__name__)


def _missing(message: str, path: str, warnings: List[ArchiveWarning]) -> None:
    logger.warning(message)
    warnings.append(ArchiveWarning(kind=ErrorKind.MISSING_OPTIONAL_FILE, message=message, path=path))


async def load_data_object(archive: ZipArchive, path: str,
                           warnings: List[ArchiveWarning]) -> Dict[str, Any]:
    """Read a single-record data file such as ``account.js``.

    A missing file yields an empty dict and a warning; a malformed one raises.
    """
    if not archive.exists(path):
        _missing(f"Optional file not found in ZIP: {path}", path, warnings)
        return {}
    result = parse_envelope(await archive.read_text(path), path)
    if isinstance(result, Single):
        record = result.value
    else:
        logger.debug(f"{path} holds {len(result.values)} records; using the first")
        record = result.values[0]
    if not isinstance(record, dict):
        raise ArchiveError.format_repair(path, "expected an object")
    return record


def avatar_path(config: ArchiveConfig, account_id: str, avatar_url: str) -> str:
    file_name = url_basename(avatar_url)
    return config.data_path(f"{config.profile_media_dir}/{account_id}-{file_name}")


async def load_avatar(archive: ZipArchive, config: ArchiveConfig, account_id: Optional[str],
                      profile: Dict[str, Any], warnings: List[ArchiveWarning],
                      lazy: bool = False) -> Optional[MediaEntry]:
    avatar_url = profile.get('avatarMediaUrl')
    if not avatar_url or not account_id:
        return None

    path = avatar_path(config, account_id, avatar_url)
    filename = path.rsplit('/', 1)[-1]
    mime_type = guess_mime_type(filename)
    if not archive.exists(path):
        _missing(f"Avatar not found in ZIP: {path}", path, warnings)
        return None
    if lazy:
        return LazyMedia(type='photo', filename=filename, mime_type=mime_type,
                         archive_path=path, archive=archive)
    try:
        blob = await archive.read_binary(path, mime_type)
    except ArchiveError as e:
        _missing(f"Avatar could not be read: {e}", path, warnings)
        return None
    return EagerMedia(type='photo', data=blob, filename=filename, mime_type=mime_type)


async def load_user(archive: ZipArchive, config: ArchiveConfig,
                    warnings: List[ArchiveWarning], lazy: bool = False) -> UserProfile:
    """Build the :class:`UserProfile`; absent files leave fields empty."""
    account = await load_data_object(archive, config.data_path(config.account_file), warnings)
    profile = await load_data_object(archive, config.data_path(config.profile_file), warnings)
    account_id = account.get('accountId')
    avatar = await load_avatar(archive, config, account_id, profile, warnings, lazy=lazy)
    return UserProfile(account=account, profile=profile, avatar=avatar)
