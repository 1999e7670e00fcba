"""Result types shared across the ingestion pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from .errors import ArchiveWarning

if TYPE_CHECKING:
    from .media.entries import MediaEntry
    from .tweets.threads import ThreadResult
    from .tweets.tweet import Tweet


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a structural check. Callers must inspect ``is_valid``."""
    is_valid: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    estimated_entry_count: int = 0
    file_size: Optional[int] = None
    has_valid_header: bool = False
    has_valid_footer: bool = False

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Combine with a later check; entry count and byte facts come from ``self``."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
            estimated_entry_count=self.estimated_entry_count,
            file_size=self.file_size,
            has_valid_header=self.has_valid_header,
            has_valid_footer=self.has_valid_footer,
        )


class Stage(Enum):
    VALIDATION = "validation"
    PROFILE = "profile"
    TWEETS = "tweets"
    FINALIZING = "finalizing"


@dataclass(frozen=True)
class MediaProgress:
    current: int = 0
    total: int = 0


@dataclass(frozen=True)
class Progress:
    """Progress notification sent to ``on_progress`` callbacks."""
    stage: Stage
    current: int = 0
    total: int = 0
    media: MediaProgress = field(default_factory=MediaProgress)


@dataclass
class UserProfile:
    """Account and profile data of the archive owner."""
    account: Dict[str, Any]
    profile: Dict[str, Any]
    avatar: Optional['MediaEntry'] = None

    @property
    def account_id(self) -> Optional[str]:
        return self.account.get('accountId')

    @property
    def username(self) -> Optional[str]:
        return self.account.get('username')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'account': dict(self.account),
            'profile': dict(self.profile, avatar=self.avatar.to_dict() if self.avatar else None),
        }


@dataclass
class IngestionResult:
    """Everything produced from one archive."""
    user: UserProfile
    tweets: List['Tweet']
    validation: ValidationResult
    warnings: List[ArchiveWarning] = field(default_factory=list)

    def get_tweet(self, tweet_id: str) -> Optional['Tweet']:
        return next((t for t in self.tweets if t.id == tweet_id), None)

    def get_thread(self, origin_id: str) -> 'ThreadResult':
        from .tweets.threads import get_thread
        return get_thread(self.tweets, self.user.account_id, origin_id)

    def media_entries(self) -> List['MediaEntry']:
        entries = [entry for tweet in self.tweets for entry in tweet.media]
        if self.user.avatar is not None:
            entries.append(self.user.avatar)
        return entries

    async def materialize_media(self) -> None:
        """Read every pending lazy entry, reopening each closed archive once."""
        from .media.entries import LazyMedia

        pending: Dict[int, List[LazyMedia]] = {}
        for entry in self.media_entries():
            if isinstance(entry, LazyMedia) and not entry.materialized:
                pending.setdefault(id(entry.archive), []).append(entry)

        for entries in pending.values():
            archive = entries[0].archive
            if not archive.closed or not archive.reopenable:
                for entry in entries:
                    await entry.materialize()
                continue
            async with await archive.reopen() as handle:
                for entry in entries:
                    await entry.materialize(handle)

    def release_media(self) -> None:
        """Release every blob held by tweet media and the avatar."""
        for entry in self.media_entries():
            entry.release()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user': self.user.to_dict(),
            'tweets': [t.to_dict() for t in self.tweets],
        }
