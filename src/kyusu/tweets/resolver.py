"""Turn raw tweet objects from the export into :class:`Tweet` records."""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from ..config import ArchiveConfig
from ..core.container import ZipArchive
from ..errors import ArchiveWarning
from ..media.resolver import resolve_media_links
from .links import resolve_shortened_links, strip_media_url
from .tweet import Tweet, parse_count, parse_timestamp

logger = logging.getLogger(__name__)


def raw_id(data: Dict[str, Any]) -> Optional[str]:
    value = data.get('id_str') or data.get('id')
    return str(value) if value is not None else None


def raw_reply_ids(data: Dict[str, Any]):
    """Return (in_reply_to_status_id, in_reply_to_user_id) as strings or None."""
    status_id = data.get('in_reply_to_status_id_str') or data.get('in_reply_to_status_id')
    user_id = data.get('in_reply_to_user_id_str') or data.get('in_reply_to_user_id')
    return (str(status_id) if status_id is not None else None,
            str(user_id) if user_id is not None else None)


def media_entities(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    extended = data.get('extended_entities') or {}
    media = extended.get('media') if isinstance(extended, dict) else None
    return media if isinstance(media, list) else []


class ThreadMembership:
    """Answers whether a tweet takes part in a self-reply chain.

    A tweet is part of a thread if the account replied to it, or if it is the
    account's reply to a tweet present in the archive.
    """

    def __init__(self, raw_tweets: Iterable[Dict[str, Any]], account_id: Optional[str]):
        self.account_id = account_id
        self._ids: Set[str] = set()
        self._replied_to: Set[str] = set()
        for data in raw_tweets:
            tweet_id = raw_id(data)
            if tweet_id:
                self._ids.add(tweet_id)
            status_id, user_id = raw_reply_ids(data)
            if status_id and user_id == account_id:
                self._replied_to.add(status_id)

    def is_thread(self, tweet_id: str, in_reply_to_status_id: Optional[str],
                  in_reply_to_user_id: Optional[str]) -> bool:
        if self.account_id is None:
            return False
        has_replies = tweet_id in self._replied_to
        replies_to_own = (in_reply_to_user_id == self.account_id
                          and in_reply_to_status_id in self._ids)
        return has_replies or replies_to_own


class TweetResolver:
    """Resolves links, media and thread membership for tweets of one archive."""

    def __init__(
        self,
        archive: ZipArchive,
        raw_tweets: List[Dict[str, Any]],
        account_id: Optional[str],
        media_dir: str,
        config: Optional[ArchiveConfig] = None,
        lazy_media: bool = False,
    ):
        self.archive = archive
        self.config = config or ArchiveConfig()
        self.media_dir = media_dir
        self.lazy_media = lazy_media
        self.membership = ThreadMembership(raw_tweets, account_id)
        self.warnings: List[ArchiveWarning] = []

    async def resolve(self, data: Dict[str, Any],
                      on_media_processed: Optional[Callable[[], None]] = None) -> Tweet:
        tweet_id = raw_id(data)
        if tweet_id is None:
            logger.warning("Tweet without id in archive; keeping it with an empty id")
            tweet_id = ''
        text = data.get('full_text') or data.get('text') or ''

        urls = (data.get('entities') or {}).get('urls') or []
        text, has_link = resolve_shortened_links(text, urls, self.config.retweet_marker)

        media = []
        entities = media_entities(data)
        if entities:
            media = await resolve_media_links(
                self.archive, tweet_id, entities, self.media_dir,
                lazy=self.lazy_media,
                on_media_processed=on_media_processed,
                warnings=self.warnings,
            )
            text = strip_media_url(text, entities)

        status_id, user_id = raw_reply_ids(data)
        return Tweet(
            id=tweet_id,
            created_at=parse_timestamp(data.get('created_at')),
            full_text=text,
            has_link=has_link,
            is_thread=self.membership.is_thread(tweet_id, status_id, user_id),
            likes=parse_count(data.get('favorite_count')),
            retweets=parse_count(data.get('retweet_count')),
            media=media,
            in_reply_to_user_id=user_id,
            in_reply_to_status_id=status_id,
        )
