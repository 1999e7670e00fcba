from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..media.entries import MediaEntry

TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %z %Y"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse the export's ``created_at`` format, e.g. ``Wed Feb 28 21:13:12 +0000 2024``."""
    if not value:
        return None
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        return None


def parse_count(value: Any) -> Optional[int]:
    """Counts are exported as strings; missing or garbled values become None."""
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Tweet:
    """A normalized tweet produced by the resolver."""
    id: str
    created_at: Optional[datetime]
    full_text: str
    has_link: bool = False
    is_thread: bool = False
    likes: Optional[int] = None
    retweets: Optional[int] = None
    media: List[MediaEntry] = field(default_factory=list)
    in_reply_to_user_id: Optional[str] = None
    in_reply_to_status_id: Optional[str] = None

    @property
    def is_reply(self) -> bool:
        return self.in_reply_to_status_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'full_text': self.full_text,
            'has_link': self.has_link,
            'is_thread': self.is_thread,
            'likes': self.likes,
            'retweets': self.retweets,
            'media': [m.to_dict() for m in self.media],
            'in_reply_to_user_id': self.in_reply_to_user_id,
            'in_reply_to_status_id': self.in_reply_to_status_id,
        }
