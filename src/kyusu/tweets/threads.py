"""Reconstruct reply chains around a tweet.

Both walks scan the full tweet list on every hop, so a chain of length k
costs O(k * n). That is fine for a single account's archive; if it ever
matters, index tweets by ``in_reply_to_status_id`` before walking.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .tweet import Tweet


@dataclass
class ThreadResult:
    """Tweets around an origin tweet.

    ``ancestors`` runs from the direct parent back to the oldest tweet and
    never contains the origin; ``descendants`` runs from the first reply to
    the last.
    """
    ancestors: List[Tweet] = field(default_factory=list)
    descendants: List[Tweet] = field(default_factory=list)

    def chain(self, origin: Tweet) -> List[Tweet]:
        """All tweets of the thread, oldest first."""
        return list(reversed(self.ancestors)) + [origin] + self.descendants

    @property
    def length(self) -> int:
        return len(self.ancestors) + len(self.descendants) + 1


def _find(tweets: Sequence[Tweet], tweet_id: str) -> Optional[Tweet]:
    return next((t for t in tweets if t.id == tweet_id), None)


def get_descendants(tweets: Sequence[Tweet], account_id: Optional[str],
                    origin_id: str) -> List[Tweet]:
    """Follow the account's own replies downwards from ``origin_id``."""
    descendants = []
    seen = {origin_id}
    next_id = origin_id
    while next_id:
        reply = next(
            (t for t in tweets
             if t.in_reply_to_user_id == account_id and t.in_reply_to_status_id == next_id),
            None,
        )
        if reply is None or reply.id in seen:
            break
        seen.add(reply.id)
        descendants.append(reply)
        next_id = reply.id
    return descendants


def get_ancestors(tweets: Sequence[Tweet], origin_id: str) -> List[Tweet]:
    """Follow ``in_reply_to_status_id`` upwards from ``origin_id``, newest first."""
    ancestors = []
    origin = _find(tweets, origin_id)
    if origin is None:
        return ancestors
    seen = {origin_id}
    next_id = origin.in_reply_to_status_id
    while next_id and next_id not in seen:
        parent = _find(tweets, next_id)
        if parent is None:
            break
        seen.add(next_id)
        ancestors.append(parent)
        next_id = parent.in_reply_to_status_id
    return ancestors


def get_thread(tweets: Sequence[Tweet], account_id: Optional[str], origin_id: str) -> ThreadResult:
    """Build the thread around ``origin_id``."""
    return ThreadResult(
        ancestors=get_ancestors(tweets, origin_id),
        descendants=get_descendants(tweets, account_id, origin_id),
    )


def thread_chain(tweets: Sequence[Tweet], account_id: Optional[str], origin_id: str) -> List[Tweet]:
    """Chronological list of the thread around ``origin_id``; empty if it is unknown."""
    origin = _find(tweets, origin_id)
    if origin is None:
        return []
    return get_thread(tweets, account_id, origin_id).chain(origin)
