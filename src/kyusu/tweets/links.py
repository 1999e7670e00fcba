"""Expansion of t.co links in tweet text."""

from html import escape
from typing import Dict, List, Tuple

RETWEET_MARKER = "RT"


def render_link(expanded_url: str) -> str:
    safe = escape(expanded_url, quote=True)
    return f'<a href="{safe}">{safe}</a>'


def resolve_shortened_links(text: str, url_entities: List[Dict],
                            retweet_marker: str = RETWEET_MARKER) -> Tuple[str, bool]:
    """Replace shortened URLs with anchors to their expanded form.

    Returns the new text and whether any link was rewritten. Retweets are
    returned untouched.
    """
    if not url_entities or text.startswith(retweet_marker):
        return text, False

    has_link = False
    for entity in url_entities:
        short_url = entity.get('url')
        expanded_url = entity.get('expanded_url')
        if not short_url or not expanded_url or short_url not in text:
            continue
        text = text.replace(short_url, render_link(expanded_url))
        has_link = True
    return text, has_link


def strip_media_url(text: str, media_entities: List[Dict]) -> str:
    """Remove the first media entity's t.co token; attachments are shown separately."""
    if not media_entities:
        return text
    first = media_entities[0]
    token = first.get('url') if isinstance(first, dict) else None
    if not isinstance(token, str) or not token:
        return text
    return text.replace(token, '').rstrip()
