from .entries import EagerMedia, LazyMedia, MediaEntry
from .resolver import resolve_media_links

__all__ = ['EagerMedia', 'LazyMedia', 'MediaEntry', 'resolve_media_links']
