from .tweet import Tweet
from .resolver import TweetResolver, ThreadMembership
from .threads import ThreadResult, get_thread, thread_chain

__all__ = ['Tweet', 'TweetResolver', 'ThreadMembership', 'ThreadResult', 'get_thread', 'thread_chain']
