from pathlib import Path
import argparse
import logging
import sys
from typing import List, Optional

import pandas as pd
from bs4 import BeautifulSoup
from tqdm import tqdm

from .config import ArchiveConfig
from .core.pipeline import ingest_archive_sync, validate_archive
from .core.validation import format_validation_report
from .errors import ArchiveError, describe_failure
from .models import IngestionResult, Progress, Stage
from .tweets.threads import thread_chain
from .tweets.tweet import Tweet

logger = logging.getLogger(__name__)


def plain_text(html: str) -> str:
    """Tweet text without the anchors added by link resolution."""
    return BeautifulSoup(html, 'html.parser').get_text()


def tweets_frame(tweets: List[Tweet]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            'id': t.id,
            'created_at': t.created_at,
            'likes': t.likes,
            'retweets': t.retweets,
            'is_thread': t.is_thread,
            'is_reply': t.is_reply,
            'has_link': t.has_link,
            'media_count': len(t.media),
        }
        for t in tweets
    ], columns=['id', 'created_at', 'likes', 'retweets', 'is_thread',
                'is_reply', 'has_link', 'media_count'])


class ArchiveReporter:
    """Prints summary statistics for a loaded archive."""

    def __init__(self, result: IngestionResult):
        self.result = result
        self.df = tweets_frame(result.tweets)

    def print_overall_stats(self):
        user = self.result.user
        print("\nOverall Statistics:")
        print(f"Account: @{user.username or 'unknown'} ({user.account_id or 'no account id'})")
        print(f"Total tweets: {len(self.df)}")
        if self.df.empty:
            return
        print(f"Replies: {int(self.df['is_reply'].sum())}")
        print(f"Thread tweets: {int(self.df['is_thread'].sum())}")
        print(f"Tweets with links: {int(self.df['has_link'].sum())}")
        print(f"Media attachments: {int(self.df['media_count'].sum())}")

    def print_yearly_stats(self):
        dated = self.df.dropna(subset=['created_at'])
        if dated.empty:
            return
        years = pd.to_datetime(dated['created_at'], utc=True).dt.year
        print("\nTweets per year:")
        print(years.value_counts().sort_index().to_string())

    def print_top_tweets(self, limit: int = 5):
        liked = self.df.dropna(subset=['likes'])
        if liked.empty:
            return
        print(f"\nTop {limit} tweets by likes:")
        by_id = {t.id: t for t in self.result.tweets}
        for _, row in liked.nlargest(limit, 'likes').iterrows():
            text = plain_text(by_id[row['id']].full_text).replace('\n', ' ')
            print(f"  {int(row['likes']):>6}  {row['id']}  {text[:70]}")

    def print_warnings(self):
        if not self.result.warnings:
            return
        print(f"\nWarnings ({len(self.result.warnings)}):")
        for warning in self.result.warnings:
            print(f"- {warning.message}")


class ProgressBar:
    """Feeds pipeline progress into a tqdm bar."""

    def __init__(self, disable: bool = False):
        self.disable = disable
        self._bar: Optional[tqdm] = None

    def __call__(self, progress: Progress) -> None:
        if progress.stage is Stage.TWEETS:
            if self._bar is None:
                self._bar = tqdm(total=progress.total, desc="Tweets", unit="tweet",
                                 disable=self.disable)
            self._bar.n = progress.current
            self._bar.set_postfix(media=f"{progress.media.current}/{progress.media.total}")
            self._bar.refresh()
        elif progress.stage is Stage.FINALIZING:
            self.close()
        else:
            logger.debug(f"{progress.stage.value}: {progress.current}/{progress.total}")

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s: %(message)s'
    )


def run_validate(args, config: ArchiveConfig) -> int:
    result = validate_archive(args.archive, config)
    print(format_validation_report(result))
    return 0 if result.is_valid else 1


def run_summary(args, config: ArchiveConfig) -> int:
    bar = ProgressBar(disable=args.no_progress)
    try:
        result = ingest_archive_sync(args.archive, config, lazy_media=args.lazy_media,
                                     on_progress=bar)
    finally:
        bar.close()
    reporter = ArchiveReporter(result)
    reporter.print_overall_stats()
    reporter.print_yearly_stats()
    reporter.print_top_tweets()
    reporter.print_warnings()
    result.release_media()
    return 0


def run_thread(args, config: ArchiveConfig) -> int:
    result = ingest_archive_sync(args.archive, config, lazy_media=True)
    chain = thread_chain(result.tweets, result.user.account_id, args.tweet_id)
    if not chain:
        print(f"Tweet {args.tweet_id} not found")
        return 1
    for tweet in chain:
        marker = '>' if tweet.id == args.tweet_id else ' '
        created = tweet.created_at.isoformat() if tweet.created_at else 'unknown date'
        print(f"{marker} [{created}] {tweet.id}")
        print(f"    {plain_text(tweet.full_text)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Inspect a Twitter archive export')
    parser.add_argument('--config', type=Path, help='JSON file with configuration overrides')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    validate = subparsers.add_parser('validate', help='Check archive structure')
    validate.add_argument('archive', type=Path, help='Path to the archive ZIP')
    validate.set_defaults(handler=run_validate)

    summary = subparsers.add_parser('summary', help='Load the archive and print statistics')
    summary.add_argument('archive', type=Path, help='Path to the archive ZIP')
    summary.add_argument('--lazy-media', action='store_true',
                         help='Do not read media files while loading')
    summary.add_argument('--no-progress', action='store_true', help='Hide the progress bar')
    summary.set_defaults(handler=run_summary)

    thread = subparsers.add_parser('thread', help='Print the thread around a tweet')
    thread.add_argument('archive', type=Path, help='Path to the archive ZIP')
    thread.add_argument('tweet_id', help='ID of a tweet in the thread')
    thread.set_defaults(handler=run_thread)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)
    config = ArchiveConfig.from_file(args.config)
    try:
        return args.handler(args, config)
    except ArchiveError as e:
        print(describe_failure(e), file=sys.stderr)
        return 1
