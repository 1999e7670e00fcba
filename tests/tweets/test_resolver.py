from datetime import datetime, timezone

import pytest

from kyusu.core.container import ZipArchive
from kyusu.errors import ErrorKind
from kyusu.media.entries import EagerMedia, LazyMedia
from kyusu.tweets.resolver import ThreadMembership, TweetResolver, raw_reply_ids
from kyusu.tweets.tweet import parse_count, parse_timestamp

from conftest import ACCOUNT_ID, JPEG_BYTES, raw_tweet


def by_id(tweets, tweet_id):
    return next(t for t in tweets if t["id_str"] == tweet_id)


def test_thread_membership(sample_tweets):
    membership = ThreadMembership(sample_tweets, ACCOUNT_ID)
    assert membership.is_thread("100", None, None)
    assert membership.is_thread("101", "100", ACCOUNT_ID)
    assert membership.is_thread("102", "101", ACCOUNT_ID)
    assert not membership.is_thread("200", None, None)
    assert not membership.is_thread("300", "999", "777")


def test_reply_to_missing_own_tweet_is_not_a_thread():
    tweets = [raw_tweet("5", "orphan", in_reply_to_status_id_str="4",
                        in_reply_to_user_id_str=ACCOUNT_ID)]
    assert not ThreadMembership(tweets, ACCOUNT_ID).is_thread("5", "4", ACCOUNT_ID)


def test_without_account_nothing_is_a_thread(sample_tweets):
    assert not ThreadMembership(sample_tweets, None).is_thread("100", None, None)


def test_reply_ids_fall_back_to_numeric_fields():
    assert raw_reply_ids({"in_reply_to_status_id": 42, "in_reply_to_user_id": 7}) == ("42", "7")
    assert raw_reply_ids({}) == (None, None)


def test_parse_helpers():
    assert parse_timestamp("Wed Feb 28 21:13:12 +0000 2024") == datetime(
        2024, 2, 28, 21, 13, 12, tzinfo=timezone.utc)
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(None) is None
    assert parse_count("12") == 12
    assert parse_count(None) is None
    assert parse_count("n/a") is None


@pytest.mark.asyncio
async def test_resolve_tweet_with_link(archive_bytes, sample_tweets):
    async with await ZipArchive.open(archive_bytes) as archive:
        resolver = TweetResolver(archive, sample_tweets, ACCOUNT_ID, "data/tweets_media")
        tweet = await resolver.resolve(by_id(sample_tweets, "100"))

    assert tweet.id == "100"
    assert tweet.full_text == ('Read this <a href="https://example.com/post">'
                               'https://example.com/post</a>')
    assert tweet.has_link
    assert tweet.is_thread
    assert tweet.likes == 5
    assert tweet.retweets == 1
    assert tweet.created_at.year == 2024
    assert tweet.media == []


@pytest.mark.asyncio
async def test_resolve_eager_media(archive_bytes, sample_tweets):
    processed = []
    async with await ZipArchive.open(archive_bytes) as archive:
        resolver = TweetResolver(archive, sample_tweets, ACCOUNT_ID, "data/tweets_media")
        tweet = await resolver.resolve(by_id(sample_tweets, "102"),
                                       on_media_processed=lambda: processed.append(1))

    assert tweet.full_text == "Last one"
    assert len(tweet.media) == 1
    media = tweet.media[0]
    assert isinstance(media, EagerMedia)
    assert media.filename == "102-photo1.jpg"
    assert media.mime_type == "image/jpeg"
    assert (await media.read()).data == JPEG_BYTES
    assert processed == [1]
    assert tweet.in_reply_to_status_id == "101"
    assert tweet.in_reply_to_user_id == ACCOUNT_ID


@pytest.mark.asyncio
async def test_missing_media_is_omitted(archive_bytes, sample_tweets):
    async with await ZipArchive.open(archive_bytes) as archive:
        resolver = TweetResolver(archive, sample_tweets, ACCOUNT_ID, "data/tweets_media")
        tweet = await resolver.resolve(by_id(sample_tweets, "300"))

    assert tweet.id == "300"
    assert tweet.media == []
    assert tweet.full_text == "@other watch this"
    assert tweet.in_reply_to_status_id == "999"
    assert len(resolver.warnings) == 1
    warning = resolver.warnings[0]
    assert warning.kind is ErrorKind.MEDIA_RESOLUTION
    assert warning.record_id == "300"
    assert warning.path == "data/tweets_media/300-clip.mp4"


@pytest.mark.asyncio
async def test_retweet_text_untouched(archive_bytes, sample_tweets):
    async with await ZipArchive.open(archive_bytes) as archive:
        resolver = TweetResolver(archive, sample_tweets, ACCOUNT_ID, "data/tweets_media")
        tweet = await resolver.resolve(by_id(sample_tweets, "200"))
    assert tweet.full_text == "RT @someone: look at https://t.co/xyz"
    assert not tweet.has_link


@pytest.mark.asyncio
async def test_resolve_lazy_media(archive_bytes, sample_tweets):
    async with await ZipArchive.open(archive_bytes) as archive:
        resolver = TweetResolver(archive, sample_tweets, ACCOUNT_ID, "data/tweets_media",
                                 lazy_media=True)
        tweet = await resolver.resolve(by_id(sample_tweets, "102"))
        media = tweet.media[0]
        assert isinstance(media, LazyMedia)
        assert not media.materialized
        assert (await media.materialize()).data == JPEG_BYTES
