"""Test fixtures and configuration."""

import io
import json
import zipfile
from typing import Dict, List, Union

import pytest

ACCOUNT_ID = "12345"

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-payload"
AVATAR_BYTES = b"\x89PNG\r\n\x1a\nfake-avatar"


def make_data_file(variable: str, wrapper: str, records: List[Dict]) -> str:
    """Render records the way the export writes its data/*.js files."""
    body = json.dumps([{wrapper: record} for record in records], indent=2)
    return f"window.YTD.{variable}.part0 = {body}"


def build_archive(files: Dict[str, Union[str, bytes]], directories: List[str] = ()) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as zf:
        for directory in directories:
            zf.writestr(zipfile.ZipInfo(directory), b"")
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def raw_tweet(tweet_id: str, text: str, **fields) -> Dict:
    tweet = {
        "id": tweet_id,
        "id_str": tweet_id,
        "full_text": text,
        "created_at": "Wed Feb 28 21:13:12 +0000 2024",
        "favorite_count": "0",
        "retweet_count": "0",
        "entities": {"urls": [], "user_mentions": [], "hashtags": []},
    }
    tweet.update(fields)
    return tweet


@pytest.fixture
def account_data():
    return {
        "accountId": ACCOUNT_ID,
        "username": "testuser",
        "accountDisplayName": "Test User",
        "createdAt": "2020-01-01T00:00:00.000Z",
    }


@pytest.fixture
def profile_data():
    return {
        "description": {"bio": "Testing archives", "website": "", "location": ""},
        "avatarMediaUrl": "https://pbs.twimg.com/profile_images/1/avatar.png",
    }


@pytest.fixture
def sample_tweets():
    return [
        raw_tweet(
            "100", "Read this https://t.co/abc",
            favorite_count="5", retweet_count="1",
            entities={"urls": [{"url": "https://t.co/abc",
                                "expanded_url": "https://example.com/post"}]},
        ),
        raw_tweet(
            "101", "Continuing the thought",
            created_at="Wed Feb 28 21:15:00 +0000 2024",
            in_reply_to_status_id="100", in_reply_to_status_id_str="100",
            in_reply_to_user_id=ACCOUNT_ID, in_reply_to_user_id_str=ACCOUNT_ID,
        ),
        raw_tweet(
            "102", "Last one https://t.co/img",
            created_at="Wed Feb 28 21:20:00 +0000 2024",
            in_reply_to_status_id="101", in_reply_to_status_id_str="101",
            in_reply_to_user_id=ACCOUNT_ID, in_reply_to_user_id_str=ACCOUNT_ID,
            extended_entities={"media": [{
                "type": "photo",
                "url": "https://t.co/img",
                "media_url": "http://pbs.twimg.com/media/photo1.jpg",
            }]},
        ),
        raw_tweet(
            "200", "RT @someone: look at https://t.co/xyz",
            entities={"urls": [{"url": "https://t.co/xyz",
                                "expanded_url": "https://example.org"}]},
        ),
        raw_tweet(
            "300", "@other watch this https://t.co/vid",
            in_reply_to_status_id="999", in_reply_to_status_id_str="999",
            in_reply_to_user_id="777", in_reply_to_user_id_str="777",
            extended_entities={"media": [{
                "type": "video",
                "url": "https://t.co/vid",
                "media_url": "http://pbs.twimg.com/ext_tw_video_thumb/1/pu/img/thumb.jpg",
                "video_info": {"variants": [
                    {"url": "https://video.twimg.com/ext_tw_video/1/pu/vid/clip.mp4?tag=12"}
                ]},
            }]},
        ),
    ]


@pytest.fixture
def archive_files(account_data, profile_data, sample_tweets):
    return {
        "Your archive.html": "<html></html>",
        "data/account.js": make_data_file("account", "account", [account_data]),
        "data/profile.js": make_data_file("profile", "profile", [profile_data]),
        "data/tweets.js": make_data_file("tweets", "tweet", sample_tweets),
        "data/tweets_media/102-photo1.jpg": JPEG_BYTES,
        f"data/profile_media/{ACCOUNT_ID}-avatar.png": AVATAR_BYTES,
    }


@pytest.fixture
def archive_bytes(archive_files):
    return build_archive(archive_files, directories=["data/", "data/tweets_media/"])


@pytest.fixture
def archive_path(tmp_path, archive_bytes):
    path = tmp_path / "twitter-archive.zip"
    path.write_bytes(archive_bytes)
    return path
