"""Configuration for archive ingestion."""

from dataclasses import dataclass, field, fields, replace
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import orjson

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "kyusu" / "config.json"


@dataclass(frozen=True)
class ArchiveConfig:
    """Settings for reading a Twitter archive export.

    Paths are relative to the archive root. Overrides can be loaded from a
    JSON file with :meth:`from_file`; unknown keys are ignored.
    """
    data_root: str = "data/"
    tweet_files: Tuple[str, ...] = ("tweet.js", "tweets.js")
    account_file: str = "account.js"
    profile_file: str = "profile.js"
    profile_media_dir: str = "profile_media"
    media_dir_suffix: str = "_media"
    retweet_marker: str = "RT"

    # Container checks
    eocd_scan_size: int = 65536
    min_archive_size: int = 22
    max_expected_entries: int = 10000

    # Pipeline behaviour
    lazy_media: bool = False
    record_progress_interval: int = 50
    media_progress_interval: int = 25
    yield_interval: int = 250

    extra: Dict[str, Any] = field(default_factory=dict)

    def data_path(self, name: str) -> str:
        return f"{self.data_root}{name}"

    @property
    def auxiliary_files(self) -> Tuple[str, str]:
        return (self.data_path(self.account_file), self.data_path(self.profile_file))

    def with_overrides(self, **overrides: Any) -> 'ArchiveConfig':
        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'ArchiveConfig':
        known = {f.name for f in fields(cls)}
        kwargs = {}
        extra = {}
        for key, value in values.items():
            if key in known and key != 'extra':
                if key == 'tweet_files':
                    value = tuple(value)
                kwargs[key] = value
            else:
                extra[key] = value
        return cls(extra=extra, **kwargs)

    @classmethod
    def from_file(cls, config_path: Optional[Path] = None) -> 'ArchiveConfig':
        """Load configuration overrides from a JSON file.

        Falls back to defaults when the file is absent or unreadable.
        """
        path = Path(config_path or DEFAULT_CONFIG_PATH)
        if not path.exists():
            return cls()
        try:
            values = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return cls()
        if not isinstance(values, dict):
            logger.warning(f"Ignoring config {path}: expected a JSON object")
            return cls()
        return cls.from_dict(values)
