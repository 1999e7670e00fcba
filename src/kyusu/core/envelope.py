"""Parser for the export's JavaScript data files.

Each data file looks like::

    window.YTD.tweets.part0 = [
      { "tweet" : { ... } },
      { "tweet" : { ... } }
    ]

i.e. an assignment line followed by a JSON array of single-key wrapper
objects. The parser drops the assignment, parses the array and unwraps each
element through the wrapper key.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Union

import orjson

from ..errors import ArchiveError

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class Single:
    """A data file holding exactly one record."""
    value: Dict[str, Any]

    def as_list(self) -> List[Dict[str, Any]]:
        return [self.value]


@dataclass(frozen=True)
class Many:
    """A data file holding several records."""
    values: List[Dict[str, Any]]

    def as_list(self) -> List[Dict[str, Any]]:
        return list(self.values)


EnvelopeResult = Union[Single, Many]


def _repair(text: str) -> str:
    lines = _LINE_BREAK.split(text)
    # The first line carries the `window.YTD... = [` assignment; the bracket goes with it.
    lines[0] = "["
    return " ".join(lines)


def parse_envelope(text: str, file_name: str = "unknown") -> EnvelopeResult:
    """Repair and unwrap the contents of one export data file.

    Raises:
        ArchiveError: ``FORMAT_REPAIR`` naming ``file_name`` when the content
            is empty, not JSON, not a non-empty array, or not uniformly wrapped.
    """
    if not text or not text.strip():
        raise ArchiveError.format_repair(file_name, "Empty JSON content")

    try:
        parsed = orjson.loads(_repair(text))
    except orjson.JSONDecodeError as e:
        raise ArchiveError.format_repair(file_name, "invalid JSON", cause=e) from e

    if not isinstance(parsed, list) or not parsed:
        raise ArchiveError.format_repair(file_name, "Parsed JSON is not a valid array or is empty")

    first = parsed[0]
    if not isinstance(first, dict) or not first:
        raise ArchiveError.format_repair(file_name, "Array elements are not wrapper objects")
    key = next(iter(first))

    records = []
    for index, item in enumerate(parsed):
        if not isinstance(item, dict) or key not in item:
            raise ArchiveError.format_repair(
                file_name, f"Element {index} is not wrapped in '{key}'"
            )
        records.append(dict(item[key]) if isinstance(item[key], dict) else item[key])

    if len(records) == 1:
        return Single(records[0])
    return Many(records)


def load_records(text: str, file_name: str = "unknown") -> List[Dict[str, Any]]:
    """Like :func:`parse_envelope` but always returns a list."""
    return parse_envelope(text, file_name).as_list()


def dump_envelope(records: List[Dict[str, Any]], wrapper_key: str,
                  variable: str = "window.YTD.data.part0") -> str:
    """Serialize records back into the export dialect."""
    body = orjson.dumps([{wrapper_key: record} for record in records],
                        option=orjson.OPT_INDENT_2).decode("utf-8")
    # orjson starts the array with "[\n"; the assignment line takes the bracket.
    return f"{variable} = {body}"
