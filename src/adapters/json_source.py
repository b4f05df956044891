"""JSON dataset adapter.

Implements the core DatasetSource port by reading the tagged messages file
and the location cache from local paths or HTTP(S) URLs.
"""

from __future__ import annotations

import http.client
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional

from core.models import Dataset, Message

LOGGER = logging.getLogger(__name__)


class DatasetLoadError(RuntimeError):
    """Raised when the messages or the location cache cannot be loaded."""


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Relies on the Python 3.11 `fromisoformat`, which accepts any ISO-8601
    fraction length.
    """

    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_messages(records: Iterable[Any]) -> List[Message]:
    """Build messages from raw records, assigning stable ids in source order.

    Records that are not objects or carry no parseable date are skipped.
    """

    messages: List[Message] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            LOGGER.warning("Skipping record %s: not an object", index)
            continue
        parsed_date = parse_date(record.get("date"))
        if parsed_date is None:
            LOGGER.warning("Skipping record %s: unparseable date %r", index, record.get("date"))
            continue
        raw_locations = record.get("locations") or []
        if not isinstance(raw_locations, list):
            LOGGER.warning("Record %s has non-list locations %r", index, raw_locations)
            raw_locations = []
        source_id = record.get("id")
        cleaned_text = record.get("cleaned_text")
        messages.append(
            Message(
                message_id=len(messages),
                text=str(record.get("text") or ""),
                cleaned_text=str(cleaned_text) if cleaned_text is not None else None,
                channel=str(record.get("channel") or ""),
                date=parsed_date,
                locations=tuple(raw_locations),
                source_id=str(source_id) if source_id is not None else None,
            )
        )
    return messages


def _is_url(location: str) -> bool:
    return urllib.parse.urlparse(location).scheme in {"http", "https"}


def _with_cache_buster(url: str) -> str:
    separator = "&" if urllib.parse.urlparse(url).query else "?"
    return f"{url}{separator}t={int(time.time() * 1000)}"


class JsonDatasetSource:
    """Load messages and the location cache from two JSON documents."""

    def __init__(
        self,
        messages_uri: str,
        cache_uri: str,
        timeout: float = 30.0,
        cache_bust: bool = True,
    ) -> None:
        self._messages_uri = messages_uri
        self._cache_uri = cache_uri
        self._timeout = timeout
        self._cache_bust = cache_bust

    def _read(self, location: str) -> Any:
        try:
            if _is_url(location):
                url = _with_cache_buster(location) if self._cache_bust else location
                with urllib.request.urlopen(url, timeout=self._timeout) as response:
                    payload = response.read().decode("utf-8")
            else:
                payload = Path(location).read_text(encoding="utf-8")
            return json.loads(payload)
        except urllib.error.HTTPError as exc:
            raise DatasetLoadError(f"Failed to load {location}: HTTP {exc.code} {exc.reason}") from exc
        except urllib.error.URLError as exc:
            raise DatasetLoadError(f"Failed to load {location}: {exc.reason}") from exc
        except http.client.HTTPException as exc:
            raise DatasetLoadError(f"Failed to load {location}: {exc!r}") from exc
        except OSError as exc:
            raise DatasetLoadError(f"Failed to load {location}: {exc.strerror or exc}") from exc
        except json.JSONDecodeError as exc:
            raise DatasetLoadError(f"Invalid JSON in {location}: {exc.msg}") from exc
        except UnicodeDecodeError as exc:
            raise DatasetLoadError(f"{location} is not valid UTF-8") from exc

    def load(self) -> Dataset:
        """Read both documents; any failure raises DatasetLoadError."""

        raw_messages = self._read(self._messages_uri)
        raw_cache = self._read(self._cache_uri)
        if not isinstance(raw_messages, list):
            raise DatasetLoadError(f"{self._messages_uri} must contain a JSON array")
        if not isinstance(raw_cache, dict):
            raise DatasetLoadError(f"{self._cache_uri} must contain a JSON object")

        messages = parse_messages(raw_messages)
        LOGGER.info("Loaded %s messages and %s cached locations", len(messages), len(raw_cache))
        return Dataset(messages=messages, location_cache=raw_cache)
