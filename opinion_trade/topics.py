"""File-backed cache of topic (market) metadata."""

import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Union

import structlog

from opinion_trade.api import ApiClient
from opinion_trade.errors import TopicLookupError
from opinion_trade.types import Position, TopicInfo

log = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


def parse_topic_info(data: dict[str, Any]) -> TopicInfo:
    """
    Extract topic metadata from a topic API response.

    Raises:
        TopicLookupError: If the response has no topic data
    """
    result = data.get("result") or data.get("data") or data
    if not isinstance(result, dict) or not isinstance(result.get("data"), dict):
        raise TopicLookupError("Invalid topic data")

    topic = result["data"]
    return TopicInfo(
        topic_id=str(topic.get("topicId")),
        title=topic.get("title"),
        yes_token=topic.get("yesPos"),
        # NO token can't be derived from the YES token when absent
        no_token=topic.get("noPos") or None,
        status=topic.get("status"),
        chain_id=topic.get("chainId"),
        question_id=topic.get("questionId"),
        yes_price=topic.get("yesMarketPrice"),
        no_price=topic.get("noMarketPrice"),
        volume=topic.get("volume"),
        total_price=topic.get("totalPrice"),
        cutoff_time=topic.get("cutoffTime"),
        raw=topic,
    )


class TopicCache:
    """Caches topic metadata as one JSON file per topic."""

    def __init__(
        self,
        api: ApiClient,
        cache_dir: Union[str, Path],
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize topic cache.

        Args:
            api: API client used on cache misses
            cache_dir: Directory holding topic_<id>.json files
            ttl_seconds: Maximum age of a usable entry
            clock: Time source (seconds)
        """
        self.api = api
        self.cache_dir = Path(cache_dir)
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def get_cache_path(self, topic_id: Union[str, int]) -> Path:
        return self.cache_dir / f"topic_{topic_id}.json"

    def load_from_cache(self, topic_id: Union[str, int]) -> TopicInfo | None:
        """Return the cached entry, or None if it is missing, unreadable or expired."""
        cache_path = self.get_cache_path(topic_id)
        try:
            cached = json.loads(cache_path.read_text(encoding="utf-8"))
            age_ms = self._now_ms() - int(cached["timestamp"])
            info = TopicInfo.from_dict(cached["data"])
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.warning("topic_cache_unreadable", topic_id=str(topic_id), error=str(e))
            return None

        if age_ms >= self.ttl_seconds * 1000:
            log.info("topic_cache_expired", topic_id=str(topic_id), age_ms=age_ms)
            return None

        log.debug("topic_cache_hit", topic_id=str(topic_id))
        return info

    def save_to_cache(self, topic_id: Union[str, int], info: TopicInfo) -> None:
        """Write a topic entry to disk."""
        cached = {
            "timestamp": self._now_ms(),
            "topicId": str(topic_id),
            "data": info.to_dict(),
        }
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.get_cache_path(topic_id).write_text(
            json.dumps(cached, indent=2), encoding="utf-8"
        )
        log.debug("topic_cached", topic_id=str(topic_id))

    def get_topic_info(
        self, topic_id: Union[str, int], force_refresh: bool = False
    ) -> TopicInfo:
        """
        Get topic metadata, from cache when fresh.

        Args:
            topic_id: Topic ID
            force_refresh: Ignore the cache and fetch from the API

        Raises:
            ApiError: If the fetch fails
            TopicLookupError: If the response has no topic data
        """
        if not force_refresh:
            cached = self.load_from_cache(topic_id)
            if cached is not None:
                return cached

        info = parse_topic_info(self.api.get_topic(topic_id))
        self.save_to_cache(topic_id, info)
        return info

    def get_token_id(
        self,
        topic_id: Union[str, int],
        position: Union[Position, str],
        force_refresh: bool = False,
    ) -> str:
        """
        Resolve the outcome token ID for a topic side.

        Raises:
            TopicLookupError: If the position is invalid or has no token
        """
        try:
            resolved = (
                position
                if isinstance(position, Position)
                else Position(str(position).strip().upper())
            )
        except ValueError:
            raise TopicLookupError('Position must be "YES" or "NO"') from None

        info = self.get_topic_info(topic_id, force_refresh=force_refresh)
        token_id = info.token_for(resolved)
        if not token_id:
            raise TopicLookupError(
                f"{resolved.value} token ID not found for topic {topic_id}"
            )
        return str(token_id)

    def get_order_book_config(self, topic_id: Union[str, int]) -> dict[str, Any]:
        """Return the identifiers needed to query a topic's order book."""
        info = self.get_topic_info(topic_id)
        if not info.no_token:
            log.warning("topic_no_token_missing", topic_id=str(topic_id))
        return {
            "question_id": info.question_id,
            "tokens": {Position.YES.value: info.yes_token, Position.NO.value: info.no_token},
            "chain_id": info.chain_id,
            "title": info.title,
        }

    def clear_cache(self, topic_id: Union[str, int]) -> None:
        """Remove one topic's cache entry if present."""
        self.get_cache_path(topic_id).unlink(missing_ok=True)
        log.info("topic_cache_cleared", topic_id=str(topic_id))

    def _cache_files(self) -> list[Path]:
        if not self.cache_dir.is_dir():
            return []
        return sorted(self.cache_dir.glob("topic_*.json"))

    def clear_all_cache(self) -> None:
        """Remove every topic cache entry."""
        for path in self._cache_files():
            path.unlink(missing_ok=True)
        log.info("topic_cache_cleared_all", cache_dir=str(self.cache_dir))

    def list_cached_topics(self) -> list[dict[str, Any]]:
        """List cached topics with their capture time and age in minutes."""
        topics = []
        for path in self._cache_files():
            try:
                cached = json.loads(path.read_text(encoding="utf-8"))
                timestamp = int(cached["timestamp"])
                title = cached["data"].get("title")
                topic_id = cached["topicId"]
            except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
                log.warning("topic_cache_unreadable", path=str(path), error=str(e))
                continue
            topics.append(
                {
                    "topic_id": topic_id,
                    "title": title,
                    "timestamp": datetime.fromtimestamp(
                        timestamp / 1000, tz=timezone.utc
                    ).isoformat(),
                    "age": (self._now_ms() - timestamp) // (1000 * 60),
                }
            )
        return topics
