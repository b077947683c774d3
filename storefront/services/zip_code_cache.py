import json

import redis
from redis.exceptions import RedisError

from storefront.domain.errors import UpstreamUnavailable
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, REDIS_SOCKET_TIMEOUT
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "zip_codes:"


class ZipCodeCache:
    """
    Cache-aside store for ZIP lookups.
    zip_codes:<zip> -> {"city": ..., "state": ...} as JSON, no expiry.
    """

    def __init__(self, client: redis.Redis | None = None, url: str | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
            socket_timeout=REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=REDIS_SOCKET_TIMEOUT,
        )

    def get(self, zip_code: str) -> dict | None:
        try:
            raw = self._get(KEY_PREFIX + zip_code)
        except RedisError as e:
            logger.error(f"Cache read for ZIP {zip_code} failed: {e}")
            raise UpstreamUnavailable("cache is unavailable") from e

        if raw is None:
            return None

        try:
            location = json.loads(raw)
            return {"city": location["city"], "state": location["state"]}
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Cache entry for ZIP {zip_code} is corrupt: {raw!r}")
            raise UpstreamUnavailable("cache returned an invalid entry") from e

    def set(self, zip_code: str, location: dict) -> None:
        payload = json.dumps({"city": location["city"], "state": location["state"]})
        try:
            self._set(KEY_PREFIX + zip_code, payload)
        except RedisError as e:
            logger.error(f"Cache write for ZIP {zip_code} failed: {e}")
            raise UpstreamUnavailable("cache is unavailable") from e

    @redis_retry()
    def _get(self, key: str) -> str | None:
        return self.redis.get(key)

    @redis_retry()
    def _set(self, key: str, value: str) -> None:
        # SET zip_codes:73301 '{"city": "Austin", "state": "TX"}' (no EX)
        self.redis.set(name=key, value=value)
