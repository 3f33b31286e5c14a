import redis
import logging
from typing import Optional
import os

from pydantic import ValidationError

from tradecost.core.entities.valuation import FrozenClose
from tradecost.core.interfaces.freeze_store import IFreezeStore

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "nc_closed_snap"


class RedisFreezeStore(IFreezeStore):
    """
    Closed-leg snapshots in Redis. First write wins via SET NX,
    so concurrent workers agree on a single snapshot per key.
    Snapshots never expire.
    """

    def __init__(self, redis_url: Optional[str] = None, prefix: Optional[str] = None, client=None):
        self.redis_url = redis_url or os.getenv("REDIS_URL")
        self.prefix = prefix or os.getenv("FREEZE_KEY_PREFIX", DEFAULT_PREFIX)
        self.client = client
        if self.client is None and self.redis_url:
            try:
                self.client = redis.from_url(self.redis_url, decode_responses=True)
                # Test connection
                self.client.ping()
                logger.info("Connected to Redis for closed-trade snapshots.")
            except (redis.RedisError, ValueError) as e:
                logger.warning(f"Failed to connect to Redis: {e}. Closed trades will not be frozen.")
                self.client = None
        elif self.client is None:
            logger.info("REDIS_URL not set. Closed trades will not be frozen.")

    @property
    def available(self) -> bool:
        return self.client is not None

    def _key(self, key: str) -> str:
        return f"{self.prefix}|{key}"

    def get(self, key: str) -> Optional[FrozenClose]:
        if not self.client:
            return None
        try:
            data = self.client.get(self._key(key))
            if data:
                return FrozenClose.model_validate_json(data)
            return None
        except redis.RedisError as e:
            logger.warning(f"Redis get error: {e}")
            return None
        except ValidationError as e:
            logger.warning(f"Discarding unreadable snapshot {key}: {e}")
            return None

    def put_if_absent(self, key: str, value: FrozenClose) -> FrozenClose:
        if not self.client:
            return value
        try:
            created = self.client.set(self._key(key), value.model_dump_json(), nx=True)
        except redis.RedisError as e:
            logger.warning(f"Redis set error: {e}")
            return value
        if created:
            return value
        # Lost the race or already frozen: the stored snapshot is authoritative
        existing = self.get(key)
        return existing if existing is not None else value

    def delete(self, key: str):
        if not self.client:
            return
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as e:
            logger.warning(f"Redis delete error: {e}")
