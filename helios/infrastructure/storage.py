import redis
import structlog
from typing import Optional

from ..application.use_cases.session_store import IDurableStorage
from ..config import settings

logger = structlog.get_logger()

_redis_client: Optional[redis.Redis] = None

def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True
        )
    return _redis_client


class RedisStorage(IDurableStorage):
    """Долговременное хранилище сессии в Redis, без TTL.

    Если Redis недоступен, чтение возвращает None, а запись пропускается.
    """

    def get_item(self, key: str) -> str | None:
        try:
            return get_redis().get(key)
        except Exception as e:
            logger.warning("storage_read_failed", key=key, error=str(e))
            return None

    def set_item(self, key: str, value: str) -> None:
        try:
            get_redis().set(key, value)
        except Exception as e:
            logger.warning("storage_write_failed", key=key, error=str(e))

    def remove_item(self, key: str) -> None:
        try:
            get_redis().delete(key)
        except Exception as e:
            logger.warning("storage_delete_failed", key=key, error=str(e))


class InMemoryStorage(IDurableStorage):
    def __init__(self, items: dict[str, str] | None = None):
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


def build_storage(backend: str) -> IDurableStorage:
    if backend == "redis":
        return RedisStorage()
    if backend == "memory":
        return InMemoryStorage()
    raise ValueError(f"Unknown storage backend: {backend}")
