from teamquiz.core.config import settings
from teamquiz.core.logging import get_logger
from teamquiz.core.redis_manager import close_redis, get_redis
from teamquiz.store.base import DocumentStore
from teamquiz.store.memory import MemoryDocumentStore
from teamquiz.store.redis_store import RedisDocumentStore

logger = get_logger(__name__)

_store: DocumentStore | None = None


async def get_store() -> DocumentStore:
    """Returns the singleton document store selected by STORE_BACKEND."""
    global _store
    if _store is None:
        if settings.STORE_BACKEND == "redis":
            _store = RedisDocumentStore(await get_redis(), prefix=settings.STORE_KEY_PREFIX)
        else:
            _store = MemoryDocumentStore()
        logger.info("Document store ready: %s", settings.STORE_BACKEND)
    return _store


async def close_store() -> None:
    global _store
    if _store is not None:
        await _store.close()
        _store = None
    await close_redis()
