"""Per-account import serialization via a Redis lock.

Rows of one batch must observe the rows inserted before them, and two batches
for the same account must not interleave their duplicate checks. The lock key
is `import-lock:{account_id}`; it expires on its own if a worker dies.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from redis.exceptions import LockError

from config.settings import settings
from src.pf_common.errors import ImportInProgressError
from src.pf_common.redis_client import get_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def account_import_lock(account_id: int) -> AsyncIterator[None]:
    redis = await get_redis()
    lock = redis.lock(
        f"import-lock:{account_id}",
        timeout=settings.IMPORT_LOCK_TIMEOUT_SECONDS,
        blocking_timeout=settings.IMPORT_LOCK_WAIT_SECONDS,
    )
    if not await lock.acquire():
        raise ImportInProgressError(account_id)
    try:
        yield
    finally:
        try:
            await lock.release()
        except LockError:
            # Expired mid-import; another worker may already hold it
            logger.warning("Import lock for account %d expired before release", account_id)
