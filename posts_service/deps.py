from functools import lru_cache
import logging
from .config import STORE_BACKEND
from .store import PostStore, MemoryPostStore
from .crud import SqlPostStore

logger = logging.getLogger(__name__)


@lru_cache
def get_store() -> PostStore:
    """Process-wide store, chosen once from STORE_BACKEND."""
    if STORE_BACKEND == 'memory':
        logger.info({'msg': 'store_selected', 'backend': 'memory'})
        return MemoryPostStore()
    logger.info({'msg': 'store_selected', 'backend': 'sql'})
    return SqlPostStore()
