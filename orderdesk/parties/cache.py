"""
List caching for customers and suppliers.

Keys embed a per-kind version number; bumping the version invalidates every
cached list of that kind at once, on any cache backend.
"""
import hashlib
import logging

from django.core.cache import cache

logger = logging.getLogger(__name__)

CUSTOMER_LIST = 'customer_list'
SUPPLIER_LIST = 'supplier_list'

PARTY_LIST_CACHE_TTL = 300  # 5 minutes


def _version_key(kind):
    return f"{kind}:version"


def get_list_cache_key(kind: str, search: str = '') -> str:
    version = cache.get(_version_key(kind))
    if version is None:
        cache.add(_version_key(kind), 1, None)
        version = cache.get(_version_key(kind), 1)
    digest = hashlib.md5(search.encode()).hexdigest()
    return f"{kind}:v{version}:{digest}"


def invalidate_list_cache(kind: str):
    try:
        cache.add(_version_key(kind), 1, None)
        cache.incr(_version_key(kind))
    except ValueError as e:
        logger.warning(f"Could not invalidate {kind} cache: {str(e)}")
        return
    logger.debug(f"Invalidated {kind} cache")
