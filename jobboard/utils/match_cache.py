# jobboard/utils/match_cache.py
import json
import hashlib
from typing import Any, Optional

import redis.asyncio as redis
from jobboard.core.config import settings

_redis_client: Optional[redis.Redis] = None

KEY_PREFIX = "resume-match:"


def _get_redis():
    global _redis_client
    if _redis_client is None:
        # settings.REDIS_URL is expected like redis://redis:6379/0
        _redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis_client


def make_cache_key(payload: Any) -> str:
    # stable JSON stringify
    s = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    return KEY_PREFIX + hashlib.sha256(s.encode("utf-8")).hexdigest()


async def get_cached(payload: Any) -> Optional[dict]:
    client = _get_redis()
    val = await client.get(make_cache_key(payload))
    if not val:
        return None
    try:
        return json.loads(val)
    except ValueError:
        return None


async def set_cached(payload: Any, value: dict, expire: Optional[int] = None):
    client = _get_redis()
    ttl = expire if expire is not None else settings.RESUME_MATCH_CACHE_TTL
    await client.set(make_cache_key(payload), json.dumps(value, ensure_ascii=False, default=str), ex=ttl)
