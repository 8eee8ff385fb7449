# jobboard/services/resume_match.py
"""
Async client for the external resume match service.

POSTs ``{resumeData, jobDetails}`` to ``RESUME_MATCH_URL`` and returns the
JSON match payload untouched; callers store it opaquely. Retries with
linear backoff. Results are cached in Redis keyed by a hash of the request;
cache outages are logged and treated as misses.

Env configuration:
- RESUME_MATCH_URL: required
- RESUME_MATCH_API_KEY: optional, sent as Authorization: Bearer <key>
- RESUME_MATCH_TIMEOUT_SEC / RESUME_MATCH_RETRIES / RESUME_MATCH_BACKOFF_FACTOR
"""

import asyncio
import logging
from typing import Any, Dict

import httpx

from jobboard.core.config import settings
from jobboard.utils import match_cache

logger = logging.getLogger(__name__)


class ResumeMatchError(RuntimeError):
    pass


async def _post_once(client: httpx.AsyncClient, body: Dict[str, Any]) -> Dict[str, Any]:
    headers = {"Content-Type": "application/json"}
    if settings.RESUME_MATCH_API_KEY:
        headers["Authorization"] = f"Bearer {settings.RESUME_MATCH_API_KEY}"
    resp = await client.post(str(settings.RESUME_MATCH_URL), json=body, headers=headers,
                             timeout=float(settings.RESUME_MATCH_TIMEOUT_SEC))
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict):
        raise ResumeMatchError("resume match service returned a non-object payload")
    return data


async def analyze_match(resume_data: Dict[str, Any], job_details: Dict[str, Any]) -> Dict[str, Any]:
    if not settings.RESUME_MATCH_URL:
        raise ResumeMatchError("RESUME_MATCH_URL is not configured")

    body = {"resumeData": resume_data, "jobDetails": job_details}

    try:
        cached = await match_cache.get_cached(body)
    except Exception:
        logger.warning("Resume match cache unavailable; calling service directly", exc_info=True)
        cached = None
    if cached is not None:
        return cached

    retries = int(settings.RESUME_MATCH_RETRIES)
    backoff = float(settings.RESUME_MATCH_BACKOFF_FACTOR)
    async with httpx.AsyncClient() as client:
        for attempt in range(1, retries + 2):
            try:
                result = await _post_once(client, body)
                break
            except (httpx.HTTPError, ValueError) as exc:
                if attempt <= retries:
                    logger.warning("Resume match attempt %s failed: %s", attempt, exc)
                    await asyncio.sleep(backoff * attempt)
                    continue
                raise ResumeMatchError("Failed to analyze resume match") from exc

    try:
        await match_cache.set_cached(body, result)
    except Exception:
        logger.warning("Could not cache resume match result", exc_info=True)
    return result
