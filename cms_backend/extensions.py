"""
Shared client constructors — Redis, OpenAI.

Importing this module never opens a connection: redis-py connects on first
command, and the OpenAI client is built per app by create_app().
"""
import logging
import redis

from cms_backend.config import (
    REDIS_URL,
    OPENAI_API_KEY, OPENAI_API_BASE, OPENAI_TIMEOUT, OPENAI_MAX_RETRIES,
)

logger = logging.getLogger('cms.extensions')

# ── Redis ─────────────────────────────────────────────────────────────────────
redis_client = redis.from_url(REDIS_URL, decode_responses=True)


# ── OpenAI ────────────────────────────────────────────────────────────────────
def make_openai_client(api_key=None, base_url=None, timeout=None, max_retries=None):
    """Build an OpenAI client from explicit args, falling back to env config.

    Returns None when no API key is configured.
    """
    api_key = api_key or OPENAI_API_KEY
    if not api_key:
        logger.warning("OPENAI_API_KEY not set — AI endpoints will fail")
        return None

    from openai import OpenAI
    client = OpenAI(
        api_key=api_key,
        base_url=base_url or OPENAI_API_BASE or None,
        timeout=timeout if timeout is not None else OPENAI_TIMEOUT,
        max_retries=max_retries if max_retries is not None else OPENAI_MAX_RETRIES,
    )
    logger.info("OpenAI client initialized")
    return client
