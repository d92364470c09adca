# enricher/base_enricher.py
"""
Common boundary for provider enrichers.

Subclasses implement fetch(session, ip). Callers use lookup(), which never
raises: a missing credential, timeout, HTTP error or unparsable body all
come back as None.
"""
import asyncio
import logging

import aiohttp

logger = logging.getLogger("enricher")


class ProviderError(Exception):
    """Raised inside fetch() for non-2xx answers or provider-reported errors."""


class BaseEnricher:
    name = "base"

    def __init__(self, api_key=None, timeout=8.0):
        self.api_key = api_key
        self.timeout = timeout

    @property
    def enabled(self):
        return bool(self.api_key)

    async def fetch(self, session, ip):
        raise NotImplementedError("fetch method must be implemented in subclass")

    async def lookup(self, session, ip):
        if not self.enabled:
            logger.debug("%s: not configured, skipping %s", self.name, ip)
            return None
        try:
            result = await asyncio.wait_for(self.fetch(session, ip), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("%s: timed out after %.1fs for %s", self.name, self.timeout, ip)
            return None
        except Exception as e:
            logger.warning("%s lookup failed for %s: %s", self.name, ip, e)
            return None
        if result is None:
            logger.info("%s: no data for %s", self.name, ip)
        else:
            logger.info("%s: success for %s", self.name, ip)
        return result

    async def _get_json(self, session, url, **kwargs):
        async with session.get(url, **kwargs) as resp:
            if resp.status != 200:
                raise ProviderError(f"HTTP {resp.status} from {self.name}")
            # some providers send JSON with a text/plain content type
            return await resp.json(content_type=None)


def client_timeout(seconds):
    return aiohttp.ClientTimeout(total=seconds)
