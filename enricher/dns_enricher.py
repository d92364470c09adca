# enricher/dns_enricher.py
"""
Reverse PTR lookup for an IP, stored as the WHOIS record's domain.
Uses dnspython; the blocking resolver runs in the default executor.
"""
import asyncio
import logging
from functools import partial

import dns.exception
import dns.resolver
import dns.reversename

from enricher.base_enricher import BaseEnricher

logger = logging.getLogger("enricher.dns")


def _resolve_ptr(ip, lifetime=5):
    try:
        rev = dns.reversename.from_address(ip)
        ans = dns.resolver.resolve(rev, "PTR", lifetime=lifetime)
    except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer, dns.resolver.NoNameservers):
        return None
    return ans[0].to_text().rstrip(".")


class ReverseDNSEnricher(BaseEnricher):
    name = "reverse_dns"

    def __init__(self, enabled=True, timeout=5.0):
        super().__init__(api_key=None, timeout=timeout)
        self._enabled = enabled

    @property
    def enabled(self):
        return self._enabled

    async def fetch(self, session, ip):
        loop = asyncio.get_running_loop()
        try:
            ptr = await loop.run_in_executor(None, partial(_resolve_ptr, ip, self.timeout))
        except dns.exception.Timeout:
            return None
        if ptr:
            logger.debug("Reverse PTR for %s -> %s", ip, ptr)
        return ptr
