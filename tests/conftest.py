"""
Pytest configuration and shared fixtures
"""

import asyncio
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from analyzer import IpAnalyzer
from detection.models import NormalizedSignal
from enricher.base_enricher import BaseEnricher
from storage import MemoryStore
from utils.cache import MemoryCache


class FakeEnricher(BaseEnricher):
    """Enricher returning a canned result and counting calls."""

    def __init__(self, name, result=None, error=None, enabled=True, delay=0):
        super().__init__(api_key="test-key" if enabled else None, timeout=1.0)
        self.name = name
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    async def fetch(self, session, ip):
        self.calls.append(ip)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MemoryCache(ttl=300, clock=clock)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def nordvpn_signal():
    return NormalizedSignal(
        organization="NordVPN International",
        isp="NordVPN International",
        asn="AS212238",
        country="Netherlands",
        country_code="NL",
        city="Amsterdam",
        region="North Holland",
        timezone="Europe/Amsterdam",
        latitude=52.37,
        longitude=4.89,
    )


@pytest.fixture
def make_analyzer(store, cache):
    def _make(enrichers=None, whois=None, dns=None, **kwargs):
        return IpAnalyzer(store, cache, enrichers=enrichers or [], whois_enricher=whois,
                          dns_enricher=dns, **kwargs)
    return _make
