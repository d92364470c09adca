# analyzer.py
"""
IP analysis: validate -> cache -> provider fan-out -> classify (or mock) ->
persist -> cache.

All signal providers are queried concurrently and every call is awaited
(success or failure) before classification; each provider contributes
different fields, so there is no short-circuit on the first answer.
Concurrent misses for one IP may fetch twice; that is accepted.
"""
import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

import aiohttp

from detection.classifier import classify
from detection.mock_generator import mock_analysis
from detection.models import IpAnalysis, WhoisRecord
from detection.normalizer import merge_signals, order_by_priority, with_defaults
from detection.provider_lists import DEFAULT_LISTS
from enricher import build_signal_enrichers, build_whois_enrichers, build_whois_record
from enricher.base_enricher import client_timeout
from storage.base import StorageError
from utils.ip_utils import InvalidIPError, ip_version

logger = logging.getLogger("analyzer")

MAX_BULK_IPS = 100


@dataclass
class AnalysisResult:
    analysis: IpAnalysis
    whois: Optional[WhoisRecord]
    cached: bool
    source: str  # "live" or "mock"

    def to_dict(self):
        return {
            "analysis": self.analysis.to_dict(),
            "whois": self.whois.to_dict() if self.whois else None,
            "cached": self.cached,
            "source": self.source,
        }

    def cache_entry(self):
        return {
            "analysis": self.analysis.to_dict(),
            "whois": self.whois.to_dict() if self.whois else None,
            "source": self.source,
            "cachedAt": time.time(),
        }

    @classmethod
    def from_cache_entry(cls, entry):
        whois = entry.get("whois")
        return cls(
            analysis=IpAnalysis.from_dict(entry["analysis"]),
            whois=WhoisRecord.from_dict(whois) if whois else None,
            cached=True,
            source=entry.get("source", "live"),
        )


class IpAnalyzer:
    def __init__(self, storage, cache, enrichers=None, whois_enricher=None, dns_enricher=None,
                 provider_lists=DEFAULT_LISTS, demo_mode=False, timeout=8.0):
        self.storage = storage
        self.cache = cache
        self.enrichers = list(enrichers or [])
        self.whois_enricher = whois_enricher
        self.dns_enricher = dns_enricher
        self.provider_lists = provider_lists
        self.demo_mode = demo_mode
        self.timeout = timeout

    @classmethod
    def from_config(cls, config, storage, cache, provider_lists=DEFAULT_LISTS):
        whois_enricher, dns_enricher = build_whois_enrichers(config)
        return cls(
            storage=storage,
            cache=cache,
            enrichers=build_signal_enrichers(config),
            whois_enricher=whois_enricher,
            dns_enricher=dns_enricher,
            provider_lists=provider_lists,
            demo_mode=config.DEMO_MODE,
            timeout=config.PROVIDER_TIMEOUT,
        )

    def provider_status(self):
        providers = list(self.enrichers) + [p for p in (self.whois_enricher, self.dns_enricher) if p]
        return {p.name: p.enabled for p in providers}

    # -------------------- cache helpers --------------------
    def _cache_get(self, ip):
        try:
            entry = self.cache.get(ip)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", ip, e)
            return None
        if not entry:
            return None
        try:
            return AnalysisResult.from_cache_entry(entry)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed cache entry for %s: %s", ip, e)
            return None

    def _cache_set(self, ip, result):
        try:
            self.cache.set(ip, result.cache_entry())
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", ip, e)

    # -------------------- provider fan-out --------------------
    async def _gather(self, ip):
        async with aiohttp.ClientSession(timeout=client_timeout(self.timeout)) as session:
            tasks = [p.lookup(session, ip) for p in self.enrichers]
            extra = [p.lookup(session, ip) if p else _none() for p in (self.whois_enricher, self.dns_enricher)]
            results = await asyncio.gather(*tasks, *extra)
        signals = results[:len(tasks)]
        whois_data, ptr = results[len(tasks):]
        return signals, whois_data, ptr

    # -------------------- analysis --------------------
    async def analyze(self, ip):
        version = ip_version(ip)  # raises InvalidIPError before any provider call

        cached = self._cache_get(ip)
        if cached is not None:
            logger.info("Cache hit for %s", ip)
            return cached

        signals, whois_data, ptr = [], None, None
        if not self.demo_mode:
            signals, whois_data, ptr = await self._gather(ip)

        live = [s for s in signals if s is not None and not s.is_empty()]
        if live:
            by_name = {p.name: s for p, s in zip(self.enrichers, signals)}
            signal = merge_signals(order_by_priority(by_name))
            detection = classify(signal, ip, self.provider_lists)
            analysis = IpAnalysis.build(ip, version, with_defaults(signal), detection)
            source = "live"
        else:
            logger.info("No live provider data for %s; using mock analysis", ip)
            analysis = mock_analysis(ip, version, self.provider_lists)
            source = "mock"

        now = datetime.now(timezone.utc)
        analysis = analysis.stamped(id=str(uuid.uuid4()), analyzed_at=now)
        whois = build_whois_record(ip, whois_data, ptr)
        whois = replace(whois, id=str(uuid.uuid4()), fetched_at=now)

        # persistence is best-effort: the caller still gets the computed result
        try:
            analysis = self.storage.create_analysis(analysis)
            whois = self.storage.create_whois_record(whois)
        except StorageError as e:
            logger.error("Failed to persist analysis for %s: %s", ip, e)

        result = AnalysisResult(analysis=analysis, whois=whois, cached=False, source=source)
        self._cache_set(ip, result)
        logger.info("Analyzed %s (%s): score=%d level=%s", ip, source, analysis.risk_score, analysis.threat_level)
        return result

    async def analyze_many(self, ips):
        """
        Analyze several IPs concurrently. Returns (results, errors) where
        errors is a list of {"ipAddress", "error"} for rejected inputs.
        """
        ips = list(ips)
        if len(ips) > MAX_BULK_IPS:
            raise ValueError(f"At most {MAX_BULK_IPS} IPs per request")
        outcomes = await asyncio.gather(*(self.analyze(ip) for ip in ips), return_exceptions=True)
        results, errors = [], []
        for ip, out in zip(ips, outcomes):
            if isinstance(out, InvalidIPError):
                errors.append({"ipAddress": ip, "error": str(out)})
            elif isinstance(out, BaseException):
                raise out
            else:
                results.append(out)
        return results, errors

    def delete_analysis(self, analysis_id):
        analysis = self.storage.get_analysis(analysis_id)
        if analysis is None:
            return False
        deleted = self.storage.delete_analysis(analysis_id)
        if deleted:
            try:
                self.cache.delete(analysis.ip_address)
            except Exception as e:
                logger.warning("Cache evict failed for %s: %s", analysis.ip_address, e)
        return deleted


async def _none():
    return None
