# enricher/__init__.py
"""
Provider enrichers. Signal providers are listed in merge priority order.
"""
from utils.config import Config

from .abuseipdb_enricher import AbuseIPDBEnricher
from .base_enricher import BaseEnricher, ProviderError
from .dns_enricher import ReverseDNSEnricher
from .geoip_enricher import GeoIPEnricher
from .ipapi_enricher import IpApiEnricher
from .ipinfo_enricher import IPInfoEnricher
from .whois_enricher import WhoisEnricher, build_whois_record


def build_signal_enrichers(config=Config):
    """Signal providers: MaxMind, IPInfo, ip-api, AbuseIPDB. Merge order comes from PROVIDER_PRIORITY."""
    live = config.ALLOW_PUBLIC_FETCH
    timeout = config.PROVIDER_TIMEOUT
    return [
        GeoIPEnricher(account_id=config.MAXMIND_ACCOUNT_ID if live else None,
                      license_key=config.MAXMIND_LICENSE_KEY if live else None,
                      db_path=config.GEOIP_DB_PATH, timeout=timeout),
        IPInfoEnricher(api_key=config.IPINFO_API_KEY if live else None, timeout=timeout),
        IpApiEnricher(enabled=live and config.IPAPI_ENABLED, timeout=timeout),
        AbuseIPDBEnricher(api_key=config.ABUSEIPDB_API_KEY if live else None, timeout=timeout),
    ]


def build_whois_enrichers(config=Config):
    live = config.ALLOW_PUBLIC_FETCH
    return (
        WhoisEnricher(api_key=config.WHOISXML_API_KEY if live else None, timeout=config.PROVIDER_TIMEOUT),
        ReverseDNSEnricher(enabled=live, timeout=min(5.0, config.PROVIDER_TIMEOUT)),
    )


__all__ = [
    "AbuseIPDBEnricher",
    "BaseEnricher",
    "GeoIPEnricher",
    "IPInfoEnricher",
    "IpApiEnricher",
    "ProviderError",
    "ReverseDNSEnricher",
    "WhoisEnricher",
    "build_signal_enrichers",
    "build_whois_enrichers",
    "build_whois_record",
]
