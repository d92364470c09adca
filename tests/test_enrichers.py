"""
Tests for provider response parsing and the lookup() boundary
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from enricher import build_signal_enrichers, build_whois_enrichers, build_whois_record
from enricher.abuseipdb_enricher import AbuseIPDBEnricher, parse_abuseipdb
from enricher.base_enricher import ProviderError
from enricher.dns_enricher import ReverseDNSEnricher
from enricher.geoip_enricher import GeoIPEnricher, parse_city_response
from enricher.ipapi_enricher import parse_ipapi
from enricher.ipinfo_enricher import parse_ipinfo
from enricher.whois_enricher import WhoisEnricher, normalize_whois
from conftest import FakeEnricher


class TestParsers:

    def test_abuseipdb(self):
        sig = parse_abuseipdb({"data": {
            "ipAddress": "185.220.101.1",
            "abuseConfidenceScore": 100,
            "totalReports": 512,
            "usageType": "Data Center/Web Hosting/Transit",
            "isp": "Stiftung Erneuerbare Freiheit",
            "countryCode": "DE",
            "isTor": True,
        }})
        assert sig.abuse_score == 100
        assert sig.report_count == 512
        assert sig.tor_flag is True
        assert sig.hosting_flag is True
        assert sig.country_code == "DE"

    def test_abuseipdb_without_tor(self):
        sig = parse_abuseipdb({"data": {"abuseConfidenceScore": 0, "totalReports": 0,
                                        "usageType": "Fixed Line ISP", "isTor": False}})
        assert sig.tor_flag is None
        assert sig.hosting_flag is None
        assert sig.abuse_score == 0

    def test_abuseipdb_empty(self):
        assert parse_abuseipdb({}) is None
        assert parse_abuseipdb(None) is None

    def test_ipinfo(self):
        sig = parse_ipinfo({
            "ip": "8.8.8.8", "city": "Mountain View", "region": "California", "country": "US",
            "loc": "37.4056,-122.0775", "org": "AS15169 Google LLC", "timezone": "America/Los_Angeles",
            "privacy": {"vpn": False, "proxy": False, "tor": False, "hosting": True},
        })
        assert sig.organization == "Google LLC"
        assert sig.asn == "AS15169"
        assert sig.latitude == 37.4056
        assert sig.longitude == -122.0775
        assert sig.hosting_flag is True
        assert sig.vpn_flag is False

    def test_ipinfo_bogon(self):
        assert parse_ipinfo({"ip": "10.0.0.1", "bogon": True}) is None

    def test_ipapi(self):
        sig = parse_ipapi({
            "status": "success", "country": "Netherlands", "countryCode": "NL", "regionName": "North Holland",
            "city": "Amsterdam", "lat": 52.37, "lon": 4.89, "timezone": "Europe/Amsterdam",
            "isp": "M247 Ltd", "org": "NordVPN", "as": "AS9009 M247 Europe SRL",
            "proxy": True, "hosting": True,
        })
        assert sig.organization == "NordVPN"
        assert sig.isp == "M247 Ltd"
        assert sig.asn == "AS9009"
        assert sig.proxy_flag is True

    def test_ipapi_failure(self):
        assert parse_ipapi({"status": "fail", "message": "reserved range"}) is None

    def test_maxmind_response(self):
        resp = SimpleNamespace(
            country=SimpleNamespace(name="Germany", iso_code="DE"),
            city=SimpleNamespace(name="Frankfurt am Main"),
            subdivisions=SimpleNamespace(most_specific=SimpleNamespace(name="Hesse")),
            location=SimpleNamespace(latitude=50.11, longitude=8.68, time_zone="Europe/Berlin"),
            traits=SimpleNamespace(autonomous_system_number=24940, autonomous_system_organization="Hetzner Online GmbH",
                                   isp="Hetzner", is_anonymous_vpn=False, is_public_proxy=False,
                                   is_hosting_provider=True, is_tor_exit_node=False),
        )
        sig = parse_city_response(resp)
        assert sig.asn == "AS24940"
        assert sig.organization == "Hetzner Online GmbH"
        assert sig.region == "Hesse"
        # default False traits are not signals
        assert sig.vpn_flag is None
        assert sig.hosting_flag is True

    def test_whois(self):
        w = normalize_whois({"result": {"registrar": "RIPE NCC", "organization": "Example GmbH",
                                        "countryCode": "DE", "nameServers": "ns1.example.de, ns2.example.de",
                                        "netRange": "192.0.2.0/24"}})
        assert w["registrar"] == "RIPE NCC"
        assert w["name_servers"] == ["ns1.example.de", "ns2.example.de"]
        assert normalize_whois({"ErrorMessage": {"msg": "bad key"}}) is None


class TestWhoisRecord:

    def test_defaults(self):
        r = build_whois_record("192.0.2.15")
        assert r.registrar == "Unknown"
        assert r.registrant_country == "XX"
        assert r.net_range == "192.0.2.0/24"
        assert r.net_name == "NET-192-0"
        assert r.name_servers == []
        assert r.domain is None

    def test_ipv6_range(self):
        assert build_whois_record("2001:db8::1").net_range == "2001:db8::/48"

    def test_provider_values_and_ptr(self):
        r = build_whois_record("8.8.8.8", {"registrar": "ARIN", "name_servers": ["ns1.google.com"]},
                               ptr="dns.google")
        assert r.registrar == "ARIN"
        assert r.domain == "dns.google"
        assert r.name_servers == ["ns1.google.com"]


class TestLookup:

    def test_disabled_returns_none_without_fetch(self):
        p = FakeEnricher("x", result="data", enabled=False)
        assert asyncio.run(p.lookup(None, "8.8.8.8")) is None
        assert p.calls == []

    def test_success(self):
        p = FakeEnricher("x", result="data")
        assert asyncio.run(p.lookup(None, "8.8.8.8")) == "data"

    def test_error_returns_none(self):
        p = FakeEnricher("x", error=ProviderError("HTTP 429 from x"))
        assert asyncio.run(p.lookup(None, "8.8.8.8")) is None

    def test_timeout_returns_none(self):
        p = FakeEnricher("x", result="late", delay=1.0)
        p.timeout = 0.05
        assert asyncio.run(p.lookup(None, "8.8.8.8")) is None


class FakeConfig:
    ALLOW_PUBLIC_FETCH = True
    PROVIDER_TIMEOUT = 3.0
    MAXMIND_ACCOUNT_ID = None
    MAXMIND_LICENSE_KEY = None
    GEOIP_DB_PATH = None
    IPINFO_API_KEY = "ipinfo-token"
    IPAPI_ENABLED = False
    ABUSEIPDB_API_KEY = "abuse-key"
    WHOISXML_API_KEY = None


def test_build_signal_enrichers_priority_and_flags():
    enrichers = build_signal_enrichers(FakeConfig)
    assert [e.name for e in enrichers] == ["maxmind", "ipinfo", "ipapi", "abuseipdb"]
    assert [e.enabled for e in enrichers] == [False, True, False, True]


def test_public_fetch_switch_disables_everything():
    class Offline(FakeConfig):
        ALLOW_PUBLIC_FETCH = False
        IPAPI_ENABLED = True

    assert not any(e.enabled for e in build_signal_enrichers(Offline))
    assert not any(e.enabled for e in build_whois_enrichers(Offline))


def test_geoip_needs_both_credentials():
    assert GeoIPEnricher(account_id="123", license_key=None).enabled is False
    assert GeoIPEnricher(account_id="123", license_key="k").enabled is True


def _session_returning(status, payload=None):
    resp = MagicMock(status=status)
    resp.json = AsyncMock(return_value=payload)
    session = MagicMock()
    session.get.return_value.__aenter__ = AsyncMock(return_value=resp)
    session.get.return_value.__aexit__ = AsyncMock(return_value=False)
    return session


class TestHttpAdapters:

    def test_abuseipdb_request(self):
        session = _session_returning(200, {"data": {"abuseConfidenceScore": 12, "totalReports": 3}})
        sig = asyncio.run(AbuseIPDBEnricher(api_key="k").lookup(session, "8.8.8.8"))
        assert sig.abuse_score == 12
        _, kwargs = session.get.call_args
        assert kwargs["headers"]["Key"] == "k"
        assert kwargs["params"]["ipAddress"] == "8.8.8.8"

    def test_non_200_is_absorbed(self):
        p = AbuseIPDBEnricher(api_key="k")
        session = _session_returning(429)
        assert asyncio.run(p.lookup(session, "8.8.8.8")) is None

    def test_get_json_raises_provider_error(self):
        p = AbuseIPDBEnricher(api_key="k")
        with pytest.raises(ProviderError, match="503"):
            asyncio.run(p._get_json(_session_returning(503), "https://example.invalid"))

    def test_whois_uses_ipv6_param(self):
        p = WhoisEnricher(api_key="k")
        with patch.object(WhoisEnricher, "_get_json", AsyncMock(return_value={"registrar": "RIPE NCC"})) as get:
            w = asyncio.run(p.lookup(None, "2001:db8::1"))
        assert w["registrar"] == "RIPE NCC"
        assert get.call_args.kwargs["params"]["ipv6"] == "2001:db8::1"

    def test_reverse_dns(self):
        with patch("enricher.dns_enricher._resolve_ptr", return_value="dns.google"):
            assert asyncio.run(ReverseDNSEnricher().lookup(None, "8.8.8.8")) == "dns.google"

    def test_reverse_dns_disabled(self):
        with patch("enricher.dns_enricher._resolve_ptr") as resolve:
            assert asyncio.run(ReverseDNSEnricher(enabled=False).lookup(None, "8.8.8.8")) is None
        resolve.assert_not_called()
