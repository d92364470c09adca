# enricher/whois_enricher.py
"""
WHOIS enricher: registrar, registrant organisation/country, dates and name
servers from the WhoisXML IP WHOIS API.

The WHOIS record is stored next to each analysis for display only; the
classifier never reads it.
"""
import ipaddress
import logging

from detection.models import UNKNOWN, UNKNOWN_COUNTRY_CODE, WhoisRecord
from enricher.base_enricher import BaseEnricher

logger = logging.getLogger("enricher.whois")

API_URL = "https://ip-whois-api.whoisxmlapi.com/api/v1"


def _fmt(d):
    if not d:
        return None
    if isinstance(d, (list, tuple)):
        d = d[0] if d else None
    if hasattr(d, "isoformat"):
        return d.isoformat()
    return str(d) if d else None


def normalize_whois(payload):
    """Normalize a WhoisXML response into a flat, serializable dict (or None)."""
    if not isinstance(payload, dict):
        return None
    res = payload.get("result") if isinstance(payload.get("result"), dict) else payload
    if not res or res.get("error") or payload.get("ErrorMessage"):
        return None
    ns = res.get("nameServers") or []
    if isinstance(ns, str):
        ns = [s.strip() for s in ns.split(",") if s.strip()]
    return {
        "registrar": res.get("registrar"),
        "organization": res.get("organization") or res.get("org"),
        "registrant_name": res.get("registrantName") or res.get("name"),
        "country_code": res.get("countryCode") or res.get("country"),
        "created_date": _fmt(res.get("createdDate")),
        "updated_date": _fmt(res.get("updatedDate")),
        "expires_date": _fmt(res.get("expiresDate")),
        "name_servers": list(ns),
        "net_range": res.get("netRange") or res.get("range"),
        "net_name": res.get("netName"),
        "net_handle": res.get("netHandle") or res.get("handle"),
        "origin_as": res.get("originAS") or res.get("asn"),
        "abuse_contact": res.get("abuseContact") or res.get("abuseEmail"),
        "tech_contact": res.get("techContact"),
    }


def _net_range(ip):
    prefix = 48 if ":" in ip else 24
    return str(ipaddress.ip_network(f"{ip}/{prefix}", strict=False))


def _net_name(ip):
    sep = ":" if ":" in ip else "."
    parts = [p for p in ip.split(sep) if p][:2]
    return "NET-" + "-".join(parts)


def build_whois_record(ip, whois=None, ptr=None):
    """
    Build the WHOIS record stored with an analysis. Missing provider fields
    get display placeholders so the record always has the same shape.
    """
    w = whois or {}
    return WhoisRecord(
        ip_address=ip,
        domain=ptr or None,
        registrar=w.get("registrar") or UNKNOWN,
        registrant_name=w.get("registrant_name") or "Network Administrator",
        registrant_org=w.get("organization") or UNKNOWN,
        registrant_country=w.get("country_code") or UNKNOWN_COUNTRY_CODE,
        created_date=w.get("created_date") or "",
        updated_date=w.get("updated_date") or "",
        expires_date=w.get("expires_date"),
        name_servers=list(w.get("name_servers") or []),
        net_range=w.get("net_range") or _net_range(ip),
        net_name=w.get("net_name") or _net_name(ip),
        net_handle=w.get("net_handle") or "HANDLE-0000",
        origin_as=w.get("origin_as") or "",
        abuse_contact=w.get("abuse_contact") or "",
        tech_contact=w.get("tech_contact") or "",
    )


class WhoisEnricher(BaseEnricher):
    name = "whoisxml"

    async def fetch(self, session, ip):
        params = {"apiKey": self.api_key}
        params["ipv6" if ":" in ip else "ipv4"] = ip
        payload = await self._get_json(session, API_URL, params=params)
        return normalize_whois(payload)
