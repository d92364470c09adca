# enricher/ipinfo_enricher.py
"""
ipinfo.io enricher. `org` comes as "AS15169 Google LLC"; `loc` as "lat,lon".
Paid plans add a `privacy` block with vpn/proxy/tor/hosting booleans.
"""
import logging

from detection.models import NormalizedSignal
from detection.normalizer import parse_asn_org, to_bool, to_float
from enricher.base_enricher import BaseEnricher

logger = logging.getLogger("enricher.ipinfo")

API_URL = "https://ipinfo.io/{ip}"


def _split_loc(loc):
    if not loc or "," not in loc:
        return None, None
    lat, lon = loc.split(",", 1)
    return to_float(lat), to_float(lon)


def parse_ipinfo(data):
    if not isinstance(data, dict) or not data or data.get("bogon") or data.get("error"):
        return None
    asn, org = parse_asn_org(data.get("org"))
    asn_block = data.get("asn")
    if isinstance(asn_block, dict):
        asn = asn or asn_block.get("asn")
        org = org or asn_block.get("name")
    privacy = data.get("privacy") or {}
    lat, lon = _split_loc(data.get("loc"))
    return NormalizedSignal(
        organization=org,
        asn=asn,
        country_code=data.get("country") or None,
        city=data.get("city") or None,
        region=data.get("region") or None,
        timezone=data.get("timezone") or None,
        latitude=lat,
        longitude=lon,
        vpn_flag=to_bool(privacy.get("vpn")),
        proxy_flag=to_bool(privacy.get("proxy")),
        tor_flag=to_bool(privacy.get("tor")),
        hosting_flag=to_bool(privacy.get("hosting")),
    )


class IPInfoEnricher(BaseEnricher):
    name = "ipinfo"

    async def fetch(self, session, ip):
        data = await self._get_json(session, API_URL.format(ip=ip), params={"token": self.api_key})
        return parse_ipinfo(data)
