# enricher/ipapi_enricher.py
"""
ip-api.com enricher (free endpoint, no key). Disabled unless IPAPI_ENABLED is
set, since it is a live public fetch. `proxy` covers proxies, VPNs and Tor
exits; `hosting` flags datacenter ranges.
"""
import logging

from detection.models import NormalizedSignal
from detection.normalizer import parse_asn_org, to_bool, to_float
from enricher.base_enricher import BaseEnricher

logger = logging.getLogger("enricher.ipapi")

API_URL = "http://ip-api.com/json/{ip}"
FIELDS = "status,message,country,countryCode,regionName,city,lat,lon,timezone,isp,org,as,proxy,hosting"


def parse_ipapi(data):
    if not isinstance(data, dict) or data.get("status") != "success":
        if isinstance(data, dict) and data.get("message"):
            logger.debug("ip-api refused lookup: %s", data.get("message"))
        return None
    asn, _ = parse_asn_org(data.get("as"))
    return NormalizedSignal(
        organization=data.get("org") or None,
        isp=data.get("isp") or None,
        asn=asn,
        country=data.get("country") or None,
        country_code=data.get("countryCode") or None,
        city=data.get("city") or None,
        region=data.get("regionName") or None,
        timezone=data.get("timezone") or None,
        latitude=to_float(data.get("lat")),
        longitude=to_float(data.get("lon")),
        proxy_flag=to_bool(data.get("proxy")),
        hosting_flag=to_bool(data.get("hosting")),
    )


class IpApiEnricher(BaseEnricher):
    name = "ipapi"

    def __init__(self, enabled=False, timeout=8.0):
        super().__init__(api_key=None, timeout=timeout)
        self._enabled = enabled

    @property
    def enabled(self):
        return self._enabled

    async def fetch(self, session, ip):
        data = await self._get_json(session, API_URL.format(ip=ip), params={"fields": FIELDS})
        return parse_ipapi(data)
