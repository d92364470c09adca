# enricher/abuseipdb_enricher.py
"""
AbuseIPDB reputation: confidence score, report count, usage type, Tor flag, ISP.
"""
import logging

from detection.models import NormalizedSignal
from detection.normalizer import to_bool, to_int
from enricher.base_enricher import BaseEnricher

logger = logging.getLogger("enricher.abuseipdb")

API_URL = "https://api.abuseipdb.com/api/v2/check"
HOSTING_USAGE_TYPES = ("data center", "content delivery network")


def parse_abuseipdb(payload):
    """Map an /api/v2/check response body onto a partial signal."""
    data = (payload or {}).get("data")
    if not isinstance(data, dict) or not data:
        return None
    usage = data.get("usageType") or None
    hosting = None
    if usage and usage.strip().lower().startswith(HOSTING_USAGE_TYPES):
        hosting = True
    return NormalizedSignal(
        isp=data.get("isp") or None,
        country_code=data.get("countryCode") or None,
        usage_type=usage,
        hosting_flag=hosting,
        # older API responses omit isTor
        tor_flag=to_bool(data.get("isTor")) or None,
        abuse_score=to_int(data.get("abuseConfidenceScore")),
        report_count=to_int(data.get("totalReports")),
    )


class AbuseIPDBEnricher(BaseEnricher):
    name = "abuseipdb"

    def __init__(self, api_key=None, timeout=8.0, max_age_days=90):
        super().__init__(api_key=api_key, timeout=timeout)
        self.max_age_days = max_age_days

    async def fetch(self, session, ip):
        params = {"ipAddress": ip, "maxAgeInDays": str(self.max_age_days)}
        headers = {"Key": self.api_key, "Accept": "application/json"}
        payload = await self._get_json(session, API_URL, params=params, headers=headers)
        sig = parse_abuseipdb(payload)
        if sig is not None:
            logger.debug("AbuseIPDB %s -> score=%s reports=%s usage=%s", ip, sig.abuse_score, sig.report_count, sig.usage_type)
        return sig
