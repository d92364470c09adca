# enricher/geoip_enricher.py
"""
MaxMind GeoIP2 enricher: city/country/coordinates/timezone plus ASN and
anonymizer traits when the product returns them.

Uses a local GeoLite2/GeoIP2 .mmdb when GEOIP_DB_PATH points at one (fast, no
HTTP required), otherwise the GeoIP2 Precision web service with an account
id + license key.
"""
import asyncio
import logging
import os
from functools import partial

import geoip2.database
import geoip2.errors
import geoip2.webservice

from detection.models import NormalizedSignal
from detection.normalizer import to_float
from enricher.base_enricher import BaseEnricher

logger = logging.getLogger("enricher.geoip")


def _true_or_none(v):
    # City responses default these traits to False; only a positive is a signal
    return True if v else None


def parse_city_response(r):
    """Map a geoip2 City/Insights model (or a look-alike) onto a partial signal."""
    if r is None:
        return None
    traits = getattr(r, "traits", None)
    asn = getattr(traits, "autonomous_system_number", None)
    subdivisions = getattr(r, "subdivisions", None)
    region = getattr(getattr(subdivisions, "most_specific", None), "name", None)
    return NormalizedSignal(
        organization=getattr(traits, "autonomous_system_organization", None) or getattr(traits, "organization", None),
        isp=getattr(traits, "isp", None),
        asn=f"AS{asn}" if asn else None,
        country=getattr(r.country, "name", None),
        country_code=getattr(r.country, "iso_code", None),
        city=getattr(r.city, "name", None),
        region=region,
        timezone=getattr(r.location, "time_zone", None),
        latitude=to_float(getattr(r.location, "latitude", None)),
        longitude=to_float(getattr(r.location, "longitude", None)),
        vpn_flag=_true_or_none(getattr(traits, "is_anonymous_vpn", None)),
        proxy_flag=_true_or_none(getattr(traits, "is_public_proxy", None)),
        hosting_flag=_true_or_none(getattr(traits, "is_hosting_provider", None)),
        tor_flag=_true_or_none(getattr(traits, "is_tor_exit_node", None)),
    )


def _read_local(db_path, ip):
    with geoip2.database.Reader(db_path) as reader:
        try:
            return reader.city(ip)
        except geoip2.errors.AddressNotFoundError:
            return None


class GeoIPEnricher(BaseEnricher):
    name = "maxmind"

    def __init__(self, account_id=None, license_key=None, db_path=None, timeout=8.0,
                 host="geoip.maxmind.com"):
        super().__init__(api_key=license_key, timeout=timeout)
        self.account_id = account_id
        self.db_path = db_path
        self.host = host

    @property
    def use_local_db(self):
        return bool(self.db_path) and os.path.exists(self.db_path)

    @property
    def enabled(self):
        return self.use_local_db or bool(self.account_id and self.api_key)

    async def fetch(self, session, ip):
        if self.use_local_db:
            loop = asyncio.get_running_loop()
            resp = await loop.run_in_executor(None, partial(_read_local, self.db_path, ip))
        else:
            # the geoip2 client manages its own aiohttp session
            async with geoip2.webservice.AsyncClient(int(self.account_id), self.api_key,
                                                     host=self.host, timeout=self.timeout) as client:
                try:
                    resp = await client.city(ip)
                except geoip2.errors.AddressNotFoundError:
                    resp = None
        return parse_city_response(resp)
