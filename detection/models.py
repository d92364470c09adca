# detection/models.py
"""
Data records shared by the enrichers, the classifier and storage.

JSON forms use camelCase keys (ipAddress, riskScore, ...) so stored documents
and API responses keep one shape.
"""
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import List, Optional

from detection.scoring import threat_level_from_score

UNKNOWN = "Unknown"
UNKNOWN_COUNTRY_CODE = "XX"

# values a provider may send that mean "no data"
EMPTY_VALUES = (None, "", UNKNOWN, UNKNOWN_COUNTRY_CODE)


def _camel(name):
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


def _fmt_dt(d):
    return d.isoformat() if d else None


def _parse_dt(s):
    if not s:
        return None
    if isinstance(s, datetime):
        return s
    return datetime.fromisoformat(str(s).replace("Z", "+00:00"))


@dataclass(frozen=True)
class NormalizedSignal:
    organization: Optional[str] = None
    isp: Optional[str] = None
    asn: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    timezone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    proxy_flag: Optional[bool] = None
    vpn_flag: Optional[bool] = None
    hosting_flag: Optional[bool] = None
    tor_flag: Optional[bool] = None
    usage_type: Optional[str] = None
    abuse_score: Optional[int] = None
    report_count: Optional[int] = None

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]

    def is_empty(self):
        return all(getattr(self, name) in EMPTY_VALUES for name in self.field_names())


@dataclass(frozen=True)
class Detection:
    is_vpn: bool
    is_proxy: bool
    is_tor: bool
    is_datacenter: bool
    vpn_provider: Optional[str]
    risk_score: int

    @property
    def threat_level(self):
        return threat_level_from_score(self.risk_score)


@dataclass(frozen=True)
class IpAnalysis:
    ip_address: str
    ip_version: str
    risk_score: int
    is_vpn: bool
    is_proxy: bool
    is_tor: bool
    is_datacenter: bool
    vpn_provider: Optional[str] = None
    isp: Optional[str] = None
    organization: Optional[str] = None
    asn: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    id: Optional[str] = None
    analyzed_at: Optional[datetime] = None

    @property
    def threat_level(self):
        # never stored on its own; always derived from the score
        return threat_level_from_score(self.risk_score)

    @classmethod
    def build(cls, ip, ip_version, signal, detection):
        """Merge a (defaulted) signal and its detection into an unsaved record."""
        return cls(
            ip_address=ip,
            ip_version=ip_version,
            risk_score=detection.risk_score,
            is_vpn=detection.is_vpn,
            is_proxy=detection.is_proxy,
            is_tor=detection.is_tor,
            is_datacenter=detection.is_datacenter,
            vpn_provider=detection.vpn_provider,
            isp=signal.isp,
            organization=signal.organization,
            asn=signal.asn,
            country=signal.country,
            country_code=signal.country_code,
            city=signal.city,
            region=signal.region,
            latitude=signal.latitude,
            longitude=signal.longitude,
            timezone=signal.timezone,
        )

    def stamped(self, id, analyzed_at):
        return replace(self, id=id, analyzed_at=analyzed_at)

    def to_dict(self):
        out = {}
        for f in fields(self):
            val = getattr(self, f.name)
            out[_camel(f.name)] = _fmt_dt(val) if f.name == "analyzed_at" else val
        out["threatLevel"] = self.threat_level
        return out

    @classmethod
    def from_dict(cls, data):
        kwargs = {}
        for f in fields(cls):
            key = _camel(f.name)
            if key in data:
                kwargs[f.name] = data[key]
        kwargs["analyzed_at"] = _parse_dt(kwargs.get("analyzed_at"))
        # threatLevel is always recomputed from riskScore
        return cls(**kwargs)


@dataclass(frozen=True)
class WhoisRecord:
    ip_address: str
    domain: Optional[str] = None
    registrar: Optional[str] = None
    registrant_name: Optional[str] = None
    registrant_org: Optional[str] = None
    registrant_country: Optional[str] = None
    created_date: Optional[str] = None
    updated_date: Optional[str] = None
    expires_date: Optional[str] = None
    name_servers: List[str] = field(default_factory=list)
    net_range: Optional[str] = None
    net_name: Optional[str] = None
    net_handle: Optional[str] = None
    origin_as: Optional[str] = None
    abuse_contact: Optional[str] = None
    tech_contact: Optional[str] = None
    id: Optional[str] = None
    fetched_at: Optional[datetime] = None

    def to_dict(self):
        out = {}
        for f in fields(self):
            val = getattr(self, f.name)
            if f.name == "fetched_at":
                val = _fmt_dt(val)
            elif f.name == "name_servers":
                val = list(val or [])
            out[_camel(f.name)] = val
        return out

    @classmethod
    def from_dict(cls, data):
        kwargs = {}
        for f in fields(cls):
            key = _camel(f.name)
            if key in data:
                kwargs[f.name] = data[key]
        kwargs["fetched_at"] = _parse_dt(kwargs.get("fetched_at"))
        kwargs["name_servers"] = list(kwargs.get("name_servers") or [])
        return cls(**kwargs)
