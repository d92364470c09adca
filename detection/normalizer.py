# detection/normalizer.py
"""
Merge partial provider signals into one NormalizedSignal.

Partials arrive in provider priority order. For descriptive fields the first
provider with a real value wins; later providers only fill gaps, they never
overwrite. None / "" / "Unknown" / "XX" count as gaps.

The *_flag fields are merged with OR: a flag is True when any provider says
True, False when providers only ever said False, None when nobody answered.
"""
from dataclasses import replace

from detection.models import EMPTY_VALUES, UNKNOWN, UNKNOWN_COUNTRY_CODE, NormalizedSignal

# provider priority when several supply the same field
PROVIDER_PRIORITY = ("maxmind", "ipinfo", "ipapi", "abuseipdb")
FLAG_FIELDS = ("proxy_flag", "vpn_flag", "hosting_flag", "tor_flag")


def merge_signals(partials):
    """
    partials: iterable of NormalizedSignal or None, highest priority first.
    Returns a NormalizedSignal (possibly empty).
    """
    merged = {}
    for part in partials:
        if part is None:
            continue
        for name in NormalizedSignal.field_names():
            if name in FLAG_FIELDS:
                val = getattr(part, name)
                if val is not None:
                    merged[name] = bool(merged.get(name)) or val
                continue
            if merged.get(name) not in EMPTY_VALUES:
                continue
            val = getattr(part, name)
            if val not in EMPTY_VALUES:
                merged[name] = val
    signal = NormalizedSignal(**{k: v for k, v in merged.items() if v not in EMPTY_VALUES})

    # providers that only report one of org/isp: mirror it into the other
    if signal.organization and not signal.isp:
        signal = replace(signal, isp=signal.organization)
    elif signal.isp and not signal.organization:
        signal = replace(signal, organization=signal.isp)
    return signal


def order_by_priority(named_partials, priority=PROVIDER_PRIORITY):
    """Sort {provider_name: partial} into priority order; unknown names go last."""
    rank = {name: i for i, name in enumerate(priority)}
    names = sorted(named_partials, key=lambda n: (rank.get(n, len(rank)), n))
    return [named_partials[n] for n in names]


def with_defaults(signal):
    """
    Fill absent descriptive fields with the persisted sentinels. Coordinates
    stay None: (0, 0) is a real location and is never used to mean "unknown".
    """
    return replace(
        signal,
        organization=signal.organization or UNKNOWN,
        isp=signal.isp or UNKNOWN,
        asn=signal.asn or UNKNOWN,
        country=signal.country or UNKNOWN,
        country_code=signal.country_code or UNKNOWN_COUNTRY_CODE,
        city=signal.city or UNKNOWN,
        region=signal.region or UNKNOWN,
        timezone=signal.timezone or UNKNOWN,
    )


def parse_asn_org(org_string):
    """
    Split an "AS12345 Example ISP" string (ipinfo style) into (asn, org_name).
    Returns (None, org_string) when there is no AS prefix.
    """
    if not org_string:
        return None, None
    parts = org_string.split(" ", 1)
    if len(parts) == 2 and parts[0].upper().startswith("AS"):
        return parts[0], parts[1]
    return None, org_string


def to_float(v):
    try:
        if v is None or v == "":
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


def to_int(v):
    try:
        if v is None or v == "":
            return None
        return int(v)
    except (TypeError, ValueError):
        return None


def to_bool(v):
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes")
    return bool(v)
