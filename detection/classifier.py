# detection/classifier.py
"""
VPN / proxy / Tor / datacenter classification.

classify(signal, ip) is a pure function of its inputs: no I/O, no clock, no
randomness, so it is safe to call from any thread or task.
"""
from detection.models import Detection
from detection.provider_lists import DEFAULT_LISTS
from detection.scoring import compute_risk_score

DATA_CENTER_USAGE = "data center"
DATACENTER_KEYWORDS = ("datacenter", "hosting")


def _names(signal):
    return [s.lower() for s in (signal.organization, signal.isp) if s]


def _contains(names, keyword):
    return any(keyword in n for n in names)


def first_match(names, entries):
    """Return the first list entry contained in any of the names, else None."""
    for entry in entries:
        needle = entry.lower()
        if any(needle in n for n in names):
            return entry
    return None


def is_data_center_usage(usage_type):
    # AbuseIPDB reports "Data Center/Web Hosting/Transit"
    return bool(usage_type) and usage_type.strip().lower().startswith(DATA_CENTER_USAGE)


def classify(signal, ip, lists=DEFAULT_LISTS):
    names = _names(signal)

    vpn_provider = first_match(names, lists.vpn_providers) or first_match(names, lists.vpn_hosting)
    is_vpn = (
        vpn_provider is not None
        or signal.vpn_flag is True
        or _contains(names, "vpn")
    )

    is_proxy = (
        signal.proxy_flag is True
        or _contains(names, "proxy")
        or (is_data_center_usage(signal.usage_type) and (signal.report_count or 0) > 0)
    )

    is_tor = signal.tor_flag is True

    is_datacenter = (
        first_match(names, lists.hosting) is not None
        or first_match(names, lists.vpn_hosting) is not None
        or signal.hosting_flag is True
        or any(_contains(names, k) for k in DATACENTER_KEYWORDS)
    )

    risk_score = compute_risk_score(
        is_vpn, is_proxy, is_tor, is_datacenter,
        abuse_score=signal.abuse_score,
        report_count=signal.report_count,
    )
    return Detection(
        is_vpn=is_vpn,
        is_proxy=is_proxy,
        is_tor=is_tor,
        is_datacenter=is_datacenter,
        vpn_provider=vpn_provider if is_vpn else None,
        risk_score=risk_score,
    )
