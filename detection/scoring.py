# detection/scoring.py
# Deterministic, reproducible risk scoring.
#
# Signals raise the score to a floor with max(); they are not summed.
import math

VPN_FLOOR = 70
PROXY_FLOOR = 65
TOR_SCORE = 95
DATACENTER_FLOOR = 35
ABUSE_MULTIPLIER = 0.9
REPORT_BOOST = 15
REPORT_BOOST_MIN_REPORTS = 4

THREAT_LEVELS = ("low", "medium", "high", "critical")


def clamp(x, lo, hi):
    return max(lo, min(hi, x))


def round_half_up(x):
    # round() is banker's rounding; 40.5 must become 41
    return int(math.floor(x + 0.5))


def compute_risk_score(is_vpn, is_proxy, is_tor, is_datacenter, abuse_score=None, report_count=None):
    if is_tor:
        return TOR_SCORE

    score = 0
    if is_vpn:
        score = max(score, VPN_FLOOR)
    if is_proxy:
        score = max(score, PROXY_FLOOR)
    if is_datacenter and not is_vpn and not is_proxy:
        score = max(score, DATACENTER_FLOOR)
    if abuse_score is not None:
        score = max(score, round_half_up(clamp(abuse_score, 0, 100) * ABUSE_MULTIPLIER))
    if report_count is not None and report_count >= REPORT_BOOST_MIN_REPORTS:
        score = min(100, score + REPORT_BOOST)

    return int(clamp(score, 0, 100))


def threat_level_from_score(score):
    if score < 25:
        return "low"
    if score < 50:
        return "medium"
    if score < 75:
        return "high"
    return "critical"

