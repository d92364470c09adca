# detection/mock_generator.py
"""
Deterministic synthetic analyses for demos and offline development.

Used only when no live provider answered. The same IP string always produces
the same record: a linear congruential generator is seeded from a checksum
of the address text, and every field (location, network, flags, reputation)
is drawn from that one stream. The synthetic signal then goes through the
real classifier, so flags, score and threat level always agree.
"""
import ipaddress

from detection.classifier import classify
from detection.models import IpAnalysis, NormalizedSignal
from detection.provider_lists import DEFAULT_LISTS

LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MODULUS = 2 ** 31

# (country, country_code, city, region, latitude, longitude, timezone)
MOCK_LOCATIONS = [
    ("United States", "US", "Ashburn", "Virginia", 39.0438, -77.4874, "America/New_York"),
    ("United States", "US", "San Jose", "California", 37.3382, -121.8863, "America/Los_Angeles"),
    ("Germany", "DE", "Frankfurt am Main", "Hesse", 50.1109, 8.6821, "Europe/Berlin"),
    ("Netherlands", "NL", "Amsterdam", "North Holland", 52.3676, 4.9041, "Europe/Amsterdam"),
    ("United Kingdom", "GB", "London", "England", 51.5074, -0.1278, "Europe/London"),
    ("France", "FR", "Paris", "Ile-de-France", 48.8566, 2.3522, "Europe/Paris"),
    ("Japan", "JP", "Tokyo", "Tokyo", 35.6762, 139.6503, "Asia/Tokyo"),
    ("Singapore", "SG", "Singapore", "Central Singapore", 1.3521, 103.8198, "Asia/Singapore"),
    ("Brazil", "BR", "Sao Paulo", "Sao Paulo", -23.5505, -46.6333, "America/Sao_Paulo"),
    ("India", "IN", "Mumbai", "Maharashtra", 19.0760, 72.8777, "Asia/Kolkata"),
    ("Canada", "CA", "Toronto", "Ontario", 43.6532, -79.3832, "America/Toronto"),
    ("Australia", "AU", "Sydney", "New South Wales", -33.8688, 151.2093, "Australia/Sydney"),
]

# (organization, isp, asn)
MOCK_RESIDENTIAL = [
    ("Comcast Cable Communications", "Comcast Cable", "AS7922"),
    ("Deutsche Telekom AG", "Deutsche Telekom", "AS3320"),
    ("British Telecommunications PLC", "BT", "AS2856"),
    ("Orange S.A.", "Orange", "AS3215"),
    ("NTT Communications", "NTT", "AS2914"),
    ("Rogers Communications", "Rogers", "AS812"),
]

MOCK_HOSTING = [
    ("Amazon.com, Inc.", "Amazon AWS", "AS16509"),
    ("DigitalOcean, LLC", "DigitalOcean", "AS14061"),
    ("Hetzner Online GmbH", "Hetzner", "AS24940"),
    ("OVH SAS", "OVH", "AS16276"),
    ("Linode, LLC", "Linode", "AS63949"),
]

MOCK_VPN = [
    ("NordVPN S.A.", "M247 Ltd", "AS9009"),
    ("Proton AG", "Proton AG", "AS62371"),
    ("Mullvad VPN AB", "31173 Services AB", "AS39351"),
    ("Private Internet Access", "Zenlayer Inc", "AS21859"),
    ("Surfshark Ltd", "Datacamp Limited", "AS60068"),
]

MOCK_TOR = [
    ("Foundation for Applied Privacy", "Foundation for Applied Privacy", "AS208323"),
    ("Tor Exit Relay Operator", "Tor Exit Relay Operator", "AS60729"),
]

# cumulative thresholds for the network profile roll
PROFILES = (
    (0.50, "residential", MOCK_RESIDENTIAL),
    (0.75, "hosting", MOCK_HOSTING),
    (0.95, "vpn", MOCK_VPN),
    (1.00, "tor", MOCK_TOR),
)


class SeededRandom:
    """Minimal LCG; identical seeds give identical streams on every platform."""

    def __init__(self, seed):
        self.state = seed % LCG_MODULUS

    def next(self):
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def choice(self, items):
        return items[int(self.next() * len(items)) % len(items)]

    def randint(self, lo, hi):
        return lo + int(self.next() * (hi - lo + 1)) % (hi - lo + 1)


def seed_for_ip(ip):
    """Sum of the character codes, mixed with the first and last octet for IPv4."""
    seed = sum(ord(c) for c in ip)
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return seed
    if addr.version == 4:
        octets = addr.packed
        seed = seed * 65536 + (octets[0] << 8 | octets[-1])
    return seed


def mock_signal(ip):
    rng = SeededRandom(seed_for_ip(ip))

    country, code, city, region, lat, lon, tz = rng.choice(MOCK_LOCATIONS)
    # jitter within ~0.25 degrees so neighbouring IPs don't stack on one point
    lat = round(lat + (rng.next() - 0.5) * 0.5, 4)
    lon = round(lon + (rng.next() - 0.5) * 0.5, 4)

    roll = rng.next()
    profile, table = next((name, tbl) for limit, name, tbl in PROFILES if roll < limit)
    organization, isp, asn = rng.choice(table)

    if profile == "residential":
        abuse_score = rng.randint(0, 20)
        report_count = rng.randint(0, 2)
    elif profile == "hosting":
        abuse_score = rng.randint(0, 60)
        report_count = rng.randint(0, 8)
    else:
        abuse_score = rng.randint(20, 100)
        report_count = rng.randint(1, 40)

    # open proxies turn up on any network, rarely
    proxy_flag = True if rng.next() < 0.08 else None

    return NormalizedSignal(
        organization=organization,
        isp=isp,
        asn=asn,
        country=country,
        country_code=code,
        city=city,
        region=region,
        timezone=tz,
        latitude=lat,
        longitude=lon,
        proxy_flag=proxy_flag,
        vpn_flag=True if profile == "vpn" else None,
        hosting_flag=True if profile in ("hosting", "vpn") else None,
        tor_flag=True if profile == "tor" else None,
        usage_type="Data Center/Web Hosting/Transit" if profile != "residential" else "Fixed Line ISP",
        abuse_score=abuse_score,
        report_count=report_count,
    )


def mock_analysis(ip, ip_version=None, lists=DEFAULT_LISTS):
    """
    Build an unsaved IpAnalysis (no id, no timestamp) for `ip`.
    Bit-reproducible: equal inputs give equal records.
    """
    if ip_version is None:
        ip_version = "IPv6" if ":" in ip else "IPv4"
    signal = mock_signal(ip)
    detection = classify(signal, ip, lists)
    return IpAnalysis.build(ip, ip_version, signal, detection)
