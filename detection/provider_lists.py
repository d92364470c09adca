# detection/provider_lists.py
"""
Static name lists used by the classifier.

Entries are matched as case-insensitive substrings of a provider's
organization / ISP string, in list order. Bump LISTS_VERSION whenever an
entry is added or removed so stored analyses can be traced to a list set.

A JSON file with the same keys can replace the built-in lists:
  {"version": "...", "vpn_providers": [...], "vpn_hosting": [...], "hosting": [...]}
"""
import json
import logging
from dataclasses import dataclass
from typing import Tuple

logger = logging.getLogger("detection.provider_lists")

LISTS_VERSION = "2024.3"

# consumer VPN brands
VPN_PROVIDERS = (
    "NordVPN",
    "ExpressVPN",
    "Surfshark",
    "ProtonVPN",
    "Proton AG",
    "CyberGhost",
    "Private Internet Access",
    "Mullvad",
    "IPVanish",
    "Windscribe",
    "TunnelBear",
    "HideMyAss",
    "VyprVPN",
    "Hotspot Shield",
    "PureVPN",
    "TurboVPN",
    "Hide.me",
    "IVPN",
    "AirVPN",
    "Astrill",
)

# networks that commonly carry VPN exit nodes
VPN_HOSTING = (
    "M247",
    "Datacamp",
    "Zenlayer",
    "Leaseweb",
    "Choopa",
    "Tzulo",
    "GSL Networks",
    "Performive",
    "Clouvider",
    "31173 Services",
    "Packethub",
    "xTom",
)

# cloud / hosting / datacenter networks
HOSTING = (
    "Amazon",
    "AWS",
    "Google Cloud",
    "Google LLC",
    "Microsoft",
    "Azure",
    "DigitalOcean",
    "Linode",
    "Akamai",
    "Vultr",
    "OVH",
    "Hetzner",
    "Scaleway",
    "Online S.A.S.",
    "Contabo",
    "Oracle Cloud",
    "Alibaba",
    "Aliyun",
    "Tencent Cloud",
    "Rackspace",
    "Cloudflare",
    "Fastly",
    "IONOS",
    "Hostinger",
    "GoDaddy",
    "Kamatera",
    "UpCloud",
)


@dataclass(frozen=True)
class ProviderLists:
    version: str
    vpn_providers: Tuple[str, ...]
    vpn_hosting: Tuple[str, ...]
    hosting: Tuple[str, ...]


DEFAULT_LISTS = ProviderLists(
    version=LISTS_VERSION,
    vpn_providers=VPN_PROVIDERS,
    vpn_hosting=VPN_HOSTING,
    hosting=HOSTING,
)


def load_provider_lists(path=None):
    """
    Load lists from a JSON file, or return the built-in DEFAULT_LISTS when no
    path is given. A bad file is a startup error, not a silent fallback.
    """
    if not path:
        return DEFAULT_LISTS
    with open(path, "r") as f:
        data = json.load(f)
    lists = ProviderLists(
        version=str(data.get("version") or "custom"),
        vpn_providers=tuple(data.get("vpn_providers") or ()),
        vpn_hosting=tuple(data.get("vpn_hosting") or ()),
        hosting=tuple(data.get("hosting") or ()),
    )
    logger.info("Loaded provider lists %s from %s (%d vpn, %d vpn-hosting, %d hosting)",
                lists.version, path, len(lists.vpn_providers), len(lists.vpn_hosting), len(lists.hosting))
    return lists
