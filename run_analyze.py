# run_analyze.py
"""
Analyze one or more IPs from the command line.

Usage:
  python run_analyze.py 8.8.8.8 1.1.1.1
  python run_analyze.py --file ips.txt --json
  python run_analyze.py --api http://127.0.0.1:5000 185.159.157.10

Without --api the analysis runs in-process (providers configured from .env,
mock fallback when none answer). With --api the IPs are submitted to a
running dashboard's /api/bulk-analyze endpoint.
"""
import argparse
import asyncio
import json
import sys
import time

import requests

from analyzer import MAX_BULK_IPS, IpAnalyzer
from detection.provider_lists import load_provider_lists
from storage import build_storage
from utils.cache import build_cache
from utils.config import Config
from utils.logging_conf import setup_logging


def read_ips(args):
    ips = list(args.ips)
    if args.file:
        with open(args.file, "r") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    ips.append(line)
    # keep order, drop duplicates
    seen = set()
    return [i for i in ips if not (i in seen or seen.add(i))]


def format_row(a):
    flags = [name for name, on in (("VPN", a["isVpn"]), ("PROXY", a["isProxy"]),
                                   ("TOR", a["isTor"]), ("DC", a["isDatacenter"])) if on]
    provider = f" ({a['vpnProvider']})" if a.get("vpnProvider") else ""
    return (f"{a['ipAddress']:<40} {a['riskScore']:>3} {a['threatLevel']:<8} "
            f"{','.join(flags) or '-':<16} {a.get('organization') or '-'}{provider}")


def build_analyzer():
    return IpAnalyzer.from_config(
        Config,
        storage=build_storage(),
        cache=build_cache(),
        provider_lists=load_provider_lists(Config.PROVIDER_LISTS_PATH),
    )


def analyze_local(analyzer, ips):
    results, errors = asyncio.run(analyzer.analyze_many(ips))
    return [r.analysis.to_dict() for r in results], errors


def analyze_remote(api, ips, timeout=60):
    url = api.rstrip("/") + "/api/bulk-analyze"
    resp = requests.post(url, json={"ips": ips}, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    return data.get("analyses", []), data.get("errors", [])


def parse_args():
    p = argparse.ArgumentParser(description="VPN / proxy / Tor detection for IP addresses")
    p.add_argument("ips", nargs="*", help="IP addresses to analyze")
    p.add_argument("--file", type=str, default=None, help="File with one IP per line")
    p.add_argument("--api", type=str, default=None, help="Base URL of a running dashboard")
    p.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    return p.parse_args()


def main():
    args = parse_args()
    setup_logging("WARNING" if args.json else None)
    ips = read_ips(args)
    if not ips:
        print("No IPs given.", file=sys.stderr)
        sys.exit(2)

    analyzer = None if args.api else build_analyzer()
    start = time.time()
    analyses, errors = [], []
    for i in range(0, len(ips), MAX_BULK_IPS):
        chunk = ips[i:i + MAX_BULK_IPS]
        try:
            res, err = analyze_remote(args.api, chunk) if args.api else analyze_local(analyzer, chunk)
        except requests.RequestException as e:
            print(f"ERROR: dashboard request failed: {e}", file=sys.stderr)
            sys.exit(1)
        analyses.extend(res)
        errors.extend(err)

    if args.json:
        print(json.dumps({"analyses": analyses, "errors": errors}, indent=2))
    else:
        for a in analyses:
            print(format_row(a))
        for e in errors:
            print(f"[INVALID] {e['ipAddress']}: {e['error']}", file=sys.stderr)
        print("Elapsed: %.1f seconds" % (time.time() - start), file=sys.stderr)

    sys.exit(1 if errors else 0)


if __name__ == "__main__":
    main()
