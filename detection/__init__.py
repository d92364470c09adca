# detection/__init__.py
"""
detection package

Provides:
- NormalizedSignal / Detection / IpAnalysis / WhoisRecord records
- classify(signal, ip): VPN/proxy/Tor/datacenter rules and risk score
- merge_signals / with_defaults: provider signal normalization
- mock_analysis(ip): deterministic offline fallback
"""

from .models import NormalizedSignal, Detection, IpAnalysis, WhoisRecord
from .classifier import classify
from .normalizer import merge_signals, with_defaults
from .scoring import compute_risk_score, threat_level_from_score
from .mock_generator import mock_analysis

__all__ = [
    "NormalizedSignal",
    "Detection",
    "IpAnalysis",
    "WhoisRecord",
    "classify",
    "merge_signals",
    "with_defaults",
    "compute_risk_score",
    "threat_level_from_score",
    "mock_analysis",
]
