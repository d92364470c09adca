# storage/base.py
"""
Storage interface for analyses and WHOIS records.

One backend is chosen at construction (see storage.build_storage); backends
do not switch at runtime. Records are immutable once written: there is
create, read and delete, no update.
"""


class StorageError(Exception):
    """A backend failed to read or write."""


class AnalysisStore:
    def create_analysis(self, analysis):
        raise NotImplementedError

    def get_analysis(self, analysis_id):
        raise NotImplementedError

    def list_analyses(self):
        """All analyses, newest first."""
        raise NotImplementedError

    def delete_analysis(self, analysis_id):
        """Return True when a record was removed."""
        raise NotImplementedError

    def create_whois_record(self, record):
        raise NotImplementedError

    def get_whois_by_ip(self, ip):
        raise NotImplementedError

    def get_stats(self):
        analyses = self.list_analyses()
        return {
            "totalScans": len(analyses),
            "threatsDetected": sum(1 for a in analyses if a.risk_score >= 50),
            "cleanIps": sum(1 for a in analyses if a.risk_score < 30),
            "vpnsDetected": sum(1 for a in analyses if a.is_vpn),
        }
