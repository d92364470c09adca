# storage/memory_store.py
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from storage.base import AnalysisStore


def _newest_first(items, attr):
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(items, key=lambda x: getattr(x, attr) or epoch, reverse=True)


class MemoryStore(AnalysisStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._analyses = {}
        self._whois = {}
        self._lock = threading.Lock()

    def create_analysis(self, analysis):
        if not analysis.id:
            analysis = replace(analysis, id=str(uuid.uuid4()))
        with self._lock:
            self._analyses[analysis.id] = analysis
        return analysis

    def get_analysis(self, analysis_id):
        with self._lock:
            return self._analyses.get(analysis_id)

    def list_analyses(self):
        with self._lock:
            items = list(self._analyses.values())
        return _newest_first(items, "analyzed_at")

    def delete_analysis(self, analysis_id):
        with self._lock:
            return self._analyses.pop(analysis_id, None) is not None

    def create_whois_record(self, record):
        if not record.id:
            record = replace(record, id=str(uuid.uuid4()))
        with self._lock:
            # latest record per IP
            self._whois[record.ip_address] = record
        return record

    def get_whois_by_ip(self, ip):
        with self._lock:
            return self._whois.get(ip)
