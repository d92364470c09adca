# storage/sqlite_store.py
"""
SQLite store: each analysis / WHOIS record is kept as a JSON document next to
the columns we query on (id, ip_address, timestamp).
"""
import json
import logging
import os
import sqlite3
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from detection.models import IpAnalysis, WhoisRecord
from storage.base import AnalysisStore, StorageError

logger = logging.getLogger("storage.sqlite")

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS analyses (
        id TEXT PRIMARY KEY,
        ip_address TEXT NOT NULL,
        analyzed_at TEXT NOT NULL,
        document TEXT NOT NULL
    )""",
    "CREATE INDEX IF NOT EXISTS idx_analyses_time ON analyses (analyzed_at)",
    """
    CREATE TABLE IF NOT EXISTS whois_records (
        id TEXT PRIMARY KEY,
        ip_address TEXT NOT NULL,
        fetched_at TEXT NOT NULL,
        document TEXT NOT NULL
    )""",
    "CREATE INDEX IF NOT EXISTS idx_whois_ip ON whois_records (ip_address, fetched_at)",
)


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


class SqliteStore(AnalysisStore):
    def __init__(self, path):
        self.path = path
        # fail at startup, not on the first request
        self._ensure_sqlite()

    def _connect(self):
        return sqlite3.connect(self.path, timeout=5)

    def _ensure_sqlite(self):
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        try:
            conn = self._connect()
            try:
                for stmt in SCHEMA:
                    conn.execute(stmt)
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"cannot initialise sqlite store at {self.path}: {e}") from e
        logger.info("SQLite store ready at %s", self.path)

    def _execute(self, sql, params=(), fetch=None):
        try:
            conn = self._connect()
            try:
                cur = conn.execute(sql, params)
                if fetch == "one":
                    result = cur.fetchone()
                elif fetch == "all":
                    result = cur.fetchall()
                else:
                    result = cur.rowcount
                conn.commit()
                return result
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("sqlite error: %s", e)
            raise StorageError(str(e)) from e

    # analyses

    def create_analysis(self, analysis):
        if not analysis.id:
            analysis = replace(analysis, id=str(uuid.uuid4()))
        doc = analysis.to_dict()
        self._execute(
            "INSERT INTO analyses (id, ip_address, analyzed_at, document) VALUES (?,?,?,?)",
            (analysis.id, analysis.ip_address, doc.get("analyzedAt") or _now_iso(), json.dumps(doc)),
        )
        logger.info("Inserted analysis %s for %s", analysis.id, analysis.ip_address)
        return analysis

    def get_analysis(self, analysis_id):
        row = self._execute("SELECT document FROM analyses WHERE id=?", (analysis_id,), fetch="one")
        return IpAnalysis.from_dict(json.loads(row[0])) if row else None

    def list_analyses(self):
        rows = self._execute("SELECT document FROM analyses ORDER BY analyzed_at DESC", fetch="all")
        return [IpAnalysis.from_dict(json.loads(r[0])) for r in rows]

    def delete_analysis(self, analysis_id):
        deleted = self._execute("DELETE FROM analyses WHERE id=?", (analysis_id,))
        if deleted:
            logger.info("Deleted analysis %s", analysis_id)
        return deleted > 0

    # whois

    def create_whois_record(self, record):
        if not record.id:
            record = replace(record, id=str(uuid.uuid4()))
        doc = record.to_dict()
        self._execute(
            "INSERT INTO whois_records (id, ip_address, fetched_at, document) VALUES (?,?,?,?)",
            (record.id, record.ip_address, doc.get("fetchedAt") or _now_iso(), json.dumps(doc)),
        )
        return record

    def get_whois_by_ip(self, ip):
        row = self._execute(
            "SELECT document FROM whois_records WHERE ip_address=? ORDER BY fetched_at DESC LIMIT 1",
            (ip,), fetch="one",
        )
        return WhoisRecord.from_dict(json.loads(row[0])) if row else None
