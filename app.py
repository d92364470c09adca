import asyncio
import logging
import socket
from datetime import datetime, timezone

from flask import Flask, jsonify, request

from analyzer import IpAnalyzer
from detection.provider_lists import load_provider_lists
from utils.cache import build_cache
from utils.config import Config
from utils.ip_utils import InvalidIPError, is_valid_ip
from utils.logging_conf import setup_logging
from storage import StorageError, build_storage

logger = logging.getLogger("app")


def create_app(analyzer=None):
    """
    Build the Flask app. Without an injected analyzer, storage, cache and
    providers are built from Config (once, here).
    """
    if analyzer is None:
        analyzer = IpAnalyzer.from_config(
            Config,
            storage=build_storage(),
            cache=build_cache(),
            provider_lists=load_provider_lists(Config.PROVIDER_LISTS_PATH),
        )
    storage = analyzer.storage

    app = Flask(__name__)
    app.config["ANALYZER"] = analyzer

    @app.errorhandler(StorageError)
    def storage_error(e):
        logger.error("Storage error: %s", e)
        return jsonify({"error": "Storage unavailable"}), 500

    # --- API ---
    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})

    @app.get("/api/providers")
    def providers():
        return jsonify(analyzer.provider_status())

    @app.post("/api/analyze")
    def analyze():
        body = _json_object()
        ip = body.get("ipAddress")
        if not isinstance(ip, str) or not ip:
            return jsonify({"error": "Validation failed", "details": "ipAddress is required"}), 400
        try:
            result = asyncio.run(analyzer.analyze(ip))
        except InvalidIPError:
            return jsonify({"error": "Invalid IP address"}), 400
        return jsonify(result.to_dict())

    @app.post("/api/bulk-analyze")
    def bulk_analyze():
        body = _json_object()
        ips = body.get("ips")
        if not isinstance(ips, list) or not ips or not all(isinstance(i, str) for i in ips):
            return jsonify({"error": "Validation failed", "details": "ips must be a non-empty list of strings"}), 400
        try:
            results, errors = asyncio.run(analyzer.analyze_many(ips))
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        return jsonify({"analyses": [r.analysis.to_dict() for r in results], "errors": errors})

    @app.get("/api/analyses")
    def list_analyses():
        return jsonify([a.to_dict() for a in storage.list_analyses()])

    @app.get("/api/analyses/<analysis_id>")
    def get_analysis(analysis_id):
        analysis = storage.get_analysis(analysis_id)
        if analysis is None:
            return jsonify({"error": "Not found"}), 404
        whois = storage.get_whois_by_ip(analysis.ip_address)
        return jsonify({"analysis": analysis.to_dict(), "whois": whois.to_dict() if whois else None})

    @app.delete("/api/analyses/<analysis_id>")
    def delete_analysis(analysis_id):
        if not analyzer.delete_analysis(analysis_id):
            return jsonify({"error": "Not found"}), 404
        return jsonify({"success": True})

    @app.get("/api/stats")
    def stats():
        return jsonify(storage.get_stats())

    @app.get("/api/whois/<ip_address>")
    def whois(ip_address):
        if not is_valid_ip(ip_address):
            return jsonify({"error": "Invalid IP"}), 400
        record = storage.get_whois_by_ip(ip_address)
        if record is None:
            return jsonify({"ipAddress": ip_address, "message": "No WHOIS data found"})
        return jsonify(record.to_dict())

    # --- Dashboard homepage ---
    @app.get("/")
    def index():
        return DASHBOARD_HTML

    return app


DASHBOARD_HTML = """
<html>
<head>
    <title>VPN / Proxy Detector</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 20px; }
        h1 { color: #2c3e50; }
        table { border-collapse: collapse; width: 80%; }
        th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
        th { background-color: #f2f2f2; }
        tr:hover { background-color: #f5f5f5; }
        .critical { color: #c0392b; font-weight: bold; }
        .high { color: #e67e22; }
    </style>
</head>
<body>
    <h1>VPN / Proxy Detector</h1>
    <form id="analyze-form">
        <input id="ip" placeholder="8.8.8.8" size="40"/>
        <button type="submit">Analyze</button>
    </form>
    <p id="stats"></p>
    <table id="scan-table">
        <tr><th>IP</th><th>Score</th><th>Threat</th><th>VPN</th><th>Proxy</th><th>Tor</th><th>Datacenter</th><th>Organization</th><th>Country</th></tr>
    </table>
    <script>
        function load() {
            fetch('/api/stats').then(r => r.json()).then(s => {
                document.getElementById('stats').innerText =
                    `Scans: ${s.totalScans} | Threats: ${s.threatsDetected} | Clean: ${s.cleanIps} | VPNs: ${s.vpnsDetected}`;
            });
            fetch('/api/analyses').then(r => r.json()).then(data => {
                const table = document.getElementById('scan-table');
                while (table.rows.length > 1) table.deleteRow(1);
                data.forEach(a => {
                    const row = table.insertRow();
                    row.className = a.threatLevel;
                    [a.ipAddress, a.riskScore, a.threatLevel, a.isVpn, a.isProxy, a.isTor,
                     a.isDatacenter, a.organization, a.country].forEach((v, i) => {
                        row.insertCell(i).innerText = v;
                    });
                });
            });
        }
        document.getElementById('analyze-form').onsubmit = (e) => {
            e.preventDefault();
            fetch('/api/analyze', {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify({ipAddress: document.getElementById('ip').value.trim()})
            }).then(load);
        };
        load();
    </script>
</body>
</html>
"""


def _json_object():
    # a JSON array or scalar body is treated like a missing one
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}

# --- Utility: find free port ---
def find_free_port(start=5000, end=5010):
    for port in range(start, end + 1):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind((Config.APP_HOST, port))
                return port
            except OSError:
                continue
    raise RuntimeError(f"No free ports available in range {start}-{end}")


# --- Main ---
if __name__ == "__main__":
    setup_logging()
    app = create_app()
    port = find_free_port(Config.APP_PORT, Config.APP_PORT + 10)
    logger.info("Starting dashboard on http://%s:%d (CTRL-C to quit)", Config.APP_HOST, port)
    app.run(host=Config.APP_HOST, port=port)
