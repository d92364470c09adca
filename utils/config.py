# utils/config.py
import os
from dotenv import load_dotenv

load_dotenv()  # Load .env file


def _flag(name, default):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# Module-level DEMO_MODE for easy imports
DEMO_MODE = _flag("DEMO_MODE", "False")


class Config:
    """Central configuration class for the IP detector"""
    DEMO_MODE = DEMO_MODE
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    APP_HOST = os.getenv("APP_HOST", "127.0.0.1")
    APP_PORT = int(os.getenv("APP_PORT") or 5000)
    ALLOW_PUBLIC_FETCH = _flag("ALLOW_PUBLIC_FETCH", "true")

    # cache
    REDIS_HOST = os.getenv("REDIS_HOST", "")
    REDIS_PORT = int(os.getenv("REDIS_PORT") or 6379)
    REDIS_DB = int(os.getenv("REDIS_DB") or 0)
    CACHE_BACKEND = os.getenv("CACHE_BACKEND", "redis" if REDIS_HOST else "memory")
    CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS") or 300)

    # storage
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sqlite")
    SQLITE_PATH = os.getenv("SQLITE_PATH", "./store/analyses.db")

    # providers
    PROVIDER_TIMEOUT = float(os.getenv("PROVIDER_TIMEOUT_SECONDS") or 8)
    ABUSEIPDB_API_KEY = os.getenv("ABUSEIPDB_API_KEY", "")
    MAXMIND_ACCOUNT_ID = os.getenv("MAXMIND_ACCOUNT_ID", "")
    MAXMIND_LICENSE_KEY = os.getenv("MAXMIND_LICENSE_KEY") or os.getenv("MAXMIND_API_KEY", "")
    GEOIP_DB_PATH = os.getenv("GEOIP_DB_PATH", "")
    IPINFO_API_KEY = os.getenv("IPINFO_API_KEY", "")
    WHOISXML_API_KEY = os.getenv("WHOISXML_API_KEY", "")
    IPAPI_ENABLED = _flag("IPAPI_ENABLED", "false")
    PROVIDER_LISTS_PATH = os.getenv("PROVIDER_LISTS_PATH", "")
