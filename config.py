import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./sessions.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENVIRONMENT = data.get("ENVIRONMENT", "development")
    ROOT_DOMAIN = data.get("ROOT_DOMAIN", "localhost:3000")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Session policy
    SESSION_COOKIE_NAME = data.get("SESSION_COOKIE_NAME", "w_sid")
    SESSION_DURATION_DAYS = data.get("SESSION_DURATION_DAYS", 30)
    SESSION_SECRETS = data.get("SESSION_SECRETS", "dev-session-secret-change-in-production")
    STORE_TIMEOUT_SECONDS = data.get("STORE_TIMEOUT_SECONDS", 5)
    RISK_LOOKBACK_DAYS = data.get("RISK_LOOKBACK_DAYS", 7)
    SESSION_CLEANUP_INTERVAL_MINUTES = data.get("SESSION_CLEANUP_INTERVAL_MINUTES", 60)
