import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    SERVICE_NAME = data.get("SERVICE_NAME", "nip-reset-api")
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    TRUST_PROXY = bool(data.get("TRUST_PROXY", True))

    # Reset tokens
    TOKEN_TTL_MINUTES = int(data.get("TOKEN_TTL_MINUTES", 30))
    TOKEN_ISSUE_MAX_ATTEMPTS = int(data.get("TOKEN_ISSUE_MAX_ATTEMPTS", 3))
    RATE_LIMIT_WINDOW_MINUTES = int(data.get("RATE_LIMIT_WINDOW_MINUTES", 60))
    RATE_LIMIT_MAX_REQUESTS = int(data.get("RATE_LIMIT_MAX_REQUESTS", 2))
    RESET_URL_BASE = data.get("RESET_URL_BASE", "http://localhost:5173/reset-nip")

    # Identity directory
    DIRECTORY_BASE_URL = data.get("DIRECTORY_BASE_URL", "http://localhost:9000")
    DIRECTORY_API_KEY = data.get("DIRECTORY_API_KEY", "")
    DIRECTORY_TIMEOUT_SECONDS = float(data.get("DIRECTORY_TIMEOUT_SECONDS", 10))

    # Outbound email
    SMTP_HOST = data.get("SMTP_HOST", "")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USERNAME = data.get("SMTP_USERNAME", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_START_TLS = bool(data.get("SMTP_START_TLS", True))
    SMTP_FROM_EMAIL = data.get("SMTP_FROM_EMAIL", "no-reply@example.com")
    SMTP_FROM_NAME = data.get("SMTP_FROM_NAME", "Soporte")

    # Finalization webhook
    WEBHOOK_URL = data.get("WEBHOOK_URL", "")
    WEBHOOK_SECRET = data.get("WEBHOOK_SECRET", "")
    WEBHOOK_TIMEOUT_SECONDS = float(data.get("WEBHOOK_TIMEOUT_SECONDS", 8))
    WEBHOOK_MAX_ATTEMPTS = int(data.get("WEBHOOK_MAX_ATTEMPTS", 2))
    WEBHOOK_RETRY_DELAY_SECONDS = float(data.get("WEBHOOK_RETRY_DELAY_SECONDS", 0.5))
