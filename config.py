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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./billing.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Billing rules
    TAX_RATE = str(data.get("TAX_RATE", "8.875"))
    INVOICE_DUE_DAYS = int(data.get("INVOICE_DUE_DAYS", 30))
    SUSPEND_AFTER_OVERDUE = int(data.get("SUSPEND_AFTER_OVERDUE", 2))
    LOW_BALANCE_THRESHOLD = str(data.get("LOW_BALANCE_THRESHOLD", "50"))
    HIGH_USAGE_THRESHOLD = str(data.get("HIGH_USAGE_THRESHOLD", "100"))
    HIGH_USAGE_WINDOW_HOURS = int(data.get("HIGH_USAGE_WINDOW_HOURS", 24))
    DB_RETRY_ATTEMPTS = int(data.get("DB_RETRY_ATTEMPTS", 5))

    # Payment provider (Stripe); empty key disables invoice mirroring
    PAYMENT_PROVIDER_API_KEY = data.get("PAYMENT_PROVIDER_API_KEY", "")
    PAYMENT_PROVIDER_WEBHOOK_SECRET = data.get("PAYMENT_PROVIDER_WEBHOOK_SECRET", "")
    PAYMENT_PROVIDER_CURRENCY = data.get("PAYMENT_PROVIDER_CURRENCY", "usd")
    PAYMENT_PROVIDER_TIMEOUT_SECONDS = float(data.get("PAYMENT_PROVIDER_TIMEOUT_SECONDS", 10))
    PAYMENT_PROVIDER_MAX_ATTEMPTS = int(data.get("PAYMENT_PROVIDER_MAX_ATTEMPTS", 3))

    # Scheduled jobs
    SCHEDULER_ENABLED = bool(data.get("SCHEDULER_ENABLED", False))
    SCHEDULER_POLL_SECONDS = int(data.get("SCHEDULER_POLL_SECONDS", 300))
    SWEEP_HOUR_UTC = int(data.get("SWEEP_HOUR_UTC", 2))
    INVOICE_RUN_HOUR_UTC = int(data.get("INVOICE_RUN_HOUR_UTC", 3))
    JOB_LOCK_TTL_SECONDS = int(data.get("JOB_LOCK_TTL_SECONDS", 900))
