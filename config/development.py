import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "daycare_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Billing rates (strings so they become exact Decimals)
HOURLY_RATE = os.getenv("HOURLY_RATE", "15")
TAX_RATE = os.getenv("TAX_RATE", "0.1")
FULL_DAY_HOURS = os.getenv("FULL_DAY_HOURS", "8")
FULL_DAY_RATE = os.getenv("FULL_DAY_RATE", "100")
INVOICE_DUE_DAYS = int(os.getenv("INVOICE_DUE_DAYS", "15"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo classrooms and accounts on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
