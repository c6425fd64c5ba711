import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "daycare_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

HOURLY_RATE = os.getenv("HOURLY_RATE", "15")
TAX_RATE = os.getenv("TAX_RATE", "0.1")
FULL_DAY_HOURS = os.getenv("FULL_DAY_HOURS", "8")
FULL_DAY_RATE = os.getenv("FULL_DAY_RATE", "100")
INVOICE_DUE_DAYS = int(os.getenv("INVOICE_DUE_DAYS", "15"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
