import os


def _int_tuple(raw: str) -> tuple:
    return tuple(int(part) for part in raw.split(",") if part.strip())


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "stallsync"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Payroll engine
IN_QUERY_BATCH_SIZE = int(os.getenv("IN_QUERY_BATCH_SIZE", "30"))
WEEKEND_DAYS = _int_tuple(os.getenv("WEEKEND_DAYS", "5,6"))
# "ignore": accept and leave out of counts, "reject": refuse the write
NON_WORKING_DAY_ATTENDANCE = os.getenv("NON_WORKING_DAY_ATTENDANCE", "ignore")

CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
