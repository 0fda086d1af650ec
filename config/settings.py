import logging
import os

LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"

# Frankfurter API (no key required): https://api.frankfurter.dev/v1/latest
EXCHANGE_BASE_URL = os.getenv("EXCHANGE_API_BASE", "https://api.frankfurter.dev/v1")
EXCHANGE_TIMEOUT_SEC = float(os.getenv("EXCHANGE_TIMEOUT_SEC", "10.0"))

DEFAULT_BASE_CURRENCY = os.getenv("DEFAULT_BASE_CURRENCY", "USD")
DEFAULT_BASE_AMOUNT = os.getenv("DEFAULT_BASE_AMOUNT", "1.00")
HISTORY_DAYS = int(os.getenv("HISTORY_DAYS", "30"))
