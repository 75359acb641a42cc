"""Global configuration for ShameBot."""

import os

from dotenv import load_dotenv

load_dotenv()

# Transports
DISCORD_TOKEN = os.environ.get("DISCORD_TOKEN")
TELEGRAM_BOT_TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN")
COMMAND_PREFIX = os.environ.get("COMMAND_PREFIX", "!")

# Storage
LEDGER_BACKEND = os.environ.get("LEDGER_BACKEND", "json")
LEDGER_PATH = os.environ.get("LEDGER_PATH", "users.json")
DB_PATH = os.environ.get("DB_PATH", "shamebot.db")
POSTGRES_PARAMS = {
    "host": os.environ.get("POSTGRES_HOST", "localhost"),
    "port": int(os.environ.get("POSTGRES_PORT", "5432")),
    "dbname": os.environ.get("POSTGRES_DB", "shamebot"),
    "user": os.environ.get("POSTGRES_USER", "shamebot"),
    "password": os.environ.get("POSTGRES_PASSWORD", ""),
}

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("LOG_FILE")

# Thresholds (dollars)
ALERT_THRESHOLD = 300  # Crossing this pages the whole channel
TROLL_THRESHOLD = 200  # Start pinging at 200 dollars
SUPER_TROLL_THRESHOLD = 500  # Lay into the user at this point
