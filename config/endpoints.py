import os
from .settings import load_config

_DEFAULT_TABLE_URL = "https://SEU_PROJETO.supabase.co/rest/v1"

_config = load_config()

TABLE_STORE_URL = os.getenv(
    "SHOPFLOOR_TABLE_URL", _config.get("table_url", _DEFAULT_TABLE_URL)
).rstrip("/")
TABLE_STORE_KEY = os.getenv("SHOPFLOOR_TABLE_KEY", _config.get("table_key", ""))
OFFLINE_DB_PATH = os.getenv(
    "SHOPFLOOR_OFFLINE_DB",
    _config.get("offline_db", os.path.expanduser("~/.shopfloor_hours_offline.db")),
)
