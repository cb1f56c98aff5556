import json
import logging
import os

logger = logging.getLogger(__name__)

CONFIG_FILE = os.getenv(
    "SHOPFLOOR_CONFIG", os.path.expanduser("~/.shopfloor_hours_config.json")
)


def load_config(path=None):
    path = path or CONFIG_FILE
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError):
        logger.warning("Ignoring unreadable config file %s", path)
        return {}


def save_config(config, path=None):
    with open(path or CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
