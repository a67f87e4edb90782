"""
Paths, logging setup, config load/save, safe_print.
"""

import os
import json
import sys
import logging
from pathlib import Path


# ─── Paths ───────────────────────────────────────────────────────
# One config/cache set per OS user.
_FOLDER_NAME = "HeronixDesk"

if sys.platform == "win32":
    BASE_DIR = Path(os.environ.get("APPDATA", Path.home())) / _FOLDER_NAME
else:
    BASE_DIR = Path.home() / ".heronix-desk"

BASE_DIR.mkdir(parents=True, exist_ok=True)

CONFIG_FILE = BASE_DIR / "config.json"
LOG_FILE = BASE_DIR / "desk.log"
PENDING_SYNC_FILE = BASE_DIR / "pending.jsonl"
ROSTER_CACHE_FILE = BASE_DIR / "students.json"
GRADING_CATEGORIES_FILE = BASE_DIR / "categories.json"


# ─── Safe print (no crash under pythonw) ─────────────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

try:
    if LOG_FILE.exists() and LOG_FILE.stat().st_size > 1_000_000:
        LOG_FILE.write_text("")
except OSError:
    pass

logging.basicConfig(
    filename=str(LOG_FILE),
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    encoding="utf-8",
)
log = logging.getLogger("desk")

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
log.addHandler(console_handler)


# ─── Config Management ──────────────────────────────────────────

DEFAULT_CONFIG = {
    "adminServerUrl": "http://localhost:9590",
    "edGamesServerUrl": "http://localhost:8081",
    "talkServerUrl": "http://localhost:9680",
    "syncEnabled": True,
    "syncIntervalSec": 15,
    "syncBatchSize": 100,
    "syncApiPath": "/api/teacher-sync",
    "employeeId": "",
}


def load_config(path=None):
    """Load config from disk merged over DEFAULT_CONFIG. Always returns a dict."""
    path = Path(path) if path else CONFIG_FILE
    config = dict(DEFAULT_CONFIG)
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                stored = json.load(f)
            if isinstance(stored, dict):
                config.update(stored)
            else:
                log.warning("Ignoring malformed config at %s", path)
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not read config %s: %s — using defaults", path, e)
    return config


def save_config(config, path=None):
    """Save config dict to disk."""
    path = Path(path) if path else CONFIG_FILE
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    log.info("Config saved to %s", path)
