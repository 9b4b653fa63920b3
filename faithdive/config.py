import os

from .storage import DEFAULT_QUOTA_BYTES

DEFAULT_CONFIG = {
    "host": "0.0.0.0",
    "port": 3000,
    "env": "development",
    "bible_api_key": "",
    "bible_api_base_url": "https://api.scripture.api.bible/v1",
    "bible_api_timeout": 30,
    "data_dir": "",
    "public_dir": "",
    "storage_quota": DEFAULT_QUOTA_BYTES,
    "origin": "",
}

ENV_VARS = {
    "host": "HOST",
    "port": "PORT",
    "env": "FAITHDIVE_ENV",
    "bible_api_key": "BIBLE_API_KEY",
    "bible_api_base_url": "BIBLE_API_BASE_URL",
    "bible_api_timeout": "BIBLE_API_TIMEOUT",
    "data_dir": "FAITHDIVE_DATA_DIR",
    "public_dir": "FAITHDIVE_PUBLIC_DIR",
    "storage_quota": "FAITHDIVE_STORAGE_QUOTA",
    "origin": "FAITHDIVE_ORIGIN",
}

_INT_KEYS = ("port", "bible_api_timeout", "storage_quota")


def _to_positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def normalize_config(config):
    out = {**DEFAULT_CONFIG, **(config or {})}
    for key in _INT_KEYS:
        out[key] = _to_positive_int(out.get(key), DEFAULT_CONFIG[key])
    for key, default in DEFAULT_CONFIG.items():
        if key not in _INT_KEYS:
            out[key] = str(out.get(key) or default).strip()
    out["bible_api_base_url"] = out["bible_api_base_url"].rstrip("/")
    if not out["origin"]:
        out["origin"] = f"http://localhost:{out['port']}"
    return out


def load_config(environ=None):
    environ = os.environ if environ is None else environ
    config = {key: environ[var] for key, var in ENV_VARS.items() if environ.get(var)}
    return normalize_config(config)
