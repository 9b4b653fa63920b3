APP_NAME = "Faith Dive"

SCHEMA_VERSION = "2"

EXPORT_VERSION = "1.0.0"

DB_SLOT = "faithdive_db"

CACHE_PREFIX = "faithdive-"
CACHE_VERSION = "1.0.1"

DEFAULT_TRANSLATION = "de4e12af7f28f599-02"

DEFAULT_SETTINGS = (
    ("translation", DEFAULT_TRANSLATION),
    ("theme", "light"),
    ("viewMode", "byBook"),
)

KNOWN_TRANSLATIONS = {
    "de4e12af7f28f599-02": "KJV",
    "de4e12af7f28f599-01": "ASV",
    "9879dbb7cfe39e4d-01": "WEB",
}

# Application shell cached for offline use.
STATIC_ASSETS = (
    "/",
    "/index.html",
    "/css/style.css",
    "/js/app.js",
    "/js/database.js",
    "/js/favorites.js",
    "/js/journal.js",
    "/js/bibleSearch.js",
    "/js/theme.js",
    "/manifest.json",
    "https://cdnjs.cloudflare.com/ajax/libs/sql.js/1.8.0/sql-wasm.js",
    "https://cdnjs.cloudflare.com/ajax/libs/sql.js/1.8.0/sql-wasm.wasm",
)

RUNTIME_ORIGINS = ("https://cdnjs.cloudflare.com",)
