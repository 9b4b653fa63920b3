import logging

from .constants import DEFAULT_SETTINGS, DEFAULT_TRANSLATION

logger = logging.getLogger("FaithDive")

THEMES = ("light", "dark")


class SettingsRepository:
    def __init__(self, store):
        self.store = store

    def get(self, key, default=None):
        row = self.store.query_one("SELECT value FROM settings WHERE key = ?", (key,))
        return row["value"] if row else default

    def set(self, key, value):
        self.store.execute(
            "INSERT OR REPLACE INTO settings(key,value) VALUES(?,?)",
            (key, str(value)),
        )

    def get_all(self):
        return self.store.query("SELECT key, value FROM settings ORDER BY key ASC")

    def get_translation(self):
        return self.get("translation") or DEFAULT_TRANSLATION

    def set_translation(self, translation_id):
        self.set("translation", translation_id)

    def get_theme(self):
        return "dark" if self.get("theme") == "dark" else "light"

    def get_view_mode(self):
        return self.get("viewMode") or dict(DEFAULT_SETTINGS)["viewMode"]


class ThemeController:
    """Light/dark switch backed by the ``theme`` setting."""

    def __init__(self, settings):
        self.settings = settings
        self.theme = "light"

    def init(self):
        self.set_theme(self.settings.get_theme())
        return self.theme

    def set_theme(self, theme):
        if theme not in THEMES:
            raise ValueError(f"unknown theme: {theme!r}")
        self.theme = theme
        self.settings.set("theme", theme)

    def toggle(self):
        self.set_theme("dark" if self.theme == "light" else "light")
        logger.debug("Theme switched to %s", self.theme)
        return self.theme

    @property
    def is_dark_mode(self):
        return self.theme == "dark"
