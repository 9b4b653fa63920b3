import logging

from .constants import KNOWN_TRANSLATIONS
from .results import Err, Ok
from .utils import format_date, now_iso

logger = logging.getLogger("FaithDive")

SORT_COLUMNS = ("created_at", "reference", "translation")
SORT_ORDERS = ("ASC", "DESC")

MSG_MISSING = "Missing required parameters"
MSG_DUPLICATE = "This verse is already in your favorites"
MSG_ADDED = "Added to favorites successfully"
MSG_INVALID_ID = "Invalid favorite ID"
MSG_NOT_FOUND = "Favorite not found"
MSG_REMOVED = "Removed from favorites successfully"


class FavoritesRepository:
    """Saved verses, at most one per (reference, translation) pair.

    Expected outcomes such as a duplicate or a missing row come back as
    ``Ok``/``Err`` results instead of exceptions.
    """

    def __init__(self, store):
        self.store = store

    def get_all(self, sort_by="created_at", order="DESC"):
        column = sort_by if sort_by in SORT_COLUMNS else "created_at"
        direction = order if order in SORT_ORDERS else "DESC"
        return self.store.query(f"SELECT * FROM favorites ORDER BY {column} {direction}, id {direction}")

    def get_by_translation(self, translation):
        return self.store.query(
            "SELECT * FROM favorites WHERE translation = ? ORDER BY created_at DESC, id DESC",
            (translation,),
        )

    def get_by_id(self, favorite_id):
        return self.store.query_one("SELECT * FROM favorites WHERE id = ?", (favorite_id,))

    def is_favorite(self, reference, translation):
        row = self.store.query_one(
            "SELECT id FROM favorites WHERE reference = ? AND translation = ?",
            (reference, translation),
        )
        return row is not None

    def create(self, reference, verse_text, translation):
        if not reference or not verse_text or not translation:
            return Err("missing_parameters", MSG_MISSING)
        if self.is_favorite(reference, translation):
            return Err("duplicate", MSG_DUPLICATE)

        created_at = now_iso()
        favorite_id = self.store.execute(
            "INSERT INTO favorites(reference,verse_text,translation,created_at) VALUES(?,?,?,?)",
            (reference, verse_text, translation, created_at),
        )
        logger.debug("Added favorite %s (%s)", reference, translation)
        return Ok(
            MSG_ADDED,
            {
                "id": favorite_id,
                "reference": reference,
                "verse_text": verse_text,
                "translation": translation,
                "created_at": created_at,
            },
        )

    def delete(self, favorite_id):
        if isinstance(favorite_id, bool) or not isinstance(favorite_id, int) or favorite_id <= 0:
            return Err("invalid_id", MSG_INVALID_ID)
        if self.get_by_id(favorite_id) is None:
            return Err("not_found", MSG_NOT_FOUND)
        self.store.execute("DELETE FROM favorites WHERE id = ?", (favorite_id,))
        return Ok(MSG_REMOVED)

    def get_count(self):
        row = self.store.query_one("SELECT COUNT(*) AS count FROM favorites")
        return int(row["count"]) if row else 0

    @staticmethod
    def format_date(iso_string, now=None, tz=None):
        return format_date(iso_string, now=now, tz=tz)

    @staticmethod
    def get_translation_display_name(translation_id):
        # Unknown ids are shortened for display only.
        return KNOWN_TRANSLATIONS.get(translation_id) or str(translation_id)[:8]
