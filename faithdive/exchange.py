import json
import logging

from .constants import EXPORT_VERSION
from .errors import ImportDataError
from .journal import extract_book_name
from .utils import now_iso

logger = logging.getLogger("FaithDive")

RECOGNIZED_KEYS = ("journals", "favorites", "settings")


class DataExchange:
    """Full backup/restore of user data as a versioned JSON document.

    Import is a restore, never a merge: with ``replace=True`` every journal
    and favorite row is dropped before the document's rows are inserted with
    fresh ids. Settings are only ever upserted.
    """

    def __init__(self, store, favorites, settings):
        self.store = store
        self.favorites = favorites
        self.settings = settings

    def export_all(self):
        return {
            "version": EXPORT_VERSION,
            "exportDate": now_iso(),
            "journals": self.store.query(
                "SELECT id, reference, verse_text, notes, book, timestamp FROM journals "
                "ORDER BY timestamp DESC, id DESC"
            ),
            "favorites": self.store.query(
                "SELECT id, reference, verse_text, translation, created_at FROM favorites "
                "ORDER BY created_at DESC, id DESC"
            ),
            "settings": self.store.query("SELECT key, value FROM settings ORDER BY key ASC"),
        }

    def export_json(self):
        return json.dumps(self.export_all(), ensure_ascii=False, indent=2)

    def import_json(self, text, replace=False):
        try:
            doc = json.loads(text or "")
        except ValueError as exc:
            raise ImportDataError(ImportDataError.INVALID_JSON, str(exc)) from exc
        return self.import_all(doc, replace=replace)

    def import_all(self, doc, replace=False):
        sections = self._validate(doc)

        result = {
            "journals": 0,
            "favorites": 0,
            "settings": 0,
            "skipped": 0,
            "errors": [],
        }
        handlers = {
            "journals": self._import_journal,
            "favorites": self._import_favorite,
            "settings": self._import_setting,
        }

        with self.store.batch():
            if replace:
                self.store.execute("DELETE FROM journals")
                self.store.execute("DELETE FROM favorites")
            for section in RECOGNIZED_KEYS:
                for payload in sections[section]:
                    try:
                        imported = handlers[section](payload)
                    except (TypeError, ValueError) as exc:
                        result["skipped"] += 1
                        result["errors"].append({"record_type": section, "error": str(exc)})
                        continue
                    if imported:
                        result[section] += 1
                    else:
                        result["skipped"] += 1

        logger.info(
            "Imported %d journals, %d favorites, %d settings (replace=%s, skipped=%d)",
            result["journals"],
            result["favorites"],
            result["settings"],
            replace,
            result["skipped"],
        )
        return result

    @staticmethod
    def _validate(doc):
        if not isinstance(doc, dict):
            raise ImportDataError(ImportDataError.NO_RECOGNIZED_DATA, "document must be a JSON object")
        if all(doc.get(key) is None for key in RECOGNIZED_KEYS):
            raise ImportDataError(ImportDataError.NO_RECOGNIZED_DATA)
        sections = {}
        for key in RECOGNIZED_KEYS:
            value = doc.get(key)
            if value is None:
                value = []
            if not isinstance(value, list):
                raise ImportDataError(ImportDataError.NO_RECOGNIZED_DATA, f"{key} must be a list")
            sections[key] = value
        return sections

    @staticmethod
    def _text(payload, *names):
        for name in names:
            value = payload.get(name)
            if value is not None:
                return str(value)
        return ""

    def _import_journal(self, payload):
        if not isinstance(payload, dict):
            raise TypeError("journal entry must be an object")
        reference = self._text(payload, "reference")
        verse_text = self._text(payload, "verse_text", "verseText")
        notes = self._text(payload, "notes")
        if not reference.strip() or not verse_text.strip() or not notes.strip():
            raise ValueError(f"journal entry {reference!r} is missing reference, verse text or notes")
        book = self._text(payload, "book") or extract_book_name(reference)
        timestamp = self._text(payload, "timestamp") or now_iso()
        self.store.execute(
            "INSERT INTO journals(reference,verse_text,notes,book,timestamp) VALUES(?,?,?,?,?)",
            (reference, verse_text, notes, book, timestamp),
        )
        return True

    def _import_favorite(self, payload):
        if not isinstance(payload, dict):
            raise TypeError("favorite must be an object")
        reference = self._text(payload, "reference")
        translation = self._text(payload, "translation")
        if not reference.strip() or not translation.strip():
            raise ValueError("favorite is missing reference or translation")
        if self.favorites.is_favorite(reference, translation):
            return False
        self.store.execute(
            "INSERT INTO favorites(reference,verse_text,translation,created_at) VALUES(?,?,?,?)",
            (
                reference,
                self._text(payload, "verse_text", "verseText"),
                translation,
                self._text(payload, "created_at", "createdAt") or now_iso(),
            ),
        )
        return True

    def _import_setting(self, payload):
        if not isinstance(payload, dict):
            raise TypeError("setting must be an object")
        key = self._text(payload, "key")
        if not key:
            raise ValueError("setting is missing key")
        self.settings.set(key, self._text(payload, "value"))
        return True
