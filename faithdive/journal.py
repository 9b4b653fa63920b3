import logging
import re

from .utils import format_date, now_iso

logger = logging.getLogger("FaithDive")

SORT_COLUMNS = ("timestamp", "reference", "book")
SORT_ORDERS = ("ASC", "DESC")

_book_re = re.compile(r"^([^\d]*(?:\d+\s+)?[^\d]+)")


def extract_book_name(reference):
    """``"John 3:16"`` -> ``"John"``, ``"1 Corinthians 13:4"`` -> ``"1 Corinthians"``.

    References without a book/number boundary come back whole.
    """
    match = _book_re.match(reference or "")
    return match.group(1).strip() if match else reference


def _escape_like(text):
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class JournalRepository:
    """CRUD over journal entries.

    Callers must pass non-empty ``reference``, ``verse_text`` and ``notes``;
    the entry form validates them and this class does not check again.
    """

    def __init__(self, store):
        self.store = store

    def get_all(self, sort_by="timestamp", order="DESC"):
        column = sort_by if sort_by in SORT_COLUMNS else "timestamp"
        direction = order if order in SORT_ORDERS else "DESC"
        return self.store.query(f"SELECT * FROM journals ORDER BY {column} {direction}, id {direction}")

    def get_by_book(self, book):
        return self.store.query(
            "SELECT * FROM journals WHERE book = ? ORDER BY timestamp DESC, id DESC",
            (book,),
        )

    def get_by_id(self, entry_id):
        return self.store.query_one("SELECT * FROM journals WHERE id = ?", (entry_id,))

    def create(self, reference, verse_text, notes):
        book = extract_book_name(reference)
        timestamp = now_iso()
        entry_id = self.store.execute(
            "INSERT INTO journals(reference,verse_text,notes,book,timestamp) VALUES(?,?,?,?,?)",
            (reference, verse_text, notes, book, timestamp),
        )
        logger.debug("Created journal entry %s for %s", entry_id, reference)
        return {
            "id": entry_id,
            "reference": reference,
            "verse_text": verse_text,
            "notes": notes,
            "book": book,
            "timestamp": timestamp,
        }

    def update(self, entry_id, reference, verse_text, notes):
        self.store.execute(
            "UPDATE journals SET reference=?, verse_text=?, notes=?, book=? WHERE id=?",
            (reference, verse_text, notes, extract_book_name(reference), entry_id),
        )
        return self.get_by_id(entry_id)

    def delete(self, entry_id):
        self.store.execute("DELETE FROM journals WHERE id = ?", (entry_id,))

    def search(self, query):
        like = "%" + _escape_like(query or "") + "%"
        return self.store.query(
            r"""
            SELECT * FROM journals
            WHERE reference LIKE ? ESCAPE '\'
               OR verse_text LIKE ? ESCAPE '\'
               OR notes LIKE ? ESCAPE '\'
            ORDER BY timestamp DESC, id DESC
            """,
            (like, like, like),
        )

    def get_books(self):
        rows = self.store.query("SELECT DISTINCT book FROM journals ORDER BY book")
        return [row["book"] for row in rows]

    def get_count(self):
        row = self.store.query_one("SELECT COUNT(*) AS count FROM journals")
        return int(row["count"]) if row else 0

    @staticmethod
    def format_date(iso_string, now=None, tz=None):
        return format_date(iso_string, now=now, tz=tz)
