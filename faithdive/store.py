import logging
import sqlite3
import threading
from contextlib import contextmanager

from .constants import DEFAULT_SETTINGS, SCHEMA_VERSION
from .errors import PersistenceError, StoreError
from .schema import SCHEMA_SQL

logger = logging.getLogger("FaithDive")


class Store:
    """In-memory SQLite database whose image is flushed after every mutation.

    The store is the single source of truth for journals, favorites and
    settings. It does no business validation; repositories do that before
    issuing statements.
    """

    def __init__(self, persistence):
        self.persistence = persistence
        self._conn = None
        self._lock = threading.RLock()
        self._batch_depth = 0
        self._dirty = False

    @property
    def initialized(self):
        return self._conn is not None

    def _connect(self):
        conn = sqlite3.connect(":memory:", check_same_thread=False, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self):
        with self._lock:
            if self._conn is not None:
                return
            image = self.persistence.load()
            conn = self._connect()
            try:
                if image:
                    self._load_image(conn, image)
                    changed = self._migrate_db(conn)
                    logger.info("Loaded existing database (%d bytes)", len(image))
                else:
                    self._create_schema(conn)
                    changed = True
                    logger.info("Created new database")
            except sqlite3.Error as exc:
                conn.close()
                raise StoreError(f"failed to initialize database: {exc}") from exc
            self._conn = conn
            if changed:
                self._flush()

    @staticmethod
    def _load_image(conn, image):
        try:
            conn.deserialize(image)
            conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
        except sqlite3.DatabaseError as exc:
            conn.close()
            raise PersistenceError(PersistenceError.CORRUPT_IMAGE, str(exc)) from exc

    def _create_schema(self, conn):
        conn.executescript(SCHEMA_SQL)
        self._insert_default_settings(conn)
        conn.execute(
            "INSERT OR REPLACE INTO meta(key,value) VALUES('schema_version', ?)",
            (SCHEMA_VERSION,),
        )

    @staticmethod
    def _insert_default_settings(conn):
        before = conn.total_changes
        conn.executemany("INSERT OR IGNORE INTO settings(key,value) VALUES(?,?)", DEFAULT_SETTINGS)
        return conn.total_changes != before

    def _migrate_db(self, conn):
        changed = False
        conn.executescript(SCHEMA_SQL)
        cols = {row["name"] for row in conn.execute("PRAGMA table_info(favorites)").fetchall()}
        if "verse_text" not in cols:
            conn.execute("ALTER TABLE favorites ADD COLUMN verse_text TEXT NOT NULL DEFAULT ''")
            logger.info("Migrated favorites table: added verse_text column")
            changed = True
        if self._insert_default_settings(conn):
            changed = True
        row = conn.execute("SELECT value FROM meta WHERE key = 'schema_version'").fetchone()
        if not row or row["value"] != SCHEMA_VERSION:
            conn.execute(
                "INSERT OR REPLACE INTO meta(key,value) VALUES('schema_version', ?)",
                (SCHEMA_VERSION,),
            )
            changed = True
        return changed

    def _require_conn(self):
        if self._conn is None:
            raise StoreError("database is not initialized")
        return self._conn

    def _flush(self):
        self.persistence.flush(self.image())

    def _mark_dirty(self):
        if self._batch_depth:
            self._dirty = True
            return
        self._flush()

    def image(self):
        with self._lock:
            return self._require_conn().serialize()

    def execute(self, statement, params=()):
        """Run a mutating statement, flush, and return the last inserted rowid."""
        with self._lock:
            conn = self._require_conn()
            try:
                cur = conn.execute(statement, tuple(params))
            except sqlite3.Error as exc:
                raise StoreError(str(exc)) from exc
            self._mark_dirty()
            return cur.lastrowid

    def query(self, statement, params=()):
        with self._lock:
            conn = self._require_conn()
            try:
                rows = conn.execute(statement, tuple(params)).fetchall()
            except sqlite3.Error as exc:
                raise StoreError(str(exc)) from exc
            return [dict(row) for row in rows]

    def query_one(self, statement, params=()):
        rows = self.query(statement, params)
        return rows[0] if rows else None

    @contextmanager
    def batch(self):
        """Defer flushing until the outermost batch exits.

        Not a SQL transaction: statements that ran before an exception stay
        applied, and the exit still flushes so the slot matches memory.
        """
        with self._lock:
            self._batch_depth += 1
            try:
                yield self
            finally:
                self._batch_depth -= 1
                if self._batch_depth == 0 and self._dirty:
                    self._dirty = False
                    self._flush()

    def close(self):
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
