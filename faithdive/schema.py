SCHEMA_SQL = r"""
CREATE TABLE IF NOT EXISTS meta (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS journals (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  reference TEXT NOT NULL,
  verse_text TEXT NOT NULL,
  notes TEXT NOT NULL,
  book TEXT NOT NULL,
  timestamp TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS favorites (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  reference TEXT NOT NULL,
  verse_text TEXT NOT NULL DEFAULT '',
  translation TEXT NOT NULL,
  created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS settings (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_journals_timestamp ON journals(timestamp);
CREATE INDEX IF NOT EXISTS idx_journals_book ON journals(book);
CREATE INDEX IF NOT EXISTS idx_favorites_ref_translation ON favorites(reference, translation);
"""
