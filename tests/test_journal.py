import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from faithdive.journal import JournalRepository, extract_book_name
from faithdive.persistence import PersistenceAdapter
from faithdive.storage import LocalStorage
from faithdive.store import Store
from faithdive.utils import format_date


class ExtractBookNameTests(unittest.TestCase):
    def test_plain_book(self):
        self.assertEqual(extract_book_name("John 3:16"), "John")

    def test_numbered_book(self):
        self.assertEqual(extract_book_name("1 Corinthians 13:4"), "1 Corinthians")

    def test_multi_word_book(self):
        self.assertEqual(extract_book_name("Song of Solomon 2:4"), "Song of Solomon")

    def test_chapter_only_reference(self):
        self.assertEqual(extract_book_name("Psalm 23"), "Psalm")

    def test_reference_without_book_falls_back_to_whole_string(self):
        self.assertEqual(extract_book_name("3:16"), "3:16")


class FormatDateTests(unittest.TestCase):
    def setUp(self):
        self.now = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    def test_today(self):
        self.assertEqual(format_date(self.now.isoformat(), now=self.now), "Today")

    def test_yesterday(self):
        self.assertEqual(format_date((self.now - timedelta(days=1)).isoformat(), now=self.now), "Yesterday")

    def test_days_ago(self):
        self.assertEqual(format_date((self.now - timedelta(days=3)).isoformat(), now=self.now), "3 days ago")

    def test_older_dates_use_month_day_year(self):
        self.assertEqual(format_date("2026-10-01T08:30:00.000Z", now=self.now, tz=timezone.utc), "Oct 1, 2026")

    def test_older_dates_use_the_viewers_calendar_day(self):
        eastern = timezone(timedelta(hours=-5))
        self.assertEqual(format_date("2026-10-01T02:00:00.000Z", now=self.now, tz=eastern), "Sep 30, 2026")
        self.assertEqual(format_date("2026-10-01T02:00:00.000Z", now=self.now, tz=timezone.utc), "Oct 1, 2026")


class JournalRepositoryTests(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        storage = LocalStorage(str(Path(self.temp_dir.name) / "local_storage.json"))
        self.store = Store(PersistenceAdapter(storage))
        self.store.initialize()
        self.journals = JournalRepository(self.store)

    def tearDown(self):
        self.store.close()
        self.temp_dir.cleanup()

    def test_create_derives_book_and_stamps_timestamp(self):
        entry = self.journals.create("1 Corinthians 13:4", "Love is patient", "On patience")

        self.assertEqual(entry["book"], "1 Corinthians")
        stored = self.journals.get_by_id(entry["id"])
        self.assertEqual(stored, entry)
        self.assertTrue(stored["timestamp"].startswith(str(datetime.now(timezone.utc).year)))

    def test_update_rederives_book_and_keeps_timestamp(self):
        entry = self.journals.create("John 3:16", "For God so loved", "first")

        updated = self.journals.update(entry["id"], "Romans 8:28", "All things work", "second")

        self.assertEqual(updated["book"], "Romans")
        self.assertEqual(updated["notes"], "second")
        self.assertEqual(updated["timestamp"], entry["timestamp"])

    def test_ids_are_not_reused_after_delete(self):
        first = self.journals.create("John 1:1", "In the beginning", "a")
        self.journals.delete(first["id"])

        second = self.journals.create("John 1:2", "The same was", "b")

        self.assertGreater(second["id"], first["id"])

    def test_delete_missing_id_is_silent(self):
        self.journals.delete(999999)
        self.assertEqual(self.journals.get_count(), 0)

    def test_get_all_sorting_and_fallback(self):
        self.journals.create("Psalm 1:1", "Blessed is the man", "one")
        self.journals.create("Genesis 1:1", "In the beginning", "two")
        self.journals.create("Mark 1:1", "The beginning of the gospel", "three")

        newest_first = [e["notes"] for e in self.journals.get_all()]
        by_book = [e["book"] for e in self.journals.get_all("book", "ASC")]
        fallback = [e["notes"] for e in self.journals.get_all("notes; DROP TABLE journals", "sideways")]

        self.assertEqual(newest_first, ["three", "two", "one"])
        self.assertEqual(by_book, ["Genesis", "Mark", "Psalm"])
        self.assertEqual(fallback, newest_first)

    def test_search_is_case_insensitive_across_fields(self):
        self.journals.create("John 3:16", "For God so loved the world", "grace")
        self.journals.create("Psalm 23:1", "The Lord is my shepherd", "Comfort in LOVE")
        self.journals.create("Genesis 1:1", "In the beginning", "creation")

        found = [e["reference"] for e in self.journals.search("love")]

        self.assertEqual(found, ["Psalm 23:1", "John 3:16"])
        self.assertEqual([e["reference"] for e in self.journals.search("JOHN")], ["John 3:16"])
        self.assertEqual(self.journals.search("100%"), [])

    def test_books_and_grouping(self):
        self.journals.create("John 3:16", "For God so loved", "a")
        self.journals.create("John 1:1", "In the beginning", "b")
        self.journals.create("Acts 2:1", "When the day of Pentecost", "c")

        self.assertEqual(self.journals.get_books(), ["Acts", "John"])
        self.assertEqual(len(self.journals.get_by_book("John")), 2)
        self.assertEqual(self.journals.get_count(), 3)


if __name__ == "__main__":
    unittest.main()
