import tempfile
import unittest
from pathlib import Path

from faithdive.favorites import FavoritesRepository
from faithdive.persistence import PersistenceAdapter
from faithdive.results import Err, Ok
from faithdive.storage import LocalStorage
from faithdive.store import Store

KJV = "de4e12af7f28f599-02"
ASV = "de4e12af7f28f599-01"


class FavoritesRepositoryTests(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        storage = LocalStorage(str(Path(self.temp_dir.name) / "local_storage.json"))
        self.store = Store(PersistenceAdapter(storage))
        self.store.initialize()
        self.favorites = FavoritesRepository(self.store)

    def tearDown(self):
        self.store.close()
        self.temp_dir.cleanup()

    def test_create_then_is_favorite(self):
        for reference, text, translation in (
            ("John 3:16", "For God so loved the world", KJV),
            ("Romans 8:28", "And we know that all things", ASV),
            ("Psalm 23:1", "The Lord is my shepherd", "custom-translation"),
        ):
            result = self.favorites.create(reference, text, translation)
            self.assertTrue(result.success)
            self.assertTrue(self.favorites.is_favorite(reference, translation))

    def test_duplicate_in_same_translation_is_rejected(self):
        first = self.favorites.create("John 3:16", "text", KJV)
        second = self.favorites.create("John 3:16", "text", KJV)

        self.assertIsInstance(first, Ok)
        self.assertEqual(first.value["translation"], KJV)
        self.assertFalse(second.success)
        self.assertTrue(second.is_duplicate)
        self.assertEqual(second.message, "This verse is already in your favorites")
        self.assertEqual(second.to_dict()["isDuplicate"], True)
        self.assertEqual(self.favorites.get_count(), 1)

    def test_same_verse_in_other_translation_is_allowed(self):
        self.assertTrue(self.favorites.create("John 3:16", "text", KJV).success)
        self.assertTrue(self.favorites.create("John 3:16", "text2", ASV).success)

        self.assertEqual(self.favorites.get_count(), 2)
        self.assertEqual(len(self.favorites.get_by_translation(ASV)), 1)

    def test_missing_parameters(self):
        for args in (("", "text", KJV), ("John 3:16", "", KJV), ("John 3:16", "text", "")):
            result = self.favorites.create(*args)
            self.assertEqual(result, Err("missing_parameters", "Missing required parameters"))
            self.assertFalse(result.is_duplicate)
        self.assertEqual(self.favorites.get_count(), 0)

    def test_uniqueness_holds_across_create_and_delete(self):
        for _ in range(3):
            created = self.favorites.create("John 3:16", "text", KJV)
            self.favorites.create("John 3:16", "text", KJV)
            rows = self.store.query(
                "SELECT COUNT(*) AS n FROM favorites WHERE reference = ? AND translation = ?",
                ("John 3:16", KJV),
            )
            self.assertEqual(rows[0]["n"], 1)
            self.assertTrue(self.favorites.delete(created.value["id"]).success)
        self.assertFalse(self.favorites.is_favorite("John 3:16", KJV))

    def test_delete_reports_not_found_and_invalid_ids(self):
        self.assertEqual(self.favorites.delete(999999).to_dict(), {"success": False, "message": "Favorite not found"})
        for bad in (0, -4, "1", None, 1.5, True):
            result = self.favorites.delete(bad)
            self.assertEqual(result.message, "Invalid favorite ID")

    def test_delete_existing(self):
        created = self.favorites.create("John 3:16", "text", KJV)

        result = self.favorites.delete(created.value["id"])

        match result:
            case Ok(message=message):
                self.assertEqual(message, "Removed from favorites successfully")
            case Err():
                self.fail("expected Ok")
        self.assertIsNone(self.favorites.get_by_id(created.value["id"]))

    def test_get_all_sort_fallback(self):
        self.favorites.create("Psalm 1:1", "text", KJV)
        self.favorites.create("Acts 1:1", "text", KJV)

        self.assertEqual([f["reference"] for f in self.favorites.get_all("reference", "ASC")], ["Acts 1:1", "Psalm 1:1"])
        self.assertEqual([f["reference"] for f in self.favorites.get_all("bogus", "bogus")], ["Acts 1:1", "Psalm 1:1"])

    def test_translation_display_names(self):
        self.assertEqual(self.favorites.get_translation_display_name(KJV), "KJV")
        self.assertEqual(self.favorites.get_translation_display_name(ASV), "ASV")
        self.assertEqual(self.favorites.get_translation_display_name("9879dbb7cfe39e4d-01"), "WEB")
        self.assertEqual(self.favorites.get_translation_display_name("abcdef0123456789"), "abcdef01")


if __name__ == "__main__":
    unittest.main()
