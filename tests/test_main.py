import csv

from threatwire.main import load_sources, main, restore_if_empty
from threatwire.processors import default_sources
from threatwire.storage import CSV_HEADER, export_csv_file

from .helpers import StoreTestCase, make_article


class TestMain(StoreTestCase):
    def test_export_and_import_modes(self):
        self.store.insert_if_absent(make_article("https://e/a"))
        backup = self.tmpdir / "out.csv"
        self.assertEqual(main(["--db", str(self.tmpdir / "news.db"), "--export", str(backup)]), 0)

        target_db = self.tmpdir / "copy.db"
        self.assertEqual(main(["--db", str(target_db), "--import", str(backup)]), 0)
        with backup.open(encoding="utf-8", newline="") as fh:
            self.assertEqual(tuple(next(csv.reader(fh))), CSV_HEADER)

    def test_import_missing_file_fails(self):
        code = main(["--db", str(self.tmpdir / "news.db"), "--import", str(self.tmpdir / "absent.csv")])
        self.assertEqual(code, 1)

    def test_restore_if_empty(self):
        self.store.insert_if_absent(make_article("https://e/a"))
        backup = self.tmpdir / "articles.csv"
        export_csv_file(self.store, backup)

        from threatwire.storage import ArticleStore

        empty = ArticleStore(self.tmpdir / "empty.db")
        restore_if_empty(empty, backup)
        self.assertEqual(empty.count(), 1)

    def test_restore_skipped_when_store_has_data(self):
        backup = self.tmpdir / "articles.csv"
        with backup.open("w", encoding="utf-8", newline="") as fh:
            csv.writer(fh).writerows([CSV_HEADER, ["t", "d", "", "https://e/other", "s", "2024-01-01T00:00:00Z", "1", "Tech"]])
        self.store.insert_if_absent(make_article("https://e/a"))
        restore_if_empty(self.store, backup)
        self.assertEqual(self.store.count(), 1)

    def test_restore_without_backup_file(self):
        restore_if_empty(self.store, self.tmpdir / "missing.csv")
        self.assertEqual(self.store.count(), 0)

    def test_load_sources_falls_back_to_builtin_list(self):
        self.assertEqual(load_sources(self.tmpdir / "absent.yaml"), default_sources())
