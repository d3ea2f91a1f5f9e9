import shutil
import tempfile
import unittest
from pathlib import Path

from threatwire.utils.config_loader import ConfigError, load_sources_config
from threatwire.utils.settings import Settings


class TestLoadSourcesConfig(unittest.TestCase):
    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp(prefix="threatwire-config-"))

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def write(self, text):
        path = self.tmpdir / "sources.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_loads_sources(self):
        path = self.write(
            "sources:\n"
            "  - name: BleepingComputer\n"
            "    url: https://www.bleepingcomputer.com/feed/\n"
            "  - url: https://techcrunch.com/feed/\n"
        )
        sources = load_sources_config(path)
        self.assertEqual([s.name for s in sources], ["BleepingComputer", "https://techcrunch.com/feed/"])
        self.assertEqual(sources[1].url, "https://techcrunch.com/feed/")

    def test_empty_file_gives_no_sources(self):
        self.assertEqual(load_sources_config(self.write("")), [])

    def test_missing_url(self):
        with self.assertRaises(ConfigError):
            load_sources_config(self.write("sources:\n  - name: nothing\n"))

    def test_non_http_url(self):
        with self.assertRaises(ConfigError):
            load_sources_config(self.write("sources:\n  - url: ftp://example.com/feed\n"))

    def test_duplicate_url(self):
        text = "sources:\n  - url: https://a.example/feed\n  - url: https://a.example/feed\n"
        with self.assertRaises(ConfigError):
            load_sources_config(self.write(text))

    def test_invalid_yaml(self):
        with self.assertRaises(ConfigError):
            load_sources_config(self.write("sources: [unclosed\n"))

    def test_top_level_must_be_mapping(self):
        with self.assertRaises(ConfigError):
            load_sources_config(self.write("- url: https://a.example/feed\n"))

    def test_sources_must_be_list(self):
        with self.assertRaises(ConfigError):
            load_sources_config(self.write("sources: https://a.example/feed\n"))

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_sources_config(self.tmpdir / "absent.yaml")

    def test_shipped_config_is_valid(self):
        path = Path(__file__).resolve().parent.parent / "config" / "sources.yaml"
        self.assertEqual(len(load_sources_config(path)), 27)


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        settings = Settings.from_env({})
        self.assertEqual(settings, Settings())
        self.assertEqual(settings.fetch_interval_minutes, 15)
        self.assertEqual(settings.port, 8080)
        self.assertTrue(settings.backup_on_exit)

    def test_overrides(self):
        settings = Settings.from_env(
            {
                "THREATWIRE_DB_PATH": "/data/news.db",
                "FETCH_INTERVAL_MINUTES": "5",
                "FETCH_TIMEOUT_SECONDS": "2.5",
                "INGEST_QUEUE_SIZE": "10",
                "BACKUP_ON_EXIT": "no",
                "PORT": "9000",
            }
        )
        self.assertEqual(settings.db_path, "/data/news.db")
        self.assertEqual(settings.fetch_interval_minutes, 5)
        self.assertEqual(settings.fetch_timeout_seconds, 2.5)
        self.assertEqual(settings.queue_size, 10)
        self.assertFalse(settings.backup_on_exit)
        self.assertEqual(settings.port, 9000)

    def test_blank_values_use_defaults(self):
        self.assertEqual(Settings.from_env({"PORT": "  "}).port, 8080)

    def test_invalid_values(self):
        for env in (
            {"PORT": "http"},
            {"BACKUP_ON_EXIT": "maybe"},
            {"FETCH_INTERVAL_MINUTES": "0"},
            {"INGEST_QUEUE_SIZE": "-1"},
            {"LANGUAGE_MIN_CONFIDENCE": "1.5"},
        ):
            with self.subTest(env=env):
                with self.assertRaises(ConfigError):
                    Settings.from_env(env)


if __name__ == "__main__":
    unittest.main()
