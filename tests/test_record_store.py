import tempfile
import unittest
from pathlib import Path

from hostbook.core.errors import HostbookError, InvalidProfile, StoreUnreadable
from hostbook.core.models import ConnectionProfile
from hostbook.core.record_store import RecordStore


def _profile(name="web", description="prod box", address="10.0.0.5", user="ubuntu", key_file="web.pem"):
    return ConnectionProfile(name, description, address, user, key_file)


class RecordStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "data" / "connections.txt"
        self.store = RecordStore(self.path)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_lists_nothing(self):
        listing = self.store.load()
        self.assertEqual(listing.profiles, [])
        self.assertEqual(listing.issues, [])

    def test_append_creates_file_and_round_trips(self):
        profile = _profile()
        self.store.append(profile)

        self.assertTrue(self.path.exists())
        self.assertEqual(self.path.read_text(encoding="utf-8"), "web|prod box|10.0.0.5|ubuntu|web.pem\n")
        self.assertEqual(self.store.list(), [profile])

    def test_append_preserves_existing_order(self):
        first = _profile(name="db", address="10.0.0.6", key_file="db.pem")
        second = _profile(name="web")
        third = _profile(name="cache", description="", address="cache.internal")

        for profile in (first, second, third):
            self.store.append(profile)

        self.assertEqual(self.store.list(), [first, second, third])

    def test_append_does_not_merge_with_unterminated_last_line(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("db||10.0.0.6|root|db.pem", encoding="utf-8")

        self.store.append(_profile())

        lines = self.path.read_text(encoding="utf-8").splitlines()
        self.assertEqual(lines, ["db||10.0.0.6|root|db.pem", "web|prod box|10.0.0.5|ubuntu|web.pem"])

    def test_empty_description_survives(self):
        profile = _profile(description="")
        self.store.append(profile)
        self.assertEqual(self.store.list()[0].description, "")

    def test_malformed_lines_are_reported_not_raised(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(
            "web|prod box|10.0.0.5|ubuntu|web.pem\n"
            "broken|only|three\n"
            "\n"
            "single\n"
            "db|primary|10.0.0.6|root|db.pem\n",
            encoding="utf-8",
        )

        listing = self.store.load()

        self.assertEqual([p.name for p in listing.profiles], ["web", "db"])
        self.assertEqual([issue.line_number for issue in listing.issues], [2, 4])
        self.assertIn("expected 5 fields", listing.issues[0].reason)

    def test_line_with_extra_fields_is_malformed(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("a|b|c|d|e|f\n", encoding="utf-8")

        listing = self.store.load()

        self.assertEqual(listing.profiles, [])
        self.assertEqual(len(listing.issues), 1)

    def test_windows_line_endings(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_bytes(b"web|prod box|10.0.0.5|ubuntu|web.pem\r\n")
        self.assertEqual(self.store.list()[0].key_file, "web.pem")

    def test_append_rejects_separator_in_field(self):
        with self.assertRaises(InvalidProfile):
            self.store.append(_profile(description="prod | staging"))
        self.assertFalse(self.path.exists())

    def test_append_rejects_newline_in_field(self):
        with self.assertRaises(InvalidProfile):
            self.store.append(_profile(name="web\nx"))

    def test_append_requires_name_address_and_key(self):
        for kwargs in ({"name": ""}, {"address": " "}, {"key_file": ""}, {"user": ""}):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(InvalidProfile):
                    self.store.append(_profile(**kwargs))

    def test_invalid_utf8_line_is_reported_not_raised(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_bytes(
            b"web|prod|10.0.0.5|ubuntu|web.pem\n"
            b"bad\xff|x|1.2.3.4|u|k\n"
            b"db|primary|10.0.0.6|root|db.pem\n"
        )

        listing = self.store.load()

        self.assertEqual([p.name for p in listing.profiles], ["web", "db"])
        self.assertEqual(len(listing.issues), 1)
        self.assertEqual(listing.issues[0].line_number, 2)
        self.assertIn("not valid UTF-8", listing.issues[0].reason)

    def test_unreadable_store_raises_recoverable_error(self):
        self.path.mkdir(parents=True)

        with self.assertRaises(StoreUnreadable) as ctx:
            self.store.load()

        self.assertIsInstance(ctx.exception, HostbookError)
        self.assertIn(str(self.path), str(ctx.exception))


class ConnectionProfileTests(unittest.TestCase):
    def test_target(self):
        self.assertEqual(_profile().target, "ubuntu@10.0.0.5")

    def test_from_line_rejects_short_line(self):
        with self.assertRaises(ValueError):
            ConnectionProfile.from_line("web|10.0.0.5")


if __name__ == "__main__":
    unittest.main()
