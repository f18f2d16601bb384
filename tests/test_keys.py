import os
import stat
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from hostbook.core.errors import KeyNotFound, PermissionRepairFailed
from hostbook.core.keys import KeyResolver, parse_icacls_output


class KeyResolveTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.keys_dir = root / "keys"
        self.fallback_dir = root / "home" / ".ssh"
        self.keys_dir.mkdir()
        self.fallback_dir.mkdir(parents=True)
        self.resolver = KeyResolver(self.keys_dir, self.fallback_dir, platform="posix")

    def tearDown(self):
        self._tmp.cleanup()

    def test_prefers_local_keys_dir(self):
        (self.keys_dir / "web.pem").write_text("local")
        (self.fallback_dir / "web.pem").write_text("fallback")
        self.assertEqual(self.resolver.resolve("web.pem"), self.keys_dir / "web.pem")

    def test_falls_back_to_ssh_dir(self):
        (self.fallback_dir / "web.pem").write_text("fallback")
        self.assertEqual(self.resolver.resolve("web.pem"), self.fallback_dir / "web.pem")

    def test_not_found_reports_both_paths(self):
        with self.assertRaises(KeyNotFound) as ctx:
            self.resolver.resolve("missing.pem")

        self.assertEqual(
            ctx.exception.checked,
            [self.keys_dir / "missing.pem", self.fallback_dir / "missing.pem"],
        )
        self.assertIn(str(self.keys_dir / "missing.pem"), str(ctx.exception))
        self.assertIn(str(self.fallback_dir / "missing.pem"), str(ctx.exception))

    def test_directory_with_key_name_is_not_a_key(self):
        (self.keys_dir / "web.pem").mkdir()
        with self.assertRaises(KeyNotFound):
            self.resolver.resolve("web.pem")


@unittest.skipIf(os.name == "nt", "POSIX file modes")
class PosixPermissionTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.key = Path(self._tmp.name) / "web.pem"
        self.key.write_text("secret")
        self.resolver = KeyResolver(Path(self._tmp.name), Path(self._tmp.name), platform="posix")

    def tearDown(self):
        self._tmp.cleanup()

    def test_open_permissions_are_restricted(self):
        os.chmod(self.key, 0o644)

        self.assertTrue(self.resolver.ensure_private_permissions(self.key))
        self.assertEqual(stat.S_IMODE(self.key.stat().st_mode), 0o600)

    def test_private_key_is_left_alone(self):
        os.chmod(self.key, 0o400)

        self.assertFalse(self.resolver.ensure_private_permissions(self.key))
        self.assertEqual(stat.S_IMODE(self.key.stat().st_mode), 0o400)

    def test_chmod_failure_is_reported(self):
        os.chmod(self.key, 0o644)
        with patch("hostbook.core.keys.os.chmod", side_effect=PermissionError("denied")):
            with self.assertRaises(PermissionRepairFailed):
                self.resolver.ensure_private_permissions(self.key)


ICACLS_OPEN = (
    "C:\\tools\\keys\\web.pem NT AUTHORITY\\SYSTEM:(I)(F)\n"
    "                        BUILTIN\\Administrators:(I)(F)\n"
    "                        DESKTOP-1\\alice:(I)(F)\n"
    "                        BUILTIN\\Users:(I)(RX)\n"
    "\n"
    "Successfully processed 1 files; Failed processing 0 files\n"
)

ICACLS_PRIVATE = (
    "C:\\tools\\keys\\web.pem DESKTOP-1\\alice:(F)\n"
    "                        NT AUTHORITY\\SYSTEM:(F)\n"
    "\n"
    "Successfully processed 1 files; Failed processing 0 files\n"
)


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=["icacls"], returncode=returncode, stdout=stdout, stderr=stderr)


class WindowsPermissionTests(unittest.TestCase):
    def setUp(self):
        self.key = Path("C:\\tools\\keys\\web.pem")
        self.resolver = KeyResolver(Path("keys"), Path("fallback"), platform="nt")
        env = patch.dict(os.environ, {"USERNAME": "alice"})
        env.start()
        self.addCleanup(env.stop)

    def test_parse_icacls_output(self):
        entries = parse_icacls_output(self.key, ICACLS_OPEN)
        self.assertEqual(
            entries,
            [
                ("NT AUTHORITY\\SYSTEM", ["I", "F"]),
                ("BUILTIN\\Administrators", ["I", "F"]),
                ("DESKTOP-1\\alice", ["I", "F"]),
                ("BUILTIN\\Users", ["I", "RX"]),
            ],
        )

    def test_other_principal_triggers_repair(self):
        with patch("hostbook.core.keys.subprocess.run") as run:
            run.side_effect = [_completed(stdout=ICACLS_OPEN), _completed(), _completed()]

            self.assertTrue(self.resolver.ensure_private_permissions(self.key))

        calls = [c.args[0] for c in run.call_args_list]
        self.assertEqual(calls[1], ["icacls", str(self.key), "/inheritance:r", "/grant:r", "alice:F"])
        self.assertEqual(calls[2], ["icacls", str(self.key), "/remove:g", "BUILTIN\\Users"])

    def test_private_acl_is_left_alone(self):
        with patch("hostbook.core.keys.subprocess.run") as run:
            run.return_value = _completed(stdout=ICACLS_PRIVATE)

            self.assertFalse(self.resolver.ensure_private_permissions(self.key))

        self.assertEqual(run.call_count, 1)

    def test_rejected_change_raises(self):
        with patch("hostbook.core.keys.subprocess.run") as run:
            run.side_effect = [
                _completed(stdout=ICACLS_OPEN),
                _completed(returncode=5, stderr="Access is denied."),
            ]

            with self.assertRaises(PermissionRepairFailed) as ctx:
                self.resolver.ensure_private_permissions(self.key)

        self.assertIn("Access is denied.", str(ctx.exception))

    def test_missing_icacls_raises(self):
        with patch("hostbook.core.keys.subprocess.run", side_effect=FileNotFoundError("icacls")):
            with self.assertRaises(PermissionRepairFailed):
                self.resolver.ensure_private_permissions(self.key)


if __name__ == "__main__":
    unittest.main()
