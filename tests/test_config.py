"""Tests for bootlib/config.py: manifest loading and validation."""

import os
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from bootlib.config import Manifest, load_manifest, parse_manifest
from bootlib.distro import PackageFamily
from bootlib.errors import ConfigError


class TestLoadManifest(unittest.TestCase):
    def _write(self, tmpdir, content):
        path = Path(tmpdir) / "bootstrap.toml"
        path.write_text(content)
        return path

    def test_shipped_manifest_matches_defaults(self):
        self.assertEqual(load_manifest(), Manifest())

    def test_partial_manifest_keeps_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, (
                '[users]\n'
                'name = "ops"\n'
                '[packages]\n'
                'apt = ["htop"]\n'
            ))
            manifest = load_manifest(path)
        self.assertEqual(manifest.user_name, "ops")
        self.assertEqual(manifest.user_shell, "/bin/bash")
        self.assertEqual(manifest.packages[PackageFamily.APT], ("htop",))
        self.assertEqual(manifest.packages[PackageFamily.DNF], ("curl", "git", "vim", "firewalld"))
        self.assertEqual(manifest.user_home, Path("/home/ops"))

    def test_sysctl_values_become_strings(self):
        manifest = parse_manifest({"hardening": {"sysctl": {"kernel.kptr_restrict": 2}}})
        self.assertEqual(manifest.sysctl, {"kernel.kptr_restrict": "2"})

    def test_family_override(self):
        manifest = parse_manifest({"distro": {"family": "dnf"}})
        self.assertEqual(manifest.family_override, "dnf")

    def test_missing_explicit_manifest(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ConfigError):
                load_manifest(Path(tmpdir) / "nope.toml")

    def test_invalid_toml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "[users\nname = ")
            with self.assertRaises(ConfigError) as ctx:
                load_manifest(path)
            self.assertIn("Invalid TOML", str(ctx.exception))

    def test_unknown_keys_are_named(self):
        with self.assertRaises(ConfigError) as ctx:
            parse_manifest({"user": {"name": "ops"}})
        self.assertIn("user", str(ctx.exception))

        with self.assertRaises(ConfigError) as ctx:
            parse_manifest({"hardening": {"drop_in": "/tmp/x.conf"}})
        self.assertIn("[hardening]: drop_in", str(ctx.exception))

    def test_bad_values(self):
        cases = [
            {"packages": {"zypper": ["vim"]}},
            {"packages": {"apt": "vim"}},
            {"users": {"name": ""}},
            {"users": "deploy"},
            {"distro": {"family": "yum"}},
            {"hardening": {"sysctl": {}}},
            {"hardening": {"sysctl": {"net.ipv4.ip_forward": True}}},
            {"ssh": {"services": []}},
            {"user": {"name": "ops"}},
            {"users": {"nmae": "ops"}},
            {"ssh": {"config": "/etc/ssh/sshd_config", "port": 22}},
        ]
        for data in cases:
            with self.subTest(data=data):
                with self.assertRaises(ConfigError):
                    parse_manifest(data)


if __name__ == '__main__':
    unittest.main()
