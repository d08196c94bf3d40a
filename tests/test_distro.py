"""Tests for bootlib/distro.py: os-release parsing and family resolution."""

import os
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from bootlib.distro import (
    FAMILY_BY_ID,
    PackageFamily,
    family_for,
    parse_family,
    parse_os_release,
    resolve,
)
from bootlib.errors import ConfigError, DetectionError


class TestFamilyTable(unittest.TestCase):
    EXPECTED = {
        "debian": PackageFamily.APT,
        "ubuntu": PackageFamily.APT,
        "rhel": PackageFamily.DNF,
        "centos": PackageFamily.DNF,
        "fedora": PackageFamily.DNF,
        "rocky": PackageFamily.DNF,
        "almalinux": PackageFamily.DNF,
        "arch": PackageFamily.PACMAN,
    }

    def test_table_is_exactly_the_known_ids(self):
        self.assertEqual(FAMILY_BY_ID, self.EXPECTED)

    def test_unknown_ids(self):
        for distro_id in ("gentoo", "opensuse-leap", "alpine", "linuxmint", ""):
            with self.subTest(distro_id=distro_id):
                self.assertIs(family_for(distro_id), PackageFamily.UNKNOWN)


class TestParseOsRelease(unittest.TestCase):
    def test_quoting_and_comments(self):
        fields = parse_os_release(
            '# comment\n'
            'NAME="Rocky Linux"\n'
            "ID='rocky'\n"
            'VERSION_ID=9.3\n'
            '\n'
            'garbage line\n'
        )
        self.assertEqual(fields["NAME"], "Rocky Linux")
        self.assertEqual(fields["ID"], "rocky")
        self.assertEqual(fields["VERSION_ID"], "9.3")
        self.assertNotIn("garbage line", fields)


class TestResolve(unittest.TestCase):
    def _write(self, tmpdir, content):
        path = Path(tmpdir) / "os-release"
        path.write_text(content)
        return path

    def test_every_table_id(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            for distro_id, family in FAMILY_BY_ID.items():
                with self.subTest(distro_id=distro_id):
                    path = self._write(tmpdir, f'NAME="{distro_id.title()}"\nID={distro_id}\n')
                    profile = resolve(path)
                    self.assertEqual(profile.id, distro_id)
                    self.assertIs(profile.family, family)

    def test_unknown_id_does_not_raise(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, 'ID=gentoo\nPRETTY_NAME="Gentoo Linux"\n')
            profile = resolve(path)
            self.assertEqual(profile.id, "gentoo")
            self.assertIs(profile.family, PackageFamily.UNKNOWN)
            self.assertEqual(profile.name, "Gentoo Linux")

    def test_override_replaces_lookup(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, 'ID=endeavouros\n')
            profile = resolve(path, override="pacman")
            self.assertIs(profile.family, PackageFamily.PACMAN)

    def test_invalid_override(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, 'ID=ubuntu\n')
            with self.assertRaises(ConfigError):
                resolve(path, override="zypper")

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(DetectionError) as ctx:
                resolve(Path(tmpdir) / "os-release")
            self.assertIn("not found", str(ctx.exception))

    def test_missing_id(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, 'NAME="Mystery"\n')
            with self.assertRaises(DetectionError):
                resolve(path)


class TestParseFamily(unittest.TestCase):
    def test_valid_names(self):
        self.assertIs(parse_family("APT"), PackageFamily.APT)
        self.assertIs(parse_family(" dnf "), PackageFamily.DNF)

    def test_unknown_is_not_a_valid_override(self):
        with self.assertRaises(ConfigError):
            parse_family("")


if __name__ == '__main__':
    unittest.main()
