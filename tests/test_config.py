# test_config.py -- Tests for reading and writing configuration files
# Copyright (C) 2026 Zit contributors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# Zit is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#


"""Tests for reading and writing configuration files."""

import os
from io import BytesIO

from zit.config import ConfigDict, ConfigFile, default_config

from . import TestCase


class ConfigFileTests(TestCase):
    """Tests for ConfigFile."""

    def from_file(self, text: bytes) -> ConfigFile:
        return ConfigFile.from_file(BytesIO(text))

    def test_empty(self) -> None:
        cf = self.from_file(b"")
        self.assertEqual([], list(cf.sections()))

    def test_default_config(self) -> None:
        cf = default_config()
        self.assertTrue(cf.get_boolean("core", "fsync"))
        self.assertEqual("myers", cf.get("diff", "algorithm"))
        self.assertEqual("auto", cf.get("color", "ui"))

    def test_from_file_simple(self) -> None:
        cf = self.from_file(b"[core]\n\tfsync = false\n[diff]\nalgorithm=patience\n")
        self.assertFalse(cf.get_boolean("core", "fsync"))
        self.assertEqual("patience", cf.get("diff", "algorithm"))

    def test_case_insensitive(self) -> None:
        cf = self.from_file(b"[CoRe]\n\tFSync = no\n")
        self.assertEqual("no", cf.get("core", "fsync"))
        self.assertEqual("no", cf.get("CORE", "FSYNC"))
        self.assertTrue(cf.has_section("Core"))

    def test_comments(self) -> None:
        cf = self.from_file(
            b"# leading comment\n[color] ; trailing\n\tui = never # why not\n"
        )
        self.assertEqual("never", cf.get("color", "ui"))

    def test_quoted_value(self) -> None:
        cf = self.from_file(b'[core]\n\tname = "a # b"\n')
        self.assertEqual("a # b", cf.get("core", "name"))

    def test_bare_name_means_true(self) -> None:
        cf = self.from_file(b"[core]\n\tfsync\n")
        self.assertTrue(cf.get_boolean("core", "fsync"))

    def test_bom(self) -> None:
        cf = self.from_file("\ufeff[core]\n\tfsync = true\n".encode())
        self.assertTrue(cf.get_boolean("core", "fsync"))

    def test_missing(self) -> None:
        cf = self.from_file(b"[core]\n")
        self.assertRaises(KeyError, cf.get, "core", "fsync")
        self.assertRaises(KeyError, cf.get, "diff", "algorithm")
        self.assertTrue(cf.get_boolean("core", "fsync", True))
        self.assertIsNone(cf.get_boolean("core", "fsync"))

    def test_invalid_boolean(self) -> None:
        cf = self.from_file(b"[core]\n\tfsync = maybe\n")
        self.assertRaises(ValueError, cf.get_boolean, "core", "fsync")

    def test_invalid_lines(self) -> None:
        self.assertRaises(ValueError, self.from_file, b"fsync = true\n")
        self.assertRaises(ValueError, self.from_file, b"[core\n")
        self.assertRaises(ValueError, self.from_file, b"[co re]\n")
        self.assertRaises(ValueError, self.from_file, b"[core]\n\t1abc = x\n")

    def test_write_to_file(self) -> None:
        cf = ConfigFile()
        cf.set("core", "fsync", False)
        cf.set("diff", "algorithm", "patience")
        f = BytesIO()
        cf.write_to_file(f)
        self.assertEqual(
            b"[core]\n\tfsync = false\n[diff]\n\talgorithm = patience\n",
            f.getvalue(),
        )

    def test_write_quotes_when_needed(self) -> None:
        cf = ConfigFile()
        cf.set("core", "name", " padded ")
        f = BytesIO()
        cf.write_to_file(f)
        self.assertEqual(b'[core]\n\tname = " padded "\n', f.getvalue())
        self.assertEqual(" padded ", self.from_file(f.getvalue()).get("core", "name"))

    def test_write_to_path_and_from_path(self) -> None:
        path = os.path.join(self.mkdtemp(), "config")
        cf = default_config()
        cf.set("color", "ui", "always")
        cf.write_to_path(path)
        self.assertFalse(os.path.exists(path + ".lock"))
        loaded = ConfigFile.from_path(path)
        self.assertEqual(path, loaded.path)
        self.assertEqual(cf, loaded)

    def test_write_to_path_without_path(self) -> None:
        self.assertRaises(ValueError, ConfigFile().write_to_path)


class ConfigDictTests(TestCase):
    """Tests for ConfigDict."""

    def test_get_set(self) -> None:
        cd = ConfigDict()
        self.assertRaises(KeyError, cd.get, "core", "fsync")
        cd.set("core", "fsync", True)
        self.assertEqual("true", cd.get("core", "fsync"))
        cd.set("core", "fsync", "0")
        self.assertFalse(cd.get_boolean("core", "fsync"))

    def test_items_and_sections(self) -> None:
        cd = ConfigDict({"core": {"fsync": "true"}, "diff": {"algorithm": "myers"}})
        self.assertEqual(["core", "diff"], list(cd.sections()))
        self.assertEqual([("algorithm", "myers")], list(cd.items("diff")))
        self.assertEqual([], list(cd.items("color")))
