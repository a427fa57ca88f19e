# test_diff.py -- Tests for line diffs
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


"""Tests for zit.diff."""

import random
import sys
from io import StringIO
from unittest import mock

from zit.diff import (
    ALL_ALGORITHMS,
    FIRST_COMMIT,
    NEW_FILE,
    ColorizedDiffWriter,
    DiffKind,
    DiffLine,
    FileDiff,
    NoPriorVersion,
    decode_blob,
    diff_lines,
    file_diff,
)
from zit.errors import DiffAlgorithmNotAvailable, MissingCommitError, PathNotInCommit
from zit.object_store import MemoryObjectStore
from zit.objects import Commit, IndexEntry

from . import TestCase, skipIf

try:
    import patiencediff
except ImportError:
    patiencediff = None

EQUAL = DiffKind.EQUAL
INSERTED = DiffKind.INSERTED
REMOVED = DiffKind.REMOVED


def reconstruct(parts: list[DiffLine], *kinds: DiffKind) -> str:
    return "".join(part.text for part in parts if part.kind in kinds)


class DiffLinesTests(TestCase):
    """Tests for diff_lines."""

    algorithm = "myers"

    def diff(self, old: str, new: str) -> list[DiffLine]:
        parts = diff_lines(old, new, algorithm=self.algorithm)
        self.assertEqual(new, reconstruct(parts, EQUAL, INSERTED))
        self.assertEqual(old, reconstruct(parts, EQUAL, REMOVED))
        for first, second in zip(parts, parts[1:]):
            self.assertIsNot(first.kind, second.kind)
        self.assertTrue(all(part.text for part in parts))
        return parts

    def test_both_empty(self) -> None:
        self.assertEqual([], self.diff("", ""))

    def test_identical(self) -> None:
        self.assertEqual([DiffLine(EQUAL, "a\nb\n")], self.diff("a\nb\n", "a\nb\n"))

    def test_from_empty(self) -> None:
        self.assertEqual([DiffLine(INSERTED, "a\nb\n")], self.diff("", "a\nb\n"))

    def test_to_empty(self) -> None:
        self.assertEqual([DiffLine(REMOVED, "a\nb\n")], self.diff("a\nb\n", ""))

    def test_changed_line(self) -> None:
        self.assertEqual(
            [
                DiffLine(EQUAL, "a\n"),
                DiffLine(REMOVED, "b\n"),
                DiffLine(INSERTED, "x\n"),
                DiffLine(EQUAL, "c\n"),
            ],
            self.diff("a\nb\nc\n", "a\nx\nc\n"),
        )

    def test_appended_words(self) -> None:
        self.assertEqual(
            [DiffLine(EQUAL, "hello"), DiffLine(INSERTED, " world")],
            self.diff("hello", "hello world"),
        )

    def test_appended_words_keeps_line_ending_with_change(self) -> None:
        self.assertEqual(
            [
                DiffLine(EQUAL, "hello"),
                DiffLine(REMOVED, "\n"),
                DiffLine(INSERTED, " world\n"),
            ],
            self.diff("hello\n", "hello world\n"),
        )

    def test_inserted_and_removed_lines(self) -> None:
        self.diff("one\ntwo\nthree\n", "zero\none\nthree\nfour\n")

    def test_missing_final_newline(self) -> None:
        self.diff("a\nb", "a\nb\n")
        self.diff("a\nb\n", "a\nb")

    def test_repeated_lines(self) -> None:
        old = "".join(f"line {i % 3}\n" for i in range(300))
        new = old.replace("line 1\n", "line one\n", 1)
        parts = self.diff(old, new)
        self.assertTrue(parts[0].text.startswith("line 0\n"))
        self.assertEqual(EQUAL, parts[-1].kind)

    def test_crlf(self) -> None:
        self.diff("a\r\nb\r\n", "a\r\nc\r\n")

    def test_mixed_line_endings(self) -> None:
        rng = random.Random(0x217)
        pieces = ["a", "b", "a b", " ", "", "\r", "\r\n", "\n", "\x0c", "\t"]
        for i in range(200):
            old, new = (
                "".join(rng.choice(pieces) for _ in range(rng.randrange(12)))
                for _ in range(2)
            )
            with self.subTest(i=i, old=old, new=new):
                self.diff(old, new)

    def test_unknown_algorithm(self) -> None:
        with self.assertRaises(ValueError) as cm:
            diff_lines("a", "b", algorithm="histogram")
        for algorithm in ALL_ALGORITHMS:
            self.assertIn(algorithm, str(cm.exception))


@skipIf(patiencediff is None, "patiencediff not installed")
class PatienceDiffLinesTests(DiffLinesTests):
    """Run the diff_lines tests with the patience algorithm."""

    algorithm = "patience"


class PatienceNotAvailableTests(TestCase):
    def test_raises(self) -> None:
        with mock.patch.dict(sys.modules, {"patiencediff": None}):
            with self.assertRaises(DiffAlgorithmNotAvailable) as cm:
                diff_lines("a\n", "b\n", algorithm="patience")
        self.assertEqual("patience", cm.exception.algorithm)
        self.assertIn("zit[patiencediff]", str(cm.exception))


class DecodeBlobTests(TestCase):
    def test_utf8(self) -> None:
        self.assertEqual("café\n", decode_blob("café\n".encode()))

    def test_undecodable_bytes_survive(self) -> None:
        data = b"caf\xe9\n"
        self.assertEqual(data, decode_blob(data).encode("utf-8", "surrogateescape"))


class FileDiffTests(TestCase):
    """Tests for file_diff."""

    def setUp(self) -> None:
        super().setUp()
        self.store = MemoryObjectStore()
        self.parent: str | None = None

    def commit(self, **files: bytes) -> str:
        entries = tuple(
            IndexEntry(path, self.store.add_object(data))
            for path, data in files.items()
        )
        c = Commit("2026-10-17T09:30:00.000Z", "msg", entries, self.parent)
        self.parent = self.store.add_commit(c)
        return self.parent

    def test_first_commit(self) -> None:
        c1 = self.commit(a=b"hello")
        self.assertEqual(
            NoPriorVersion("a", FIRST_COMMIT), file_diff(self.store, c1, "a")
        )

    def test_new_file(self) -> None:
        self.commit(a=b"hello")
        c2 = self.commit(a=b"hello", b=b"new")
        self.assertEqual(
            NoPriorVersion("b", NEW_FILE), file_diff(self.store, c2, "b")
        )

    def test_modified(self) -> None:
        c1 = self.commit(a=b"hello")
        c2 = self.commit(a=b"hello world")
        result = file_diff(self.store, c2, "a")
        self.assertIsInstance(result, FileDiff)
        assert isinstance(result, FileDiff)
        self.assertEqual(
            [DiffLine(EQUAL, "hello"), DiffLine(INSERTED, " world")], result.parts
        )
        parent = self.store.get_commit(c1)
        self.assertEqual(parent.files[0].sha, result.old_sha)
        self.assertTrue(result.changed)

    def test_unchanged(self) -> None:
        self.commit(a=b"hello\n")
        c2 = self.commit(a=b"hello\n", b=b"x")
        result = file_diff(self.store, c2, "a")
        assert isinstance(result, FileDiff)
        self.assertFalse(result.changed)
        self.assertEqual([DiffLine(EQUAL, "hello\n")], result.parts)

    def test_path_not_in_commit(self) -> None:
        c1 = self.commit(a=b"hello")
        with self.assertRaises(PathNotInCommit) as cm:
            file_diff(self.store, c1, "b")
        self.assertEqual("b", cm.exception.path)
        self.assertEqual(c1, cm.exception.sha)

    def test_missing_commit(self) -> None:
        self.assertRaises(MissingCommitError, file_diff, self.store, "a" * 40, "a")

    def test_missing_parent(self) -> None:
        self.parent = "f" * 40
        c = self.commit(a=b"hello")
        self.assertRaises(MissingCommitError, file_diff, self.store, c, "a")


class ColorizedDiffWriterTests(TestCase):
    parts = [
        DiffLine(EQUAL, "a\n"),
        DiffLine(INSERTED, "b\n"),
        DiffLine(REMOVED, "c\n"),
    ]

    def test_plain(self) -> None:
        out = StringIO()
        ColorizedDiffWriter(out, color=False).write_diff(self.parts)
        self.assertEqual("a\n++b\n--c\n\n", out.getvalue())

    def test_plain_undecodable(self) -> None:
        out = StringIO()
        text = decode_blob(b"caf\xe9\n")
        ColorizedDiffWriter(out, color=False).write_diff([DiffLine(EQUAL, text)])
        self.assertEqual("caf\ufffd\n\n", out.getvalue())

    def test_color(self) -> None:
        self.overrideEnv("NO_COLOR", None)
        self.overrideEnv("TERM", "xterm-256color")
        out = StringIO()
        ColorizedDiffWriter(out, color=True).write_diff(self.parts)
        output = out.getvalue()
        self.assertIn("\x1b[32m++b", output)
        self.assertIn("\x1b[31m--c", output)
        self.assertTrue(output.endswith("\n"))
