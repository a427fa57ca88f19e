# test_file.py -- Tests for zit.file
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


"""Tests for zit.file."""

import os
import threading
import time

from zit.file import FileLocked, LockedFile

from . import TestCase


class LockedFileTests(TestCase):
    """Tests for the lock file protocol."""

    def setUp(self) -> None:
        super().setUp()
        self.tempdir = self.mkdtemp()
        self.path = os.path.join(self.tempdir, "foo")
        with open(self.path, "wb") as f:
            f.write(b"foo contents")

    def test_invalid_modes(self) -> None:
        self.assertRaises(OSError, LockedFile, self.path, "r")
        self.assertRaises(OSError, LockedFile, self.path, "ab")
        self.assertRaises(OSError, LockedFile, self.path, "r+b")
        self.assertRaises(OSError, LockedFile, self.path, "w+b")

    def test_readonly(self) -> None:
        f = LockedFile(self.path, "rb")
        self.addCleanup(f.close)
        self.assertEqual(b"foo contents", f.read())
        self.assertFalse(os.path.exists(self.path + ".lock"))

    def test_write(self) -> None:
        f = LockedFile(self.path, "wb")
        self.assertTrue(os.path.exists(self.path + ".lock"))
        f.write(b"new contents")
        # the target is untouched until close
        with open(self.path, "rb") as orig:
            self.assertEqual(b"foo contents", orig.read())
        f.close()
        self.assertFalse(os.path.exists(self.path + ".lock"))
        with open(self.path, "rb") as orig:
            self.assertEqual(b"new contents", orig.read())

    def test_write_creates_file(self) -> None:
        path = os.path.join(self.tempdir, "new")
        with LockedFile(path, "wb") as f:
            f.write(b"created")
        with open(path, "rb") as orig:
            self.assertEqual(b"created", orig.read())

    def test_abort(self) -> None:
        f = LockedFile(self.path, "wb")
        f.write(b"discarded")
        f.abort()
        self.assertTrue(f.closed)
        self.assertFalse(os.path.exists(self.path + ".lock"))
        with open(self.path, "rb") as orig:
            self.assertEqual(b"foo contents", orig.read())

    def test_abort_close(self) -> None:
        f = LockedFile(self.path, "wb")
        f.abort()
        # close after abort is a no-op
        f.close()
        with open(self.path, "rb") as orig:
            self.assertEqual(b"foo contents", orig.read())

    def test_context_manager_aborts_on_error(self) -> None:
        with self.assertRaises(RuntimeError):
            with LockedFile(self.path, "wb") as f:
                f.write(b"partial")
                raise RuntimeError("boom")
        self.assertFalse(os.path.exists(self.path + ".lock"))
        with open(self.path, "rb") as orig:
            self.assertEqual(b"foo contents", orig.read())

    def test_no_wait_raises_file_locked(self) -> None:
        f = LockedFile(self.path, "wb")
        self.addCleanup(f.abort)
        with self.assertRaises(FileLocked) as cm:
            LockedFile(self.path, "wb", wait=False)
        self.assertEqual(self.path, cm.exception.filename)
        self.assertEqual(self.path + ".lock", cm.exception.lockfilename)

    def test_wait_for_lock(self) -> None:
        first = LockedFile(self.path, "wb")
        first.write(b"first")
        order = []

        def second_writer() -> None:
            with LockedFile(self.path, "wb") as f:
                order.append("second acquired")
                f.write(b"second")

        t = threading.Thread(target=second_writer)
        t.start()
        time.sleep(0.1)
        order.append("first released")
        first.close()
        t.join(10)
        self.assertFalse(t.is_alive())
        self.assertEqual(["first released", "second acquired"], order)
        with open(self.path, "rb") as orig:
            self.assertEqual(b"second", orig.read())

    def test_fspath(self) -> None:
        with LockedFile(self.path, "wb") as f:
            self.assertEqual(self.path, os.fspath(f))
            f.write(b"x")
