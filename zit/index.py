# index.py -- File parser/writer for the zit staging index
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

"""Parser and writer for the staging index.

The index is a JSON array of ``{"path": ..., "hash": ...}`` objects, one per
staged path, in the order the paths were first staged.
"""

__all__ = [
    "Index",
    "read_index",
    "write_index",
]

import json
import os
from collections.abc import Iterable, Iterator
from typing import IO

from .errors import CorruptIndex
from .file import LockedFile, _LockedFile
from .log_utils import getLogger
from .objects import IndexEntry

logger = getLogger(__name__)


def read_index(f: IO[bytes], path: str = "index") -> list[IndexEntry]:
    """Read the entries of an index file.

    Args:
      f: File-like object to read from
      path: Name of the file, for error messages
    Raises:
      CorruptIndex: if the contents are not a list of well-formed entries
    """
    data = f.read()
    if not data.strip():
        return []
    try:
        values = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise CorruptIndex(path, str(e)) from e
    if not isinstance(values, list):
        raise CorruptIndex(path, "expected a list of entries")
    entries = []
    seen: set[str] = set()
    for value in values:
        try:
            entry = IndexEntry.from_dict(value)
        except ValueError as e:
            raise CorruptIndex(path, str(e)) from e
        if entry.path in seen:
            raise CorruptIndex(path, f"duplicate entry for {entry.path}")
        seen.add(entry.path)
        entries.append(entry)
    return entries


def write_index(f: IO[bytes], entries: Iterable[IndexEntry]) -> None:
    """Write an index file.

    Args:
      f: File-like object to write to
      entries: Entries to write, in order
    """
    data = json.dumps([entry.to_dict() for entry in entries], indent=2)
    f.write(data.encode("utf-8"))


class Index:
    """The staging index, backed by a file.

    Every mutation re-reads the file while holding its lock and writes the
    whole index back before releasing it, so concurrent writers serialize
    instead of overwriting each other's changes.
    """

    def __init__(
        self, filename: str | os.PathLike[str], read: bool = True, fsync: bool = True
    ) -> None:
        """Create an index object associated with the given filename.

        Args:
          filename: Path to the index file
          read: Whether to initialize the index from the given file, should it
            exist.
          fsync: Whether to fsync the index file when writing it
        """
        self._filename = os.fspath(filename)
        self._fsync = fsync
        self._entries: list[IndexEntry] = []
        if read and os.path.exists(self._filename):
            self.read()

    @property
    def path(self) -> str:
        """Get the path to the index file."""
        return self._filename

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._filename!r})"

    def read(self) -> list[IndexEntry]:
        """Read current contents of index from disk."""
        try:
            with LockedFile(self._filename, "rb") as f:
                self._entries = read_index(f, self._filename)
        except FileNotFoundError:
            self._entries = []
        return list(self._entries)

    def __len__(self) -> int:
        """Number of entries in this index file."""
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        """Iterate over the staged paths in this index."""
        return iter([entry.path for entry in self._entries])

    def __contains__(self, path: object) -> bool:
        return any(entry.path == path for entry in self._entries)

    def __getitem__(self, path: str) -> IndexEntry:
        """Retrieve the entry for a path.

        Raises:
          KeyError: if the path is not staged
        """
        for entry in self._entries:
            if entry.path == path:
                return entry
        raise KeyError(path)

    def snapshot(self) -> tuple[IndexEntry, ...]:
        """Return the entries as an immutable sequence."""
        return tuple(self._entries)

    def lock(self) -> _LockedFile:
        """Take the index lock and refresh from disk while holding it.

        Returns: the locked file; write the new contents with write_index()
          and close() it to replace the index, or abort() it to leave the
          index as it was.
        """
        f = LockedFile(self._filename, "wb", fsync=self._fsync)
        try:
            self.read()
        except BaseException:
            f.abort()
            raise
        return f

    def stage(self, path: str, sha: str) -> None:
        """Stage the contents named by sha at path.

        An existing entry for path is updated in place; otherwise a new entry
        is appended.
        """
        new_entry = IndexEntry(path, sha)
        with self.lock() as f:
            entries = list(self._entries)
            for i, entry in enumerate(entries):
                if entry.path == path:
                    entries[i] = new_entry
                    break
            else:
                entries.append(new_entry)
            write_index(f, entries)
        self._entries = entries
        logger.debug("staged %s as %s", path, sha)

    def clear(self) -> None:
        """Remove all entries from the index."""
        with self.lock() as f:
            write_index(f, [])
        self._entries = []
