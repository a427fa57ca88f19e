# object_store.py -- Object store for zit objects
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


"""Content-addressable object store interfaces and implementation."""

__all__ = [
    "OBJECT_MODE",
    "BaseObjectStore",
    "DiskObjectStore",
    "MemoryObjectStore",
]

import os
from collections.abc import Iterator

from .errors import ChecksumMismatch, MissingCommitError, ObjectMissing
from .file import LockedFile
from .log_utils import getLogger
from .objects import Commit, hash_object, valid_hexsha

logger = getLogger(__name__)

OBJECT_MODE = 0o444


class BaseObjectStore:
    """Object store interface.

    Objects are added once and never modified or removed.
    """

    def add_object(self, data: bytes) -> str:
        """Add a single object to this object store.

        Args:
          data: Raw contents of the object
        Returns: The digest naming the object
        """
        raise NotImplementedError(self.add_object)

    def get_raw(self, sha: str) -> bytes:
        """Obtain the raw contents of an object.

        Args:
          sha: Digest of the object
        Returns: The stored bytes
        Raises:
          ObjectMissing: if no object with that digest exists
        """
        raise NotImplementedError(self.get_raw)

    def __contains__(self, sha: object) -> bool:
        """Check if a particular object is present by digest."""
        raise NotImplementedError(self.__contains__)

    def __iter__(self) -> Iterator[str]:
        """Iterate over the digests of all objects in the store."""
        raise NotImplementedError(self.__iter__)

    def __getitem__(self, sha: str) -> bytes:
        """Obtain an object by digest."""
        return self.get_raw(sha)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def get_commit(self, sha: str) -> Commit:
        """Retrieve and parse a commit object.

        Raises:
          MissingCommitError: if the object does not exist
          CorruptCommit: if the object is not a commit record
        """
        try:
            data = self.get_raw(sha)
        except ObjectMissing as e:
            raise MissingCommitError(sha) from e
        return Commit.from_raw_string(data, sha)

    def add_commit(self, commit: Commit) -> str:
        """Store a commit record, returning its digest."""
        sha = self.add_object(commit.as_raw_string())
        assert sha == commit.id
        return sha

    def close(self) -> None:
        """Close any files opened by this object store."""


class MemoryObjectStore(BaseObjectStore):
    """Object store that keeps all objects in memory."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    def add_object(self, data: bytes) -> str:
        sha = hash_object(data)
        self._data.setdefault(sha, bytes(data))
        return sha

    def get_raw(self, sha: str) -> bytes:
        try:
            return self._data[sha]
        except KeyError:
            raise ObjectMissing(sha) from None

    def __contains__(self, sha: object) -> bool:
        return sha in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)


class DiskObjectStore(BaseObjectStore):
    """Object store that keeps one file per object in a directory.

    Objects are stored uncompressed under their hex digest, directly in
    the store directory.
    """

    def __init__(self, path: str | os.PathLike[str], *, fsync: bool = True) -> None:
        """Open an object store.

        Args:
          path: Path of the object store.
          fsync: whether to fsync object files for durability
        """
        self.path = os.fspath(path)
        self.fsync = fsync

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @classmethod
    def init(
        cls, path: str | os.PathLike[str], *, fsync: bool = True
    ) -> "DiskObjectStore":
        """Create the object store directory if it does not exist yet.

        Existing objects are left untouched.
        """
        try:
            os.mkdir(path)
        except FileExistsError:
            pass
        return cls(path, fsync=fsync)

    def _get_shafile_path(self, sha: str) -> str:
        return os.path.join(self.path, sha)

    def __contains__(self, sha: object) -> bool:
        if not isinstance(sha, str) or not valid_hexsha(sha):
            return False
        return os.path.exists(self._get_shafile_path(sha))

    def __iter__(self) -> Iterator[str]:
        for name in os.listdir(self.path):
            if valid_hexsha(name):
                yield name

    def add_object(self, data: bytes) -> str:
        """Add a single object to this object store.

        The object is written through a lock file, so a concurrent writer of
        the same content either waits and then finds the object present, or
        has already finished writing it.

        Args:
          data: Raw contents of the object
        Returns: The digest naming the object
        """
        sha = hash_object(data)
        path = self._get_shafile_path(sha)
        if os.path.exists(path):
            return sha
        with LockedFile(path, "wb", mask=OBJECT_MODE, fsync=self.fsync) as f:
            # check again while holding the lock
            if os.path.exists(path):
                f.abort()
                return sha
            f.write(data)
        logger.debug("wrote object %s (%d bytes)", sha, len(data))
        return sha

    def get_raw(self, sha: str) -> bytes:
        if not valid_hexsha(sha):
            raise ObjectMissing(sha)
        try:
            with open(self._get_shafile_path(sha), "rb") as f:
                data = f.read()
        except FileNotFoundError:
            raise ObjectMissing(sha) from None
        got = hash_object(data)
        if got != sha:
            raise ChecksumMismatch(sha, got)
        return data
