# repo.py -- For dealing with zit repositories.
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

"""Repository access.

A repository is a working directory with a ``.zit`` control directory
laid out as::

    .zit/objects/<digest>   one file per object
    .zit/index              staged entries
    .zit/HEAD               digest of the latest commit, empty at first
    .zit/config             settings
"""

__all__ = [
    "CONTROLDIR",
    "CONFIG_FILENAME",
    "INDEX_FILENAME",
    "OBJECTDIR",
    "Repo",
]

import datetime
import os
from types import TracebackType

from .config import ConfigFile, default_config
from .diff import FileDiff, NoPriorVersion, file_diff
from .errors import EmptyStagingError, NotZitRepository
from .file import LockedFile
from .index import Index, write_index
from .log_utils import getLogger
from .object_store import DiskObjectStore
from .objects import Commit, format_timestamp, hash_object
from .refs import DiskRefsContainer
from .walk import Walker

logger = getLogger(__name__)

CONTROLDIR = ".zit"
OBJECTDIR = "objects"
INDEX_FILENAME = "index"
CONFIG_FILENAME = "config"


class Repo:
    """A zit repository backed by a directory on disk.

    Every piece of mutable state (index, HEAD) is re-read from disk when it
    is used, so several Repo objects, in one process or many, can work on
    the same repository.

    Attributes:
      path: Path to the working directory
      controldir: Path to the ``.zit`` directory
      object_store: DiskObjectStore holding blobs and commits
      refs: DiskRefsContainer holding HEAD
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        """Open a repository.

        Args:
          root: Path to the working directory containing ``.zit``
        Raises:
          NotZitRepository: if root has no ``.zit`` directory
        """
        root = os.fspath(root)
        controldir = os.path.join(root, CONTROLDIR)
        if not os.path.isdir(os.path.join(controldir, OBJECTDIR)):
            raise NotZitRepository(root)
        self.path = root
        self.controldir = controldir
        self._config = self.get_config()
        fsync = self._config.get_boolean("core", "fsync", True)
        self.object_store = DiskObjectStore(
            os.path.join(controldir, OBJECTDIR), fsync=fsync
        )
        self.refs = DiskRefsContainer(controldir, fsync=fsync)
        self._fsync = fsync

    def __repr__(self) -> str:
        return f"<Repo at {self.path!r}>"

    def __enter__(self) -> "Repo":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close any files opened by this repository."""
        self.object_store.close()

    @classmethod
    def init(cls, path: str | os.PathLike[str], mkdir: bool = False) -> "Repo":
        """Create a new repository, or complete an existing one.

        Anything already present (objects, HEAD, staged entries, config) is
        left untouched, so running this on an existing repository is safe.

        Args:
          path: Path in which to create the repository
          mkdir: Whether to create the directory
        Returns: `Repo` instance
        """
        path = os.fspath(path)
        if mkdir:
            os.makedirs(path, exist_ok=True)
        controldir = os.path.join(path, CONTROLDIR)
        try:
            os.mkdir(controldir)
        except FileExistsError:
            pass
        DiskObjectStore.init(os.path.join(controldir, OBJECTDIR))
        DiskRefsContainer(controldir).init_head()
        _create_exclusive(os.path.join(controldir, INDEX_FILENAME), b"[]")
        config_path = os.path.join(controldir, CONFIG_FILENAME)
        if not os.path.exists(config_path):
            with LockedFile(config_path, "wb") as f:
                default_config().write_to_file(f)
        return cls(path)

    @classmethod
    def is_initialized(cls, path: str | os.PathLike[str]) -> bool:
        """Check whether path already holds a complete repository."""
        controldir = os.path.join(os.fspath(path), CONTROLDIR)
        return all(
            os.path.exists(os.path.join(controldir, name))
            for name in (OBJECTDIR, "HEAD", INDEX_FILENAME, CONFIG_FILENAME)
        )

    def index_path(self) -> str:
        """Return path to the index file."""
        return os.path.join(self.controldir, INDEX_FILENAME)

    def open_index(self) -> Index:
        """Open the index for this repository, reading its current state."""
        return Index(self.index_path(), fsync=self._fsync)

    def get_config(self) -> ConfigFile:
        """Retrieve the config object.

        Returns: `ConfigFile` object for the ``.zit/config`` file; the
          defaults if the file does not exist.
        """
        path = os.path.join(self.controldir, CONFIG_FILENAME)
        try:
            return ConfigFile.from_path(path)
        except FileNotFoundError:
            ret = default_config()
            ret.path = path
            return ret

    def diff_algorithm(self) -> str:
        """Return the configured diff algorithm."""
        try:
            return self._config.get("diff", "algorithm")
        except KeyError:
            return "myers"

    def stage(
        self, fs_path: str | os.PathLike[str], path: str | None = None
    ) -> tuple[str, bool]:
        """Stage the current contents of a file.

        The file is read completely and stored before the index is touched,
        so a failure leaves the index as it was.

        Args:
          fs_path: File to read
          path: Path to record in the index; defaults to fs_path as given
        Returns: The digest of the staged contents, and whether the contents
          were newly stored rather than already present in the object store
        Raises:
          OSError: if the file cannot be read
        """
        if path is None:
            path = os.fspath(fs_path)
        with open(fs_path, "rb") as f:
            data = f.read()
        stored = hash_object(data) not in self.object_store
        sha = self.object_store.add_object(data)
        self.open_index().stage(path, sha)
        return sha, stored

    def head(self) -> str | None:
        """Return the digest HEAD points at, or None before the first commit."""
        return self.refs.read_head()

    def get_commit(self, sha: str) -> Commit:
        """Retrieve a commit.

        Raises:
          MissingCommitError: if no such object exists
          CorruptCommit: if the object is not a commit record
        """
        return self.object_store.get_commit(sha)

    def __getitem__(self, sha: str) -> Commit:
        return self.get_commit(sha)

    def do_commit(
        self, message: str, timestamp: datetime.datetime | str | None = None
    ) -> str:
        """Create a commit from the staged entries and advance HEAD to it.

        The index lock and then the HEAD lock are held for the whole
        operation. If anything fails before HEAD is replaced, both lock files
        are discarded and neither HEAD nor the index changes.

        Args:
          message: Commit message
          timestamp: Commit time; defaults to now. A string is used as is.
        Returns: The digest of the new commit
        Raises:
          EmptyStagingError: if nothing is staged
        """
        if not isinstance(timestamp, str):
            timestamp = format_timestamp(timestamp)
        index = self.open_index()
        index_file = index.lock()
        try:
            entries = index.snapshot()
            if not entries:
                raise EmptyStagingError()
            head_file = self.refs.lock_head()
            try:
                # read HEAD again while holding its lock
                parent = self.refs.read_head()
                commit = Commit(timestamp, message, entries, parent)
                commit_id = self.object_store.add_commit(commit)
                head_file.write(commit_id.encode("ascii"))
                write_index(index_file, [])
            except BaseException:
                head_file.abort()
                raise
            head_file.close()
        except BaseException:
            index_file.abort()
            raise
        index_file.close()
        logger.debug("HEAD: %s -> %s", parent, commit_id)
        return commit_id

    def history(self, max_entries: int | None = None) -> Walker:
        """Walk the commit chain from HEAD back to the first commit.

        The returned walker starts again from the current HEAD every time it
        is iterated.
        """
        return Walker(self.object_store, self.head, max_entries=max_entries)

    def file_diff(
        self, commit_id: str, path: str, algorithm: str | None = None
    ) -> FileDiff | NoPriorVersion:
        """Diff a path in a commit against its parent.

        See zit.diff.file_diff; algorithm defaults to ``diff.algorithm``.
        """
        if algorithm is None:
            algorithm = self.diff_algorithm()
        return file_diff(self.object_store, commit_id, path, algorithm=algorithm)


def _create_exclusive(path: str, contents: bytes) -> bool:
    with LockedFile(path, "wb") as f:
        if os.path.exists(path):
            f.abort()
            return False
        f.write(contents)
    return True
