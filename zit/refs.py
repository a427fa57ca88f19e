# refs.py -- For dealing with zit refs
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

"""Ref handling.

Zit has a single ref, HEAD, holding the digest of the latest commit as
plain text. The file is empty until the first commit.
"""

__all__ = [
    "HEADREF",
    "DiskRefsContainer",
    "InvalidRef",
]

import os

from .errors import CorruptObject
from .file import LockedFile, _LockedFile
from .log_utils import getLogger
from .objects import valid_hexsha

logger = getLogger(__name__)

HEADREF = "HEAD"


class InvalidRef(CorruptObject):
    """HEAD holds something that is not a commit digest."""

    def __init__(self, path: str, contents: bytes) -> None:
        self.path = path
        self.contents = contents
        super().__init__(f"{path} does not hold a commit digest: {contents!r}")


class DiskRefsContainer:
    """Refs container that reads HEAD from disk."""

    def __init__(self, path: str | os.PathLike[str], fsync: bool = True) -> None:
        """Initialize DiskRefsContainer.

        Args:
          path: The repository control directory
          fsync: Whether to fsync HEAD when writing it
        """
        self.path = os.fspath(path)
        self._fsync = fsync

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def refpath(self, name: str = HEADREF) -> str:
        """Return the disk path of a ref."""
        return os.path.join(self.path, name)

    def read_head(self) -> str | None:
        """Read the digest HEAD points at.

        Returns: The digest, or None if no commit exists yet
        Raises:
          InvalidRef: if HEAD holds something other than a digest
        """
        filename = self.refpath(HEADREF)
        try:
            with LockedFile(filename, "rb") as f:
                contents = f.read()
        except FileNotFoundError:
            return None
        sha = contents.strip()
        if not sha:
            return None
        if not valid_hexsha(sha):
            raise InvalidRef(filename, contents)
        return sha.decode("ascii")

    def lock_head(self) -> _LockedFile:
        """Take the HEAD lock.

        Returns: the locked file; write the new digest and close() it to move
          HEAD, or abort() it to leave HEAD where it was.
        """
        return LockedFile(self.refpath(HEADREF), "wb", fsync=self._fsync)

    def init_head(self) -> bool:
        """Create an empty HEAD unless one exists.

        Returns: True if HEAD was created.
        """
        try:
            fd = os.open(
                self.refpath(HEADREF), os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644
            )
        except FileExistsError:
            return False
        os.close(fd)
        logger.debug("created empty HEAD in %s", self.path)
        return True
