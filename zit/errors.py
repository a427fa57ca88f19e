# errors.py -- errors for zit
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

"""Zit-related exception classes.

I/O failures are not wrapped: they surface as the builtin OSError
subclasses, which already carry the offending filename.
"""

__all__ = [
    "ChecksumMismatch",
    "CorruptCommit",
    "CorruptIndex",
    "CorruptObject",
    "DiffAlgorithmNotAvailable",
    "EmptyStagingError",
    "MissingCommitError",
    "NotFound",
    "NotZitRepository",
    "ObjectMissing",
    "PathNotInCommit",
]


class NotFound(Exception):
    """Baseclass for objects, commits and paths that do not exist."""


class ObjectMissing(NotFound):
    """Indicates that a requested object is missing."""

    def __init__(self, sha: str) -> None:
        """Initialize an ObjectMissing exception.

        Args:
            sha: The digest of the missing object.
        """
        self.sha = sha
        super().__init__(f"{sha} is not in the object store")


class MissingCommitError(NotFound):
    """Indicates that a commit was not found in the repository."""

    def __init__(self, sha: str) -> None:
        """Initialize a MissingCommitError.

        Args:
            sha: The digest of the missing commit.
        """
        self.sha = sha
        super().__init__(f"commit {sha} is not in the object store")


class PathNotInCommit(NotFound):
    """Indicates that a path is not part of a commit."""

    def __init__(self, path: str, sha: str) -> None:
        self.path = path
        self.sha = sha
        super().__init__(f"{path} is not in commit {sha}")


class EmptyStagingError(Exception):
    """Indicates that a commit was attempted with nothing staged."""

    def __init__(self) -> None:
        super().__init__("Nothing to commit. Staging area is empty.")


class CorruptObject(Exception):
    """Baseclass for stored data that exists but cannot be used."""


class CorruptCommit(CorruptObject):
    """Indicates that an object is not a well-formed commit record."""

    def __init__(self, sha: str | None, reason: str) -> None:
        """Initialize a CorruptCommit exception.

        Args:
            sha: The digest of the object, if known.
            reason: What is wrong with it.
        """
        self.sha = sha
        self.reason = reason
        if sha is None:
            super().__init__(f"corrupt commit: {reason}")
        else:
            super().__init__(f"corrupt commit {sha}: {reason}")


class CorruptIndex(CorruptObject):
    """Indicates that the staging index file cannot be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"corrupt index {path}: {reason}")


class ChecksumMismatch(CorruptObject):
    """A stored object no longer hashes to its name."""

    def __init__(self, expected: str, got: str) -> None:
        """Initialize a ChecksumMismatch exception.

        Args:
            expected: The digest the object is stored under.
            got: The digest of the bytes actually read.
        """
        self.expected = expected
        self.got = got
        super().__init__(f"Checksum mismatch: Expected {expected}, got {got}")


class NotZitRepository(Exception):
    """Indicates that no zit repository was found."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"not a zit repository: {path}")


class DiffAlgorithmNotAvailable(Exception):
    """Raised when a requested diff algorithm is not available."""

    def __init__(self, algorithm: str, install_hint: str = "") -> None:
        """Initialize exception.

        Args:
            algorithm: Name of the unavailable algorithm
            install_hint: Optional installation hint
        """
        self.algorithm = algorithm
        self.install_hint = install_hint
        if install_hint:
            super().__init__(
                f"Diff algorithm '{algorithm}' requested but not available. "
                + install_hint
            )
        else:
            super().__init__(
                f"Diff algorithm '{algorithm}' requested but not available."
            )
