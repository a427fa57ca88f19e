# objects.py -- Access to base zit objects
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

"""Access to base zit objects.

Objects are opaque byte strings named by the hex SHA-1 of their exact
contents. Two kinds exist: blobs (file snapshots, stored verbatim) and
commits, stored in the canonical serialization produced by
:meth:`Commit.as_raw_string`.
"""

__all__ = [
    "HEX_LENGTH",
    "Commit",
    "IndexEntry",
    "format_timestamp",
    "hash_object",
    "valid_hexsha",
]

import datetime
import hashlib
import json
from dataclasses import dataclass, field
from typing import Any

from .errors import CorruptCommit

HEX_LENGTH = 40

_HEX_DIGITS = frozenset("0123456789abcdef")


def hash_object(data: bytes) -> str:
    """Return the hex digest naming ``data`` in the object store."""
    return hashlib.sha1(data).hexdigest()


def valid_hexsha(hex: str | bytes) -> bool:
    """Check if a string is a valid object digest.

    Only the lowercase form produced by hash_object is accepted, so a digest
    can safely be used as a file name.
    """
    if isinstance(hex, bytes):
        try:
            hex = hex.decode("ascii")
        except UnicodeDecodeError:
            return False
    return len(hex) == HEX_LENGTH and set(hex) <= _HEX_DIGITS


def format_timestamp(when: datetime.datetime | None = None) -> str:
    """Format a point in time the way commit records store it.

    Returns an ISO 8601 UTC string with millisecond precision, e.g.
    ``2026-10-17T09:30:00.000Z``.
    """
    if when is None:
        when = datetime.datetime.now(datetime.timezone.utc)
    elif when.tzinfo is None:
        when = when.replace(tzinfo=datetime.timezone.utc)
    when = when.astimezone(datetime.timezone.utc)
    return when.strftime("%Y-%m-%dT%H:%M:%S.") + f"{when.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class IndexEntry:
    """A staged path and the digest of its contents."""

    path: str
    sha: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "hash": self.sha}

    @classmethod
    def from_dict(cls, value: Any) -> "IndexEntry":  # noqa: ANN401
        """Build an entry from its serialized form.

        Raises:
          ValueError: if value is not a well-formed entry
        """
        if not isinstance(value, dict):
            raise ValueError(f"entry is not an object: {value!r}")
        path = value.get("path")
        sha = value.get("hash")
        if not isinstance(path, str) or not path:
            raise ValueError(f"entry has no valid path: {value!r}")
        if not isinstance(sha, str) or not valid_hexsha(sha):
            raise ValueError(f"entry for {path} has no valid hash")
        return cls(path, sha)


@dataclass(frozen=True)
class Commit:
    """An immutable commit record.

    Attributes:
      timestamp: Creation time, as produced by format_timestamp
      message: Commit message
      files: Snapshot of the staging index at commit time
      parent: Digest of the previous commit, or None for the first commit
    """

    timestamp: str
    message: str
    files: tuple[IndexEntry, ...] = ()
    parent: str | None = None
    _id: str | None = field(default=None, repr=False, compare=False)

    def as_raw_string(self) -> bytes:
        """Return the canonical serialization of this commit.

        Keys always appear in the order timestamp, message, files, parent,
        with no insignificant whitespace, so equal records always serialize
        (and therefore hash) identically.
        """
        record = {
            "timestamp": self.timestamp,
            "message": self.message,
            "files": [entry.to_dict() for entry in self.files],
            "parent": self.parent,
        }
        return json.dumps(record, ensure_ascii=False, separators=(",", ":")).encode(
            "utf-8"
        )

    @property
    def id(self) -> str:
        """The digest naming this commit in the object store."""
        if self._id is None:
            object.__setattr__(self, "_id", hash_object(self.as_raw_string()))
        assert self._id is not None
        return self._id

    def get_file(self, path: str) -> IndexEntry | None:
        """Return the entry recorded for path, or None if it is not tracked."""
        for entry in self.files:
            if entry.path == path:
                return entry
        return None

    @classmethod
    def from_raw_string(cls, data: bytes, sha: str | None = None) -> "Commit":
        """Parse a serialized commit record.

        Args:
          data: Stored bytes
          sha: Digest the bytes were stored under, used in error messages
        Raises:
          CorruptCommit: if data is not a well-formed commit record
        """
        try:
            record = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise CorruptCommit(sha, f"not a commit record ({e})") from e
        if not isinstance(record, dict):
            raise CorruptCommit(sha, "not a commit record")
        missing = {"timestamp", "message", "files", "parent"} - set(record)
        if missing:
            raise CorruptCommit(sha, f"missing fields: {', '.join(sorted(missing))}")
        timestamp = record["timestamp"]
        message = record["message"]
        files = record["files"]
        parent = record["parent"]
        if not isinstance(timestamp, str):
            raise CorruptCommit(sha, "timestamp is not a string")
        if not isinstance(message, str):
            raise CorruptCommit(sha, "message is not a string")
        if not isinstance(files, list):
            raise CorruptCommit(sha, "files is not a list")
        if parent is not None and not (
            isinstance(parent, str) and valid_hexsha(parent)
        ):
            raise CorruptCommit(sha, f"invalid parent {parent!r}")
        try:
            entries = tuple(IndexEntry.from_dict(value) for value in files)
        except ValueError as e:
            raise CorruptCommit(sha, str(e)) from e
        return cls(timestamp, message, entries, parent, _id=sha)
