# diff.py -- Line diffs between commits
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

"""Line diffs between two texts, and between a commit and its parent.

diff_lines() produces an edit script as a list of DiffLine parts, each
EQUAL, INSERTED or REMOVED. The script always satisfies two identities:

* joining the EQUAL and INSERTED parts, in order, gives the new text
* joining the EQUAL and REMOVED parts, in order, gives the old text

Example usage:
    from zit.repo import Repo
    from zit.diff import ColorizedDiffWriter
    import sys

    repo = Repo('.')
    result = repo.file_diff(repo.head(), 'README')
    ColorizedDiffWriter(sys.stdout).write_diff(result.parts)
"""

__all__ = [
    "DEFAULT_DIFF_ALGORITHM",
    "ColorizedDiffWriter",
    "DiffKind",
    "DiffLine",
    "FileDiff",
    "NoPriorVersion",
    "decode_blob",
    "diff_lines",
    "file_diff",
]

import enum
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import TYPE_CHECKING, TextIO

from rich.console import Console

if TYPE_CHECKING:
    from .object_store import BaseObjectStore

from .errors import DiffAlgorithmNotAvailable, PathNotInCommit

DEFAULT_DIFF_ALGORITHM = "myers"

ALL_ALGORITHMS = ("myers", "patience")

FIRST_COMMIT = "first commit"
NEW_FILE = "new file"


class DiffKind(enum.Enum):
    """Classification of a part of an edit script."""

    EQUAL = "equal"
    INSERTED = "inserted"
    REMOVED = "removed"


@dataclass(frozen=True)
class DiffLine:
    """A run of text with a single classification.

    ``text`` holds one or more whole lines, line endings included, except
    where a changed line was split into its unchanged and changed pieces.
    """

    kind: DiffKind
    text: str


@dataclass(frozen=True)
class FileDiff:
    """Changes to one path between a commit and its parent."""

    path: str
    old_sha: str
    new_sha: str
    parts: list[DiffLine]

    @property
    def changed(self) -> bool:
        return any(part.kind is not DiffKind.EQUAL for part in self.parts)


@dataclass(frozen=True)
class NoPriorVersion:
    """There is nothing to diff a path against.

    ``reason`` is FIRST_COMMIT when the commit has no parent and NEW_FILE
    when the parent does not contain the path.
    """

    path: str
    reason: str


def _get_sequence_matcher(
    algorithm: str, a: Sequence[str], b: Sequence[str]
) -> SequenceMatcher[str]:
    """Get appropriate sequence matcher for the given algorithm.

    Raises:
        DiffAlgorithmNotAvailable: If patience requested but not available
    """
    if algorithm not in ALL_ALGORITHMS:
        raise ValueError(
            f"Unknown diff algorithm {algorithm!r}; expected one of "
            + ", ".join(ALL_ALGORITHMS)
        )
    if algorithm == "patience":
        try:
            from patiencediff import PatienceSequenceMatcher
        except ImportError:
            raise DiffAlgorithmNotAvailable(
                "patience", "Install with: pip install 'zit[patiencediff]'"
            )
        return PatienceSequenceMatcher(None, a, b)  # type: ignore[no-any-return]
    # autojunk would classify frequent lines as junk, reporting unchanged
    # runs in long files as removed and re-inserted
    return SequenceMatcher(a=a, b=b, autojunk=False)


def _common_prefix_length(a: str, b: str) -> int:
    return len(os.path.commonprefix([a, b]))


def _refine_replacement(old: str, new: str) -> list[DiffLine]:
    """Split a replaced block into its unchanged and changed pieces.

    The common prefix and suffix of the two blocks are reported as EQUAL,
    unless they are blank, in which case they stay with the change so that
    a rewritten line keeps its line ending.
    """
    prefix = _common_prefix_length(old, new)
    if not old[:prefix].strip():
        prefix = 0
    suffix = _common_prefix_length(old[prefix:][::-1], new[prefix:][::-1])
    if not old[len(old) - suffix :].strip():
        suffix = 0
    parts = []
    if prefix:
        parts.append(DiffLine(DiffKind.EQUAL, old[:prefix]))
    if len(old) - suffix > prefix:
        parts.append(DiffLine(DiffKind.REMOVED, old[prefix : len(old) - suffix]))
    if len(new) - suffix > prefix:
        parts.append(DiffLine(DiffKind.INSERTED, new[prefix : len(new) - suffix]))
    if suffix:
        parts.append(DiffLine(DiffKind.EQUAL, old[len(old) - suffix :]))
    return parts


def _append(parts: list[DiffLine], part: DiffLine) -> None:
    if not part.text:
        return
    if parts and parts[-1].kind is part.kind:
        parts[-1] = DiffLine(part.kind, parts[-1].text + part.text)
    else:
        parts.append(part)


def diff_lines(
    old_text: str, new_text: str, algorithm: str | None = None
) -> list[DiffLine]:
    """Compute a line-oriented edit script turning old_text into new_text.

    Args:
      old_text: Text before the change
      new_text: Text after the change
      algorithm: "myers" (difflib) or "patience"; defaults to
        DEFAULT_DIFF_ALGORITHM
    Returns:
      Parts in order, with adjacent parts of the same kind merged
    """
    if algorithm is None:
        algorithm = DEFAULT_DIFF_ALGORITHM
    a = old_text.splitlines(keepends=True)
    b = new_text.splitlines(keepends=True)
    matcher = _get_sequence_matcher(algorithm, a, b)

    parts: list[DiffLine] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        old_block = "".join(a[i1:i2])
        new_block = "".join(b[j1:j2])
        if tag == "equal":
            _append(parts, DiffLine(DiffKind.EQUAL, new_block))
        elif tag == "delete":
            _append(parts, DiffLine(DiffKind.REMOVED, old_block))
        elif tag == "insert":
            _append(parts, DiffLine(DiffKind.INSERTED, new_block))
        else:
            for part in _refine_replacement(old_block, new_block):
                _append(parts, part)
    return parts


def decode_blob(data: bytes, encoding: str = "utf-8") -> str:
    """Decode blob contents for diffing.

    Undecodable bytes are kept as surrogates, so the text encodes back to
    exactly the stored bytes.
    """
    return data.decode(encoding, errors="surrogateescape")


def file_diff(
    store: "BaseObjectStore",
    commit_id: str,
    path: str,
    algorithm: str | None = None,
) -> FileDiff | NoPriorVersion:
    """Diff a path in a commit against the same path in its parent.

    Args:
      store: Object store holding the commits and blobs
      commit_id: Digest of the commit
      path: Tracked path to diff
      algorithm: Diff algorithm, see diff_lines()
    Returns:
      FileDiff, or NoPriorVersion if the commit has no parent or the parent
      does not contain path
    Raises:
      MissingCommitError: if the commit or its parent is missing
      PathNotInCommit: if the commit does not contain path
    """
    commit = store.get_commit(commit_id)
    entry = commit.get_file(path)
    if entry is None:
        raise PathNotInCommit(path, commit_id)
    if commit.parent is None:
        return NoPriorVersion(path, FIRST_COMMIT)
    parent_entry = store.get_commit(commit.parent).get_file(path)
    if parent_entry is None:
        return NoPriorVersion(path, NEW_FILE)
    old_text = decode_blob(store.get_raw(parent_entry.sha))
    new_text = decode_blob(store.get_raw(entry.sha))
    return FileDiff(
        path,
        parent_entry.sha,
        entry.sha,
        diff_lines(old_text, new_text, algorithm=algorithm),
    )


def _displayable(text: str) -> str:
    # undecodable bytes kept by decode_blob() cannot be written to a terminal
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


class ColorizedDiffWriter:
    """Render an edit script on a text stream, optionally colored with Rich.

    Inserted text is prefixed with ``++`` and shown in green, removed text
    with ``--`` in red; unchanged text is shown dimmed.
    """

    STYLES = {
        DiffKind.EQUAL: "grey50",
        DiffKind.INSERTED: "green",
        DiffKind.REMOVED: "red",
    }
    PREFIXES = {
        DiffKind.EQUAL: "",
        DiffKind.INSERTED: "++",
        DiffKind.REMOVED: "--",
    }

    def __init__(self, outstream: TextIO, color: bool = True) -> None:
        """Initialize the writer.

        Args:
            outstream: Text stream to write to
            color: Whether to emit terminal color codes
        """
        self.outstream = outstream
        self.color = color
        self.console = Console(
            file=outstream,
            force_terminal=color,
            no_color=not color,
            highlight=False,
            soft_wrap=True,
        )

    def write_part(self, part: DiffLine) -> None:
        text = self.PREFIXES[part.kind] + _displayable(part.text)
        if self.color:
            self.console.print(
                text, style=self.STYLES[part.kind], end="", markup=False
            )
        else:
            self.outstream.write(text)

    def write_diff(self, parts: Iterable[DiffLine]) -> None:
        """Write all parts, ending with a newline."""
        for part in parts:
            self.write_part(part)
        self.outstream.write("\n")
        self.outstream.flush()
