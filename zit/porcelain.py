# porcelain.py -- Porcelain-like layer on top of zit
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

"""Simple wrapper that provides porcelain-like functions on top of Zit.

Currently implemented:
 * init
 * add
 * commit
 * log
 * show
 * status

These functions are meant to behave similarly to the commands of the zit
command line, and take a repository path (or Repo object) plus output
streams.
"""

__all__ = [
    "add",
    "commit",
    "init",
    "log",
    "open_repo_closing",
    "print_commit",
    "show",
    "status",
]

import os
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TextIO

from .diff import FIRST_COMMIT, ColorizedDiffWriter, FileDiff
from .log_utils import getLogger
from .objects import Commit, IndexEntry
from .repo import Repo

logger = getLogger(__name__)

RepoPath = str | os.PathLike[str] | Repo


@contextmanager
def open_repo_closing(path_or_repo: RepoPath) -> Iterator[Repo]:
    """Open an argument that can be a repository or a path for a repository.

    Returns a context manager that will close the repo on exit if the
    argument is a path, else does nothing if the argument is a repo.
    """
    if isinstance(path_or_repo, Repo):
        yield path_or_repo
        return
    with Repo(path_or_repo) as repo:
        yield repo


def init(path: str | os.PathLike[str] = ".") -> tuple[Repo, bool]:
    """Create a new zit repository, or reinitialize an existing one.

    Args:
      path: Path to the working directory
    Returns: A Repo instance, and whether anything had to be created
    """
    created = not Repo.is_initialized(path)
    repo = Repo.init(path, mkdir=True)
    return repo, created


def add(
    repo: RepoPath, paths: Sequence[str | os.PathLike[str]]
) -> tuple[list[tuple[str, str, bool]], list[tuple[str, OSError]]]:
    """Add files to the staging area.

    A file that cannot be read is reported and skipped; the other paths are
    still staged. Relative paths are taken relative to the repository root
    and recorded as given; absolute paths are recorded relative to the root.

    Args:
      repo: Repository for the files
      paths: Paths to add
    Returns: Tuple with a list of (path, digest, stored) triples for the
      staged files (stored is False if the contents were already in
      the object store) and a list of (path, error) pairs for the files
      that could not be read
    """
    added = []
    failed = []
    with open_repo_closing(repo) as r:
        for p in paths:
            path = os.fspath(p)
            if os.path.isabs(path):
                fs_path = path
                path = os.path.relpath(path, r.path)
            else:
                fs_path = os.path.join(r.path, path)
            try:
                sha, stored = r.stage(fs_path, path)
            except OSError as e:
                logger.debug("failed to add %s: %s", path, e)
                failed.append((path, e))
            else:
                added.append((path, sha, stored))
    return added, failed


def commit(repo: RepoPath = ".", message: str = "") -> str:
    """Create a new commit from the staged files.

    Args:
      repo: Path to repository
      message: Optional commit message
    Returns: Digest of the newly created commit
    Raises:
      EmptyStagingError: if nothing is staged
    """
    with open_repo_closing(repo) as r:
        return r.do_commit(message)


def print_commit(
    commit_id: str, commit: Commit, outstream: TextIO = sys.stdout
) -> None:
    """Write a human-readable commit log entry.

    Args:
      commit_id: Digest of the commit
      commit: A `Commit` object
      outstream: A stream file to write to
    """
    outstream.write("-" * 50 + "\n")
    outstream.write("Commit: " + commit_id + "\n")
    outstream.write("Date:   " + commit.timestamp + "\n")
    if commit.message:
        outstream.write("\n")
        for line in commit.message.splitlines():
            outstream.write("    " + line + "\n")
    outstream.write("\n")


def log(
    repo: RepoPath = ".",
    outstream: TextIO = sys.stdout,
    max_entries: int | None = None,
) -> int:
    """Write commit logs from HEAD back to the first commit.

    Args:
      repo: Path to repository
      outstream: Stream to write log output to
      max_entries: Optional maximum number of entries to display
    Returns: The number of commits written
    """
    count = 0
    with open_repo_closing(repo) as r:
        for entry in r.history(max_entries=max_entries):
            print_commit(entry.commit_id, entry.commit, outstream=outstream)
            count += 1
    if not count:
        outstream.write("No commits yet.\n")
    return count


def _write_file_content(outstream: TextIO, data: bytes) -> None:
    text = data.decode("utf-8", errors="replace")
    outstream.write(text)
    if not text.endswith("\n"):
        outstream.write("\n")


def show(
    repo: RepoPath,
    commit_id: str,
    outstream: TextIO = sys.stdout,
    color: bool = False,
) -> None:
    """Print the files of a commit and how each differs from the parent.

    Args:
      repo: Path to repository
      commit_id: Digest of the commit to show
      outstream: Stream to write to
      color: Whether to color the diff output
    Raises:
      MissingCommitError: if the commit does not exist
    """
    with open_repo_closing(repo) as r:
        c = r.get_commit(commit_id)
        writer = ColorizedDiffWriter(outstream, color=color)
        outstream.write(f"Changes in commit {commit_id}:\n")
        for entry in c.files:
            outstream.write(f"\nFile: {entry.path}\n")
            _write_file_content(outstream, r.object_store[entry.sha])
            result = r.file_diff(commit_id, entry.path)
            if isinstance(result, FileDiff):
                writer.write_diff(result.parts)
            elif result.reason == FIRST_COMMIT:
                outstream.write("First commit\n")
            else:
                outstream.write("New file in this commit\n")


def status(repo: RepoPath = ".", outstream: TextIO = sys.stdout) -> list[IndexEntry]:
    """Write the staged entries, in the order they were first staged.

    Returns: The staged entries
    """
    with open_repo_closing(repo) as r:
        entries = list(r.open_index().snapshot())
    if not entries:
        outstream.write("Nothing staged.\n")
        return entries
    outstream.write("Changes to be committed:\n")
    for entry in entries:
        outstream.write(f"\t{entry.sha[:7]}  {entry.path}\n")
    return entries

