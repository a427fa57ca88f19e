# walk.py -- General implementation of walking commits
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

"""Walking the commit chain."""

__all__ = [
    "WalkEntry",
    "Walker",
]

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .object_store import BaseObjectStore

from .errors import CorruptCommit
from .objects import Commit


class WalkEntry:
    """A single result from a walk: a commit and the digest naming it."""

    def __init__(self, commit_id: str, commit: Commit) -> None:
        self.commit_id = commit_id
        self.commit = commit

    def __repr__(self) -> str:
        return f"<WalkEntry commit={self.commit_id}>"


class Walker:
    """Lazy walk from a starting commit back to the root of the chain.

    Walker objects can be iterated any number of times. Each iteration asks
    get_start for the commit to begin at, so a walker created with HEAD as
    its start follows HEAD as it advances between iterations.
    """

    def __init__(
        self,
        store: "BaseObjectStore",
        get_start: Callable[[], str | None],
        max_entries: int | None = None,
    ) -> None:
        """Constructor.

        Args:
          store: Object store to read commits from
          get_start: Callable returning the digest to start from, or None
            for an empty chain
          max_entries: The maximum number of entries to yield, or None for
            no limit.
        """
        self.store = store
        self.get_start = get_start
        self.max_entries = max_entries

    def __iter__(self) -> Iterator[WalkEntry]:
        sha = self.get_start()
        seen: set[str] = set()
        count = 0
        while sha is not None:
            if self.max_entries is not None and count >= self.max_entries:
                return
            if sha in seen:
                raise CorruptCommit(sha, "parent chain contains a cycle")
            seen.add(sha)
            commit = self.store.get_commit(sha)
            yield WalkEntry(sha, commit)
            count += 1
            sha = commit.parent
