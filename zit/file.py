# file.py -- Safe access to zit files
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

"""Safe access to zit files.

Every mutable file in a repository (the index, HEAD, the config file) and
every object write goes through the lock file protocol implemented here:
writes to ``foo`` go to ``foo.lock``, which is created exclusively and renamed
over ``foo`` on success or removed on failure.
"""

__all__ = [
    "FileLocked",
    "LockedFile",
]

import os
import time
import warnings
from types import TracebackType
from typing import IO, Any, ClassVar, Literal, overload

from .log_utils import getLogger

logger = getLogger(__name__)

# Seconds between attempts to take a lock held by another writer.
LOCK_POLL_INTERVAL = 0.01
LOCK_POLL_MAX_INTERVAL = 0.2


@overload
def LockedFile(
    filename: str | os.PathLike[str],
    mode: Literal["wb"],
    bufsize: int = -1,
    mask: int = 0o644,
    fsync: bool = True,
    wait: bool = True,
) -> "_LockedFile": ...


@overload
def LockedFile(
    filename: str | os.PathLike[str],
    mode: Literal["rb"] = "rb",
    bufsize: int = -1,
    mask: int = 0o644,
    fsync: bool = True,
    wait: bool = True,
) -> IO[bytes]: ...


def LockedFile(
    filename: str | os.PathLike[str],
    mode: str = "rb",
    bufsize: int = -1,
    mask: int = 0o644,
    fsync: bool = True,
    wait: bool = True,
) -> "IO[bytes] | _LockedFile":
    """Create a file object that obeys the zit file locking protocol.

    Returns: a builtin file object or a _LockedFile object

    Note: See _LockedFile for a description of the file locking protocol.

    Only read-only and write-only (binary) modes are supported; r+, w+, and a
    are not.  To read and write from the same file, you can take advantage of
    the fact that opening a file for write does not actually open the file you
    request: open it for writing, read the current contents, then write the
    replacement.

    Args:
      filename: Path to the file
      mode: File mode (only 'rb' and 'wb' are supported)
      bufsize: Buffer size for file operations
      mask: File mask for created files
      fsync: Whether to call fsync() before closing (default: True)
      wait: Whether to block until a lock held by another writer is
        released (default: True). If False, FileLocked is raised instead.
    """
    if "a" in mode:
        raise OSError("append mode not supported for zit files")
    if "+" in mode:
        raise OSError("read/write mode not supported for zit files")
    if "b" not in mode:
        raise OSError("text mode not supported for zit files")
    if "w" in mode:
        return _LockedFile(filename, mode, bufsize, mask, fsync, wait)
    else:
        return open(filename, mode, bufsize)


class FileLocked(Exception):
    """File is already locked."""

    def __init__(
        self,
        filename: str | os.PathLike[str],
        lockfilename: str,
    ) -> None:
        """Initialize FileLocked.

        Args:
          filename: Name of the file that is locked
          lockfilename: Name of the lock file
        """
        self.filename = filename
        self.lockfilename = lockfilename
        super().__init__(filename, lockfilename)


class _LockedFile(IO[bytes]):
    """File that follows the zit locking protocol for writes.

    All writes to a file foo will be written into foo.lock in the same
    directory, and the lockfile will be renamed to overwrite the original file
    on close.

    The lock file doubles as an exclusive lock on foo: as long as it exists,
    no other writer can open foo for writing. Readers are never blocked; they
    see either the old or the new contents, never a partial write.

    Note: You *must* call close() or abort() on a _LockedFile for the lock to
        be released. Typically this will happen in a finally block, or by
        using the object as a context manager.
    """

    _file: IO[bytes]
    _filename: str
    _lockfilename: str
    _closed: bool

    PROXY_PROPERTIES: ClassVar[set[str]] = {
        "encoding",
        "errors",
        "mode",
        "name",
        "newlines",
    }

    def __init__(
        self,
        filename: str | os.PathLike[str],
        mode: str,
        bufsize: int,
        mask: int,
        fsync: bool = True,
        wait: bool = True,
    ) -> None:
        self._filename = os.fspath(filename)
        self._fsync = fsync
        self._lockfilename = self._filename + ".lock"
        fd = self._acquire(mask, wait)
        self._file = os.fdopen(fd, mode, bufsize)
        self._closed = False

    def _acquire(self, mask: int, wait: bool) -> int:
        interval = LOCK_POLL_INTERVAL
        waited = False
        while True:
            try:
                return os.open(
                    self._lockfilename,
                    os.O_RDWR | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0),
                    mask,
                )
            except FileExistsError as exc:
                if not wait:
                    raise FileLocked(self._filename, self._lockfilename) from exc
            if not waited:
                logger.debug("waiting for lock on %s", self._filename)
                waited = True
            time.sleep(interval)
            interval = min(interval * 2, LOCK_POLL_MAX_INTERVAL)

    def abort(self) -> None:
        """Close and discard the lockfile without overwriting the target.

        If the file is already closed, this is a no-op.
        """
        if self._closed:
            return
        self._file.close()
        try:
            os.remove(self._lockfilename)
        except FileNotFoundError:
            # The file may have been removed already, which is ok.
            pass
        self._closed = True

    def close(self) -> None:
        """Close this file, saving the lockfile over the original.

        Note: If this method fails, it will attempt to delete the lockfile.
            However, it is not guaranteed to do so (e.g. if a filesystem
            becomes suddenly read-only), which will prevent future writes to
            this file until the lockfile is removed manually.

        Raises:
          OSError: if the original file could not be overwritten. The
            lock file is still closed, so further attempts to write to the same
            file object will raise ValueError.
        """
        if self._closed:
            return
        self._file.flush()
        if self._fsync:
            os.fsync(self._file.fileno())
        self._file.close()
        try:
            os.replace(self._lockfilename, self._filename)
        finally:
            self.abort()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            warnings.warn(f"unclosed {self!r}", ResourceWarning, stacklevel=2)
            self.abort()

    def __enter__(self) -> "_LockedFile":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()

    def __fspath__(self) -> str:
        """Return the file path for os.fspath() compatibility."""
        return self._filename

    @property
    def closed(self) -> bool:
        """Return whether the file is closed."""
        return self._closed

    def __getattr__(self, name: str) -> Any:  # noqa: ANN401
        """Proxy property calls to the underlying file."""
        if name in self.PROXY_PROPERTIES:
            return getattr(self._file, name)
        raise AttributeError(name)

    def read(self, size: int = -1) -> bytes:
        return self._file.read(size)

    def write(self, data: bytes, /) -> int:  # type: ignore[override]
        return self._file.write(data)

    def flush(self) -> None:
        return self._file.flush()

    def fileno(self) -> int:
        return self._file.fileno()

    def isatty(self) -> bool:
        return self._file.isatty()

    def readable(self) -> bool:
        return self._file.readable()

    def writable(self) -> bool:
        return self._file.writable()

    def seekable(self) -> bool:
        return self._file.seekable()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        return self._file.tell()
