# log_utils.py -- Logging functions
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


"""Logging for zit.

Library code logs through ``getLogger(__name__)`` and stays silent until an
application configures logging: the ``zit`` logger carries a handler that
drops every record.

Applications call default_logging_config(). Setting ``ZIT_TRACE`` switches
that to DEBUG output with timestamps, sent to:

* stderr, for ``1``, ``2`` or ``true``
* an already open file descriptor, for ``3`` to ``9``
* a file, for an absolute path; a directory gets ``trace.<pid>``
"""

__all__ = [
    "TRACE_ENV",
    "default_logging_config",
    "getLogger",
]

import logging
import os
import sys

getLogger = logging.getLogger

TRACE_ENV = "ZIT_TRACE"
TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


class _NullHandler(logging.Handler):
    """Handler that drops every record."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_ZIT_LOGGER = getLogger("zit")
_ZIT_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target() -> str | int | None:
    """Interpret ZIT_TRACE.

    Returns: 2 for stderr, a file descriptor number, an absolute path, or
      None when tracing is off or the value is not understood.
    """
    value = os.environ.get(TRACE_ENV, "").strip()
    if value.lower() in ("", "0", "false"):
        return None
    if value.lower() in ("1", "2", "true"):
        return 2
    if value.isdigit():
        fd = int(value)
        return fd if 3 <= fd <= 9 else None
    if os.path.isabs(value):
        return value
    return None


def _trace_handler(target: str | int) -> logging.Handler:
    """Create the handler trace output goes to.

    Raises:
      OSError: if the descriptor or file cannot be opened
    """
    if target == 2:
        return logging.StreamHandler(sys.stderr)
    if isinstance(target, int):
        return logging.StreamHandler(os.fdopen(target, "w", buffering=1))
    if os.path.isdir(target):
        target = os.path.join(target, f"trace.{os.getpid()}")
    return logging.FileHandler(target, mode="a")


def default_logging_config(
    level: int = logging.INFO, fmt: str = "%(message)s"
) -> bool:
    """Send zit log output to stderr, or to the ZIT_TRACE target.

    Like logging.basicConfig(), this does nothing to a root logger that
    already has handlers.

    Args:
      level: Level to log at when tracing is off
      fmt: Record format when tracing is off
    Returns: Whether trace output was configured
    """
    _ZIT_LOGGER.removeHandler(_NULL_HANDLER)
    root = logging.getLogger()
    if root.handlers:
        return False
    target = _get_trace_target()
    if target is not None:
        try:
            handler = _trace_handler(target)
        except OSError as e:
            sys.stderr.write(f"Warning: cannot open {TRACE_ENV} target {target}: {e}\n")
        else:
            handler.setFormatter(logging.Formatter(TRACE_FORMAT))
            root.addHandler(handler)
            root.setLevel(logging.DEBUG)
            return True
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)
    return False
