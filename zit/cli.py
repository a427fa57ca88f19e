#
# zit - Simple command-line interface to Zit
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

"""Simple command-line interface to Zit.

Each subcommand is a ``cmd_<name>`` class whose run() method parses its own
arguments and returns an exit code (None meaning success).
"""

import argparse
import logging
import os
import signal
import sys
import types
from collections.abc import Sequence

from . import __version__, porcelain
from .errors import (
    CorruptObject,
    DiffAlgorithmNotAvailable,
    EmptyStagingError,
    NotFound,
    NotZitRepository,
)
from .log_utils import default_logging_config
from .repo import Repo

# Failures rendered as a message and exit status 1 rather than a traceback
REPORTED_ERRORS = (
    CorruptObject,
    DiffAlgorithmNotAvailable,
    NotFound,
    NotZitRepository,
    OSError,
    ValueError,
)


def signal_int(signal: int, frame: types.FrameType | None) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


class Command:
    """A Zit subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_init(Command):
    """Create an empty zit repository or reinitialize an existing one."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the init command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="zit init")
        parser.add_argument(
            "path", nargs="?", default=os.getcwd(), help="Repository path"
        )
        parsed_args = parser.parse_args(args)

        repo, created = porcelain.init(parsed_args.path)
        with repo:
            if created:
                sys.stdout.write(
                    f"Initialized empty zit repository in {repo.controldir}\n"
                )
            else:
                sys.stdout.write(
                    f"Already initialized zit repository in {repo.controldir}\n"
                )
        return None


class cmd_add(Command):
    """Add file contents to the staging area."""

    def run(self, argv: Sequence[str]) -> int | None:
        """Execute the add command.

        Args:
            argv: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="zit add")
        parser.add_argument("path", nargs="+")
        args = parser.parse_args(argv)

        added, failed = porcelain.add(".", args.path)
        for path, sha, stored in added:
            sys.stdout.write(f"File Hash: {sha}\n")
            if not stored:
                sys.stdout.write("File content already stored.\n")
            sys.stdout.write(f"Added {path} to staging area.\n")
        for path, error in failed:
            logging.error("Failed to add file %s: %s", path, error.strerror or error)
        return 1 if failed else None


class cmd_commit(Command):
    """Record the staged files as a new commit."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the commit command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="zit commit")
        parser.add_argument("--message", "-m", help="Commit message")
        parser.add_argument("text", nargs="?", help="Commit message")
        parsed_args = parser.parse_args(args)

        message = parsed_args.message
        if message is None:
            message = parsed_args.text
        if message is None:
            parser.error("a commit message is required")

        try:
            commit_id = porcelain.commit(".", message=message)
        except EmptyStagingError as e:
            logging.error("%s", e)
            return 1
        sys.stdout.write(f"Commit successfully created: {commit_id}\n")
        return None


class cmd_log(Command):
    """Show commit logs."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the log command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="zit log")
        parser.add_argument(
            "-n",
            "--max-count",
            type=int,
            default=None,
            help="Limit the number of commits to output",
        )
        parsed_args = parser.parse_args(args)

        porcelain.log(".", outstream=sys.stdout, max_entries=parsed_args.max_count)
        return None


class cmd_show(Command):
    """Show the files of a commit and their changes."""

    def run(self, argv: Sequence[str]) -> int | None:
        """Execute the show command.

        Args:
            argv: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="zit show")
        parser.add_argument("commit", type=str)
        parser.add_argument(
            "--color",
            choices=["always", "never", "auto"],
            default=None,
            help="Use colored output (defaults to color.ui)",
        )
        args = parser.parse_args(argv)

        with Repo(".") as repo:
            color = args.color
            if color is None:
                try:
                    color = repo.get_config().get("color", "ui")
                except KeyError:
                    color = "auto"
            if color == "always":
                use_color = True
            elif color == "never":
                use_color = False
            else:
                use_color = sys.stdout.isatty()
            porcelain.show(repo, args.commit, outstream=sys.stdout, color=use_color)
        return None


class cmd_status(Command):
    """Show the staged files."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the status command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="zit status")
        parser.parse_args(args)
        porcelain.status(".", outstream=sys.stdout)
        return None


commands = {
    "add": cmd_add,
    "commit": cmd_commit,
    "init": cmd_init,
    "log": cmd_log,
    "show": cmd_show,
    "status": cmd_status,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the Zit CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(
        prog="zit",
        description="Zit - A Simple Version Control System",
        add_help=False,
    )
    parser.add_argument("--help", "-h", action="store_true", help="Show help")
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s " + ".".join(map(str, __version__)),
    )

    # Parse known args to separate global options from command args
    global_args, remaining = parser.parse_known_args(argv)

    if global_args.help or not remaining:
        parser = argparse.ArgumentParser(
            prog="zit", description="Zit - A Simple Version Control System"
        )
        parser.add_argument(
            "command",
            nargs="?",
            help=f"Command to run. Available: {', '.join(sorted(commands.keys()))}",
        )
        parser.print_help()
        return 1

    default_logging_config(logging.INFO, "%(message)s")

    cmd = remaining[0]
    cmd_args = remaining[1:]

    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logging.fatal("No such subcommand: %s", cmd)
        return 1
    try:
        return cmd_kls().run(cmd_args)
    except REPORTED_ERRORS as e:
        logging.error("%s", e)
        return 1


def _main() -> None:
    signal.signal(signal.SIGINT, signal_int)

    sys.exit(main())


if __name__ == "__main__":
    _main()
