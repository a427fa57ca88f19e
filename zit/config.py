# config.py - Reading and writing zit config files
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

"""Reading and writing zit configuration files.

The format is the git one, restricted to what zit needs:

* ``[section]`` headers, without subsections
* ``name = value`` settings; a bare ``name`` means ``true``
* ``#`` and ``;`` start comments outside double quotes
* section and variable names are case-insensitive
"""

__all__ = [
    "DEFAULT_CONFIG",
    "Config",
    "ConfigDict",
    "ConfigFile",
    "default_config",
]

import os
import re
from collections.abc import Iterator
from typing import IO, overload

from .file import LockedFile

DEFAULT_CONFIG: dict[str, dict[str, str]] = {
    "core": {"fsync": "true"},
    "diff": {"algorithm": "myers"},
    "color": {"ui": "auto"},
}

_SECTION_RE = re.compile(r"^[A-Za-z0-9.-]+$")
_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")


class Config:
    """A zit configuration."""

    def get(self, section: str, name: str) -> str:
        """Retrieve the contents of a configuration setting.

        Args:
          section: Section name
          name: Variable name
        Returns:
          Contents of the setting
        Raises:
          KeyError: if the value is not set
        """
        raise NotImplementedError(self.get)

    @overload
    def get_boolean(self, section: str, name: str, default: bool) -> bool: ...

    @overload
    def get_boolean(self, section: str, name: str) -> bool | None: ...

    def get_boolean(
        self, section: str, name: str, default: bool | None = None
    ) -> bool | None:
        """Retrieve a configuration setting as boolean.

        Args:
          section: Section name
          name: Variable name
          default: Default value if setting is not found

        Returns:
          Contents of the setting
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        if value.lower() in ("true", "yes", "on", "1"):
            return True
        elif value.lower() in ("false", "no", "off", "0", ""):
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def set(self, section: str, name: str, value: str | bool) -> None:
        """Set a configuration value."""
        raise NotImplementedError(self.set)

    def items(self, section: str) -> Iterator[tuple[str, str]]:
        """Iterate over the configuration pairs for a specific section."""
        raise NotImplementedError(self.items)

    def sections(self) -> Iterator[str]:
        """Iterate over the sections."""
        raise NotImplementedError(self.sections)

    def has_section(self, name: str) -> bool:
        """Check if a specified section exists."""
        return name.lower() in self.sections()


class ConfigDict(Config):
    """Zit configuration stored in a dictionary."""

    def __init__(self, values: dict[str, dict[str, str]] | None = None) -> None:
        """Create a new ConfigDict."""
        self._values: dict[str, dict[str, str]] = {}
        for section, settings in (values or {}).items():
            for name, value in settings.items():
                self.set(section, name, value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._values!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, self.__class__) and other._values == self._values

    def get(self, section: str, name: str) -> str:
        return self._values[section.lower()][name.lower()]

    def set(self, section: str, name: str, value: str | bool) -> None:
        if isinstance(value, bool):
            value = "true" if value else "false"
        self._values.setdefault(section.lower(), {})[name.lower()] = value

    def items(self, section: str) -> Iterator[tuple[str, str]]:
        return iter(self._values.get(section.lower(), {}).items())

    def sections(self) -> Iterator[str]:
        return iter(self._values.keys())


def _strip_comments(line: str) -> str:
    string_open = False
    for i, character in enumerate(line):
        # Comment characters outside balanced quotes denote comment start
        if character == '"':
            string_open = not string_open
        elif not string_open and character in "#;":
            return line[:i]
    return line


def _parse_string(value: str) -> str:
    value = _strip_comments(value).strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        value = value[1:-1]
    return value


def _format_string(value: str) -> str:
    if value != value.strip() or any(c in value for c in "#;"):
        return '"' + value + '"'
    return value


class ConfigFile(ConfigDict):
    """A zit configuration file, like .zit/config."""

    def __init__(self, values: dict[str, dict[str, str]] | None = None) -> None:
        super().__init__(values=values)
        self.path: str | None = None

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object."""
        ret = cls()
        section: str | None = None
        for lineno, raw in enumerate(f.readlines(), 1):
            line = raw.decode("utf-8").strip()
            if lineno == 1 and line.startswith("\ufeff"):
                line = line[1:]
            if line.startswith("["):
                end = line.find("]")
                if end == -1:
                    raise ValueError(f"line {lineno}: expected trailing ]")
                section = line[1:end].strip()
                if not _SECTION_RE.match(section):
                    raise ValueError(f"line {lineno}: invalid section name {section!r}")
                ret._values.setdefault(section.lower(), {})
                line = line[end + 1 :]
            if _strip_comments(line).strip() == "":
                continue
            if section is None:
                raise ValueError(f"line {lineno}: setting {line!r} without section")
            if "=" in line:
                name, value = line.split("=", 1)
                value = _parse_string(value)
            else:
                name, value = _strip_comments(line), "true"
            name = name.strip()
            if not _NAME_RE.match(name):
                raise ValueError(f"line {lineno}: invalid variable name {name!r}")
            ret.set(section, name, value)
        return ret

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "ConfigFile":
        """Read configuration from a file on disk."""
        abs_path = os.fspath(path)
        with LockedFile(abs_path, "rb") as f:
            ret = cls.from_file(f)
        ret.path = abs_path
        return ret

    def write_to_path(self, path: str | os.PathLike[str] | None = None) -> None:
        """Write configuration to a file on disk."""
        if path is None:
            if self.path is None:
                raise ValueError("No path specified and no default path available")
            path = self.path
        with LockedFile(path, "wb") as f:
            self.write_to_file(f)

    def write_to_file(self, f: IO[bytes]) -> None:
        """Write configuration to a file-like object."""
        for section, values in self._values.items():
            f.write(f"[{section}]\n".encode())
            for key, value in values.items():
                f.write(f"\t{key} = {_format_string(value)}\n".encode())


def default_config() -> ConfigFile:
    """Return a ConfigFile holding the settings written by ``zit init``."""
    return ConfigFile(DEFAULT_CONFIG)
