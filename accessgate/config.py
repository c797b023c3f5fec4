"""INI-style configuration files with sections and continued lines."""

from __future__ import annotations

import io
import re
import threading
from collections.abc import Iterable

DEFAULT_SECTION = "default"
_COMMENT_PREFIXES = ("#", ";")
_CONTINUATION = "\\"

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class Config:
    """Parsed configuration: a mapping of section -> option -> value.

    Keys are looked up as ``"section::option"``, or as ``"option"`` for
    the default section.
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path) -> Config:
        """Load a configuration from a file."""
        config = cls()
        with open(path, encoding="utf-8") as handle, config._lock:
            config._parse(handle)
        return config

    @classmethod
    def from_text(cls, text: str) -> Config:
        """Load a configuration from a string."""
        config = cls()
        with config._lock:
            config._parse(io.StringIO(text))
        return config

    def add_config(self, section: str, option: str, value: str) -> bool:
        """Store a value; return True if the option was not present before."""
        if not section:
            section = DEFAULT_SECTION
        options = self._data.setdefault(section, {})
        is_new = option not in options
        options[option] = value
        return is_new

    def _parse(self, lines: Iterable[str]) -> None:
        section = ""
        buffer: list[str] = []
        can_write = False
        line_num = 0

        for raw in lines:
            if can_write:
                self._write(section, line_num, buffer)
                can_write = False
            line_num += 1
            line = raw.strip()

            if not line or line.startswith(_COMMENT_PREFIXES):
                can_write = True
                continue

            if line.startswith("[") and line.endswith("]"):
                if "".join(buffer):
                    self._write(section, line_num, buffer)
                    can_write = False
                section = line[1:-1]
                continue

            if line.endswith(_CONTINUATION):
                buffer.append(line[:-1].strip())
            else:
                buffer.append(line)
                can_write = True

        if can_write:
            self._write(section, line_num, buffer)
        line_num += 1
        if "".join(buffer):
            self._write(section, line_num, buffer)

    def _write(self, section: str, line_num: int, buffer: list[str]) -> None:
        content = "".join(buffer)
        if not content:
            buffer.clear()
            return
        parts = content.split("=", 1)
        if len(parts) != 2:
            raise ValueError(
                f"parse the content error : line {line_num} , {parts[0]} = ? "
            )
        self.add_config(section, parts[0].strip(), parts[1].strip())
        buffer.clear()

    def _get(self, key: str) -> str:
        keys = key.lower().split("::")
        if len(keys) >= 2:
            section, option = keys[0], keys[1]
        else:
            section, option = DEFAULT_SECTION, keys[0]
        return self._data.get(section, {}).get(option, "")

    def get_bool(self, key: str) -> bool:
        """Return the value as a boolean; raise ValueError if it is not one."""
        value = self._get(key)
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ValueError(f"invalid boolean value for {key!r}: {value!r}")

    def get_int(self, key: str) -> int:
        """Return the value as a 64-bit integer; raise ValueError otherwise."""
        value = self._get(key)
        if not _INT_PATTERN.fullmatch(value):
            raise ValueError(f"invalid integer value for {key!r}: {value!r}")
        number = int(value)
        if not _INT64_MIN <= number <= _INT64_MAX:
            raise ValueError(f"integer value out of range for {key!r}: {value!r}")
        return number

    def get_float(self, key: str) -> float:
        """Return the value as a float; raise ValueError otherwise."""
        value = self._get(key)
        if not value or "_" in value or any(ch.isspace() for ch in value):
            raise ValueError(f"invalid float value for {key!r}: {value!r}")
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"invalid float value for {key!r}: {value!r}") from None

    def get_string(self, key: str) -> str:
        """Return the value, or an empty string if the key is missing."""
        return self._get(key)

    def get_strings(self, key: str) -> list[str]:
        """Return the value split on commas; empty list if missing or empty."""
        value = self._get(key)
        if not value:
            return []
        return value.split(",")

    def set(self, key: str, value: str) -> None:
        """Set a value by ``"section::option"`` or ``"option"`` key."""
        with self._lock:
            if not key:
                raise ValueError("key is empty")
            keys = key.lower().split("::")
            if len(keys) >= 2:
                section, option = keys[0], keys[1]
            else:
                section, option = "", keys[0]
            self.add_config(section, option, value)