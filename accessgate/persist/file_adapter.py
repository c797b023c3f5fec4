"""Policy storage in text files of comma-separated rules."""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from accessgate.model.model import Model
from accessgate.persist.adapter import Adapter, FilteredAdapter, load_policy_line

EMPTY_PATH_MESSAGE = "invalid file path, file path cannot be empty"
_AUTO_SAVE_UNSUPPORTED = "auto-save is not supported by the file adapter"


class FileAdapter(Adapter):
    """Loads policy from, and saves it to, a text file.

    Each line holds one rule, such as ``p, alice, data1, read``.
    """

    def __init__(self, file_path: str | os.PathLike = "") -> None:
        self.file_path = os.fspath(file_path) if file_path else ""

    def _require_path(self) -> None:
        if not self.file_path:
            raise ValueError(EMPTY_PATH_MESSAGE)

    def _lines(self) -> Iterator[str]:
        with open(self.file_path, encoding="utf-8") as handle:
            for raw in handle:
                yield raw.strip()

    def load_policy(self, model: Model) -> None:
        """Load every rule of the file into the model."""
        self._require_path()
        for line in self._lines():
            load_policy_line(line, model)

    def save_policy(self, model: Model) -> None:
        """Write every policy and grouping rule of the model to the file."""
        self._require_path()
        lines = [
            f"{ptype}, {', '.join(rule)}"
            for sec in ("p", "g")
            for ptype, ast in model.get(sec, {}).items()
            for rule in ast.policy
        ]
        with open(self.file_path, "w", encoding="utf-8", newline="") as handle:
            handle.write("\n".join(lines))

    def add_policy(self, sec: str, ptype: str, rule: list[str]) -> None:
        """Single-rule writes are not supported; save the whole policy instead."""
        raise NotImplementedError(_AUTO_SAVE_UNSUPPORTED)

    def remove_policy(self, sec: str, ptype: str, rule: list[str]) -> None:
        """Single-rule removals are not supported; save the whole policy instead."""
        raise NotImplementedError(_AUTO_SAVE_UNSUPPORTED)

    def remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> None:
        """Filtered removals are not supported; save the whole policy instead."""
        raise NotImplementedError(_AUTO_SAVE_UNSUPPORTED)


@dataclass
class Filter:
    """Field values that loaded ``p`` and ``g`` rules must match.

    Empty values match anything.
    """

    p: list[str] = field(default_factory=list)
    g: list[str] = field(default_factory=list)


def _skip_line(line: str, flt: Filter) -> bool:
    parts = line.split(",")
    ptype = parts[0].strip()
    if ptype == "p":
        criteria = flt.p
    elif ptype == "g":
        criteria = flt.g
    else:
        criteria = []
    if len(parts) < len(criteria) + 1:
        return True
    return any(
        value and value.strip() != part.strip()
        for value, part in zip(criteria, parts[1:])
    )


class FilteredFileAdapter(FileAdapter, FilteredAdapter):
    """File adapter that can load only the rules matching a :class:`Filter`."""

    def __init__(self, file_path: str | os.PathLike = "") -> None:
        super().__init__(file_path)
        self._filtered = True

    def load_policy(self, model: Model) -> None:
        """Load the whole policy; the adapter is then no longer filtered."""
        self._filtered = False
        super().load_policy(model)

    def load_filtered_policy(self, model: Model, filter: Any) -> None:
        """Load only the rules matching ``filter``; ``None`` loads everything."""
        if filter is None:
            self.load_policy(model)
            return
        self._require_path()
        if not isinstance(filter, Filter):
            raise TypeError("invalid filter type")
        for line in self._lines():
            if not _skip_line(line, filter):
                load_policy_line(line, model)
        self._filtered = True

    def is_filtered(self) -> bool:
        return self._filtered

    def save_policy(self, model: Model) -> None:
        """Save the policy; refused while only a filtered part is loaded."""
        if self._filtered:
            raise RuntimeError("cannot save a filtered policy")
        super().save_policy(model)