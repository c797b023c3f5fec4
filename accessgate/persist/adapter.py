"""Storage adapters for policy rules."""

from __future__ import annotations

import abc
from typing import Any

from accessgate.model.model import Model


def load_policy_line(line: str, model: Model) -> None:
    """Parse one text line such as ``p, alice, data1, read`` into the model.

    Empty lines and lines starting with ``#`` are ignored.
    """
    if not line or line.startswith("#"):
        return
    tokens = [token.strip() for token in line.split(",")]
    key = tokens[0]
    model[key[:1]][key].policy.append(tokens[1:])


class Adapter(abc.ABC):
    """Interface for policy storage."""

    @abc.abstractmethod
    def load_policy(self, model: Model) -> None:
        """Load all policy rules from storage into the model."""

    @abc.abstractmethod
    def save_policy(self, model: Model) -> None:
        """Save all policy rules of the model to storage."""

    @abc.abstractmethod
    def add_policy(self, sec: str, ptype: str, rule: list[str]) -> None:
        """Add one rule to storage (auto-save)."""

    @abc.abstractmethod
    def remove_policy(self, sec: str, ptype: str, rule: list[str]) -> None:
        """Remove one rule from storage (auto-save)."""

    @abc.abstractmethod
    def remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> None:
        """Remove the rules matching the filter from storage (auto-save)."""


class FilteredAdapter(Adapter):
    """Interface for storage that can load a filtered subset of the policy."""

    @abc.abstractmethod
    def load_filtered_policy(self, model: Model, filter: Any) -> None:
        """Load only the rules matching ``filter``."""

    @abc.abstractmethod
    def is_filtered(self) -> bool:
        """Return whether the loaded policy was filtered."""