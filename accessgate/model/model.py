"""The access-control model: its definitions and the policy attached to them."""

from __future__ import annotations

import re
from collections.abc import Iterator

from accessgate.config import Config
from accessgate.log import log_print, log_printf
from accessgate.model.assertion import Assertion

_SECTION_NAMES = {
    "r": "request_definition",
    "p": "policy_definition",
    "g": "role_definition",
    "e": "policy_effect",
    "m": "matchers",
}

_LOAD_ORDER = ("r", "p", "e", "m", "g")

_ESCAPE_PATTERN = re.compile(r"(\|| |=|\)|\(|&|<|>|,|\+|-|!|\*|/)(r|p)\.")


def _escape_assertion(text: str) -> str:
    """Turn ``r.sub``/``p.sub`` references into ``r_sub``/``p_sub``."""
    if text.startswith(("r", "p")):
        text = text.replace(".", "_", 1)
    return _ESCAPE_PATTERN.sub(lambda m: m.group(1) + m.group(2) + "_", text)


def _remove_comments(text: str) -> str:
    pos = text.find("#")
    if pos == -1:
        return text
    return text[:pos].strip()


def _key_suffix(index: int) -> str:
    return "" if index == 1 else str(index)


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _matches(rule: list[str], field_index: int, field_values: tuple[str, ...]) -> bool:
    return all(
        not value or rule[field_index + offset] == value
        for offset, value in enumerate(field_values)
    )


class Model(dict):
    """Mapping of section (``r``, ``p``, ``g``, ``e``, ``m``) to its assertions."""

    @classmethod
    def from_file(cls, path) -> Model:
        """Create a model from a model configuration file."""
        model = cls()
        model.load_model(path)
        return model

    @classmethod
    def from_text(cls, text: str) -> Model:
        """Create a model from model configuration text."""
        model = cls()
        model.load_model_from_text(text)
        return model

    def add_def(self, sec: str, key: str, value: str) -> bool:
        """Add an assertion; return False if ``value`` is empty."""
        if not value:
            return False
        if sec in ("r", "p"):
            tokens = [f"{key}_{token}" for token in value.split(", ")]
            ast = Assertion(key=key, value=value, tokens=tokens)
        else:
            ast = Assertion(key=key, value=_remove_comments(_escape_assertion(value)))
        self.setdefault(sec, {})[key] = ast
        return True

    def _load_section(self, cfg: Config, sec: str) -> None:
        index = 1
        while True:
            key = sec + _key_suffix(index)
            value = cfg.get_string(f"{_SECTION_NAMES[sec]}::{key}")
            if not self.add_def(sec, key, value):
                break
            index += 1

    def _load_config(self, cfg: Config) -> None:
        for sec in _LOAD_ORDER:
            self._load_section(cfg, sec)

    def load_model(self, path) -> None:
        """Load definitions from a model configuration file."""
        self._load_config(Config.from_file(path))

    def load_model_from_text(self, text: str) -> None:
        """Load definitions from model configuration text."""
        self._load_config(Config.from_text(text))

    def print_model(self) -> None:
        """Log every definition of the model."""
        log_print("Model:")
        for sec, assertions in self.items():
            for key, ast in assertions.items():
                log_printf("%s.%s: %s", sec, key, ast.value)

    def _assertions(self, sec: str) -> Iterator[Assertion]:
        return iter(self.get(sec, {}).values())

    def build_role_links(self, rm) -> None:
        """Load all grouping rules into the role manager."""
        for ast in self._assertions("g"):
            ast.build_role_links(rm)

    def print_policy(self) -> None:
        """Log the policy and grouping rules."""
        log_print("Policy:")
        for sec in ("p", "g"):
            for key, ast in self.get(sec, {}).items():
                log_print(key, ": ", ast.value, ": ", ast.policy)

    def clear_policy(self) -> None:
        """Remove every policy and grouping rule."""
        for sec in ("p", "g"):
            for ast in self._assertions(sec):
                ast.policy = []

    def get_policy(self, sec: str, ptype: str) -> list[list[str]]:
        """Return all rules of a policy type."""
        return [list(rule) for rule in self[sec][ptype].policy]

    def get_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        """Return the rules matching the field filters; empty values match all."""
        return [
            list(rule)
            for rule in self[sec][ptype].policy
            if _matches(rule, field_index, field_values)
        ]

    def has_policy(self, sec: str, ptype: str, rule) -> bool:
        """Return whether the exact rule exists."""
        wanted = list(rule)
        return any(existing == wanted for existing in self[sec][ptype].policy)

    def add_policy(self, sec: str, ptype: str, rule) -> bool:
        """Add a rule; return False if it already existed."""
        if self.has_policy(sec, ptype, rule):
            return False
        self[sec][ptype].policy.append(list(rule))
        return True

    def remove_policy(self, sec: str, ptype: str, rule) -> bool:
        """Remove a rule; return False if it was not present."""
        policy = self[sec][ptype].policy
        wanted = list(rule)
        for index, existing in enumerate(policy):
            if existing == wanted:
                del policy[index]
                return True
        return False

    def remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        """Remove rules matching the field filters; return whether any matched."""
        ast = self[sec][ptype]
        kept = [rule for rule in ast.policy if not _matches(rule, field_index, field_values)]
        removed = len(kept) != len(ast.policy)
        ast.policy = kept
        return removed

    def get_values_for_field_in_policy(
        self, sec: str, ptype: str, field_index: int
    ) -> list[str]:
        """Return the distinct values of one field, in first-seen order."""
        return _dedupe([rule[field_index] for rule in self[sec][ptype].policy])

    def get_values_for_field_in_policy_all_types(
        self, sec: str, field_index: int
    ) -> list[str]:
        """Return the distinct values of one field across all policy types."""
        values: list[str] = []
        for ptype in self.get(sec, {}):
            values.extend(self.get_values_for_field_in_policy(sec, ptype, field_index))
        return _dedupe(values)