"""A single definition line of an access-control model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from accessgate.log import log_print


@dataclass
class Assertion:
    """An expression in a section of the model, such as ``r = sub, obj, act``.

    ``rm`` is the role manager attached by :meth:`build_role_links`; it must
    provide ``add_link(*names)`` and ``print_roles()``.
    """

    key: str
    value: str
    tokens: list[str] = field(default_factory=list)
    policy: list[list[str]] = field(default_factory=list)
    rm: Any = None

    def build_role_links(self, rm: Any) -> None:
        """Feed every grouping rule of this assertion into the role manager."""
        self.rm = rm
        count = self.value.count("_")
        for rule in self.policy:
            if count < 2:
                raise ValueError(
                    'the number of "_" in role definition should be at least 2'
                )
            if len(rule) < count:
                raise ValueError("grouping policy elements do not meet role definition")
            if count <= 4:
                rm.add_link(*rule[:count])

        log_print("Role links for: " + self.key)
        rm.print_roles()