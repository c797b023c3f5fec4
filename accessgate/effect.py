"""Policy effects and the effector that merges them into a decision."""

from __future__ import annotations

import abc
import enum
from collections.abc import Sequence


class Effect(enum.IntEnum):
    """The result of matching a single policy rule."""

    ALLOW = 0
    INDETERMINATE = 1
    DENY = 2


class Effector(abc.ABC):
    """Merges per-rule effects into one decision."""

    @abc.abstractmethod
    def merge_effects(
        self, expr: str, effects: Sequence[Effect], results: Sequence[float]
    ) -> bool:
        """Return the final decision for the given effect expression."""


class DefaultEffector(Effector):
    """Supports the four built-in policy effect expressions."""

    def merge_effects(
        self, expr: str, effects: Sequence[Effect], results: Sequence[float]
    ) -> bool:
        if expr == "some(where (p_eft == allow))":
            return any(eft == Effect.ALLOW for eft in effects)

        if expr == "!some(where (p_eft == deny))":
            return not any(eft == Effect.DENY for eft in effects)

        if expr == "some(where (p_eft == allow)) && !some(where (p_eft == deny))":
            result = False
            for eft in effects:
                if eft == Effect.ALLOW:
                    result = True
                elif eft == Effect.DENY:
                    return False
            return result

        if expr == "priority(p_eft) || deny":
            for eft in effects:
                if eft != Effect.INDETERMINATE:
                    return eft == Effect.ALLOW
            return False

        raise ValueError("unsupported effect")