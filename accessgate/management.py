"""Policy management on top of the core enforcer."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from accessgate.core_enforcer import CoreEnforcer


def _rule_from(params: tuple) -> list[str]:
    """Accept either one list/tuple of fields or the fields as arguments."""
    if len(params) == 1 and isinstance(params[0], (list, tuple)):
        return list(params[0])
    for param in params:
        if not isinstance(param, str):
            raise TypeError(f"policy field must be a string, got {param!r}")
    return list(params)


class Enforcer(CoreEnforcer):
    """Enforcer with an API to inspect and change the policy."""

    def get_all_subjects(self) -> list[str]:
        """Return the subjects that appear in the policy."""
        return self.model.get_values_for_field_in_policy_all_types("p", 0)

    def get_all_named_subjects(self, ptype: str) -> list[str]:
        """Return the subjects that appear in the named policy."""
        return self.model.get_values_for_field_in_policy("p", ptype, 0)

    def get_all_objects(self) -> list[str]:
        """Return the objects that appear in the policy."""
        return self.model.get_values_for_field_in_policy_all_types("p", 1)

    def get_all_named_objects(self, ptype: str) -> list[str]:
        """Return the objects that appear in the named policy."""
        return self.model.get_values_for_field_in_policy("p", ptype, 1)

    def get_all_actions(self) -> list[str]:
        """Return the actions that appear in the policy."""
        return self.model.get_values_for_field_in_policy_all_types("p", 2)

    def get_all_named_actions(self, ptype: str) -> list[str]:
        """Return the actions that appear in the named policy."""
        return self.model.get_values_for_field_in_policy("p", ptype, 2)

    def get_all_roles(self) -> list[str]:
        """Return the roles that appear in the grouping policy."""
        return self.model.get_values_for_field_in_policy_all_types("g", 1)

    def get_all_named_roles(self, ptype: str) -> list[str]:
        """Return the roles that appear in the named grouping policy."""
        return self.model.get_values_for_field_in_policy("g", ptype, 1)

    def get_policy(self) -> list[list[str]]:
        """Return all authorization rules."""
        return self.get_named_policy("p")

    def get_filtered_policy(self, field_index: int, *field_values: str) -> list[list[str]]:
        """Return the authorization rules matching the field filters."""
        return self.get_filtered_named_policy("p", field_index, *field_values)

    def get_named_policy(self, ptype: str) -> list[list[str]]:
        """Return all rules of the named policy."""
        return self.model.get_policy("p", ptype)

    def get_filtered_named_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        """Return the rules of the named policy matching the field filters."""
        return self.model.get_filtered_policy("p", ptype, field_index, *field_values)

    def get_grouping_policy(self) -> list[list[str]]:
        """Return all role inheritance rules."""
        return self.get_named_grouping_policy("g")

    def get_filtered_grouping_policy(
        self, field_index: int, *field_values: str
    ) -> list[list[str]]:
        """Return the role inheritance rules matching the field filters."""
        return self.get_filtered_named_grouping_policy("g", field_index, *field_values)

    def get_named_grouping_policy(self, ptype: str) -> list[list[str]]:
        """Return all rules of the named grouping policy."""
        return self.model.get_policy("g", ptype)

    def get_filtered_named_grouping_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        """Return the named grouping rules matching the field filters."""
        return self.model.get_filtered_policy("g", ptype, field_index, *field_values)

    def has_policy(self, *params: Any) -> bool:
        """Return whether an authorization rule exists."""
        return self.has_named_policy("p", *params)

    def has_named_policy(self, ptype: str, *params: Any) -> bool:
        """Return whether a rule exists in the named policy."""
        return self.model.has_policy("p", ptype, _rule_from(params))

    def add_policy(self, *params: Any) -> bool:
        """Add an authorization rule; return False if it already existed."""
        return self.add_named_policy("p", *params)

    def add_named_policy(self, ptype: str, *params: Any) -> bool:
        """Add a rule to the named policy; return False if it already existed."""
        return self._add_policy("p", ptype, _rule_from(params))

    def remove_policy(self, *params: Any) -> bool:
        """Remove an authorization rule; return whether it was present."""
        return self.remove_named_policy("p", *params)

    def remove_filtered_policy(self, field_index: int, *field_values: str) -> bool:
        """Remove the authorization rules matching the field filters."""
        return self.remove_filtered_named_policy("p", field_index, *field_values)

    def remove_named_policy(self, ptype: str, *params: Any) -> bool:
        """Remove a rule from the named policy; return whether it was present."""
        return self._remove_policy("p", ptype, _rule_from(params))

    def remove_filtered_named_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        """Remove the named policy's rules matching the field filters."""
        return self._remove_filtered_policy("p", ptype, field_index, *field_values)

    def has_grouping_policy(self, *params: Any) -> bool:
        """Return whether a role inheritance rule exists."""
        return self.has_named_grouping_policy("g", *params)

    def has_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        """Return whether a rule exists in the named grouping policy."""
        return self.model.has_policy("g", ptype, _rule_from(params))

    def _rebuild_links(self) -> None:
        if self._auto_build_role_links:
            self.build_role_links()

    def add_grouping_policy(self, *params: Any) -> bool:
        """Add a role inheritance rule; return False if it already existed."""
        return self.add_named_grouping_policy("g", *params)

    def add_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        """Add a named role inheritance rule; return False if it already existed."""
        try:
            return self._add_policy("g", ptype, _rule_from(params))
        finally:
            self._rebuild_links()

    def remove_grouping_policy(self, *params: Any) -> bool:
        """Remove a role inheritance rule; return whether it was present."""
        return self.remove_named_grouping_policy("g", *params)

    def remove_filtered_grouping_policy(self, field_index: int, *field_values: str) -> bool:
        """Remove the role inheritance rules matching the field filters."""
        return self.remove_filtered_named_grouping_policy("g", field_index, *field_values)

    def remove_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        """Remove a named role inheritance rule; return whether it was present."""
        try:
            return self._remove_policy("g", ptype, _rule_from(params))
        finally:
            self._rebuild_links()

    def remove_filtered_named_grouping_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        """Remove the named grouping rules matching the field filters."""
        try:
            return self._remove_filtered_policy("g", ptype, field_index, *field_values)
        finally:
            self._rebuild_links()

    def add_function(self, name: str, function: Callable[..., Any]) -> None:
        """Make a custom function available to matchers."""
        self.functions.add_function(name, function)