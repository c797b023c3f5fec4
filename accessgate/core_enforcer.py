"""The core enforcer: loads a model and policy and decides access requests."""

from __future__ import annotations

import os
from collections import deque
from typing import Any

from accessgate.effect import DefaultEffector, Effect, Effector
from accessgate.errors import DomainParameterError
from accessgate.expression import Expression
from accessgate.log import get_logger, log_print
from accessgate.model.function import FunctionMap, load_function_map
from accessgate.model.model import Model
from accessgate.persist.adapter import Adapter, FilteredAdapter
from accessgate.persist.file_adapter import EMPTY_PATH_MESSAGE, FileAdapter
from accessgate.persist.watcher import Watcher

_PRIORITY_EFFECT = "priority(p_eft) || deny"
_MAX_HIERARCHY_LEVEL = 10


class _RoleManager:
    """In-memory role inheritance graph, optionally split by domain."""

    def __init__(self, max_hierarchy_level: int = _MAX_HIERARCHY_LEVEL) -> None:
        self._max_level = max_hierarchy_level
        self._links: dict[str, set[str]] = {}

    @staticmethod
    def _qualify(name1: str, name2: str, domain: tuple[str, ...]) -> tuple[str, str]:
        if len(domain) > 1:
            raise DomainParameterError()
        if domain:
            return f"{domain[0]}::{name1}", f"{domain[0]}::{name2}"
        return name1, name2

    def clear(self) -> None:
        self._links.clear()

    def add_link(self, name1: str, name2: str, *domain: str) -> None:
        user, role = self._qualify(name1, name2, domain)
        self._links.setdefault(user, set()).add(role)

    def has_link(self, name1: str, name2: str, *domain: str) -> bool:
        user, role = self._qualify(name1, name2, domain)
        if user == role:
            return True
        seen = {user}
        frontier = deque([(user, 0)])
        while frontier:
            name, level = frontier.popleft()
            if level >= self._max_level:
                continue
            for parent in self._links.get(name, ()):
                if parent == role:
                    return True
                if parent not in seen:
                    seen.add(parent)
                    frontier.append((parent, level + 1))
        return False

    def print_roles(self) -> None:
        links = ", ".join(
            f"{user} < {', '.join(sorted(roles))}"
            for user, roles in sorted(self._links.items())
        )
        log_print(links)


def _g_function(rm: Any):
    def g(*args: Any) -> bool:
        if len(args) < 2:
            raise ValueError(f"expected at least 2 arguments, got {len(args)}")
        name1, name2, *domain = args
        if rm is None:
            return name1 == name2
        return rm.has_link(name1, name2, *domain)

    return g


def _is_path(value: Any) -> bool:
    return isinstance(value, (str, os.PathLike))


class CoreEnforcer:
    """Decides whether a request is allowed by the model and its policy.

    ``CoreEnforcer(model_path, policy_path)``, ``CoreEnforcer(model_path,
    adapter)``, ``CoreEnforcer(model, adapter)``, ``CoreEnforcer(model_path)``
    and ``CoreEnforcer(model)`` are accepted, as is an empty enforcer.
    """

    def __init__(self, model: Any = None, adapter: Any = None, *, enable_log: bool | None = None) -> None:
        self._model_path = ""
        self._model: Model | None = None
        self._fm: FunctionMap = FunctionMap()
        self._adapter: Adapter | None = None
        self._initialize()

        if enable_log is not None:
            self.enable_log(enable_log)

        if model is None:
            if adapter is not None:
                raise TypeError("invalid parameters for enforcer")
            return
        if _is_path(model):
            if adapter is None:
                self.init_with_file(model, "")
            elif _is_path(adapter):
                self.init_with_file(model, adapter)
            else:
                self.init_with_adapter(model, adapter)
        elif _is_path(adapter):
            raise TypeError("invalid parameters for enforcer")
        else:
            self.init_with_model_and_adapter(model, adapter)

    def _initialize(self) -> None:
        self.role_manager: Any = _RoleManager(_MAX_HIERARCHY_LEVEL)
        self.effector: Effector = DefaultEffector()
        self._watcher: Watcher | None = None
        self._enabled = True
        self._auto_save = True
        self._auto_build_role_links = True

    def init_with_file(self, model_path, policy_path) -> None:
        """Initialise from a model file and a policy file."""
        self.init_with_adapter(model_path, FileAdapter(policy_path))

    def init_with_adapter(self, model_path, adapter: Adapter | None) -> None:
        """Initialise from a model file and a storage adapter."""
        model = Model.from_file(model_path)
        self.init_with_model_and_adapter(model, adapter)
        self._model_path = os.fspath(model_path)

    def init_with_model_and_adapter(self, model: Model, adapter: Adapter | None) -> None:
        """Initialise from a model and a storage adapter."""
        self._adapter = adapter
        self._model = model
        self._model.print_model()
        self._fm = load_function_map()
        self._initialize()

        if adapter is not None and not (
            isinstance(adapter, FilteredAdapter) and adapter.is_filtered()
        ):
            self.load_policy()

    def load_model(self) -> None:
        """Reload the model from its file; the policy must then be reloaded."""
        self._model = Model.from_file(self._model_path)
        self._model.print_model()
        self._fm = load_function_map()
        self._initialize()

    @property
    def model(self) -> Model | None:
        """The current model; assigning one resets the enforcer's state."""
        return self._model

    @model.setter
    def model(self, model: Model) -> None:
        self._model = model
        self._fm = load_function_map()
        self._initialize()

    @property
    def adapter(self) -> Adapter | None:
        """The current storage adapter."""
        return self._adapter

    @adapter.setter
    def adapter(self, adapter: Adapter | None) -> None:
        self._adapter = adapter

    @property
    def watcher(self) -> Watcher | None:
        """The current watcher, if any."""
        return self._watcher

    @property
    def functions(self) -> FunctionMap:
        """The functions available to matchers."""
        return self._fm

    def set_watcher(self, watcher: Watcher) -> None:
        """Use ``watcher``; its notifications reload the policy."""
        self._watcher = watcher
        watcher.set_update_callback(lambda _message: self.load_policy())

    def clear_policy(self) -> None:
        """Remove all rules from the in-memory policy."""
        self._model.clear_policy()

    def _require_adapter(self) -> Adapter:
        if self._adapter is None:
            raise RuntimeError("no adapter is set")
        return self._adapter

    def _after_load(self) -> None:
        self._model.print_policy()
        if self._auto_build_role_links:
            self.build_role_links()

    def load_policy(self) -> None:
        """Reload the policy from storage."""
        adapter = self._require_adapter()
        self._model.clear_policy()
        try:
            adapter.load_policy(self._model)
        except ValueError as exc:
            if str(exc) != EMPTY_PATH_MESSAGE:
                raise
        self._after_load()

    def load_filtered_policy(self, filter: Any) -> None:
        """Reload only the rules of the stored policy that match ``filter``."""
        self._model.clear_policy()
        adapter = self._adapter
        if not isinstance(adapter, FilteredAdapter):
            raise TypeError("filtered policies are not supported by this adapter")
        try:
            adapter.load_filtered_policy(self._model, filter)
        except ValueError as exc:
            if str(exc) != EMPTY_PATH_MESSAGE:
                raise
        self._after_load()

    def is_filtered(self) -> bool:
        """Return whether the loaded policy is a filtered subset."""
        adapter = self._adapter
        return isinstance(adapter, FilteredAdapter) and adapter.is_filtered()

    def save_policy(self) -> None:
        """Write the current policy back to storage."""
        if self.is_filtered():
            raise RuntimeError("cannot save a filtered policy")
        self._require_adapter().save_policy(self._model)
        if self._watcher is not None:
            self._watcher.update()

    def enable_enforce(self, enable: bool) -> None:
        """When disabled, every request is allowed."""
        self._enabled = enable

    def enable_log(self, enable: bool) -> None:
        """Turn logging on or off for the current logger."""
        get_logger().enable_log(enable)

    def enable_auto_save(self, auto_save: bool) -> None:
        """Control whether rule changes are written to the adapter at once."""
        self._auto_save = auto_save

    def enable_auto_build_role_links(self, auto_build_role_links: bool) -> None:
        """Control whether role links are rebuilt after grouping changes."""
        self._auto_build_role_links = auto_build_role_links

    def build_role_links(self) -> None:
        """Rebuild the role inheritance relations from the grouping rules."""
        self.role_manager.clear()
        self._model.build_role_links(self.role_manager)

    def _notify(self) -> None:
        if self._watcher is not None:
            self._watcher.update()

    def _add_policy(self, sec: str, ptype: str, rule: list[str]) -> bool:
        if not self._model.add_policy(sec, ptype, rule):
            return False
        if self._adapter is not None and self._auto_save:
            try:
                self._adapter.add_policy(sec, ptype, list(rule))
            except NotImplementedError:
                pass
            self._notify()
        return True

    def _remove_policy(self, sec: str, ptype: str, rule: list[str]) -> bool:
        if not self._model.remove_policy(sec, ptype, rule):
            return False
        if self._adapter is not None and self._auto_save:
            try:
                self._adapter.remove_policy(sec, ptype, list(rule))
            except NotImplementedError:
                pass
            self._notify()
        return True

    def _remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        if not self._model.remove_filtered_policy(sec, ptype, field_index, *field_values):
            return False
        if self._adapter is not None and self._auto_save:
            try:
                self._adapter.remove_filtered_policy(sec, ptype, field_index, *field_values)
            except NotImplementedError:
                pass
            self._notify()
        return True

    def _enforce(self, matcher: str, rvals: tuple) -> bool:
        if not self._enabled:
            return True

        model = self._model
        functions = FunctionMap(self._fm)
        for key, ast in model.get("g", {}).items():
            functions[key] = _g_function(ast.rm)

        expression = Expression(matcher or model["m"]["m"].value, functions)

        r_tokens = model["r"]["r"].tokens
        p_ast = model["p"]["p"]
        p_tokens = p_ast.tokens
        effect_expr = model["e"]["e"].value
        request = dict(zip(r_tokens, rvals))

        effects: list[Effect] = []
        results: list[float] = []
        if p_ast.policy:
            if len(r_tokens) != len(rvals):
                raise ValueError(
                    f"invalid request size: expected {len(r_tokens)}, "
                    f"got {len(rvals)}, rvals: {list(rvals)}"
                )
            for pvals in p_ast.policy:
                if len(p_tokens) != len(pvals):
                    raise ValueError(
                        f"invalid policy size: expected {len(p_tokens)}, "
                        f"got {len(pvals)}, pvals: {pvals}"
                    )
                parameters = {**request, **dict(zip(p_tokens, pvals))}
                result = expression.evaluate(parameters)

                if isinstance(result, bool):
                    matched, score = result, 0.0
                elif isinstance(result, (int, float)):
                    matched, score = result != 0, float(result)
                else:
                    raise TypeError("matcher result should be bool, int or float")

                if not matched:
                    effects.append(Effect.INDETERMINATE)
                    results.append(0.0)
                    continue
                results.append(score)

                if "p_eft" in p_tokens:
                    eft = pvals[p_tokens.index("p_eft")]
                    effects.append(
                        Effect.ALLOW if eft == "allow"
                        else Effect.DENY if eft == "deny"
                        else Effect.INDETERMINATE
                    )
                else:
                    effects.append(Effect.ALLOW)

                if effect_expr == _PRIORITY_EFFECT:
                    break
        else:
            parameters = {**request, **{token: "" for token in p_tokens}}
            result = expression.evaluate(parameters)
            if not isinstance(result, bool):
                raise TypeError("matcher result should be bool")
            effects.append(Effect.ALLOW if result else Effect.INDETERMINATE)
            results.append(0.0)

        decision = self.effector.merge_effects(effect_expr, effects, results)

        if get_logger().is_enabled():
            values = ", ".join(str(value) for value in rvals)
            log_print(f"Request: {values} ---> {'true' if decision else 'false'}")

        return decision

    def enforce(self, *rvals: Any) -> bool:
        """Decide a request, usually given as ``(sub, obj, act)``."""
        return self._enforce("", rvals)

    def enforce_with_matcher(self, matcher: str, *rvals: Any) -> bool:
        """Decide a request with a custom matcher; ``""`` uses the model's."""
        return self._enforce(matcher, rvals)