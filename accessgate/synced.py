"""Enforcer that serialises access from several threads."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from accessgate.management import Enforcer
from accessgate.persist.watcher import Watcher

_logger = logging.getLogger(__name__)


class SyncedEnforcer(Enforcer):
    """Enforcer whose operations are guarded by a lock.

    It can also reload its policy periodically on a background thread.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        # The lock must exist before the base initialiser loads the policy.
        self._lock = threading.RLock()
        self._stop_event: threading.Event | None = None
        super().__init__(*args, **kwargs)

    def start_auto_load_policy(self, interval: float | timedelta) -> threading.Thread:
        """Reload the policy every ``interval`` seconds on a daemon thread.

        Errors raised while loading are ignored. Returns the started thread.
        """
        seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        stop_event = threading.Event()
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()
            self._stop_event = stop_event

        def run() -> None:
            _logger.info("Start automatically load policy")
            while not stop_event.is_set():
                try:
                    self.load_policy()
                except Exception:  # reload errors are deliberately ignored
                    _logger.debug("automatic policy load failed", exc_info=True)
                stop_event.wait(seconds)
            _logger.info("Stop automatically load policy")

        thread = threading.Thread(target=run, name="policy-auto-load", daemon=True)
        thread.start()
        return thread

    def stop_auto_load_policy(self) -> None:
        """Stop the periodic policy reload."""
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()
                self._stop_event = None

    def set_watcher(self, watcher: Watcher) -> None:
        """Use ``watcher``; its notifications reload the policy."""
        self._watcher = watcher
        watcher.set_update_callback(lambda _message: self.load_policy())

    def clear_policy(self) -> None:
        with self._lock:
            super().clear_policy()

    def load_policy(self) -> None:
        with self._lock:
            super().load_policy()

    def save_policy(self) -> None:
        with self._lock:
            super().save_policy()

    def build_role_links(self) -> None:
        with self._lock:
            super().build_role_links()

    def enforce(self, *rvals: Any) -> bool:
        with self._lock:
            return super().enforce(*rvals)

    def get_all_subjects(self) -> list[str]:
        with self._lock:
            return super().get_all_subjects()

    def get_all_named_subjects(self, ptype: str) -> list[str]:
        with self._lock:
            return super().get_all_named_subjects(ptype)

    def get_all_objects(self) -> list[str]:
        with self._lock:
            return super().get_all_objects()

    def get_all_named_objects(self, ptype: str) -> list[str]:
        with self._lock:
            return super().get_all_named_objects(ptype)

    def get_all_actions(self) -> list[str]:
        with self._lock:
            return super().get_all_actions()

    def get_all_named_actions(self, ptype: str) -> list[str]:
        with self._lock:
            return super().get_all_named_actions(ptype)

    def get_all_roles(self) -> list[str]:
        with self._lock:
            return super().get_all_roles()

    def get_all_named_roles(self, ptype: str) -> list[str]:
        with self._lock:
            return super().get_all_named_roles(ptype)

    def get_policy(self) -> list[list[str]]:
        with self._lock:
            return super().get_policy()

    def get_filtered_policy(self, field_index: int, *field_values: str) -> list[list[str]]:
        with self._lock:
            return super().get_filtered_policy(field_index, *field_values)

    def get_named_policy(self, ptype: str) -> list[list[str]]:
        with self._lock:
            return super().get_named_policy(ptype)

    def get_filtered_named_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        with self._lock:
            return super().get_filtered_named_policy(ptype, field_index, *field_values)

    def get_grouping_policy(self) -> list[list[str]]:
        with self._lock:
            return super().get_grouping_policy()

    def get_filtered_grouping_policy(
        self, field_index: int, *field_values: str
    ) -> list[list[str]]:
        with self._lock:
            return super().get_filtered_grouping_policy(field_index, *field_values)

    def get_named_grouping_policy(self, ptype: str) -> list[list[str]]:
        with self._lock:
            return super().get_named_grouping_policy(ptype)

    def get_filtered_named_grouping_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> list[list[str]]:
        with self._lock:
            return super().get_filtered_named_grouping_policy(ptype, field_index, *field_values)

    def has_policy(self, *params: Any) -> bool:
        with self._lock:
            return super().has_policy(*params)

    def has_named_policy(self, ptype: str, *params: Any) -> bool:
        with self._lock:
            return super().has_named_policy(ptype, *params)

    def add_policy(self, *params: Any) -> bool:
        with self._lock:
            return super().add_policy(*params)

    def add_named_policy(self, ptype: str, *params: Any) -> bool:
        with self._lock:
            return super().add_named_policy(ptype, *params)

    def remove_policy(self, *params: Any) -> bool:
        with self._lock:
            return super().remove_policy(*params)

    def remove_filtered_policy(self, field_index: int, *field_values: str) -> bool:
        with self._lock:
            return super().remove_filtered_policy(field_index, *field_values)

    def remove_named_policy(self, ptype: str, *params: Any) -> bool:
        with self._lock:
            return super().remove_named_policy(ptype, *params)

    def remove_filtered_named_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        with self._lock:
            return super().remove_filtered_named_policy(ptype, field_index, *field_values)

    def has_grouping_policy(self, *params: Any) -> bool:
        with self._lock:
            return super().has_grouping_policy(*params)

    def has_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        with self._lock:
            return super().has_named_grouping_policy(ptype, *params)

    def add_grouping_policy(self, *params: Any) -> bool:
        with self._lock:
            return super().add_grouping_policy(*params)

    def add_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        with self._lock:
            return super().add_named_grouping_policy(ptype, *params)

    def remove_grouping_policy(self, *params: Any) -> bool:
        with self._lock:
            return super().remove_grouping_policy(*params)

    def remove_filtered_grouping_policy(self, field_index: int, *field_values: str) -> bool:
        with self._lock:
            return super().remove_filtered_grouping_policy(field_index, *field_values)

    def remove_named_grouping_policy(self, ptype: str, *params: Any) -> bool:
        with self._lock:
            return super().remove_named_grouping_policy(ptype, *params)

    def remove_filtered_named_grouping_policy(
        self, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        with self._lock:
            return super().remove_filtered_named_grouping_policy(
                ptype, field_index, *field_values
            )

    def add_function(self, name: str, function: Callable[..., Any]) -> None:
        with self._lock:
            super().add_function(name, function)