"""Interface for notifying other instances of policy changes."""

from __future__ import annotations

import abc
from collections.abc import Callable


class Watcher(abc.ABC):
    """Keeps the policies of several enforcer instances in step."""

    @abc.abstractmethod
    def set_update_callback(self, callback: Callable[[str], None]) -> None:
        """Set the function called when another instance changes the policy."""

    @abc.abstractmethod
    def update(self) -> None:
        """Tell other instances that the policy has changed."""

    @abc.abstractmethod
    def close(self) -> None:
        """Stop the watcher; the callback is no longer called."""