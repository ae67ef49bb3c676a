import logging
from typing import Any, Callable, List, Optional

from feed_engine.exceptions import FeedException

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class ObservableState:
    """Listeners, recorded errors and the warnings of the last mutation.

    Subclasses call _notify() after every state change; listeners receive the
    subclass instance itself.
    """

    def __init__(self) -> None:
        self.errors: List[FeedException] = []
        self.warnings: List[str] = []
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener after every state change; returns an unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    @property
    def error(self) -> Optional[FeedException]:
        """Most recent error not yet cleared"""
        return self.errors[-1] if self.errors else None

    def clear_errors(self) -> None:
        self.errors = []
        self._notify()

    def _record_error(self, error: FeedException, action: str) -> None:
        logger.warning("%s %s failed: %s", type(self).__name__, action, error)
        self.errors.append(error)
        self._notify()
