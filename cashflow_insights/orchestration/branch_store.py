"""Currently selected branch, shared by dashboard views"""

import logging
from typing import Callable, List

from cashflow_insights.config import settings

logger = logging.getLogger(__name__)


class BranchStore:
    """
    Holds the active branch code and notifies listeners on every set.

    Setting the same code again still notifies, which lets views refresh a
    branch on demand. Empty codes are ignored.
    """

    def __init__(self, initial: str | None = None):
        self._current = initial or settings.default_branch
        self._listeners: List[Callable[[str], None]] = []

    @property
    def current(self) -> str:
        return self._current

    def subscribe(self, listener: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def set_branch(self, code: str) -> None:
        if not code:
            logger.debug("Ignoring empty branch code")
            return
        self._current = code
        for listener in list(self._listeners):
            listener(code)
