"""
Index mode state machine: CONFIGURABLE until the first write, LOCKED after.
"""

import logging

from src.index_base import IndexMode, ModeState
from .errors import ModeLockedError

logger = logging.getLogger(__name__)


class ModeManager:
    """Holds the active IndexMode and refuses changes once indexing has begun."""

    def __init__(self, mode=IndexMode.SUBSTRINGS):
        """
        Initialize mode manager.

        Args:
            mode: Initial mode (enum member or name)
        """
        self._mode = IndexMode.parse(mode)
        self._state = ModeState.CONFIGURABLE

    @property
    def mode(self) -> IndexMode:
        return self._mode

    @property
    def state(self) -> ModeState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state is ModeState.LOCKED

    def set_mode(self, mode) -> IndexMode:
        """
        Change the mode.

        Args:
            mode: New mode (enum member or name)

        Returns:
            The mode now in effect

        Raises:
            ValueError: if mode is not a known IndexMode
            ModeLockedError: if the manager is LOCKED
        """
        new_mode = IndexMode.parse(mode)
        if self.is_locked:
            raise ModeLockedError(self._mode, new_mode)
        self._mode = new_mode
        logger.debug(f"Index mode set to {new_mode.name}")
        return new_mode

    def lock(self) -> None:
        """Transition to LOCKED. Idempotent."""
        if not self.is_locked:
            self._state = ModeState.LOCKED
            logger.info(f"Index mode locked at {self._mode.name}")
