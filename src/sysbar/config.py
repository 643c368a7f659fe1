"""Runtime display settings with change notification."""

import itertools
import logging
import threading
from collections.abc import Callable

from sysbar.models import DEFAULT_DECIMAL_PLACES, MAX_DECIMAL_PLACES, DisplayConfig, clamp_decimal_places

logger = logging.getLogger(__name__)

DecimalPlacesCallback = Callable[[int], None]


class DisplaySettings:
    """
    Holds the user-adjustable decimal precision.

    Consumers subscribe with :meth:`connect` and are called with the new
    value after every effective change. Values are clamped on the way in,
    whatever validation the caller already did.
    """

    def __init__(self, decimal_places: object = DEFAULT_DECIMAL_PLACES) -> None:
        """
        Initialize the settings.

        Args:
            decimal_places: Initial precision; clamped into [0, 2].
        """
        self._decimal_places = clamp_decimal_places(decimal_places)
        self._handlers: dict[int, DecimalPlacesCallback] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def decimal_places(self) -> int:
        """Get the current decimal precision."""
        return self._decimal_places

    @decimal_places.setter
    def decimal_places(self, value: object) -> None:
        """Set the decimal precision and notify subscribers if it changed."""
        clamped = clamp_decimal_places(value)
        with self._lock:
            if clamped == self._decimal_places:
                return
            self._decimal_places = clamped
            handlers = list(self._handlers.values())

        for handler in handlers:
            try:
                handler(clamped)
            except Exception:
                logger.exception("decimal-places handler %r failed", handler)

    def cycle_decimal_places(self) -> int:
        """Advance to the next precision (0 -> 1 -> 2 -> 0) and return it."""
        self.decimal_places = (self._decimal_places + 1) % (MAX_DECIMAL_PLACES + 1)
        return self._decimal_places

    def to_config(self) -> DisplayConfig:
        """Return an immutable copy of the current presentation parameters."""
        return DisplayConfig(decimal_places=self._decimal_places)

    def connect(self, callback: DecimalPlacesCallback) -> int:
        """Register a change callback and return its handler id."""
        with self._lock:
            handler_id = next(self._ids)
            self._handlers[handler_id] = callback
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        """Remove a change callback. Unknown ids are ignored."""
        with self._lock:
            self._handlers.pop(handler_id, None)
