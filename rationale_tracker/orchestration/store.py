"""Single-writer owner of the cockpit state."""

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from ..models.loan import LoanCockpitState
from ..services.staleness import utc_now
from .state import INITIAL_STATE, reduce

logger = logging.getLogger(__name__)

Subscriber = Callable[[LoanCockpitState, object], None]


class CockpitStore:
    """
    Holds the one LoanCockpitState of a session.

    dispatch() serialises transitions behind a lock, so concurrent
    callers (request handlers, background extraction) never interleave
    a read-modify-write. Subscribers run after the new state is
    committed; a failing subscriber is logged and does not undo the
    transition.
    """

    def __init__(
        self,
        state: LoanCockpitState = INITIAL_STATE,
        clock: Callable[[], datetime] = utc_now
    ):
        self._state = state
        self._clock = clock
        self._lock = threading.RLock()
        self._subscribers: List[Subscriber] = []

    @property
    def state(self) -> LoanCockpitState:
        with self._lock:
            return self._state

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe():
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe

    def dispatch(self, event, now: Optional[datetime] = None) -> LoanCockpitState:
        """
        Apply an event and notify subscribers.

        Args:
            event: Event dataclass from orchestration.state
            now: Transition time, defaults to the store clock

        Returns:
            The committed state
        """
        with self._lock:
            new_state = reduce(self._state, event, now or self._clock())
            self._state = new_state
            subscribers = list(self._subscribers)

            logger.debug(f"Applied {type(event).__name__}")

            for subscriber in subscribers:
                try:
                    subscriber(new_state, event)
                except Exception as e:
                    logger.error(
                        f"Subscriber failed after {type(event).__name__}: {str(e)}",
                        exc_info=True
                    )

        return new_state
