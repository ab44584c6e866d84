"""
Operation locks for mutating commands.

The per-entity lock enforces that one entity never has two commands in
flight. The busy signal only reports progress; it blocks nothing by itself.
"""
import itertools
import logging
from typing import Any, Callable, Dict, List, Set, Tuple
from . import schemas
from .errors import LockContention

logger = logging.getLogger(__name__)

Subscriber = Callable[[schemas.BusyState], None]


class BusySignal:
    """
    Observable process-wide busy flag with a progress message.

    Starts inactive. Each running command holds a token from activate()
    and hands it back to release(); the signal stays active while any
    token is held and shows the message of the most recent one.
    """

    def __init__(self):
        self._tokens = itertools.count(1)
        self._holders: Dict[int, str] = {}
        self._subscribers: List[Subscriber] = []
        self._state = schemas.BusyState()

    @property
    def state(self) -> schemas.BusyState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state.active

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Call callback with the new state on every change.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def activate(self, message: str) -> int:
        token = next(self._tokens)
        self._holders[token] = message
        self._publish()
        return token

    def release(self, token: int) -> None:
        if self._holders.pop(token, None) is not None:
            self._publish()

    def _publish(self) -> None:
        if self._holders:
            message = self._holders[max(self._holders)]
            self._state = schemas.BusyState(active=True, message=message)
        else:
            self._state = schemas.BusyState()
        for callback in list(self._subscribers):
            try:
                callback(self._state)
            except Exception:
                logger.exception(f"Busy signal subscriber {callback!r} failed")


class OperationLock:
    """
    Per-entity exclusivity plus the global busy signal.

    Entities are keyed by (collection, id) so products and orders never
    share a key.
    """

    def __init__(self, busy: BusySignal = None):
        self.busy = busy or BusySignal()
        self._held: Set[Tuple[str, Any]] = set()

    @property
    def held(self) -> Set[Tuple[str, Any]]:
        return set(self._held)

    def acquire(self, collection: str, entity_id: Any) -> None:
        """
        Mark an entity as having a command in flight.

        Raises:
            LockContention: If the entity is already locked
        """
        key = (collection, entity_id)
        if key in self._held:
            raise LockContention(key)
        self._held.add(key)

    def release(self, collection: str, entity_id: Any) -> None:
        self._held.discard((collection, entity_id))
