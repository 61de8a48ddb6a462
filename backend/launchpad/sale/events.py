"""
Domain events and the journaled event log.

Events emitted inside an atomic block are held back and only delivered to
subscribers once the outermost block commits; a rolled back purchase never
notifies anyone.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Union

from launchpad.sale.base import Journaled

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectAdded:
    project_id: int
    name: str


@dataclass(frozen=True)
class TokenBought:
    project_id: int
    buyer: str
    currency_address: str
    amount: int
    payment_amount: int


@dataclass(frozen=True)
class TokenSoldOut:
    project_id: int


SaleEvent = Union[ProjectAdded, TokenBought, TokenSoldOut]
Subscriber = Callable[[SaleEvent], None]


class EventLog(Journaled):
    """Ordered record of committed events with synchronous subscribers."""

    def __init__(self):
        super().__init__()
        self._events: List[SaleEvent] = []
        self._pending: List[SaleEvent] = []
        self._subscribers: List[Subscriber] = []

    @property
    def events(self) -> List[SaleEvent]:
        return list(self._events)

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def emit(self, event: SaleEvent) -> None:
        if not self.in_transaction:
            self._deliver([event])
            return
        self._pending.append(event)
        self._record(lambda: self._pending.remove(event))

    def commit(self) -> None:
        super().commit()
        if not self.in_transaction and self._pending:
            pending, self._pending = self._pending, []
            self._deliver(pending)

    def _deliver(self, events: List[SaleEvent]) -> None:
        self._events.extend(events)
        for event in events:
            logger.debug(f"event: {event}")
            for subscriber in self._subscribers:
                subscriber(event)
