"""
Persists committed sale events.

The sale engine delivers events synchronously once a call has committed.
The recorder buffers them and writes the buffer to the database when the
HTTP layer flushes it after the call returns.
"""

import logging
import uuid
from typing import List, Optional

from launchpad.models.sale import SaleEvent, SaleEventKind
from launchpad.sale.events import ProjectAdded, SaleEvent as DomainEvent, TokenBought, TokenSoldOut

logger = logging.getLogger(__name__)


def _to_row(event: DomainEvent, run_id: str) -> SaleEvent:
    if isinstance(event, TokenBought):
        return SaleEvent(
            run_id=run_id,
            kind=SaleEventKind.TOKEN_BOUGHT,
            project_id=event.project_id,
            buyer_wallet=event.buyer,
            currency_address=event.currency_address,
            token_amount=str(event.amount),
            payment_amount=str(event.payment_amount),
        )
    if isinstance(event, TokenSoldOut):
        return SaleEvent(
            run_id=run_id,
            kind=SaleEventKind.TOKEN_SOLD_OUT,
            project_id=event.project_id,
        )
    if isinstance(event, ProjectAdded):
        return SaleEvent(
            run_id=run_id,
            kind=SaleEventKind.PROJECT_ADDED,
            project_id=event.project_id,
            project_name=event.name,
        )
    raise TypeError(f"Unknown sale event: {event!r}")


class EventRecorder:
    """
    Buffers engine events until ``flush`` writes them.

    Rows are tagged with ``run_id`` so that history queries only return events
    of the engine instance that is currently serving; project ids restart from
    0 whenever the in-memory engine does.
    """

    def __init__(self, run_id: Optional[str] = None):
        self.run_id = run_id or uuid.uuid4().hex
        self._buffer: List[DomainEvent] = []

    def __call__(self, event: DomainEvent) -> None:
        self._buffer.append(event)

    @property
    def pending(self) -> int:
        return len(self._buffer)

    async def flush(self) -> int:
        if not self._buffer:
            return 0
        events, self._buffer = self._buffer, []
        rows = [_to_row(event, self.run_id) for event in events]
        # Saved one by one so ids follow commit order
        for row in rows:
            await row.save()
        logger.debug(f"recorder: persisted {len(rows)} events")
        return len(rows)
