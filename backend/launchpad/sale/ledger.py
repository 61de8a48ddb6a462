"""
Per-project allocation ledger.

Holds, for every project:
- an AllocationRecord per buyer (tokens allocated, amount paid per currency)
- the participants in first-purchase order
- running totals of tokens allocated and funds raised per currency

All entities are append-only. Mutations register undo steps so that a
failed purchase can be rolled back by the settlement layer.
"""

from typing import Callable, Dict, List, Tuple

from launchpad.core.constants import ZERO_ADDRESS
from launchpad.core.errors import SoldOut, ZeroAmount
from launchpad.sale.base import Journaled
from launchpad.sale.types import (
    AllocatedAccount,
    AllocationRecord,
    CommittedAmount,
    Currency,
    RaisedAmount,
    Reservation,
)


class AllocationLedger(Journaled):
    """Allocation state keyed by ``(project_id, user_address)``."""

    def __init__(self):
        super().__init__()
        self._records: Dict[Tuple[int, str], AllocationRecord] = {}
        self._participants: Dict[int, List[str]] = {}
        self._allocated: Dict[int, int] = {}
        self._raised: Dict[int, RaisedAmount] = {}

    def allocated_amount(self, project_id: int) -> int:
        return self._allocated.get(project_id, 0)

    def raised_amount(self, project_id: int) -> RaisedAmount:
        raised = self._raised.get(project_id, RaisedAmount())
        return RaisedAmount(raised.usdc_amount, raised.usdt_amount, raised.native_amount)

    def reserve(
        self,
        project_id: int,
        max_allocate_amount: int,
        buyer: str,
        requested_amount: int,
        currency: Currency,
        quote: Callable[[int], int],
    ) -> Reservation:
        """
        Allocate up to ``requested_amount`` tokens to ``buyer``.

        Requests larger than the remaining supply are partially filled with
        whatever is left. ``quote`` prices the granted amount; its result is
        recorded as the buyer's payment in ``currency``.
        """
        if requested_amount <= 0:
            raise ZeroAmount()

        available = max_allocate_amount - self.allocated_amount(project_id)
        if available <= 0:
            raise SoldOut()

        granted = min(requested_amount, available)
        payment = quote(granted)

        key = (project_id, buyer)
        record = self._records.get(key)
        if record is None:
            record = AllocationRecord()
            self._records[key] = record
            participants = self._participants.setdefault(project_id, [])
            participants.append(buyer)

            def _forget_buyer() -> None:
                del self._records[key]
                participants.pop()

            self._record(_forget_buyer)

        raised = self._raised.setdefault(project_id, RaisedAmount())
        previous = (
            AllocationRecord(**vars(record)),
            RaisedAmount(**vars(raised)),
            self.allocated_amount(project_id),
        )

        record.token_amount += granted
        record.add_payment(currency, payment)
        raised.add_payment(currency, payment)
        self._allocated[project_id] = previous[2] + granted

        def _restore_totals() -> None:
            vars(record).update(vars(previous[0]))
            vars(raised).update(vars(previous[1]))
            self._allocated[project_id] = previous[2]

        self._record(_restore_totals)

        return Reservation(
            granted_amount=granted,
            payment_amount=payment,
            sold_out=available - granted == 0,
        )

    def get_allocated_accounts(self, project_id: int) -> List[AllocatedAccount]:
        accounts = []
        for user in self._participants.get(project_id, []):
            record = self._records[(project_id, user)]
            accounts.append(
                AllocatedAccount(
                    user_address=user,
                    amounts=record.token_amount,
                    usdc_amounts=record.usdc_amount,
                    usdt_amounts=record.usdt_amount,
                    native_amounts=record.native_amount,
                )
            )
        return accounts

    def get_user_allocated_amount(self, project_id: int, user: str) -> int:
        record = self._records.get((project_id, user))
        return record.token_amount if record else 0

    def get_user_committed_amounts(
        self,
        project_id: int,
        user: str,
        usdc_address: str,
        usdt_address: str,
    ) -> List[CommittedAmount]:
        """One entry per accepted currency; unused currencies read as 0."""
        record = self._records.get((project_id, user), AllocationRecord())
        return [
            CommittedAmount(usdc_address, record.paid(Currency.USDC)),
            CommittedAmount(usdt_address, record.paid(Currency.USDT)),
            CommittedAmount(ZERO_ADDRESS, record.paid(Currency.NATIVE)),
        ]
