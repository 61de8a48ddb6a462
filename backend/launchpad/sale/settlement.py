"""
Token sale settlement.

``TokenSale`` is the entry point for every write: it validates the project
and its time window, prices the purchase, reserves the allocation and moves
funds to the project's payout address.

Each write runs inside one atomic block. Ledger mutations are applied before
any funds move, so a payout address that calls back into the sale while
receiving value already sees the reduced supply. Any failure, including a
rejected transfer, restores every journaled participant to its state before
the call.
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, List, Optional

from launchpad.core.constants import ZERO_ADDRESS
from launchpad.core.errors import (
    Ended,
    InsufficientPayment,
    InvalidProjectParameters,
    NotStarted,
    TransferFailed,
    Unauthorized,
    UnsupportedCurrency,
    ZeroAmount,
)
from launchpad.sale.base import NativeCurrency, PaymentToken, atomic
from launchpad.sale.events import EventLog, ProjectAdded, TokenBought, TokenSoldOut
from launchpad.sale.ledger import AllocationLedger
from launchpad.sale.oracle import NativePriceSource
from launchpad.sale.pricing import required_payment_native, required_payment_stable
from launchpad.sale.registry import ProjectRegistry
from launchpad.sale.types import (
    AdminCredential,
    AllocatedAccount,
    CommittedAmount,
    Currency,
    Project,
    RaisedAmount,
    Reservation,
    SalePhase,
    is_zero_address,
    normalize_address,
    phase_at,
)

logger = logging.getLogger(__name__)


class TokenSale:
    """Multi-project token sale accepting USDC, USDT and the native currency."""

    def __init__(
        self,
        owner: str,
        usdc: PaymentToken,
        usdt: PaymentToken,
        native: NativeCurrency,
        price_source: NativePriceSource,
        address: str,
        clock: Optional[Callable[[], int]] = None,
    ):
        if is_zero_address(usdc.address):
            raise ValueError("USDC address must not be 0")
        if is_zero_address(usdt.address):
            raise ValueError("USDT address must not be 0")

        self._owner = normalize_address(owner)
        self._address = normalize_address(address)
        self._usdc = usdc
        self._usdt = usdt
        self._native = native
        self._price_source = price_source
        self._clock = clock or (lambda: int(time.time()))

        self.registry = ProjectRegistry()
        self.ledger = AllocationLedger()
        self.events = EventLog()
        self._lock = threading.RLock()

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def address(self) -> str:
        return self._address

    @property
    def usdc_address(self) -> str:
        return normalize_address(self._usdc.address)

    @property
    def usdt_address(self) -> str:
        return normalize_address(self._usdt.address)

    def now(self) -> int:
        return self._clock()

    def _atomic(self):
        return atomic(
            self.registry,
            self.ledger,
            self.events,
            self._usdc,
            self._usdt,
            self._native,
        )

    # --- Registry ---

    def add_project(self, credential: AdminCredential, project: Project) -> int:
        with self._lock:
            try:
                caller = normalize_address(credential.address)
            except ValueError:
                raise Unauthorized()
            if caller != self._owner:
                raise Unauthorized()
            project = _normalized(project)
            with self._atomic():
                project_id = self.registry.add_project(project, now=self.now())
                self.events.emit(ProjectAdded(project_id, project.name))
            logger.info(f"Added project {project_id} ({project.name})")
            return project_id

    def get_projects(self) -> List[Project]:
        return self.registry.get_projects()

    def phase(self, project_id: int) -> SalePhase:
        project = self.registry.require_valid_project_id(project_id)
        return phase_at(self.now(), project.start_time, project.end_time)

    def _require_open(self, project: Project) -> None:
        current = phase_at(self.now(), project.start_time, project.end_time)
        if current == SalePhase.PENDING:
            raise NotStarted()
        if current == SalePhase.CLOSED:
            raise Ended()

    # --- Purchases ---

    def buy_with_stable(
        self,
        buyer: str,
        project_id: int,
        currency_address: str,
        token_amount: int,
    ) -> int:
        """Buy with USDC or USDT pulled from ``buyer`` via allowance. Returns the granted amount."""
        with self._lock:
            buyer = normalize_address(buyer)
            project = self.registry.require_valid_project_id(project_id)
            token, currency = self._stable_token(currency_address)
            self._require_open(project)
            if token_amount <= 0:
                raise ZeroAmount()

            with self._atomic():
                reservation = self.ledger.reserve(
                    project_id,
                    project.max_allocate_amount,
                    buyer,
                    token_amount,
                    currency,
                    quote=lambda amount: required_payment_stable(project, amount),
                )
                paid = token.transfer_from(
                    self._address,
                    buyer,
                    project.payout_address,
                    reservation.payment_amount,
                )
                if not paid:
                    logger.warning(
                        f"{currency.value} transfer of {reservation.payment_amount} "
                        f"from {buyer} for project {project_id} failed"
                    )
                    raise TransferFailed()
                self._emit_purchase(project_id, buyer, token.address, reservation)

            logger.info(
                f"{buyer} bought {reservation.granted_amount} of project {project_id} "
                f"for {reservation.payment_amount} {currency.value}"
            )
            return reservation.granted_amount

    def buy_with_native(
        self,
        buyer: str,
        project_id: int,
        token_amount: int,
        value: int,
    ) -> int:
        """
        Buy with native currency attached as ``value``.

        The exact cost is forwarded to the payout address and any excess is
        returned to ``buyer``. Returns the granted amount.
        """
        with self._lock:
            buyer = normalize_address(buyer)
            project = self.registry.require_valid_project_id(project_id)
            self._require_open(project)
            if token_amount <= 0:
                raise ZeroAmount()
            native_price_e8 = self._price_source.get_native_price_e8()

            with self._atomic():
                if not self._native.transfer(buyer, self._address, value):
                    raise TransferFailed()

                reservation = self.ledger.reserve(
                    project_id,
                    project.max_allocate_amount,
                    buyer,
                    token_amount,
                    Currency.NATIVE,
                    quote=lambda amount: required_payment_native(
                        project, amount, native_price_e8
                    ),
                )
                cost = reservation.payment_amount
                if value < cost:
                    raise InsufficientPayment()

                if not self._native.transfer(self._address, project.payout_address, cost):
                    logger.warning(
                        f"native payout of {cost} to {project.payout_address} failed"
                    )
                    raise TransferFailed()
                refund = value - cost
                if refund > 0 and not self._native.transfer(self._address, buyer, refund):
                    logger.warning(f"native refund of {refund} to {buyer} failed")
                    raise TransferFailed()
                self._emit_purchase(project_id, buyer, ZERO_ADDRESS, reservation)

            logger.info(
                f"{buyer} bought {reservation.granted_amount} of project {project_id} "
                f"for {cost} native (price_e8={native_price_e8})"
            )
            return reservation.granted_amount

    def get_native_price_e8(self) -> int:
        return self._price_source.get_native_price_e8()

    def _stable_token(self, currency_address: str):
        address = currency_address.strip().lower()
        if address == self.usdc_address:
            return self._usdc, Currency.USDC
        if address == self.usdt_address:
            return self._usdt, Currency.USDT
        raise UnsupportedCurrency()

    def _emit_purchase(self, project_id: int, buyer: str, currency_address: str, reservation: Reservation) -> None:
        self.events.emit(
            TokenBought(
                project_id=project_id,
                buyer=buyer,
                currency_address=normalize_address(currency_address),
                amount=reservation.granted_amount,
                payment_amount=reservation.payment_amount,
            )
        )
        if reservation.sold_out:
            self.events.emit(TokenSoldOut(project_id))

    # --- Reads ---

    def allocated_amount(self, project_id: int) -> int:
        self.registry.require_valid_project_id(project_id)
        return self.ledger.allocated_amount(project_id)

    def raised_amount(self, project_id: int) -> RaisedAmount:
        self.registry.require_valid_project_id(project_id)
        return self.ledger.raised_amount(project_id)

    def get_allocated_accounts(self, project_id: int) -> List[AllocatedAccount]:
        self.registry.require_valid_project_id(project_id)
        return self.ledger.get_allocated_accounts(project_id)

    def get_user_allocated_amount(self, project_id: int, user: str) -> int:
        self.registry.require_valid_project_id(project_id)
        return self.ledger.get_user_allocated_amount(project_id, normalize_address(user))

    def get_users_committed_token_amounts(self, project_id: int, user: str) -> List[CommittedAmount]:
        self.registry.require_valid_project_id(project_id)
        return self.ledger.get_user_committed_amounts(
            project_id,
            normalize_address(user),
            self.usdc_address,
            self.usdt_address,
        )


def _normalized(project: Project) -> Project:
    """Return ``project`` with its payout address in canonical form."""
    try:
        payout_address = normalize_address(project.payout_address)
    except ValueError:
        raise InvalidProjectParameters("Funds address is not a valid address")
    return replace(project, payout_address=payout_address)
