"""
Value types shared by the sale engine.

Amounts are plain integers in each asset's smallest unit:
- project tokens: 10^token_decimals per whole token
- stablecoins: 10^6
- native currency: 10^18
"""

import re
from dataclasses import dataclass
from enum import Enum

from launchpad.core.constants import ZERO_ADDRESS

EVM_ADDRESS_REGEX = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_valid_address(address: str) -> bool:
    return bool(EVM_ADDRESS_REGEX.fullmatch(address.strip()))


def normalize_address(address: str) -> str:
    """Lowercase an address so lookups ignore checksum casing."""
    address = address.strip()
    if not is_valid_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return address.lower()


def is_zero_address(address: str) -> bool:
    return address.strip().lower() == ZERO_ADDRESS


class Currency(str, Enum):
    """Payment currencies accepted by every project."""
    USDC = "usdc"
    USDT = "usdt"
    NATIVE = "native"


class SalePhase(str, Enum):
    PENDING = "pending"
    OPEN = "open"
    CLOSED = "closed"


def phase_at(now: int, start_time: int, end_time: int) -> SalePhase:
    """Derive a project's phase from the clock; the window bounds are inclusive."""
    if now < start_time:
        return SalePhase.PENDING
    if now > end_time:
        return SalePhase.CLOSED
    return SalePhase.OPEN


@dataclass(frozen=True)
class Project:
    """One configured sale. Immutable once registered."""
    name: str
    start_time: int
    end_time: int
    token_decimals: int
    max_allocate_amount: int
    usd_price_per_token_e6: int
    native_discount_multiplier_e4: int
    payout_address: str


@dataclass(frozen=True)
class AdminCredential:
    """Capability presented to owner-only operations."""
    address: str


@dataclass
class AllocationRecord:
    token_amount: int = 0
    usdc_amount: int = 0
    usdt_amount: int = 0
    native_amount: int = 0

    def paid(self, currency: Currency) -> int:
        return getattr(self, f"{currency.value}_amount")

    def add_payment(self, currency: Currency, amount: int) -> None:
        field = f"{currency.value}_amount"
        setattr(self, field, getattr(self, field) + amount)


@dataclass
class RaisedAmount:
    usdc_amount: int = 0
    usdt_amount: int = 0
    native_amount: int = 0

    def add_payment(self, currency: Currency, amount: int) -> None:
        field = f"{currency.value}_amount"
        setattr(self, field, getattr(self, field) + amount)


@dataclass(frozen=True)
class AllocatedAccount:
    user_address: str
    amounts: int
    usdc_amounts: int
    usdt_amounts: int
    native_amounts: int


@dataclass(frozen=True)
class CommittedAmount:
    paid_token_address: str
    amount_paid: int


@dataclass(frozen=True)
class Reservation:
    """Outcome of a ledger reservation."""
    granted_amount: int
    payment_amount: int
    sold_out: bool
