"""Shared constants and builders for the sale tests."""

from dataclasses import replace

from eth_account import Account

from launchpad.sale.types import AdminCredential, Project

OWNER_KEY = "0x" + "4c" * 32
OWNER = Account.from_key(OWNER_KEY).address.lower()
OTHER_KEY = "0x" + "7e" * 32

ALICE = "0x" + "aa" * 20
BOB = "0x" + "bb" * 20
PROJECT_WALLET = "0x" + "cc" * 20
SALE_ADDRESS = "0x" + "5a" * 20
USDC_ADDRESS = "0x" + "c1" * 20
USDT_ADDRESS = "0x" + "d1" * 20
ZERO = "0x" + "00" * 20

NATIVE_KEY = "ASTR/USD"
T0 = 1_700_000_000

OWNER_CREDENTIAL = AdminCredential(OWNER)


class FakeClock:
    """Settable unix clock."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def sample_project(now: int, **overrides) -> Project:
    """Project opening 1000s after ``now`` and closing 5000s after it."""
    project = Project(
        name="Sample project",
        start_time=now + 1000,
        end_time=now + 5000,
        token_decimals=6,
        max_allocate_amount=1000,
        usd_price_per_token_e6=1000,
        native_discount_multiplier_e4=9500,
        payout_address=PROJECT_WALLET,
    )
    return replace(project, **overrides)


def to_scaled(n: int, decimals: int) -> int:
    return n * 10**decimals
