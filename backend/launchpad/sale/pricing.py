"""
Price computation for project tokens.

Precision:
  usd_price_per_token_e6 is USD per whole project token × 10^6.
    e.g. $0.20 → 200_000
  native_discount_multiplier_e4 is the share of the USD price a native buyer pays × 10^4.
    e.g. 95% → 9_500
  native_price_e8 is USD per whole native coin × 10^8 (oracle format).
    e.g. $0.10 → 10_000_000

Every formula multiplies first and divides once, rounding up, so a buyer can
never underpay because of truncation.
"""

from launchpad.core.constants import (
    DISCOUNT_BASIS,
    NATIVE_DECIMALS,
    ORACLE_PRICE_DECIMALS,
    USD_PRICE_DECIMALS,
)
from launchpad.sale.types import Project


def ceil_div(a: int, b: int) -> int:
    """Integer division rounding towards positive infinity (a >= 0, b > 0)."""
    return -(-a // b)


def required_payment_stable(project: Project, token_amount: int) -> int:
    """Stablecoin units (6 decimals) owed for ``token_amount`` project token units."""
    return ceil_div(
        project.usd_price_per_token_e6 * token_amount,
        10**project.token_decimals,
    )


def required_payment_native(project: Project, token_amount: int, native_price_e8: int) -> int:
    """Native currency units (18 decimals) owed for ``token_amount`` at the discounted price."""
    numerator = (
        project.usd_price_per_token_e6
        * project.native_discount_multiplier_e4
        * token_amount
        * 10**ORACLE_PRICE_DECIMALS
        * 10**NATIVE_DECIMALS
    )
    denominator = (
        DISCOUNT_BASIS
        * 10**project.token_decimals
        * native_price_e8
        * 10**USD_PRICE_DECIMALS
    )
    return ceil_div(numerator, denominator)


def discounted_usd_price_e6(project: Project) -> int:
    """Per-token USD price seen by native buyers (truncated, display only)."""
    return project.usd_price_per_token_e6 * project.native_discount_multiplier_e4 // DISCOUNT_BASIS
