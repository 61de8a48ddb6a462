from launchpad.sale.base import NativeCurrency, PaymentToken, PriceFeed, atomic
from launchpad.sale.oracle import InMemoryPriceFeed, NativePriceSource
from launchpad.sale.settlement import TokenSale
from launchpad.sale.types import AdminCredential, Currency, Project, SalePhase

__all__ = [
    "AdminCredential",
    "Currency",
    "InMemoryPriceFeed",
    "NativeCurrency",
    "NativePriceSource",
    "PaymentToken",
    "PriceFeed",
    "Project",
    "SalePhase",
    "TokenSale",
    "atomic",
]
