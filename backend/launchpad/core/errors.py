"""
Error taxonomy of the token sale engine.

Every error aborts the call that raised it; the settlement layer rolls back
all state the call touched before the exception leaves the engine.
"""


class SaleError(Exception):
    """Base class for all sale failures."""

    message = "Sale operation failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class Unauthorized(SaleError):
    message = "Caller is not the owner"


class InvalidProjectParameters(SaleError):
    message = "Invalid project parameters"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ProjectNotFound(SaleError):
    message = "Project ID should be within index range of projects"


class NotStarted(SaleError):
    message = "Project has not started yet"


class Ended(SaleError):
    message = "Project ended already"


class ZeroAmount(SaleError):
    message = "Token amount should be greater than 0"


class SoldOut(SaleError):
    message = "Token amount should be available"


class UnsupportedCurrency(SaleError):
    message = "USD token should be either USDC or USDT"


class InsufficientPayment(SaleError):
    message = "Sending native amount is not enough for payment"


class InvalidPriceFeed(SaleError):
    message = "Native price must be greater than 0"


class TransferFailed(SaleError):
    message = "Transfer failed"
