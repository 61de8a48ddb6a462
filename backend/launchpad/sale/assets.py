"""
In-memory payment assets.

Reference implementations of the payment token and native currency
interfaces. They back the HTTP service's simulated chain and the tests.
"""

import logging
from typing import Callable, Dict, Set, Tuple

from launchpad.sale.base import Journaled, NativeCurrency, PaymentToken
from launchpad.sale.types import normalize_address

logger = logging.getLogger(__name__)


class _Balances(Journaled):
    """Journaled balance table shared by the asset implementations."""

    def __init__(self):
        super().__init__()
        self._balances: Dict[str, int] = {}
        self._rejecting: Set[str] = set()

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def set_accept(self, account: str, accept: bool) -> None:
        """Make ``account`` accept or reject incoming transfers."""
        account = normalize_address(account)
        if accept:
            self._rejecting.discard(account)
        else:
            self._rejecting.add(account)

    def _set_balance(self, account: str, amount: int) -> None:
        previous = self._balances.get(account, 0)
        self._balances[account] = amount
        self._record(lambda: self._balances.__setitem__(account, previous))

    def _move(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0 or self._balances.get(sender, 0) < amount:
            return False
        if recipient in self._rejecting:
            return False
        self._set_balance(sender, self._balances.get(sender, 0) - amount)
        self._set_balance(recipient, self._balances.get(recipient, 0) + amount)
        return True


class InMemoryToken(_Balances, PaymentToken):
    """ERC20-like token with balances and allowances."""

    def __init__(self, address: str, symbol: str, decimals: int = 6):
        super().__init__()
        self._address = normalize_address(address)
        self.symbol = symbol
        self.decimals = decimals
        self._allowances: Dict[Tuple[str, str], int] = {}

    @property
    def address(self) -> str:
        return self._address

    def mint(self, account: str, amount: int) -> None:
        account = normalize_address(account)
        self._set_balance(account, self._balances.get(account, 0) + amount)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        key = (normalize_address(owner), normalize_address(spender))
        previous = self._allowances.get(key, 0)
        self._allowances[key] = amount
        self._record(lambda: self._allowances.__setitem__(key, previous))

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        spender = normalize_address(spender)
        owner = normalize_address(owner)
        recipient = normalize_address(recipient)

        allowed = self.allowance(owner, spender)
        if allowed < amount:
            logger.debug(f"{self.symbol}: allowance {allowed} < {amount} for {owner}")
            return False
        if not self._move(owner, recipient, amount):
            return False
        self.approve(owner, spender, allowed - amount)
        return True


ReceiveHook = Callable[[str, int], None]


class NativeBank(_Balances, NativeCurrency):
    """
    Native currency balances.

    Accounts may register a receive hook, called with ``(sender, amount)``
    after value arrives. A hook that raises makes the transfer fail and
    undoes everything the hook changed in this bank.
    """

    def __init__(self):
        super().__init__()
        self._hooks: Dict[str, ReceiveHook] = {}

    def set_balance(self, account: str, amount: int) -> None:
        self._set_balance(normalize_address(account), amount)

    def on_receive(self, account: str, hook: ReceiveHook) -> None:
        self._hooks[normalize_address(account)] = hook

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)

        self.begin()
        try:
            moved = self._move(sender, recipient, amount)
            hook = self._hooks.get(recipient)
            if moved and hook is not None:
                hook(sender, amount)
        except Exception as e:
            logger.warning(f"native: receive hook of {recipient} failed: {e}")
            self.rollback()
            return False
        if not moved:
            self.rollback()
            return False
        self.commit()
        return True
