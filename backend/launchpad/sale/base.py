"""
Abstract base classes for the sale's external collaborators.

The engine never talks to a chain directly. It consumes:
- a price feed (oracle store keyed by asset pair)
- two payment tokens with allowance-based ``transfer_from``
- the native currency with push-based ``transfer``

Stateful collaborators are journaled: every mutation registers an undo step
so that ``atomic`` can restore them when a purchase fails half way.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterator, List, Tuple


class Journaled:
    """Mixin recording undo steps inside nested transaction frames."""

    def __init__(self):
        self._frames: List[List[Callable[[], None]]] = []

    def _record(self, undo: Callable[[], None]) -> None:
        if self._frames:
            self._frames[-1].append(undo)

    @property
    def in_transaction(self) -> bool:
        return bool(self._frames)

    def begin(self) -> None:
        self._frames.append([])

    def commit(self) -> None:
        frame = self._frames.pop()
        if self._frames:
            # Inner commits stay undoable until the outermost frame commits
            self._frames[-1].extend(frame)

    def rollback(self) -> None:
        frame = self._frames.pop()
        for undo in reversed(frame):
            undo()


@contextmanager
def atomic(*participants: Journaled) -> Iterator[None]:
    """Apply everything inside the block to all participants, or nothing."""
    for participant in participants:
        participant.begin()
    try:
        yield
    except BaseException:
        for participant in reversed(participants):
            participant.rollback()
        raise
    # Every frame is closed even when a commit hook raises; the first error wins
    error = None
    for participant in participants:
        try:
            participant.commit()
        except Exception as e:
            if error is None:
                error = e
    if error is not None:
        raise error


class PriceFeed(ABC):
    """Oracle store. Unknown keys read as ``(0, 0)``."""

    @abstractmethod
    def get_value(self, key: str) -> Tuple[int, int]:
        """Return ``(value, timestamp)`` of the latest published price."""
        pass


class PaymentToken(Journaled, ABC):
    """Fungible payment token with transfer/approve semantics."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Token contract address."""
        pass

    @abstractmethod
    def balance_of(self, account: str) -> int:
        pass

    @abstractmethod
    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """
        Move ``amount`` from ``owner`` to ``recipient`` using ``spender``'s allowance.
        Returns False when the transfer is rejected; nothing moves in that case.
        """
        pass


class NativeCurrency(Journaled, ABC):
    """The chain's base currency."""

    @abstractmethod
    def balance_of(self, account: str) -> int:
        pass

    @abstractmethod
    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Push ``amount`` from ``sender`` to ``recipient``.
        Returns False when the sender is short or the recipient rejects the value.
        """
        pass
