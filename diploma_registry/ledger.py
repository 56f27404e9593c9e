"""
Ledger Collaborators

The registry does not own the ledger. It consumes three external
capabilities, each defined here as an interface with an in-memory
implementation for development and testing:

    BlockClock       current block height (monotonic)
    AuthorityOracle  membership test for verified issuing authorities
    TransferSink     fee transfers from the issuer to the authority contract

WARNING: the in-memory implementations are not persistent and do not
settle anything. They record what a ledger would have been asked to do.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set


class TransferError(Exception):
    """Raised by a TransferSink that refuses a transfer."""


class BlockClock:
    """
    Monotonic block height clock.

    Starts at the given height and only moves forward.
    """

    def __init__(self, height: int = 0):
        if height < 0:
            raise ValueError("block height must be non-negative")
        self._height = height
        self._lock = threading.Lock()

    @property
    def block_height(self) -> int:
        with self._lock:
            return self._height

    def advance(self, blocks: int = 1) -> int:
        """Move forward by a number of blocks and return the new height."""
        if blocks < 0:
            raise ValueError("cannot advance by a negative number of blocks")
        with self._lock:
            self._height += blocks
            return self._height

    def set_height(self, height: int) -> None:
        with self._lock:
            if height < self._height:
                raise ValueError(
                    f"block height is monotonic: {height} < {self._height}"
                )
            self._height = height


class AuthorityOracle(ABC):
    """
    Abstract interface for the verified authority set.

    Membership is managed outside the registry. The registry only asks.
    """

    @abstractmethod
    def is_verified(self, identity: str) -> bool:
        """Check whether an identity may issue diplomas."""
        pass


class StaticAuthoritySet(AuthorityOracle):
    """In-memory authority set."""

    def __init__(self, authorities: Optional[Iterable[str]] = None):
        self._authorities: Set[str] = set(authorities or ())
        self._lock = threading.Lock()

    def is_verified(self, identity: str) -> bool:
        with self._lock:
            return identity in self._authorities

    def add(self, identity: str) -> None:
        with self._lock:
            self._authorities.add(identity)

    def remove(self, identity: str) -> None:
        with self._lock:
            self._authorities.discard(identity)

    def clear(self) -> None:
        with self._lock:
            self._authorities.clear()

    def members(self) -> List[str]:
        with self._lock:
            return sorted(self._authorities)


@dataclass(frozen=True)
class Transfer:
    """A fee transfer as requested by the registry."""
    amount: int
    sender: str
    recipient: str
    block_height: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "sender": self.sender,
            "recipient": self.recipient,
            "block_height": self.block_height,
        }


class TransferSink(ABC):
    """
    Abstract interface for value transfers.

    Implementations either accept the transfer or raise TransferError.
    """

    @abstractmethod
    def transfer(self, amount: int, sender: str, recipient: str, block_height: int) -> Transfer:
        """Move amount from sender to recipient."""
        pass


class InMemoryTransferLedger(TransferSink):
    """
    Records transfers in memory for audit.

    Use a ledger-backed sink for anything that must actually settle.
    """

    def __init__(self):
        self._transfers: List[Transfer] = []
        self._lock = threading.Lock()

    def transfer(self, amount: int, sender: str, recipient: str, block_height: int) -> Transfer:
        record = Transfer(
            amount=amount,
            sender=sender,
            recipient=recipient,
            block_height=block_height,
        )
        with self._lock:
            self._transfers.append(record)
        return record

    def transfers(
        self,
        sender: Optional[str] = None,
        recipient: Optional[str] = None,
    ) -> List[Transfer]:
        """Query recorded transfers."""
        with self._lock:
            records = self._transfers[:]

        if sender:
            records = [t for t in records if t.sender == sender]
        if recipient:
            records = [t for t in records if t.recipient == recipient]

        return records

    def total_received(self, recipient: str) -> int:
        return sum(t.amount for t in self.transfers(recipient=recipient))

    def clear(self) -> None:
        with self._lock:
            self._transfers.clear()
