"""Counter Repository Interface

Defines the contract for sequential number reservation.
"""

from abc import ABC, abstractmethod
from typing import Optional


class CounterReservationError(Exception):
    """The counter could not be advanced"""


class CounterRepository(ABC):
    """
    Repository interface for shared sequence counters

    Each namespace (e.g. invoiceCounter, salesOrderCounter) is one
    integer in the store.
    """

    @abstractmethod
    async def reserve(self, namespace: str) -> int:
        """
        Atomically reserve the next number of a namespace

        The first reservation on an uninitialised counter returns the
        namespace seed; later ones return the previous value + 1.

        Raises:
            CounterReservationError: unknown namespace or not committed
            TransactionContentionError: retry budget exhausted
        """
        pass

    @abstractmethod
    async def peek(self, namespace: str) -> Optional[int]:
        """
        Read the last reserved value without advancing

        Returns:
            Current value, or None if the counter was never used
        """
        pass
