"""Document Store Interface

Defines the contract for the hierarchical key-value store that holds
orders, invoices, counters and settings.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


class DocumentStoreError(Exception):
    """Base error for store operations"""


class PermissionDeniedError(DocumentStoreError):
    """The store refused access to a path"""


class StoreUnavailableError(DocumentStoreError):
    """The store could not be reached or failed to answer"""


class TransactionContentionError(DocumentStoreError):
    """A transaction could not commit within its retry budget"""


# Returned from a transaction update function to abort without writing
ABORT = object()


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of an atomic read-modify-write"""
    committed: bool
    value: Any


UpdateFunction = Callable[[Any], Any]
Listener = Callable[[str, Any], None]


def normalize_path(path: str) -> str:
    """Strip redundant slashes: '/orders//o1/' -> 'orders/o1'"""
    return "/".join(part for part in path.split("/") if part)


def join_path(*parts: str) -> str:
    return normalize_path("/".join(str(p) for p in parts))


def is_under(path: str, ancestor: str) -> bool:
    """True if path equals ancestor or lives below it"""
    if not ancestor:
        return True
    return path == ancestor or path.startswith(ancestor + "/")


class DocumentStore(ABC):
    """
    Hierarchical document store

    Values are JSON-compatible (dict, list, str, int, float, bool).
    Every write is durable once awaited. Only `transaction` offers
    read-modify-write atomicity.
    """

    @abstractmethod
    async def get(self, path: str) -> Optional[Any]:
        """
        Read the value stored at a path

        Returns:
            Stored value, or None if nothing is stored there
        """
        pass

    @abstractmethod
    async def list_children(self, path: str) -> Dict[str, Any]:
        """
        Read the direct children of a collection path

        Returns:
            Mapping of child key to value, ordered by key
        """
        pass

    @abstractmethod
    async def set(self, path: str, value: Any) -> None:
        """Replace the value at a path"""
        pass

    @abstractmethod
    async def push(self, path: str, value: Any) -> str:
        """
        Append a value under a collection with a generated key

        Returns:
            The generated child key (chronologically sortable)
        """
        pass

    @abstractmethod
    async def update(self, path: str, values: Dict[str, Any]) -> None:
        """Shallow-merge fields into the mapping stored at a path"""
        pass

    @abstractmethod
    async def remove(self, path: str) -> None:
        """Delete the value at a path and everything below it"""
        pass

    @abstractmethod
    async def transaction(self, path: str, update_fn: UpdateFunction) -> TransactionResult:
        """
        Atomically read-modify-write the value at a path

        update_fn receives the current value (None if absent) and returns
        the new value, or ABORT to leave the value untouched. It may be
        called more than once under contention and must be pure.

        Returns:
            TransactionResult(committed, value)

        Raises:
            TransactionContentionError: retry budget exhausted
        """
        pass

    @abstractmethod
    def subscribe(self, path: str, listener: Listener) -> Callable[[], None]:
        """
        Register a live listener for writes at or below a path

        The listener is called with (changed_path, new_value) after each
        committed write. Returns a callable that unsubscribes.
        """
        pass
