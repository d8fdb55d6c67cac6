"""Document Store Counter Repository Implementation

Each counter namespace is a single integer stored at its own path.
"""

import logging
from typing import Dict, Optional
from src.app.repositories.counter_repository import CounterRepository, CounterReservationError
from src.app.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


class DocumentCounterRepository(CounterRepository):
    """
    DocumentStore implementation of CounterRepository

    Reservation is a single store transaction, so uniqueness holds
    across every process sharing the store.
    """

    def __init__(self, store: DocumentStore, seeds: Dict[str, int]):
        """
        Args:
            store: Backing document store
            seeds: namespace -> value returned by the first reservation
        """
        self.store = store
        self.seeds = dict(seeds)

    def _seed(self, namespace: str) -> int:
        if namespace not in self.seeds:
            raise CounterReservationError(f"Unknown counter namespace: {namespace}")
        return int(self.seeds[namespace])

    async def reserve(self, namespace: str) -> int:
        seed = self._seed(namespace)

        def advance(current):
            if current is None:
                return seed
            return int(current) + 1

        result = await self.store.transaction(namespace, advance)
        if not result.committed or result.value is None:
            raise CounterReservationError(f"Counter {namespace} was not committed")

        logger.debug(f"Reserved {result.value} from {namespace}")
        return int(result.value)

    async def peek(self, namespace: str) -> Optional[int]:
        self._seed(namespace)
        value = await self.store.get(namespace)
        return int(value) if value is not None else None
