"""In-Memory Document Store Implementation

Process-local fake of the document store with the same semantics as
the SQL implementation. Used by tests and local development only:
counters kept here are not shared between processes.
"""

import asyncio
import copy
from typing import Any, Callable, Dict, List, Optional, Tuple
from src.app.services.document_store import (
    ABORT,
    DocumentStore,
    Listener,
    TransactionResult,
    UpdateFunction,
    is_under,
    join_path,
    normalize_path,
)
from src.adapter.services.document_store_support import (
    ListenerRegistry,
    ancestors,
    descend,
    direct_child_key,
    replace_nested,
    to_json_value,
)
from src.domain.base import generate_push_key


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed DocumentStore

    Each path maps to one JSON value. An asyncio lock serialises
    transactions; every public coroutine yields to the event loop once so
    concurrent callers interleave the way they would against a real store.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._documents: Dict[str, Any] = {}
        self._lock = asyncio.Lock()
        self._listeners = ListenerRegistry()
        for path, value in (initial or {}).items():
            self._documents[normalize_path(path)] = to_json_value(value)

    async def get(self, path: str) -> Optional[Any]:
        await asyncio.sleep(0)
        path = normalize_path(path)
        if path in self._documents:
            return copy.deepcopy(self._documents[path])
        for ancestor, remainder in ancestors(path):
            if ancestor in self._documents:
                return descend(self._documents[ancestor], remainder)
        return None

    async def list_children(self, path: str) -> Dict[str, Any]:
        await asyncio.sleep(0)
        path = normalize_path(path)
        children: Dict[str, Any] = {}
        container = self._documents.get(path)
        if isinstance(container, dict):
            children.update(copy.deepcopy(container))
        for doc_path, value in self._documents.items():
            key = direct_child_key(doc_path, path)
            if key is not None:
                children[key] = copy.deepcopy(value)
        return dict(sorted(children.items()))

    async def set(self, path: str, value: Any) -> None:
        if value is None:
            await self.remove(path)
            return
        await self.transaction(path, lambda _current: value)

    async def push(self, path: str, value: Any) -> str:
        key = generate_push_key()
        await self.set(join_path(path, key), value)
        return key

    async def update(self, path: str, values: Dict[str, Any]) -> None:
        def merge(current):
            merged = dict(current) if isinstance(current, dict) else {}
            for field, field_value in values.items():
                if field_value is None:
                    merged.pop(field, None)
                else:
                    merged[field] = field_value
            return merged

        await self.transaction(path, merge)

    def _locate(self, path: str) -> Tuple[str, List[str]]:
        """Document holding the value at `path` and the segments below it"""
        if path in self._documents:
            return path, []
        for ancestor, remainder in ancestors(path):
            if ancestor in self._documents and descend(self._documents[ancestor], remainder) is not None:
                return ancestor, remainder
        return path, []

    def _write(self, path: str, value: Any) -> None:
        target, segments = self._locate(path)
        if segments:
            self._documents[target] = replace_nested(self._documents[target], segments, value)
        elif value is None:
            self._documents.pop(path, None)
        else:
            self._documents[path] = value

    async def remove(self, path: str) -> None:
        await asyncio.sleep(0)
        path = normalize_path(path)
        async with self._lock:
            doomed = [p for p in self._documents if is_under(p, path)]
            for doc_path in doomed:
                del self._documents[doc_path]
            self._write(path, None)
        self._listeners.notify(path, None)

    async def transaction(self, path: str, update_fn: UpdateFunction) -> TransactionResult:
        await asyncio.sleep(0)
        path = normalize_path(path)
        async with self._lock:
            target, segments = self._locate(path)
            stored = self._documents.get(target)
            current = descend(stored, segments) if segments else copy.deepcopy(stored)
            new_value = update_fn(copy.deepcopy(current))
            if new_value is ABORT:
                return TransactionResult(committed=False, value=current)
            committed_value = to_json_value(new_value) if new_value is not None else None
            self._write(path, copy.deepcopy(committed_value))
        self._listeners.notify(path, committed_value)
        return TransactionResult(committed=True, value=copy.deepcopy(committed_value))

    def subscribe(self, path: str, listener: Listener) -> Callable[[], None]:
        return self._listeners.add(normalize_path(path), listener)

    def dump(self) -> Dict[str, Any]:
        """Snapshot of every stored document (test helper)"""
        return copy.deepcopy(self._documents)
