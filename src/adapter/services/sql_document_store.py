"""SQLAlchemy Document Store Implementation

Implements the document store on a single `documents` table using
SQLAlchemy async sessions. Transactions are optimistic: read the row,
compute the new value, then write it only if the row version is
unchanged, retrying on conflict.
"""

import asyncio
import copy
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Tuple
from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from src.app.services.document_store import (
    ABORT,
    DocumentStore,
    Listener,
    PermissionDeniedError,
    StoreUnavailableError,
    TransactionContentionError,
    TransactionResult,
    UpdateFunction,
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
from src.domain.base import generate_push_key, utc_now
from src.domain.stored_document import StoredDocument

logger = logging.getLogger(__name__)

# SQLSTATE for insufficient_privilege (PostgreSQL)
_PERMISSION_DENIED_SQLSTATES = {"42501"}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _sqlstate(error: DBAPIError) -> Optional[str]:
    orig = getattr(error, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


class SqlAlchemyDocumentStore(DocumentStore):
    """
    SQLAlchemy implementation of DocumentStore

    Uses one short-lived session per operation so that every awaited
    write is committed. Safe to share between processes: all agreement
    happens in the database through the version column.
    """

    def __init__(self, session_factory, max_retries: int = 25):
        """
        Args:
            session_factory: async sessionmaker producing AsyncSession objects
            max_retries: compare-and-swap attempts before giving up
        """
        self.session_factory = session_factory
        self.max_retries = max_retries
        self._listeners = ListenerRegistry()

    @contextmanager
    def _translate_errors(self, operation: str, path: str):
        try:
            yield
        except DBAPIError as e:
            if _sqlstate(e) in _PERMISSION_DENIED_SQLSTATES:
                raise PermissionDeniedError(f"{operation} denied for {path}") from e
            raise StoreUnavailableError(f"{operation} failed for {path}: {e}") from e
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(f"{operation} failed for {path}: {e}") from e

    async def get(self, path: str) -> Optional[Any]:
        path = normalize_path(path)
        with self._translate_errors("get", path):
            async with self.session_factory() as session:
                document = await session.get(StoredDocument, path)
                if document is not None:
                    return copy.deepcopy(document.data)
                for ancestor, remainder in ancestors(path):
                    parent = await session.get(StoredDocument, ancestor)
                    if parent is not None:
                        return descend(parent.data, remainder)
        return None

    async def list_children(self, path: str) -> Dict[str, Any]:
        path = normalize_path(path)
        prefix = f"{path}/" if path else ""
        children: Dict[str, Any] = {}
        with self._translate_errors("list", path):
            async with self.session_factory() as session:
                statement = select(StoredDocument).where(
                    or_(
                        StoredDocument.path == path,
                        StoredDocument.path.like(f"{_escape_like(prefix)}%", escape="\\"),
                    )
                )
                result = await session.execute(statement)
                for document in result.scalars().all():
                    if document.path == path:
                        if isinstance(document.data, dict):
                            for key, value in document.data.items():
                                children.setdefault(key, copy.deepcopy(value))
                        continue
                    key = direct_child_key(document.path, path)
                    if key is not None:
                        children[key] = copy.deepcopy(document.data)
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

    async def remove(self, path: str) -> None:
        path = normalize_path(path)
        with self._translate_errors("remove", path):
            async with self.session_factory() as session:
                statement = delete(StoredDocument).where(
                    or_(
                        StoredDocument.path == path,
                        StoredDocument.path.like(f"{_escape_like(path)}/%", escape="\\"),
                    )
                )
                await session.execute(statement)
                await session.commit()
            # Values nested inside an ancestor document
            await self._run_transaction(path, lambda _current: None)
        self._listeners.notify(path, None)

    async def _locate(self, session, path: str) -> Tuple[Optional[StoredDocument], List[str]]:
        """Row holding the value at `path` and the segments below it"""
        document = await session.get(StoredDocument, path)
        if document is not None:
            return document, []
        for ancestor, remainder in ancestors(path):
            parent = await session.get(StoredDocument, ancestor)
            if parent is not None and descend(parent.data, remainder) is not None:
                return parent, remainder
        return None, []

    async def transaction(self, path: str, update_fn: UpdateFunction) -> TransactionResult:
        path = normalize_path(path)
        with self._translate_errors("transaction", path):
            result = await self._run_transaction(path, update_fn)
        if result.committed:
            self._listeners.notify(path, result.value)
        return result

    async def _run_transaction(self, path: str, update_fn: UpdateFunction) -> TransactionResult:
        for attempt in range(1, self.max_retries + 1):
            async with self.session_factory() as session:
                document, segments = await self._locate(session, path)
                if document is None:
                    current = None
                elif segments:
                    current = descend(document.data, segments)
                else:
                    current = copy.deepcopy(document.data)

                new_value = update_fn(copy.deepcopy(current))
                if new_value is ABORT:
                    return TransactionResult(committed=False, value=current)
                committed_value = to_json_value(new_value) if new_value is not None else None

                if segments:
                    # Rewrite the ancestor that holds the value
                    stored_value = replace_nested(document.data, segments, committed_value)
                else:
                    stored_value = committed_value

                if stored_value is None:
                    if document is None:
                        return TransactionResult(committed=True, value=None)
                    statement = delete(StoredDocument).where(
                        StoredDocument.path == document.path,
                        StoredDocument.version == document.version,
                    )
                elif document is None:
                    statement = None
                    session.add(StoredDocument(path=path, data=stored_value, version=1))
                else:
                    statement = (
                        update(StoredDocument)
                        .where(StoredDocument.path == document.path)
                        .where(StoredDocument.version == document.version)
                        .values(
                            data=stored_value,
                            version=document.version + 1,
                            updated_at=utc_now(),
                        )
                    )

                try:
                    if statement is not None:
                        result = await session.execute(statement)
                        if result.rowcount != 1:
                            await session.rollback()
                            logger.debug(f"Version conflict on {path} (attempt {attempt})")
                            await asyncio.sleep(0)
                            continue
                    await session.commit()
                except IntegrityError:
                    # Another writer created the row first
                    await session.rollback()
                    logger.debug(f"Insert race on {path} (attempt {attempt})")
                    await asyncio.sleep(0)
                    continue

            return TransactionResult(committed=True, value=committed_value)

        logger.warning(f"Transaction on {path} gave up after {self.max_retries} attempts")
        raise TransactionContentionError(
            f"Transaction on {path} did not commit after {self.max_retries} attempts"
        )

    def subscribe(self, path: str, listener: Listener) -> Callable[[], None]:
        # Only writes made through this instance are observed
        return self._listeners.add(normalize_path(path), listener)
