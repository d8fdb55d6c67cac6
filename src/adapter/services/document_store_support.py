"""Helpers shared by the document store implementations"""

import copy
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from src.app.services.document_store import Listener, is_under

logger = logging.getLogger(__name__)


def to_json_value(value: Any) -> Any:
    """Round-trip through JSON so stored values never alias caller objects"""
    return json.loads(json.dumps(value, default=str))


def ancestors(path: str) -> List[Tuple[str, List[str]]]:
    """
    Ancestor paths of a path, nearest first, with the remaining segments

    'a/b/c' -> [('a/b', ['c']), ('a', ['b', 'c'])]
    """
    parts = path.split("/")
    return [
        ("/".join(parts[:i]), parts[i:])
        for i in range(len(parts) - 1, 0, -1)
    ]


def descend(value: Any, segments: List[str]) -> Optional[Any]:
    """Walk nested mappings; None if any segment is missing"""
    for segment in segments:
        if not isinstance(value, dict) or segment not in value:
            return None
        value = value[segment]
    return copy.deepcopy(value)


def replace_nested(container: Any, segments: List[str], value: Any) -> Any:
    """
    Copy of `container` with the value at `segments` replaced

    A None value drops the key. Every segment but the last must already
    resolve to a mapping.
    """
    root = copy.deepcopy(container)
    node = root
    for segment in segments[:-1]:
        node = node[segment]
    if value is None:
        node.pop(segments[-1], None)
    else:
        node[segments[-1]] = value
    return root


def direct_child_key(path: str, collection: str) -> Optional[str]:
    """Child key if `path` sits directly under `collection`, else None"""
    prefix = f"{collection}/" if collection else ""
    if not path.startswith(prefix):
        return None
    rest = path[len(prefix):]
    if not rest or "/" in rest:
        return None
    return rest


class ListenerRegistry:
    """Live subscriptions keyed by path"""

    def __init__(self):
        self._listeners: Dict[int, Tuple[str, Listener]] = {}
        self._next_id = 0

    def add(self, path: str, listener: Listener) -> Callable[[], None]:
        listener_id = self._next_id
        self._next_id += 1
        self._listeners[listener_id] = (path, listener)

        def unsubscribe():
            self._listeners.pop(listener_id, None)

        return unsubscribe

    def notify(self, changed_path: str, value: Any) -> None:
        """Call every listener whose path overlaps the changed path"""
        for path, listener in list(self._listeners.values()):
            if not (is_under(changed_path, path) or is_under(path, changed_path)):
                continue
            try:
                listener(changed_path, copy.deepcopy(value))
            except Exception as e:
                logger.error(f"Listener for {path} failed on change to {changed_path}: {e}")
