"""Dot-path addressed key/value store persisted as one JSON snapshot."""
import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from .json_store import JsonSnapshot, json_error
from .keypath import Index, Key, KeyPath, Segment, _MISSING

logger = logging.getLogger(__name__)

PathLike = Union[str, KeyPath]

PATH_NOT_FOUND = "path does not exist"


@dataclass(frozen=True)
class MutationResult:
    """Outcome of ``set``/``delete``. Truthy only when the change was applied."""

    ok: bool
    path: str
    reason: Optional[str] = None
    persisted: bool = False

    def __bool__(self) -> bool:
        return self.ok


def _slot(seg: Segment) -> str:
    return seg.name if isinstance(seg, Key) else seg.key


def _conflict(container: Any, seg: Segment) -> Optional[str]:
    """Why ``seg`` cannot be written into ``container``, or None."""
    if isinstance(container, list):
        if isinstance(seg, Key):
            return f"cannot use key {seg.name!r} on a list"
        if seg.position >= len(container):
            return f"index {seg.position} out of range for a list of {len(container)}"
    return None


def _assign(container: Any, seg: Segment, value: Any):
    if isinstance(container, list):
        container[seg.position] = value
    else:
        container[_slot(seg)] = value


class PathStore:
    """In-memory root mapping, loaded from and rewritten to a JSON snapshot.

    ``get`` returns stored objects without copying; use :class:`PathStoreView`
    when handing values to callers that may mutate them.
    """

    def __init__(self, snapshot_path: Path):
        self._snapshot = JsonSnapshot(snapshot_path)
        self._root: Dict[str, Any] = self._snapshot.load()
        logger.debug("Loaded %d top-level keys from %s", len(self._root), self.snapshot_path)

    @property
    def snapshot_path(self) -> Path:
        return self._snapshot.path

    def reload(self):
        self._root = self._snapshot.load()

    def save(self) -> bool:
        try:
            self._snapshot.save(self._root)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write snapshot %s: %s", self.snapshot_path, e)
            return False
        return True

    def get(self, path: PathLike, default: Any = None) -> Any:
        node: Any = self._root
        for seg in KeyPath.coerce(path):
            node = seg.lookup(node, _MISSING)
            if node is _MISSING:
                return default
        return node

    def has(self, path: PathLike) -> bool:
        return self.get(path, _MISSING) is not _MISSING

    def set(self, path: PathLike, value: Any) -> MutationResult:
        kp = KeyPath.coerce(path)
        problem = json_error(value)
        if problem:
            return self._rejected(kp, f"value is not JSON serializable: {problem}")
        node: Any = self._root

        for depth, seg in enumerate(kp.parent):
            reason = _conflict(node, seg)
            if reason:
                return self._rejected(kp, reason)
            child = seg.lookup(node, None)
            if child is None:
                # everything below is new, so build it off to the side
                built = copy.deepcopy(value)
                for below in reversed(kp.segments[depth + 1:]):
                    built = {_slot(below): built}
                _assign(node, seg, built)
                return self._applied(kp)
            if not isinstance(child, (dict, list)):
                prefix = KeyPath(kp.segments[:depth + 1])
                return self._rejected(
                    kp, f"{prefix} holds a {type(child).__name__}, not a container"
                )
            node = child

        reason = _conflict(node, kp.last)
        if reason:
            return self._rejected(kp, reason)
        _assign(node, kp.last, copy.deepcopy(value))
        return self._applied(kp)

    def delete(self, path: PathLike) -> MutationResult:
        kp = KeyPath.coerce(path)
        node: Any = self._root
        for seg in kp.parent:
            node = seg.lookup(node, _MISSING)
            if node is _MISSING:
                break

        last = kp.last
        if isinstance(node, list) and isinstance(last, Index) and last.position < len(node):
            del node[last.position]
        elif isinstance(node, dict) and _slot(last) in node:
            del node[_slot(last)]
        else:
            logger.warning("Delete skipped, path %s does not exist", kp)
            return MutationResult(False, str(kp), reason=PATH_NOT_FOUND)
        return self._applied(kp)

    def all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._root)

    def _applied(self, kp: KeyPath) -> MutationResult:
        return MutationResult(True, str(kp), persisted=self.save())

    def _rejected(self, kp: KeyPath, reason: str) -> MutationResult:
        logger.error("Cannot set %s: %s", kp, reason)
        return MutationResult(False, str(kp), reason=reason)


class PathStoreView:
    """Public face of a :class:`PathStore`: reads return deep copies.

    Top-level keys in ``reserved`` belong to another layer; they can be read
    here but not written or deleted.
    """

    def __init__(self, store: PathStore, reserved: Iterable[str] = ()):
        self._store = store
        self._reserved = frozenset(reserved)

    def _owner_check(self, path: PathLike) -> Optional[MutationResult]:
        kp = KeyPath.coerce(path)
        head = kp.segments[0]
        if isinstance(head, Key) and head.name in self._reserved:
            reason = f"{head.name!r} is managed by another module"
            logger.error("Cannot change %s: %s", kp, reason)
            return MutationResult(False, str(kp), reason=reason)
        return None

    def get(self, path: PathLike, default: Any = None) -> Any:
        value = self._store.get(path, _MISSING)
        if value is _MISSING:
            return default
        return copy.deepcopy(value)

    def has(self, path: PathLike) -> bool:
        return self._store.has(path)

    def set(self, path: PathLike, value: Any) -> MutationResult:
        return self._owner_check(path) or self._store.set(path, value)

    def delete(self, path: PathLike) -> MutationResult:
        return self._owner_check(path) or self._store.delete(path)

    def all(self) -> Dict[str, Any]:
        return self._store.all()
