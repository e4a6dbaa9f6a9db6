"""Named collections of documents kept inside a :class:`PathStore`.

Every collection owns a plain list of dicts. After a mutation the collection
writes a copy of that list to ``<DB_KEY>.<name>`` in the path store, which
rewrites the snapshot.
"""
import copy
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .json_store import json_error
from .keypath import KeyPath
from .path_store import PathStore

logger = logging.getLogger(__name__)

DB_KEY = "_db"
ID_FIELD = "_id"

Document = Dict[str, Any]
Query = Optional[Dict[str, Any]]
Updater = Union[Dict[str, Any], Callable[[Document], Optional[Document]]]


def generate_id() -> str:
    """Millisecond timestamp plus random hex. Not guaranteed unique."""
    return f"{int(time.time() * 1000):x}-{secrets.token_hex(4)}"


def strict_equal(a: Any, b: Any) -> bool:
    """Equality that does not mix types: ``True != 1`` and ``"1" != 1``."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a is b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(strict_equal(a[k], b[k]) for k in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(strict_equal(x, y) for x, y in zip(a, b))
    return type(a) is type(b) and a == b


def matches(doc: Document, query: Query) -> bool:
    if not query:
        return True
    return all(k in doc and strict_equal(doc[k], v) for k, v in query.items())


def _check_query(query: Query):
    if query is not None and not isinstance(query, dict):
        raise TypeError(f"query must be a dict or None, got {type(query).__name__}")


@dataclass
class UpdateResult:
    count: int = 0
    documents: List[Document] = field(default_factory=list)
    upserted: bool = False


class Collection:
    def __init__(self, name: str, database: "Database", documents: List[Document]):
        self.name = name
        self._db = database
        self._docs = documents

    def __repr__(self) -> str:
        return f"<Collection {self.name!r} ({len(self._docs)} documents)>"

    def __len__(self) -> int:
        return len(self._docs)

    def _persist(self):
        self._db._write(self.name, self._docs)

    def _match_indexes(self, query: Query, multi: bool = True) -> List[int]:
        """Positions of matching documents in insertion order."""
        found = []
        for i, doc in enumerate(self._docs):
            if matches(doc, query):
                found.append(i)
                if not multi:
                    break
        return found

    def _prepare(self, doc: Any) -> Optional[Document]:
        if not isinstance(doc, dict):
            logger.warning(
                "Skipping insert into %s: expected a dict, got %s", self.name, type(doc).__name__
            )
            return None
        problem = json_error(doc)
        if problem:
            logger.warning("Skipping insert into %s: %s", self.name, problem)
            return None
        doc = copy.deepcopy(doc)
        if doc.get(ID_FIELD) is None:
            doc[ID_FIELD] = generate_id()
        return doc

    def insert(self, docs: Union[Document, List[Document]]):
        """Insert one document or a list of them.

        Returns a copy of what was stored, in the same shape as the input.
        Entries that are not JSON-serializable dicts are skipped (``None`` for a single value).
        """
        many = isinstance(docs, (list, tuple))
        accepted = [d for d in map(self._prepare, docs if many else [docs]) if d is not None]
        if accepted:
            self._docs.extend(accepted)
            self._persist()
        out = copy.deepcopy(accepted)
        if many:
            return out
        return out[0] if out else None

    def find(self, query: Query = None) -> List[Document]:
        _check_query(query)
        return [copy.deepcopy(d) for d in self._docs if matches(d, query)]

    def find_one(self, query: Query = None) -> Optional[Document]:
        _check_query(query)
        for doc in self._docs:
            if matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def count(self, query: Query = None) -> int:
        _check_query(query)
        if not query:
            return len(self._docs)
        return sum(1 for d in self._docs if matches(d, query))

    def update(self, query: Query, data: Updater, *, multi: bool = False,
               upsert: bool = False) -> UpdateResult:
        """Merge ``data`` into matching documents, or replace them with ``data(doc)``.

        Without ``multi`` only the earliest match is touched. ``_id`` is kept
        whatever the update says. With ``upsert`` and no match, a document
        built from the query fields is inserted instead.
        """
        _check_query(query)
        if not isinstance(data, dict) and not callable(data):
            raise TypeError("update must be a dict or a callable")

        result = UpdateResult()
        for i in self._match_indexes(query, multi):
            current = self._docs[i]
            replacement = self._apply(data, current)
            if replacement is None:
                continue
            if ID_FIELD in current:
                replacement[ID_FIELD] = current[ID_FIELD]
            problem = json_error(replacement)
            if problem:
                logger.warning("Skipping update in %s: %s", self.name, problem)
                continue
            self._docs[i] = replacement
            result.count += 1
            result.documents.append(copy.deepcopy(replacement))

        if result.count:
            self._persist()
            return result

        if upsert and not self._match_indexes(query, multi=False):
            base = self._apply(data, copy.deepcopy(query or {}))
            inserted = self.insert(base) if base is not None else None
            if inserted is not None:
                result.count = 1
                result.documents.append(inserted)
                result.upserted = True
        return result

    def _apply(self, data: Updater, doc: Document) -> Optional[Document]:
        if isinstance(data, dict):
            return {**copy.deepcopy(doc), **copy.deepcopy(data)}
        working = copy.deepcopy(doc)
        out = data(working)
        if out is None:
            return working
        if not isinstance(out, dict):
            logger.warning(
                "Update function for %s returned %s, document left unchanged",
                self.name, type(out).__name__,
            )
            return None
        return copy.deepcopy(out)

    def remove(self, query: Query, *, multi: bool = False) -> int:
        _check_query(query)
        doomed = self._match_indexes(query, multi)
        for i in reversed(doomed):
            del self._docs[i]
        if doomed:
            self._persist()
        return len(doomed)

    def clear(self) -> int:
        removed = len(self._docs)
        self._docs.clear()
        if removed:
            self._persist()
        return removed


class Database:
    """Hands out one :class:`Collection` per case-insensitive name."""

    def __init__(self, store: PathStore):
        self._store = store
        self._collections: Dict[str, Collection] = {}

    def collection(self, name: str) -> Collection:
        if not isinstance(name, str):
            raise TypeError(f"collection name must be a str, got {type(name).__name__}")
        key = name.strip().lower()
        if not key:
            raise ValueError("collection name must not be empty")

        coll = self._collections.get(key)
        if coll is None:
            coll = Collection(key, self, self._load(key))
            self._collections[key] = coll
        return coll

    __getitem__ = collection

    def collection_names(self) -> List[str]:
        persisted = self._store.get(DB_KEY)
        names = set(self._collections)
        if isinstance(persisted, dict):
            names.update(persisted)
        return sorted(names)

    def _load(self, key: str) -> List[Document]:
        stored = self._store.get(KeyPath.of(DB_KEY, key))
        if stored is None:
            return []
        if not isinstance(stored, list):
            logger.error("Stored collection %s is not a list, starting empty", key)
            return []
        return [copy.deepcopy(d) for d in stored if isinstance(d, dict)]

    def _write(self, key: str, docs: List[Document]):
        # set() stores a deep copy, so the live list is never aliased
        result = self._store.set(KeyPath.of(DB_KEY, key), docs)
        if not result:
            logger.error("Collection %s was not persisted: %s", key, result.reason)
