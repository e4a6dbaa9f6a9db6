"""Dot/bracket key paths.

``"user.tags[0].name"`` parses to ``Key("user"), Key("tags"), Index(0),
Key("name")``. An ``Index`` reads a list by position or a mapping by the
decimal string of the index.
"""
import re
from dataclasses import dataclass
from typing import Any, Iterator, Tuple, Union

from ..errors import InvalidPathError

_MISSING = object()

# name, then any number of [n] suffixes
_PART = re.compile(r"^(?P<name>[^\[\]]*)(?P<indexes>(?:\[[^\[\]]*\])*)$")
_INDEX = re.compile(r"\[([^\[\]]*)\]")


@dataclass(frozen=True)
class Key:
    name: str

    def lookup(self, container: Any, default: Any = _MISSING) -> Any:
        if isinstance(container, dict):
            return container.get(self.name, default)
        return default

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Index:
    position: int

    @property
    def key(self) -> str:
        return str(self.position)

    def lookup(self, container: Any, default: Any = _MISSING) -> Any:
        if isinstance(container, list):
            if self.position < len(container):
                return container[self.position]
            return default
        if isinstance(container, dict):
            return container.get(self.key, default)
        return default

    def __str__(self) -> str:
        return f"[{self.position}]"


Segment = Union[Key, Index]


class KeyPath:
    """An immutable sequence of path segments."""

    __slots__ = ("segments",)

    def __init__(self, segments: Tuple[Segment, ...]):
        if not segments:
            raise InvalidPathError("", "a key path needs at least one segment")
        self.segments = tuple(segments)

    @classmethod
    def parse(cls, path: str) -> "KeyPath":
        if not isinstance(path, str):
            raise TypeError(f"key path must be a str, got {type(path).__name__}")
        if not path:
            raise InvalidPathError(path, "empty path")

        segments = []
        for i, part in enumerate(path.split(".")):
            m = _PART.match(part)
            if not m:
                raise InvalidPathError(path, f"unbalanced brackets in {part!r}")
            name, indexes = m.group("name"), m.group("indexes")
            if name:
                segments.append(Key(name))
            elif not indexes or i > 0:
                # only a leading part may start with an index, e.g. "[0].name"
                raise InvalidPathError(path, "empty segment")
            for raw in _INDEX.findall(indexes):
                if not (raw.isascii() and raw.isdigit()):
                    raise InvalidPathError(path, f"index [{raw}] is not a non-negative integer")
                segments.append(Index(int(raw)))
        return cls(tuple(segments))

    @classmethod
    def of(cls, *names: Union[str, int]) -> "KeyPath":
        """Build a path from literal keys, without parsing dots or brackets."""
        return cls(tuple(Index(n) if isinstance(n, int) else Key(str(n)) for n in names))

    @classmethod
    def coerce(cls, path: Union[str, "KeyPath"]) -> "KeyPath":
        if isinstance(path, KeyPath):
            return path
        return cls.parse(path)

    @property
    def parent(self) -> Tuple[Segment, ...]:
        return self.segments[:-1]

    @property
    def last(self) -> Segment:
        return self.segments[-1]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __eq__(self, other) -> bool:
        return isinstance(other, KeyPath) and self.segments == other.segments

    def __hash__(self) -> int:
        return hash(self.segments)

    def __str__(self) -> str:
        out = ""
        for seg in self.segments:
            if isinstance(seg, Index):
                out += str(seg)
            else:
                out += ("." if out else "") + seg.name
        return out

    def __repr__(self) -> str:
        return f"KeyPath({str(self)!r})"
