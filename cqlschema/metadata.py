"""Ordered metadata annotations with merge-on-export.

Every validator carries a MetadataChain. Each chained ``.meta(...)`` call
appends one annotation; nothing is ever overwritten in place. Exporting a
validator's canonical annotation is an explicit reduce over the chain:

    chain = MetadataChain().append({"cql": True, "type": "int"})
    chain = chain.append({"some": "metadata"}).append({"some": "overwritten"})
    chain.merged()  # {"cql": True, "type": "int", "some": "overwritten"}
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, Mapping

CQL_KEY = "cql"


@dataclass(frozen=True, slots=True)
class MetadataChain:
    """Immutable, ordered sequence of annotation records."""
    entries: tuple[Mapping[str, Any], ...] = ()

    def append(self, annotation: Mapping[str, Any]) -> MetadataChain:
        return MetadataChain(self.entries + (MappingProxyType(dict(annotation)),))

    def concat(self, other: MetadataChain) -> MetadataChain:
        return MetadataChain(self.entries + other.entries)

    def find(self, key: str = CQL_KEY) -> Mapping[str, Any] | None:
        """Last annotation containing ``key``, or None."""
        for entry in reversed(self.entries):
            if key in entry: return entry
        return None

    def value(self, key: str, default: Any = None) -> Any:
        if (entry := self.find(key)) is None: return default
        return entry[key]

    def merged(self, key: str = CQL_KEY) -> dict[str, Any] | None:
        """Shallow-merge every annotation in chain order.

        Returns None unless some annotation carries the discriminant ``key``.
        Later annotations win on collisions; keys only present earlier survive.
        """
        if self.find(key) is None: return None
        result: dict[str, Any] = {}
        for entry in self.entries: result.update(entry)
        return result

    def __iter__(self) -> Iterator[Mapping[str, Any]]: return iter(self.entries)

    def __len__(self) -> int: return len(self.entries)
