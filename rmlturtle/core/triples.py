from dataclasses import dataclass
from typing import Iterator, List

from rdflib.plugins.serializers.nt import _nt_row
from rdflib.term import Node


@dataclass(frozen=True)
class Triple:
    s: Node
    p: Node
    o: Node

    def __iter__(self) -> Iterator[Node]:
        return iter((self.s, self.p, self.o))

    def nt(self) -> str:
        """The triple as one N-Triples line, without the trailing newline."""
        return _nt_row((self.s, self.p, self.o)).rstrip("\n")


class GraphBuffer:
    """Append-only, order-preserving triple accumulator (no deduplication)."""

    def __init__(self):
        self.triples: List[Triple] = []

    def add(self, s, p, o):
        self.triples.append(Triple(s, p, o))

    def extend(self, other: "GraphBuffer"):
        self.triples.extend(other.triples)

    def __len__(self):
        return len(self.triples)

    def __iter__(self):
        return iter(self.triples)
