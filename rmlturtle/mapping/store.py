from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from rdflib import Graph
from rdflib.term import Node

from rmlturtle.mapping import vocab


class MappingStore:
    """
    Read-only index over the descriptive triples of a mapping.

    Built once per descriptor load:
      (subject, predicate) -> [object, ...]   in source order
      predicate            -> [(subject, object), ...]

    "First object" is the first match in source order. It is deterministic
    for a given input, but callers must not give meaning to the order of
    duplicates.
    """

    def __init__(self):
        self._sp: Dict[Tuple[Node, Node], List[Node]] = {}
        self._by_predicate: Dict[Node, List[Tuple[Node, Node]]] = {}
        self._size = 0
        self.namespaces: Dict[str, str] = {}

    @classmethod
    def load(cls, triples: Iterable[Tuple[Node, Node, Node]],
             namespaces: Optional[Dict[str, str]] = None) -> "MappingStore":
        store = cls()
        if namespaces is not None:
            store.namespaces = dict(namespaces)
        elif isinstance(triples, Graph):
            store.namespaces = {p: str(ns) for p, ns in triples.namespaces() if p}
        for s, p, o in triples:
            store._add(s, p, o)
        return store

    def _add(self, s: Node, p: Node, o: Node) -> None:
        objs = self._sp.setdefault((s, p), [])
        if o in objs:
            return
        objs.append(o)
        self._by_predicate.setdefault(p, []).append((s, o))
        self._size += 1

    def objects(self, subject: Node, predicate: Node) -> List[Node]:
        return list(self._sp.get((subject, predicate), ()))

    def first_object(self, subject: Node, predicate: Node) -> Optional[Node]:
        objs = self._sp.get((subject, predicate))
        return objs[0] if objs else None

    def subjects_with(self, predicate: Node) -> List[Node]:
        return _unique(s for s, _ in self._by_predicate.get(predicate, ()))

    def triples_maps_of_type(self, type_iri: Node) -> List[Node]:
        return _unique(s for s, o in self._by_predicate.get(vocab.TYPE, ()) if o == type_iri)

    def triples_maps(self) -> List[Node]:
        """Typed rr:TriplesMap nodes, then untyped nodes carrying a logical source."""
        typed = self.triples_maps_of_type(vocab.TRIPLES_MAP)
        return _unique(typed + self.subjects_with(vocab.LOGICAL_SOURCE))

    def output_namespaces(self) -> Dict[str, str]:
        return {p: ns for p, ns in self.namespaces.items() if ns not in vocab.MAPPING_PREFIXES}

    def __len__(self) -> int:
        return self._size


def _unique(items: Iterable[Node]) -> List[Node]:
    out: List[Node] = []
    seen = set()
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out
