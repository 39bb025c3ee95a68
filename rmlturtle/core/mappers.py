from typing import Dict, List, Optional

from rdflib.namespace import RDF
from rdflib.term import Node

from rmlturtle.core.diagnostics import DiagnosticKind, Diagnostics, InvalidTermError
from rmlturtle.core.evaluator import resolve_object, resolve_predicate
from rmlturtle.core.ids import NodeFactory
from rmlturtle.core.rows import TabularSource
from rmlturtle.core.triples import GraphBuffer, Triple
from rmlturtle.log import get_logger
from rmlturtle.mapping.schema import TriplesMap

log = get_logger(__name__)


class TriplesMapExecutor:
    def __init__(self, triples_map: TriplesMap, diagnostics: Optional[Diagnostics] = None):
        self.triples_map = triples_map
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.ids = NodeFactory(triples_map.subject)
        # predicates are constants, resolve them once
        self.poms = [(resolve_predicate(pom.predicate), pom.object)
                     for pom in triples_map.predicate_object_maps]

    def _skip(self, row_index: int, what: str, exc: InvalidTermError):
        self.diagnostics.warn(DiagnosticKind.INVALID_TERM, self.triples_map.node,
                              f"row {row_index}: {exc}; {what} skipped")

    def run_row(self, row, graph: GraphBuffer, row_index: int = 0):
        try:
            subj = self.ids.subject(row)
        except InvalidTermError as exc:
            self._skip(row_index, "row", exc)
            return
        for cls in self.triples_map.classes:
            graph.add(subj, RDF.type, cls)
        for p, object_map in self.poms:
            try:
                obj = resolve_object(object_map, row)
            except InvalidTermError as exc:
                self._skip(row_index, f"{p.n3()} triple", exc)
                continue
            graph.add(subj, p, obj)

    def run(self, rows, graph: GraphBuffer) -> GraphBuffer:
        for i, row in enumerate(rows, start=1):
            self.run_row(row, graph, i)
        return graph


def generate(triples_maps: List[TriplesMap],
             bound_sources: Dict[Node, TabularSource],
             diagnostics: Optional[Diagnostics] = None) -> List[Triple]:
    """
    Emit triples in (triples-map order) x (row order) x (predicate-object-map
    order). Each triples map fills its own buffer and the buffers are
    concatenated, so maps never share an accumulator. Maps whose node is not
    in ``bound_sources`` are skipped; the caller reports why. Row values that
    cannot form a valid term drop their triple and land in ``diagnostics``.
    """
    out = GraphBuffer()
    for tm in triples_maps:
        source = bound_sources.get(tm.node)
        if source is None:
            continue
        buffer = TriplesMapExecutor(tm, diagnostics).run(source.rows, GraphBuffer())
        log.debug("%s: %d row(s) x %d predicate-object map(s) -> %d triple(s)",
                  tm.node, len(source.rows), len(tm.predicate_object_maps), len(buffer))
        out.extend(buffer)
    return out.triples
