from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

from rdflib import Graph
from rdflib.term import Node
from rdflib.util import guess_format

from rmlturtle.core.diagnostics import QueryError
from rmlturtle.core.triples import Triple
from rmlturtle.io.ttl_writer import to_graph
from rmlturtle.log import get_logger

log = get_logger(__name__)


@dataclass
class QueryOutcome:
    """Result of a SPARQL query: SELECT rows, an ASK answer or CONSTRUCT triples."""

    kind: str
    variables: List[str] = field(default_factory=list)
    rows: List[Dict[str, Optional[Node]]] = field(default_factory=list)
    answer: Optional[bool] = None
    graph: Optional[Graph] = None


def run_query(data: Union[Graph, Iterable[Triple]], sparql: str,
              namespaces: Optional[Dict[str, str]] = None) -> QueryOutcome:
    g = data if isinstance(data, Graph) else to_graph(data, namespaces)
    try:
        result = g.query(sparql)
    except Exception as exc:
        raise QueryError(f"SPARQL query failed: {exc}") from exc

    if result.type == "ASK":
        return QueryOutcome(kind="ASK", answer=bool(result.askAnswer))
    if result.type in ("CONSTRUCT", "DESCRIBE"):
        return QueryOutcome(kind=result.type, graph=result.graph)

    variables = [str(v) for v in result.vars]
    rows = [{v: binding.get(v) for v in variables} for binding in (r.asdict() for r in result)]
    log.info("Query returned %d row(s)", len(rows))
    return QueryOutcome(kind="SELECT", variables=variables, rows=rows)


def load_graph(path: str, fmt: Optional[str] = None) -> Graph:
    g = Graph()
    try:
        g.parse(path, format=fmt or guess_format(path) or "turtle")
    except Exception as exc:
        raise QueryError(f"Cannot load RDF data from {path!r}: {exc}") from exc
    log.info("Loaded %d triple(s) from %s", len(g), path)
    return g
