from typing import Dict, Iterable, Optional

from rdflib import Graph

from rmlturtle.core.diagnostics import OutputError
from rmlturtle.core.triples import Triple
from rmlturtle.log import get_logger

log = get_logger(__name__)

FORMATS = {"turtle": ".ttl", "nt": ".nt"}


def output_suffix(fmt: str) -> str:
    return FORMATS.get(fmt, ".ttl")


def to_graph(triples: Iterable[Triple], namespaces: Optional[Dict[str, str]] = None) -> Graph:
    g = Graph(bind_namespaces="core")
    for prefix, ns in (namespaces or {}).items():
        g.bind(prefix, ns)
    for t in triples:
        g.add(tuple(t))
    return g


def to_ntriples(triples: Iterable[Triple]) -> str:
    # emission order kept, repeated statements written once
    seen = set()
    lines = []
    for t in triples:
        if t in seen:
            continue
        seen.add(t)
        lines.append(t.nt())
    return "".join(line + "\n" for line in lines)


def serialize(triples: Iterable[Triple], fmt: str = "turtle",
              namespaces: Optional[Dict[str, str]] = None) -> str:
    """
    Render triples as Turtle (through an rdflib Graph, with ``namespaces``
    bound as prefixes) or N-Triples (emission order). Terms rdflib refuses
    to write raise OutputError.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported output format {fmt!r}; expected one of {sorted(FORMATS)}")
    try:
        if fmt == "nt":
            return to_ntriples(triples)
        return to_graph(triples, namespaces).serialize(format="turtle")
    except Exception as exc:
        raise OutputError(f"Cannot serialize triples as {fmt}: {exc}") from exc


def write_output(triples, path, fmt: str = "turtle", namespaces=None):
    text = serialize(triples, fmt=fmt, namespaces=namespaces)
    try:
        with open(path, "w", encoding="utf-8") as out:
            out.write(text)
    except OSError as exc:
        raise OutputError(f"Cannot write {path!r}: {exc}") from exc
    log.info("Wrote %s output to %s", fmt, path)
    return path
