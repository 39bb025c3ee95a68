from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from rdflib import Graph
from rdflib.term import Literal, Node, URIRef, _is_valid_langtag

from rmlturtle.core.diagnostics import (
    DiagnosticKind,
    Diagnostics,
    MappingParseError,
)
from rmlturtle.log import get_logger
from rmlturtle.mapping import vocab
from rmlturtle.mapping.schema import (
    CONSTANT,
    REFERENCE,
    TEMPLATE,
    Mapping,
    PredicateObjectMap,
    TermMap,
    TriplesMap,
)
from rmlturtle.mapping.store import MappingStore
from rmlturtle.mapping.yarrrml import translate_yarrrml

log = get_logger(__name__)

_SUFFIX_FORMATS = {".ttl": "turtle", ".nt": "nt", ".n3": "n3", ".yml": "yarrrml", ".yaml": "yarrrml"}


# --- parsing -----------------------------------------------------------------
class _RecordingGraph(Graph):
    """Graph that keeps the order in which the parser emitted triples."""

    def __init__(self):
        super().__init__(bind_namespaces="core")
        self.emitted = []

    def add(self, triple):
        self.emitted.append(triple)
        return super().add(triple)


def parse_mapping(text: str, fmt: str = "turtle") -> MappingStore:
    """
    Parse an RML descriptor into an indexed MappingStore, in document order.
    ``fmt="yarrrml"`` compiles YARRRML to RML Turtle first.
    """
    if fmt == "yarrrml":
        text, fmt = translate_yarrrml(text), "turtle"
    g = _RecordingGraph()
    try:
        g.parse(data=text, format=fmt)
    except Exception as exc:
        raise MappingParseError(f"Mapping is not valid {fmt}: {exc}") from exc
    # parsers that bypass Graph.add (n3) leave nothing recorded
    triples = g.emitted if len(g.emitted) >= len(g) else list(g)
    namespaces = {p: str(ns) for p, ns in g.namespaces() if p}
    store = MappingStore.load(triples, namespaces=namespaces)
    log.debug("Parsed mapping: %d descriptive triples", len(store))
    return store


def load_mapping(mapping_path: str, encoding: str = "utf-8",
                 fmt: Optional[str] = None) -> MappingStore:
    """
    Read a mapping file from disk. The RDF syntax is taken from ``fmt`` or
    guessed from the file suffix (.ttl, .nt, .n3, .yml/.yaml for YARRRML),
    defaulting to Turtle.
    """
    path = Path(mapping_path)
    try:
        text = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise MappingParseError(f"Cannot read mapping {mapping_path!r}: {exc}") from exc
    fmt = fmt or _SUFFIX_FORMATS.get(path.suffix.lower(), "turtle")
    return parse_mapping(text, fmt=fmt)


# --- compilation -------------------------------------------------------------
def _term_map(store: MappingStore, node: Node) -> Optional[TermMap]:
    term_type = store.first_object(node, vocab.TERM_TYPE)
    datatype = store.first_object(node, vocab.DATATYPE)
    language = store.first_object(node, vocab.LANGUAGE)
    extras = dict(
        term_type=term_type if isinstance(term_type, URIRef) else None,
        datatype=datatype if isinstance(datatype, URIRef) else None,
        language=str(language) if language is not None else None,
    )

    constant = store.first_object(node, vocab.CONSTANT)
    if constant is not None:
        return TermMap(CONSTANT, constant, **extras)
    template = store.first_object(node, vocab.TEMPLATE)
    if template is not None:
        return TermMap(TEMPLATE, str(template), **extras)
    reference = store.first_object(node, vocab.REFERENCE)
    if reference is not None:
        return TermMap(REFERENCE, str(reference), **extras)
    return None


def _subject_map(store: MappingStore, tm: Node) -> Optional[TermMap]:
    sm = store.first_object(tm, vocab.SUBJECT_MAP)
    if sm is not None:
        return _term_map(store, sm)
    shortcut = store.first_object(tm, vocab.SUBJECT)
    return TermMap(CONSTANT, shortcut) if shortcut is not None else None


def _predicate_map(store: MappingStore, pom: Node) -> Optional[TermMap]:
    pm = store.first_object(pom, vocab.PREDICATE_MAP)
    if pm is not None:
        return _term_map(store, pm)
    shortcut = store.first_object(pom, vocab.PREDICATE)
    return TermMap(CONSTANT, shortcut) if shortcut is not None else None


def _object_map(store: MappingStore, pom: Node) -> Optional[TermMap]:
    om = store.first_object(pom, vocab.OBJECT_MAP)
    if om is not None:
        return _term_map(store, om)
    shortcut = store.first_object(pom, vocab.OBJECT)
    return TermMap(CONSTANT, shortcut) if shortcut is not None else None


def _compile_pom(store: MappingStore, tm: Node, pom: Node,
                 diagnostics: Diagnostics) -> Optional[PredicateObjectMap]:
    pred = _predicate_map(store, pom)
    if pred is None or pred.kind != CONSTANT or not isinstance(pred.value, URIRef):
        diagnostics.warn(DiagnosticKind.INCOMPLETE_MAPPING, tm,
                         f"predicate-object map {pom} has no constant predicate IRI; skipped")
        return None

    obj = _object_map(store, pom)
    if obj is None:
        diagnostics.warn(DiagnosticKind.INCOMPLETE_MAPPING, tm,
                         f"predicate-object map {pom} has no object reference, template or constant; skipped")
        return None
    if obj.datatype is not None and obj.language is not None:
        diagnostics.warn(DiagnosticKind.INCOMPLETE_MAPPING, tm,
                         f"object map of {pom} declares both a datatype and a language; skipped")
        return None
    if obj.language is not None and not _is_valid_langtag(obj.language):
        diagnostics.warn(DiagnosticKind.INCOMPLETE_MAPPING, tm,
                         f"object map of {pom} has invalid language tag {obj.language!r}; skipped")
        return None

    return PredicateObjectMap(node=pom, predicate=pred, object=obj)


def _compile_triples_map(store: MappingStore, tm: Node,
                         diagnostics: Diagnostics) -> Optional[TriplesMap]:
    subject = _subject_map(store, tm)
    if subject is None:
        diagnostics.warn(DiagnosticKind.INCOMPLETE_MAPPING, tm,
                         "no subject template; triples map skipped")
        return None
    if subject.term_type in (vocab.BLANK_NODE, vocab.LITERAL):
        diagnostics.warn(DiagnosticKind.INCOMPLETE_MAPPING, tm,
                         f"subject term type {subject.term_type} is not supported; triples map skipped")
        return None

    source_key = None
    formulation = None
    ls = store.first_object(tm, vocab.LOGICAL_SOURCE)
    if ls is not None:
        src = store.first_object(ls, vocab.SOURCE)
        if isinstance(src, (Literal, URIRef)):
            source_key = str(src)
        rf = store.first_object(ls, vocab.REFERENCE_FORMULATION)
        formulation = rf if isinstance(rf, URIRef) else None

    sm = store.first_object(tm, vocab.SUBJECT_MAP)
    classes = [c for c in store.objects(sm, vocab.CLASS) if isinstance(c, URIRef)] if sm is not None else []

    poms = []
    for pom in store.objects(tm, vocab.PREDICATE_OBJECT_MAP):
        compiled = _compile_pom(store, tm, pom, diagnostics)
        if compiled is not None:
            poms.append(compiled)

    return TriplesMap(
        node=tm,
        source_key=source_key,
        reference_formulation=formulation,
        subject=subject,
        predicate_object_maps=poms,
        classes=classes,
    )


def compile_mapping(store: MappingStore, diagnostics: Diagnostics) -> Mapping:
    """
    Turn the descriptive triples into typed TriplesMap objects, in
    triples-map order. Incomplete maps and predicate-object maps are
    reported on ``diagnostics`` and left out.
    """
    triples_maps = []
    for tm in store.triples_maps():
        compiled = _compile_triples_map(store, tm, diagnostics)
        if compiled is not None:
            triples_maps.append(compiled)
    log.debug("Compiled %d triples map(s)", len(triples_maps))
    return Mapping(namespaces=store.output_namespaces(), triples_maps=triples_maps)


def source_keys(store: MappingStore) -> List[str]:
    """Every distinct rml:source string of the mapping, in triples-map order."""
    keys: List[str] = []
    for tm in store.triples_maps():
        ls = store.first_object(tm, vocab.LOGICAL_SOURCE)
        src = store.first_object(ls, vocab.SOURCE) if ls is not None else None
        if src is not None and str(src) not in keys:
            keys.append(str(src))
    return keys
