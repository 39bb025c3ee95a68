from __future__ import annotations

from rdflib.term import BNode, Literal, Node, URIRef

from rmlturtle.core.ids import expand_template, to_iri
from rmlturtle.core.rows import lookup_reference
from rmlturtle.mapping import vocab
from rmlturtle.mapping.schema import CONSTANT, REFERENCE, TEMPLATE, TermMap


# --- value evaluators --------------------------------------------------------
def _as_term(value: str, term_map: TermMap, default_type: URIRef) -> Node:
    term_type = term_map.term_type or default_type
    if term_type == vocab.IRI:
        return to_iri(value)
    if term_type == vocab.BLANK_NODE:
        return BNode(value) if value else BNode()
    if term_map.language:
        return Literal(value, lang=term_map.language)
    return Literal(value, datatype=term_map.datatype)


def resolve_predicate(predicate_map: TermMap) -> URIRef:
    if predicate_map.kind != CONSTANT or not isinstance(predicate_map.value, URIRef):
        raise ValueError(f"Predicate map must be a constant IRI, got {predicate_map!r}")
    return predicate_map.value


def resolve_object(object_map: TermMap, row) -> Node:
    """
    Object term for ``row``.

    reference: the field value as a plain literal ("" when the field is
               absent; the triple is still produced)
    constant:  the constant term as written in the mapping
    template:  an IRI built from the expanded template
    rr:termType, rr:datatype and rr:language override the defaults.
    """
    if object_map.kind == CONSTANT:
        return object_map.value

    if object_map.kind == REFERENCE:
        value = lookup_reference(row, object_map.value)
        return _as_term(value, object_map, default_type=vocab.LITERAL)

    if object_map.kind == TEMPLATE:
        is_literal = object_map.term_type == vocab.LITERAL or (
            object_map.term_type is None
            and (object_map.datatype is not None or object_map.language is not None)
        )
        value = expand_template(object_map.value, row, encode=not is_literal)
        return _as_term(value, object_map,
                        default_type=vocab.LITERAL if is_literal else vocab.IRI)

    raise ValueError(f"Unknown term map kind {object_map.kind!r}")
