from typing import Dict, List, Optional
from dataclasses import dataclass, field

from rdflib.term import Node, URIRef

CONSTANT = "constant"
TEMPLATE = "template"
REFERENCE = "reference"

@dataclass(frozen=True)
class TermMap:
    kind: str                         # constant | template | reference
    value: Node                       # the rr:constant term, or the template / reference string
    term_type: Optional[URIRef] = None
    datatype: Optional[URIRef] = None
    language: Optional[str] = None

@dataclass(frozen=True)
class PredicateObjectMap:
    node: Node
    predicate: TermMap
    object: TermMap

@dataclass
class TriplesMap:
    node: Node
    source_key: Optional[str]
    reference_formulation: Optional[URIRef]
    subject: Optional[TermMap]
    predicate_object_maps: List[PredicateObjectMap] = field(default_factory=list)
    classes: List[URIRef] = field(default_factory=list)   # rr:class of the subject map

@dataclass
class Mapping:
    namespaces: Dict[str, str]
    triples_maps: List[TriplesMap]

