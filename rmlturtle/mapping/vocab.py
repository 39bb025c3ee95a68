from rdflib import URIRef
from rdflib.namespace import RDF

RR = "http://www.w3.org/ns/r2rml#"

RML = "http://semweb.mmlab.be/ns/rml#"

QL = "http://semweb.mmlab.be/ns/ql#"

TYPE = RDF.type

TRIPLES_MAP = URIRef(RR + "TriplesMap")

LOGICAL_SOURCE = URIRef(RML + "logicalSource")

SOURCE = URIRef(RML + "source")

REFERENCE_FORMULATION = URIRef(RML + "referenceFormulation")

CSV = URIRef(QL + "CSV")

SUBJECT_MAP = URIRef(RR + "subjectMap")

SUBJECT = URIRef(RR + "subject")

PREDICATE_OBJECT_MAP = URIRef(RR + "predicateObjectMap")

PREDICATE_MAP = URIRef(RR + "predicateMap")

PREDICATE = URIRef(RR + "predicate")

OBJECT_MAP = URIRef(RR + "objectMap")

OBJECT = URIRef(RR + "object")

CONSTANT = URIRef(RR + "constant")

CLASS = URIRef(RR + "class")

TEMPLATE = URIRef(RR + "template")

REFERENCE = URIRef(RML + "reference")

TERM_TYPE = URIRef(RR + "termType")

DATATYPE = URIRef(RR + "datatype")

LANGUAGE = URIRef(RR + "language")

IRI = URIRef(RR + "IRI")

LITERAL = URIRef(RR + "Literal")

BLANK_NODE = URIRef(RR + "BlankNode")

# prefixes that describe the mapping itself and are not carried into output
MAPPING_PREFIXES = {RR, RML, QL, "http://semweb.mmlab.be/ns/fnml#", "https://w3id.org/function/ontology#"}
