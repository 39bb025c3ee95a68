import pytest
from rdflib import Graph, Literal, URIRef
from rdflib.namespace import RDF

from rmlturtle.core.diagnostics import DiagnosticKind, MappingParseError, SourceReadError
from rmlturtle.core.engine import run
from rmlturtle.core.rows import TabularSource
from rmlturtle.core.triples import Triple
from rmlturtle.io.csv_reader import parse_csv
from rmlturtle.mapping.loader import parse_mapping

EX = "http://example.com/"
SCHEMA = "http://schema.org/"


def test_end_to_end_example(prefixes):
    mapping = prefixes + """
ex:medication a rr:TriplesMap ;
    rml:logicalSource [ rml:source "medication.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/medication/{id}" ] ;
    rr:predicateObjectMap [
        rr:predicateMap [ rr:constant schema:identifier ] ;
        rr:objectMap [ rml:reference "id" ]
    ] .
"""
    result = run(mapping, {"medication.csv": "id\nATC001\n"})
    assert result.triples == [
        Triple(URIRef(EX + "medication/ATC001"), URIRef(SCHEMA + "identifier"), Literal("ATC001"))
    ]
    assert result.triples[0].nt() == (
        '<http://example.com/medication/ATC001> <http://schema.org/identifier> "ATC001" .'
    )
    assert not result.diagnostics


def test_row_times_predicate_object_maps(medication_mapping, medication_csv):
    result = run(medication_mapping, {"medication.csv": medication_csv})
    rows, poms = 3, 3
    assert len(result) == rows * poms


def test_emission_order(medication_mapping, medication_csv):
    result = run(medication_mapping, {"medication.csv": medication_csv})
    subjects = [t.s for t in result]
    assert subjects == [URIRef(EX + f"medication/ATC00{i}") for i in (1, 2, 3) for _ in range(3)]
    assert [t.p for t in result][:3] == [
        URIRef(SCHEMA + "identifier"), URIRef(EX + "date"), URIRef(EX + "room"),
    ]


def test_determinism(medication_mapping, medication_csv):
    first = run(medication_mapping, {"medication.csv": medication_csv})
    second = run(medication_mapping, {"medication.csv": medication_csv})
    assert first.triples == second.triples


def test_dotted_header_reference(medication_mapping, medication_csv):
    result = run(medication_mapping, {"medication.csv": medication_csv})
    rooms = [t.o for t in result if t.p == URIRef(EX + "room")]
    assert rooms == [Literal("101"), Literal("102"), Literal("101")]


def test_empty_field_still_emits_empty_literal(medication_mapping):
    result = run(medication_mapping, {"medication.csv": "id,begin_date,room.name\nATC009,,\n"})
    assert len(result) == 3
    date = [t.o for t in result if t.p == URIRef(EX + "date")]
    assert date == [Literal("")]


def test_duplicates_are_kept(medication_mapping):
    csv = "id,begin_date,room.name\nA,d,1\nA,d,1\n"
    result = run(medication_mapping, {"medication.csv": csv})
    assert len(result) == 6
    assert result.triples[:3] == result.triples[3:]


def test_missing_source_is_tolerated(prefixes):
    mapping = prefixes + """
ex:bound a rr:TriplesMap ;
    rml:logicalSource [ rml:source "bound.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/bound/{id}" ] ;
    rr:predicateObjectMap [ rr:predicateMap [ rr:constant ex:id ] ; rr:objectMap [ rml:reference "id" ] ] .

ex:unbound a rr:TriplesMap ;
    rml:logicalSource [ rml:source "unbound.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/unbound/{id}" ] ;
    rr:predicateObjectMap [ rr:predicateMap [ rr:constant ex:id ] ; rr:objectMap [ rml:reference "id" ] ] .
"""
    result = run(mapping, {"bound.csv": "id\n1\n2\n"})
    assert [str(t.s) for t in result] == [EX + "bound/1", EX + "bound/2"]
    missing = result.diagnostics.of_kind(DiagnosticKind.MISSING_SOURCE)
    assert len(missing) == 1
    assert missing[0].triples_map == EX + "unbound"


def test_map_without_subject_is_skipped(prefixes):
    mapping = prefixes + """
ex:noSubject a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:predicateObjectMap [ rr:predicateMap [ rr:constant ex:id ] ; rr:objectMap [ rml:reference "id" ] ] .
"""
    result = run(mapping, {"a.csv": "id\n1\n"})
    assert len(result) == 0
    diag = result.diagnostics.first(DiagnosticKind.INCOMPLETE_MAPPING)
    assert diag is not None and diag.triples_map == EX + "noSubject"


def test_incomplete_predicate_object_maps_are_skipped(prefixes):
    mapping = prefixes + """
ex:partial a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/{id}" ] ;
    rr:predicateObjectMap [ rr:objectMap [ rml:reference "id" ] ] ,
        [ rr:predicateMap [ rr:constant ex:noObject ] ] ,
        [ rr:predicateMap [ rr:constant ex:ok ] ; rr:objectMap [ rml:reference "id" ] ] .
"""
    result = run(mapping, {"a.csv": "id\n1\n2\n"})
    assert [t.p for t in result] == [URIRef(EX + "ok"), URIRef(EX + "ok")]
    assert len(result.diagnostics.of_kind(DiagnosticKind.INCOMPLETE_MAPPING)) == 2


def test_constant_object_and_shortcuts(prefixes):
    mapping = prefixes + """
ex:typed a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/med/{id}" ] ;
    rr:predicateObjectMap [
        rr:predicateMap [ rr:constant <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> ] ;
        rr:objectMap [ rr:constant ex:Medication ]
    ] , [
        rr:predicate ex:source ;
        rr:object "import"
    ] .
"""
    result = run(mapping, {"a.csv": "id\n1\n"})
    assert [t.o for t in result] == [URIRef(EX + "Medication"), Literal("import")]


def test_typed_reference_object(prefixes):
    mapping = prefixes + """
ex:dated a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/{id}" ] ;
    rr:predicateObjectMap [
        rr:predicateMap [ rr:constant ex:date ] ;
        rr:objectMap [ rml:reference "date" ; rr:datatype xsd:date ]
    ] .
"""
    result = run(mapping, {"a.csv": "id,date\n1,2024-01-05\n"})
    assert result.triples[0].o.datatype == URIRef("http://www.w3.org/2001/XMLSchema#date")


def test_non_csv_source_is_reported(prefixes):
    mapping = prefixes + """
ex:json a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.json" ; rml:referenceFormulation ql:JSONPath ] ;
    rr:subjectMap [ rr:template "http://example.com/{id}" ] .
"""
    result = run(mapping, {"a.json": "{}"})
    assert len(result) == 0
    assert result.diagnostics.first(DiagnosticKind.UNSUPPORTED_SOURCE) is not None


def test_two_maps_share_one_source(prefixes):
    mapping = prefixes + """
ex:first a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/first/{id}" ] ;
    rr:predicateObjectMap [ rr:predicateMap [ rr:constant ex:id ] ; rr:objectMap [ rml:reference "id" ] ] .

ex:second a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/second/{id}" ] ;
    rr:predicateObjectMap [ rr:predicateMap [ rr:constant ex:id ] ; rr:objectMap [ rml:reference "id" ] ] .
"""
    result = run(mapping, {"a.csv": "id\n1\n2\n"})
    assert [str(t.s) for t in result] == [
        EX + "first/1", EX + "first/2", EX + "second/1", EX + "second/2",
    ]


def test_source_key_matches_by_file_name(medication_mapping, medication_csv):
    result = run(medication_mapping, {"data/exports/medication.csv": medication_csv})
    assert len(result) == 9


def test_parsed_sources_are_accepted(medication_mapping, medication_csv):
    source = parse_csv(medication_csv)
    assert isinstance(source, TabularSource)
    result = run(medication_mapping, {"medication.csv": source})
    assert len(result) == 9


def test_mapping_as_graph_or_store(medication_mapping, medication_csv):
    g = Graph().parse(data=medication_mapping, format="turtle")
    from_graph = run(g, {"medication.csv": medication_csv})
    from_store = run(parse_mapping(medication_mapping), {"medication.csv": medication_csv})
    assert set(from_graph.triples) == set(from_store.triples)


def test_invalid_mapping_raises():
    with pytest.raises(MappingParseError):
        run("this is not turtle at all {", {})


def test_empty_bound_source_raises(medication_mapping):
    with pytest.raises(SourceReadError):
        run(medication_mapping, {"medication.csv": ""})


def test_unbound_empty_source_is_never_parsed(medication_mapping, medication_csv):
    result = run(medication_mapping, {"medication.csv": medication_csv, "other.csv": ""})
    assert len(result) == 9


def test_output_namespaces_come_from_mapping(medication_mapping, medication_csv):
    result = run(medication_mapping, {"medication.csv": medication_csv})
    assert result.namespaces["ex"] == EX
    assert "rr" not in result.namespaces


def test_invalid_language_tag_skips_only_that_map(prefixes):
    mapping = prefixes + """
ex:good a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/good/{id}" ] ;
    rr:predicateObjectMap [ rr:predicateMap [ rr:constant ex:label ] ;
        rr:objectMap [ rml:reference "label" ; rr:language "en" ] ] .

ex:bad a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/bad/{id}" ] ;
    rr:predicateObjectMap [ rr:predicateMap [ rr:constant ex:label ] ;
        rr:objectMap [ rml:reference "label" ; rr:language "en us" ] ] .
"""
    result = run(mapping, {"a.csv": "id,label\n1,Ward\n"})
    assert result.triples == [
        Triple(URIRef(EX + "good/1"), URIRef(EX + "label"), Literal("Ward", lang="en"))
    ]
    diag = result.diagnostics.first(DiagnosticKind.INCOMPLETE_MAPPING)
    assert diag.triples_map == EX + "bad"


def test_value_that_is_not_an_iri_is_reported(prefixes):
    mapping = prefixes + """
ex:rooms a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:subjectMap [ rml:reference "id" ] ;
    rr:predicateObjectMap [ rr:predicateMap [ rr:constant ex:room ] ;
        rr:objectMap [ rml:reference "room" ; rr:termType rr:IRI ] ] ,
      [ rr:predicateMap [ rr:constant ex:name ] ; rr:objectMap [ rml:reference "room" ] ] .
"""
    csv = "id,room\nhttp://example.com/x,Room 1\nhttp://example.com/y,http://example.com/room/2\nnot an iri,3\n"
    result = run(mapping, {"a.csv": csv})
    assert result.triples == [
        Triple(URIRef(EX + "x"), URIRef(EX + "name"), Literal("Room 1")),
        Triple(URIRef(EX + "y"), URIRef(EX + "room"), URIRef(EX + "room/2")),
        Triple(URIRef(EX + "y"), URIRef(EX + "name"), Literal("http://example.com/room/2")),
    ]
    assert len(result.diagnostics.of_kind(DiagnosticKind.INVALID_TERM)) == 2


def test_subject_classes(prefixes):
    mapping = prefixes + """
ex:typed a rr:TriplesMap ;
    rml:logicalSource [ rml:source "a.csv" ] ;
    rr:subjectMap [ rr:template "http://example.com/med/{id}" ; rr:class ex:Medication ] ;
    rr:predicateObjectMap [ rr:predicate ex:id ; rr:objectMap [ rml:reference "id" ] ] .
"""
    result = run(mapping, {"a.csv": "id\n1\n"})
    assert [t.o for t in result] == [URIRef(EX + "Medication"), Literal("1")]


def test_file_name_shared_by_two_sources_binds_neither(medication_mapping, medication_csv):
    result = run(medication_mapping, {"a/medication.csv": medication_csv,
                                      "b/medication.csv": medication_csv})
    assert len(result) == 0
    assert result.diagnostics.first(DiagnosticKind.MISSING_SOURCE) is not None


def test_yarrrml_mapping(medication_yarrrml, medication_export_csv):
    result = run(medication_yarrrml, {"medication.csv": medication_export_csv},
                 mapping_format="yarrrml")
    subject = URIRef(EX + "medication_ATC001")
    assert len(result) == 8
    assert Triple(subject, URIRef(SCHEMA + "identifier"), Literal("ATC001")) in result.triples
    assert Triple(subject, RDF.type, URIRef(EX + "Medication")) in result.triples
    assert Triple(subject, URIRef(EX + "room"), Literal("101")) in result.triples
    assert result.namespaces["schema"] == SCHEMA


def test_invalid_yarrrml_raises():
    with pytest.raises(MappingParseError):
        run("mappings: [unclosed", {}, mapping_format="yarrrml")
    with pytest.raises(MappingParseError):
        run("just: a mapping without mappings\n", {}, mapping_format="yarrrml")
