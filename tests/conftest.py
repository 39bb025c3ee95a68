import pytest

PREFIXES = """
@prefix rr: <http://www.w3.org/ns/r2rml#> .
@prefix rml: <http://semweb.mmlab.be/ns/rml#> .
@prefix ql: <http://semweb.mmlab.be/ns/ql#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
@prefix schema: <http://schema.org/> .
@prefix ex: <http://example.com/> .
"""

MEDICATION_MAPPING = PREFIXES + """
ex:medicationMap a rr:TriplesMap ;
    rml:logicalSource [
        rml:source "medication.csv" ;
        rml:referenceFormulation ql:CSV
    ] ;
    rr:subjectMap [ rr:template "http://example.com/medication/{id}" ] ;
    rr:predicateObjectMap [
        rr:predicateMap [ rr:constant schema:identifier ] ;
        rr:objectMap [ rml:reference "id" ]
    ] , [
        rr:predicateMap [ rr:constant ex:date ] ;
        rr:objectMap [ rml:reference "begin_date" ]
    ] , [
        rr:predicateMap [ rr:constant ex:room ] ;
        rr:objectMap [ rml:reference "room.name" ]
    ] .
"""

MEDICATION_CSV = """id,begin_date,room.name
ATC001,2024-01-05,101
ATC002,2024-02-11,102
ATC003,2024-03-20,101
"""


@pytest.fixture
def medication_mapping():
    return MEDICATION_MAPPING


@pytest.fixture
def medication_csv():
    return MEDICATION_CSV


@pytest.fixture
def prefixes():
    return PREFIXES


MEDICATION_YARRRML = """
prefixes:
  ex: http://example.com/
  schema: http://schema.org/
  xsd: http://www.w3.org/2001/XMLSchema#
mappings:
  medication:
    sources:
      - ['medication.csv~csv']
    s: ex:medication_$(artikel___ATC___label)
    po:
      - [a, ex:Medication]
      - [schema:identifier, $(artikel___ATC___label)]
      - [ex:date, $(begin_date)]
      - [ex:room, $(room)]
"""

MEDICATION_EXPORT_CSV = """artikel___ATC___label,begin_date,room
ATC001,2024-01-05,101
ATC002,2024-02-11,102
"""


@pytest.fixture
def medication_yarrrml():
    return MEDICATION_YARRRML


@pytest.fixture
def medication_export_csv():
    return MEDICATION_EXPORT_CSV
