import re
from urllib.parse import quote

from rdflib.term import URIRef, _is_valid_uri

from rmlturtle.core.diagnostics import InvalidTermError
from rmlturtle.core.rows import lookup_reference
from rmlturtle.mapping.schema import CONSTANT, REFERENCE, TermMap

# {field} placeholders; \{ and \} are literal braces
_PLACEHOLDER = re.compile(r"(?<!\\)\{((?:[^{}\\]|\\.)*)\}")
_ESCAPED = re.compile(r"\\([{}\\])")


def _unescape(text: str) -> str:
    return _ESCAPED.sub(r"\1", text)


def iri_safe(value: str) -> str:
    # RFC 3986 unreserved characters are kept, everything else is percent-encoded
    return quote(value, safe="")


def to_iri(value: str) -> URIRef:
    if not value or not _is_valid_uri(value):
        raise InvalidTermError(f"{value!r} is not a valid IRI")
    return URIRef(value)


def placeholders(template: str):
    return [_unescape(m.group(1)) for m in _PLACEHOLDER.finditer(template)]


def expand_template(template: str, row, encode: bool = True) -> str:
    """
    Substitute every {field} of ``template`` with the row value.
    Absent fields expand to "", so expansion never fails.
    """
    parts = []
    last = 0
    for m in _PLACEHOLDER.finditer(template):
        value = lookup_reference(row, _unescape(m.group(1)))
        parts.append(_unescape(template[last:m.start()]))
        parts.append(iri_safe(value) if encode else value)
        last = m.end()
    parts.append(_unescape(template[last:]))
    return "".join(parts)


class NodeFactory:
    """Builds subject IRIs for the rows of one triples map."""

    def __init__(self, subject_map: TermMap):
        self.subject_map = subject_map

    def subject(self, row) -> URIRef:
        sm = self.subject_map
        if sm.kind == CONSTANT:
            return URIRef(str(sm.value))
        if sm.kind == REFERENCE:
            return to_iri(lookup_reference(row, sm.value))
        return to_iri(expand_template(sm.value, row))


def resolve_subject(subject_map: TermMap, row) -> URIRef:
    return NodeFactory(subject_map).subject(row)
