"""Error taxonomy and the per-run diagnostics collector.

Fatal conditions are exceptions and propagate to the caller of ``run``.
Recoverable ones (a triples map without a bound source, an incomplete
predicate-object map) are recorded here, logged, and processing continues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from rmlturtle.log import get_logger

log = get_logger(__name__)


class RmlTurtleError(Exception):
    """Base class for every error raised by rmlturtle."""


class MappingParseError(RmlTurtleError):
    """The mapping descriptor is not syntactically valid RDF."""


class SourceReadError(RmlTurtleError):
    """A tabular source cannot be read or parsed at all."""


class MissingSourceError(RmlTurtleError, LookupError):
    """A triples map has no tabular source bound to it."""


class QueryError(RmlTurtleError):
    """A SPARQL query could not be parsed or evaluated."""


class OutputError(RmlTurtleError):
    """Triples could not be serialized or written."""


class InvalidTermError(RmlTurtleError, ValueError):
    """A row value cannot form the RDF term its term map asks for."""


class DiagnosticKind(str, Enum):
    MISSING_SOURCE = "missing_source"
    INCOMPLETE_MAPPING = "incomplete_mapping"
    UNSUPPORTED_SOURCE = "unsupported_source"
    INVALID_TERM = "invalid_term"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    triples_map: str
    message: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.triples_map}: {self.message}"


@dataclass
class Diagnostics:
    """Collects recoverable problems found while interpreting a mapping."""

    entries: List[Diagnostic] = field(default_factory=list)

    def warn(self, kind: DiagnosticKind, triples_map, message: str) -> Diagnostic:
        diag = Diagnostic(kind=kind, triples_map=str(triples_map), message=message)
        self.entries.append(diag)
        log.warning("%s", diag)
        return diag

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.entries if d.kind == kind]

    def first(self, kind: DiagnosticKind) -> Optional[Diagnostic]:
        found = self.of_kind(kind)
        return found[0] if found else None

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)
