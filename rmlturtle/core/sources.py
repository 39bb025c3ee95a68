from __future__ import annotations

from pathlib import PurePath
from typing import Dict, Mapping, Optional, Union

from rmlturtle.core.diagnostics import MissingSourceError
from rmlturtle.core.rows import TabularSource
from rmlturtle.io.csv_reader import CsvOptions, parse_csv
from rmlturtle.log import get_logger
from rmlturtle.mapping import vocab
from rmlturtle.mapping.schema import TriplesMap

log = get_logger(__name__)

SourceValue = Union[str, TabularSource]


class SourceTable:
    """
    Caller-supplied sources keyed by the ``rml:source`` string. Raw text is
    parsed on first use and cached, so maps sharing a source parse it once.
    A key also matches by file name, so ``data/medication.csv`` binds a
    mapping that says ``medication.csv`` and the other way round. A file name
    shared by several supplied keys binds none of them.
    """

    def __init__(self, sources: Mapping[str, SourceValue],
                 options: Optional[CsvOptions] = None):
        self._raw = dict(sources)
        self._parsed: Dict[str, TabularSource] = {}
        self.options = options or CsvOptions()

    def _find_key(self, key: str) -> Optional[str]:
        if key in self._raw:
            return key
        name = PurePath(key).name
        matches = [c for c in self._raw if PurePath(c).name == name]
        if len(matches) > 1:
            log.warning("Source %r matches %s by file name; not bound", key, matches)
            return None
        return matches[0] if matches else None

    def __contains__(self, key: str) -> bool:
        return self._find_key(key) is not None

    def get(self, key: str) -> Optional[TabularSource]:
        found = self._find_key(key)
        if found is None:
            return None
        if found not in self._parsed:
            value = self._raw[found]
            if isinstance(value, TabularSource):
                self._parsed[found] = value
            else:
                self._parsed[found] = parse_csv(value, self.options)
                log.debug("Parsed source %s: %d row(s)", found, len(self._parsed[found]))
        return self._parsed[found]


def is_supported(triples_map: TriplesMap) -> bool:
    rf = triples_map.reference_formulation
    return rf is None or rf == vocab.CSV


def resolve(triples_map: TriplesMap, sources: SourceTable) -> TabularSource:
    """
    Tabular source bound to ``triples_map``. Raises MissingSourceError when
    the map has no rml:source or the key is not among ``sources``.
    """
    key = triples_map.source_key
    if not key:
        raise MissingSourceError(f"{triples_map.node} has no logical source")
    source = sources.get(key)
    if source is None:
        raise MissingSourceError(f"source {key!r} is not among the supplied sources")
    return source
