from __future__ import annotations

from dataclasses import dataclass, field
from glob import glob
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Union

from rdflib import Graph

from rmlturtle.core.diagnostics import DiagnosticKind, Diagnostics, MissingSourceError
from rmlturtle.core.mappers import generate
from rmlturtle.core.sources import SourceTable, SourceValue, is_supported, resolve
from rmlturtle.core.triples import Triple
from rmlturtle.io.csv_reader import CsvOptions, read_source_file
from rmlturtle.io.ttl_writer import output_suffix, write_output
from rmlturtle.log import get_logger
from rmlturtle.mapping.loader import compile_mapping, load_mapping, parse_mapping, source_keys
from rmlturtle.mapping.store import MappingStore

log = get_logger(__name__)

MappingInput = Union[str, Graph, MappingStore]


@dataclass
class MappingResult:
    triples: List[Triple]
    diagnostics: Diagnostics
    namespaces: Dict[str, str] = field(default_factory=dict)

    def __iter__(self) -> Iterator[Triple]:
        return iter(self.triples)

    def __len__(self) -> int:
        return len(self.triples)


def _store(mapping: MappingInput, mapping_format: str) -> MappingStore:
    if isinstance(mapping, MappingStore):
        return mapping
    if isinstance(mapping, Graph):
        return MappingStore.load(mapping)
    return parse_mapping(mapping, fmt=mapping_format)


def run(mapping: MappingInput,
        sources: Union[Mapping[str, SourceValue], SourceTable],
        options: Optional[CsvOptions] = None,
        mapping_format: str = "turtle") -> MappingResult:
    """
    Interpret an RML mapping over tabular sources.

    ``mapping`` is RDF text (Turtle unless ``mapping_format`` says
    otherwise), an rdflib Graph, or an already loaded MappingStore.
    ``sources`` maps each ``rml:source`` key to raw delimited text or a
    parsed TabularSource.

    MappingParseError and SourceReadError propagate. Triples maps without a
    bound source, or with incomplete term maps, are reported in the
    result's diagnostics and the rest of the mapping still runs.
    """
    store = _store(mapping, mapping_format)
    diagnostics = Diagnostics()
    compiled = compile_mapping(store, diagnostics)
    table = sources if isinstance(sources, SourceTable) else SourceTable(sources, options)

    bound = {}
    for tm in compiled.triples_maps:
        if not is_supported(tm):
            diagnostics.warn(DiagnosticKind.UNSUPPORTED_SOURCE, tm.node,
                             f"reference formulation {tm.reference_formulation} is not CSV; skipped")
            continue
        try:
            bound[tm.node] = resolve(tm, table)
        except MissingSourceError as exc:
            diagnostics.warn(DiagnosticKind.MISSING_SOURCE, tm.node, f"{exc}; skipped")

    triples = generate(compiled.triples_maps, bound, diagnostics)
    log.info("Generated %d triple(s) from %d of %d triples map(s)",
             len(triples), len(bound), len(compiled.triples_maps))
    return MappingResult(triples=triples, diagnostics=diagnostics,
                         namespaces=compiled.namespaces)


# --- file-level conversion -----------------------------------------------------
def _read_sources(paths: Sequence[str], options: CsvOptions,
                  bindings: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    sources = {p: read_source_file(p, options) for p in paths}
    for key, path in (bindings or {}).items():
        sources[key] = read_source_file(path, options)
    return sources


def run_convert(csv_paths: Sequence[str], mapping_path: str, out_path: str,
                csv_encoding=None, csv_delimiter=None, trim=True,
                mapping_encoding="utf-8", mapping_format=None,
                out_format="turtle", bindings=None) -> MappingResult:
    """
    Read a mapping and its CSV sources from disk, run it and write the
    triples to ``out_path``. Each CSV binds the ``rml:source`` equal to its
    path or file name; ``bindings`` adds explicit key -> path pairs.
    """
    options = CsvOptions(delimiter=csv_delimiter, encoding=csv_encoding, trim=trim)
    store = load_mapping(mapping_path, encoding=mapping_encoding, fmt=mapping_format)
    sources = _read_sources(csv_paths, options, bindings)
    result = run(store, sources, options)
    write_output(result.triples, out_path, fmt=out_format, namespaces=result.namespaces)
    return result


def run_convert_batch(input_glob: str, mapping_path: str, out_dir: str,
                      csv_encoding=None, csv_delimiter=None, trim=True,
                      mapping_encoding="utf-8", mapping_format=None,
                      out_format="turtle") -> Dict[str, MappingResult]:
    """
    Apply one mapping to every CSV matched by ``input_glob``. Each file is
    bound to every ``rml:source`` of the mapping and written to
    ``out_dir/<stem>.ttl`` (or ``.nt``).
    """
    options = CsvOptions(delimiter=csv_delimiter, encoding=csv_encoding, trim=trim)
    store = load_mapping(mapping_path, encoding=mapping_encoding, fmt=mapping_format)
    keys = source_keys(store)

    outd = Path(out_dir)
    outd.mkdir(parents=True, exist_ok=True)
    results = {}
    for fp in sorted(glob(input_glob)):
        text = read_source_file(fp, options)
        result = run(store, {key: text for key in keys}, options)
        out = outd / (Path(fp).stem + output_suffix(out_format))
        write_output(result.triples, str(out), fmt=out_format, namespaces=result.namespaces)
        results[fp] = result
    log.info("Converted %d file(s) into %s", len(results), outd)
    return results
