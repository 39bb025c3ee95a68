from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from charset_normalizer import from_bytes

from rmlturtle.core.diagnostics import SourceReadError
from rmlturtle.core.rows import Row, TabularSource
from rmlturtle.log import get_logger

log = get_logger(__name__)

DELIMITERS = [",", ";", "\t", "|"]
FALLBACK_ENCODINGS = ("utf-8", "utf-8-sig", "cp1252", "latin-1")


@dataclass(frozen=True)
class CsvOptions:
    delimiter: Optional[str] = None   # sniffed when None
    encoding: Optional[str] = None    # detected when None
    trim: bool = True


# --- delimiter sniffing --------------------------------------------------------
def sniff_delimiter(sample: str) -> str:
    # Try csv.Sniffer first
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters="".join(DELIMITERS))
        return dialect.delimiter
    except csv.Error:
        pass
    # Simple heuristic: pick the delimiter with the most hits in the header
    header = sample.splitlines()[0] if sample else ""
    counts = {d: header.count(d) for d in DELIMITERS}
    best = max(counts, key=counts.get)
    return best if counts[best] > 0 else ","


# --- text -> rows -------------------------------------------------------------
def _fit(fields: List[str], width: int) -> List[str]:
    # ragged rows: pad missing trailing fields, drop extras
    if len(fields) < width:
        return fields + [""] * (width - len(fields))
    return fields[:width]


def parse_csv(text: str, options: Optional[CsvOptions] = None) -> TabularSource:
    """
    Parse delimited text into headers and rows.

    The first non-blank line holds the headers. Quoted fields may contain
    the delimiter. Rows with the wrong number of fields are kept: missing
    fields become "" and extra ones are ignored. Raises SourceReadError
    when there is no header line at all.
    """
    options = options or CsvOptions()
    if text.startswith("\ufeff"):
        text = text[1:]
    if not text.strip():
        raise SourceReadError("Tabular source is empty; a header line is required")

    delimiter = options.delimiter or sniff_delimiter(text[:65536])
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)

    def clean(fields):
        return [f.strip() for f in fields] if options.trim else list(fields)

    headers: Optional[List[str]] = None
    rows: List[Row] = []
    try:
        for fields in reader:
            if not any(f.strip() for f in fields):
                continue
            if headers is None:
                headers = clean(fields)
                continue
            values = _fit(clean(fields), len(headers))
            rows.append(Row(dict(zip(headers, values))))
    except csv.Error as exc:
        raise SourceReadError(f"Malformed delimited text: {exc}") from exc

    if headers is None:
        raise SourceReadError("Tabular source has no header line")
    log.debug("Parsed %d row(s) with headers %s", len(rows), headers)
    return TabularSource(headers=headers, rows=rows)


# --- file reading with encoding robustness ------------------------------------------
def detect_encoding(raw: bytes) -> Optional[str]:
    best = from_bytes(raw).best()
    if best and best.encoding:
        return best.encoding
    return None


def decode(raw: bytes, encoding: Optional[str] = None) -> str:
    """Decode source bytes: explicit encoding, then detected, then fallbacks."""
    if encoding:
        try:
            return raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            raise SourceReadError(f"Cannot decode source as {encoding}: {exc}") from exc

    candidates = []
    detected = detect_encoding(raw)
    if detected:
        candidates.append(detected)
    candidates.extend(e for e in FALLBACK_ENCODINGS if e not in candidates)

    for enc in candidates:
        try:
            return raw.decode(enc)
        except (UnicodeDecodeError, LookupError):
            continue
    raise SourceReadError(f"Cannot decode source with any of {candidates}")


def read_source_file(path: str, options: Optional[CsvOptions] = None) -> str:
    options = options or CsvOptions()
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise SourceReadError(f"Cannot read source {path!r}: {exc}") from exc
    text = decode(raw, options.encoding)
    log.info("Read source %s (%d bytes)", path, len(raw))
    return text


def load_csv(path: str, options: Optional[CsvOptions] = None) -> TabularSource:
    return parse_csv(read_source_file(path, options), options)
