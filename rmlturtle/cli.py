import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from rmlturtle.core.diagnostics import RmlTurtleError
from rmlturtle.core.engine import run_convert, run_convert_batch
from rmlturtle.io.query import load_graph, run_query
from rmlturtle.log import set_level

console = Console()
stderr_console = Console(stderr=True)


def _binding(text):
    key, sep, path = text.partition("=")
    if not sep or not key or not path:
        raise argparse.ArgumentTypeError(f"expected KEY=PATH, got {text!r}")
    return key, path


def _add_conversion_options(sp):
    sp.add_argument("--csv-encoding", default=None,
                    help="e.g., utf-8, utf-8-sig, cp1252, latin-1 (auto if omitted)")
    sp.add_argument("--csv-delimiter", default=None,
                    help="Delimiter override, e.g., ';' (auto if omitted)")
    sp.add_argument("--no-trim", action="store_true",
                    help="Keep surrounding whitespace in CSV fields")
    sp.add_argument("--mapping-encoding", default="utf-8",
                    help="mapping file encoding (default utf-8)")
    sp.add_argument("--mapping-format", default=None, choices=["turtle", "nt", "n3", "yarrrml"],
                    help="mapping syntax (guessed from suffix if omitted; .yml/.yaml is YARRRML)")
    sp.add_argument("--format", dest="out_format", default="turtle", choices=["turtle", "nt"],
                    help="output syntax (default turtle)")


def build_parser():
    ap = argparse.ArgumentParser(prog="rmlturtle", description="RML mapping interpreter: CSV → RDF")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    ap.add_argument("-q", "--quiet", action="store_true", help="errors only")
    sub = ap.add_subparsers(dest="cmd", required=True)

    # CSV mode
    sp_csv = sub.add_parser("csv", help="Convert CSV → RDF using an RML mapping")
    sp_csv.add_argument("csv", nargs="+", help="CSV file(s); each binds the rml:source with its name")
    sp_csv.add_argument("--mapping", "-m", required=True, help="RML mapping (Turtle) or YARRRML (.yml)")
    sp_csv.add_argument("--out", "-o", required=True, help="output file")
    sp_csv.add_argument("--source", action="append", type=_binding, default=[],
                        metavar="KEY=PATH", help="bind an rml:source key to a file explicitly")
    _add_conversion_options(sp_csv)

    # CSV batch mode
    sp_csvb = sub.add_parser("csv-batch", help="Batch-convert CSVs with one mapping (glob path)")
    sp_csvb.add_argument("glob", help='Glob, e.g. "exports/*.csv"')
    sp_csvb.add_argument("mapping")
    sp_csvb.add_argument("out_dir")
    _add_conversion_options(sp_csvb)

    # SPARQL over produced triples
    sp_q = sub.add_parser("query", help="Run a SPARQL query over RDF output")
    sp_q.add_argument("data", help="RDF file (Turtle / N-Triples)")
    q_src = sp_q.add_mutually_exclusive_group(required=True)
    q_src.add_argument("--query-file", "-f", help="file holding the SPARQL query")
    q_src.add_argument("--query", "-e", help="SPARQL query text")
    return ap


def _print_outcome(outcome):
    if outcome.kind == "ASK":
        console.print(f"[bold]{outcome.answer}[/bold]")
        return
    if outcome.kind != "SELECT":
        console.print(outcome.graph.serialize(format="turtle"))
        return
    if not outcome.rows:
        console.print("No results.")
        return
    table = Table(*outcome.variables)
    for row in outcome.rows:
        table.add_row(*[("" if row[v] is None else str(row[v])) for v in outcome.variables])
    console.print(table)


def _report(result, label):
    line = f"✓ {label}: {len(result)} triple(s)"
    if result.diagnostics:
        line += f", {len(result.diagnostics)} warning(s)"
    console.print(f"[green]{line}[/green]")


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)
    elif args.quiet:
        set_level(logging.ERROR)

    try:
        if args.cmd == "csv":
            result = run_convert(args.csv, args.mapping, args.out,
                                 csv_encoding=args.csv_encoding,
                                 csv_delimiter=args.csv_delimiter,
                                 trim=not args.no_trim,
                                 mapping_encoding=args.mapping_encoding,
                                 mapping_format=args.mapping_format,
                                 out_format=args.out_format,
                                 bindings=dict(args.source))
            _report(result, args.out)
            return 0

        if args.cmd == "csv-batch":
            results = run_convert_batch(args.glob, args.mapping, args.out_dir,
                                        csv_encoding=args.csv_encoding,
                                        csv_delimiter=args.csv_delimiter,
                                        trim=not args.no_trim,
                                        mapping_encoding=args.mapping_encoding,
                                        mapping_format=args.mapping_format,
                                        out_format=args.out_format)
            for fp, result in results.items():
                _report(result, fp)
            return 0

        if args.cmd == "query":
            sparql = args.query or Path(args.query_file).read_text(encoding="utf-8")
            _print_outcome(run_query(load_graph(args.data), sparql))
            return 0
    except (RmlTurtleError, OSError) as e:
        stderr_console.print(f"[red]✗ {e}[/red]")
        return 1
    return 2


if __name__ == "__main__":
    sys.exit(main())
