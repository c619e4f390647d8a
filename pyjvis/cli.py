#!/usr/bin/env python3
"""
Command-line interface for pyjvis - JVM class file tracer.
"""

import argparse
import json
import logging
import sys
import zipfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .classreader import ClassReader
from .errors import ClassFormatError
from .serializer import to_dict
from .trace import (
    DEFAULT_KIND,
    DEFAULT_SKIPPED_PREFIXES,
    TraceAssembler,
    keep_all,
    skip_shorthand_loads,
)

logger = logging.getLogger(__name__)


def collect_inputs(paths: list[str]) -> list[tuple[str, bytes]]:
    """Expand .class files and .jar/.zip archives into (name, bytes) pairs."""
    inputs = []
    for source in paths:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {source}")
        if path.suffix in (".jar", ".zip"):
            with zipfile.ZipFile(path, "r") as zf:
                for entry in sorted(zf.namelist()):
                    if entry.endswith(".class"):
                        inputs.append((f"{source}!{entry}", zf.read(entry)))
        else:
            inputs.append((source, path.read_bytes()))
    return inputs


def positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {text}")
    return value


def _instruction_filter(args):
    if args.keep_all:
        return keep_all
    return skip_shorthand_loads(args.skip or DEFAULT_SKIPPED_PREFIXES)


def trace_command(args):
    """Trace class files and write the JSON report."""
    keep = _instruction_filter(args)

    def trace_one(item: tuple[str, bytes]) -> dict:
        name, data = item
        logger.debug("tracing %s", name)
        try:
            info = ClassReader(data).read()
            traced = TraceAssembler(args.kind, keep).assemble(info)
        except ClassFormatError as e:
            raise ClassFormatError(f"{name}: {e}") from e
        return to_dict(traced, detailed=args.detailed)

    try:
        inputs = collect_inputs(args.files)
        with ThreadPoolExecutor(max_workers=args.jobs) as executor:
            reports = list(executor.map(trace_one, inputs))
    except (OSError, zipfile.BadZipFile, ClassFormatError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    document = reports[0] if len(reports) == 1 else reports
    text = json.dumps(document, indent=args.indent)

    if args.output:
        with open(args.output, "w") as f:
            f.write(text)
            f.write("\n")
        if args.verbose:
            print(f"Wrote {args.output}", file=sys.stderr)
    else:
        print(text)


def main(argv=None):
    """Main entry point for pyjvis CLI."""
    parser = argparse.ArgumentParser(
        prog="pyjvis",
        description="Decode JVM class files into JSON method traces",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    trace_parser = subparsers.add_parser(
        "trace",
        help="Trace .class files (or every class in a .jar) as JSON",
    )
    trace_parser.add_argument(
        "files",
        nargs="+",
        help="Class files or jar archives to trace",
    )
    trace_parser.add_argument(
        "-o", "--output",
        help="Output file (default: stdout)",
    )
    trace_parser.add_argument(
        "--kind",
        default=DEFAULT_KIND,
        help=f"Kind label stored in the report (default: {DEFAULT_KIND})",
    )
    filter_group = trace_parser.add_mutually_exclusive_group()
    filter_group.add_argument(
        "--keep-all",
        action="store_true",
        help="Keep every instruction, including iload_<n>/aload_<n>",
    )
    filter_group.add_argument(
        "--skip",
        action="append",
        metavar="PREFIX",
        help="Drop operand-less instructions with this mnemonic prefix (repeatable)",
    )
    trace_parser.add_argument(
        "--detailed",
        action="store_true",
        help="Include offsets, raw operands and access flags",
    )
    trace_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )
    trace_parser.add_argument(
        "-j", "--jobs",
        type=positive_int,
        default=1,
        help="Number of classes decoded in parallel (default: 1)",
    )
    trace_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log decoding progress to stderr",
    )
    trace_parser.set_defaults(func=trace_command)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    args.func(args)


if __name__ == "__main__":
    main()
