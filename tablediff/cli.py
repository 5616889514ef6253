#!/usr/bin/env python3
"""
tablediff - command-line entry point.
Compare two tabular files on a key field and write a classified report.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from . import __version__
from .adapters.file_reader import TabularParser
from .config.manager import (
    ComparisonConfig,
    ConfigManager,
    SourceConfig,
    create_sample_config,
)
from .core.errors import ComparisonPreconditionError
from .session import ComparisonSession
from .ui.console import ResultPrinter
from .utils.logger import configure_logger, get_logger


logger = get_logger()

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PRECONDITION = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tablediff",
        description="Compare two JSON/CSV/TSV/TXT/workbook files keyed on a shared field"
    )
    parser.add_argument("left", nargs="?", help="Left (old) file")
    parser.add_argument("right", nargs="?", help="Right (new) file")
    parser.add_argument("--key", "-k", help="Key field present in both files")
    parser.add_argument("--config", "-c", help="YAML configuration file")
    parser.add_argument("--out", "-o", help="Report directory (default: reports)")
    parser.add_argument("--base-name", help="Report file name without extension")
    parser.add_argument("--encoding", help="Encoding of byte input, e.g. utf-8, euc-kr")
    parser.add_argument("--delimiter", help="Force a delimiter; use '\\t' for tab")
    parser.add_argument("--show-same", action="store_true",
                        help="List unchanged rows as well")
    parser.add_argument("--preview", action="store_true",
                        help="Show the first 30 rows of each file")
    parser.add_argument("--no-export", action="store_true", help="Do not write a report")
    parser.add_argument("--no-rich", action="store_true", help="Plain console output")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Warnings and errors only")
    parser.add_argument("--create-sample", action="store_true",
                        help="Write tablediff_sample.yaml and exit")
    parser.add_argument("--version", action="version", version=f"tablediff {__version__}")
    return parser


def parse_delimiter(value: Optional[str]) -> Optional[str]:
    """Accept escaped tab spellings from the shell."""
    if value is None:
        return None
    if value in ("\\t", "tab", "TAB"):
        return "\t"
    if len(value) != 1:
        raise ValueError("--delimiter must be a single character")
    return value


def resolve_config(args: argparse.Namespace) -> ComparisonConfig:
    """
    Merge the optional config file with command-line arguments.

    Command-line values win.
    """
    if args.config:
        config = ConfigManager(Path(args.config)).load()
    else:
        if not (args.left and args.right):
            raise ValueError("Give LEFT and RIGHT files, or --config")
        config = ComparisonConfig(left=SourceConfig(path=args.left),
                                  right=SourceConfig(path=args.right))

    if args.left:
        config.left.path = args.left
    if args.right:
        config.right.path = args.right
    if args.key:
        config.key = args.key
    if args.out:
        config.output.dir = args.out
    if args.base_name:
        config.output.base_name = args.base_name
    if args.show_same:
        config.output.show_same = True
    if args.no_export:
        config.output.export = False

    delimiter = parse_delimiter(args.delimiter)
    for source in (config.left, config.right):
        if args.encoding:
            source.encoding = args.encoding
        if delimiter:
            source.delimiter = delimiter

    if args.verbose:
        config.logging.level = "DEBUG"
    elif args.quiet:
        config.logging.level = "WARN"

    return config


def make_parser(config: ComparisonConfig, source: SourceConfig) -> TabularParser:
    return TabularParser(
        field_sample_size=config.parser.field_sample_size,
        delimiter_sample_chars=config.parser.delimiter_sample_chars,
        encoding=source.encoding,
        delimiter=source.delimiter,
    )


def run(config: ComparisonConfig, printer: ResultPrinter, preview: bool = False) -> int:
    """
    Run one comparison.

    Returns:
        Process exit code
    """
    logger.info("cli.run", left=config.left.path, right=config.right.path, key=config.key)

    session = ComparisonSession(parser=make_parser(config, config.left),
                                right_parser=make_parser(config, config.right))

    failed = False
    for side, source in (("left", config.left), ("right", config.right)):
        path = Path(source.path)
        if not path.exists():
            printer.print_error(f"{side} file not found: {path}")
            failed = True
            continue
        state = session.load_path(side, path)
        if state.error is not None:
            printer.print_error(f"{side} file {path.name}: {state.error}")
            failed = True
            continue
        printer.print_source(side, path.name, state.size, state.table)
        if preview:
            printer.print_preview(state.table)

    if failed:
        return EXIT_FAILED

    if not config.key:
        printer.print_key_candidates(session.key_candidates())
        return EXIT_PRECONDITION

    try:
        result = session.compare(config.key)
    except ComparisonPreconditionError as e:
        printer.print_error(str(e))
        return EXIT_PRECONDITION

    printer.print_summary(result, Path(config.left.path).name, Path(config.right.path).name)
    printer.print_entries(result, show_same=config.output.show_same)

    if config.output.export:
        artifact = session.export(config.report_base_name())
        out_dir = Path(config.output.dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path = out_dir / artifact.filename
        out_path.write_bytes(artifact.content)
        printer.print_export(str(out_path), artifact.format, artifact.fallback_reason)

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.create_sample:
        path = create_sample_config(Path("tablediff_sample.yaml"))
        print(f"Sample configuration created: {path}")
        return EXIT_OK

    printer = ResultPrinter(use_rich=not args.no_rich)

    try:
        config = resolve_config(args)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        printer.print_error(str(e))
        return EXIT_FAILED

    configure_logger(config.logging.level, config.logging.file)
    return run(config, printer, preview=args.preview)


if __name__ == "__main__":
    sys.exit(main())
