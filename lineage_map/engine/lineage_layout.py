#!/usr/bin/env python
"""
Lineage Layout - Compute diagram layout for a table/field lineage graph.

Usage:
    # JSON graph, auto-expanded tables
    python -m lineage_map.engine.lineage_layout --graph graph.json --output output/

    # Mapping sheet, two tables expanded, highlight lineage of one field
    python -m lineage_map.engine.lineage_layout --mappings mappings.xlsx \\
        --expand FCT_LOAN --expand STG_LOAN --focus FCT_LOAN.AMOUNT --format both
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from lineage_map import __version__
from lineage_map.engine.contracts import GraphContractError
from lineage_map.engine.loader import GraphFileLoader, MappingLoader
from lineage_map.engine.models import LayoutOptions, TraversalDirection
from lineage_map.engine.processor import (
    LayoutEngine, FieldReferenceExtractor, KnownIdConvention, SqlReferenceExtractor,
)
from lineage_map.engine.output import ExcelWriter, JsonWriter


logger = logging.getLogger("lineage_layout")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID = 2


def setup_logging(level: str, output_dir: Path) -> None:
    """Configure logging."""
    log_levels = {
        "normal": logging.WARNING,
        "verbose": logging.INFO,
        "debug": logging.DEBUG,
    }

    # Ensure output dir exists
    output_dir.mkdir(parents=True, exist_ok=True)

    # File handler
    file_handler = logging.FileHandler(
        output_dir / "lineage_layout.log",
        mode="w",
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
    ))

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_levels.get(level, logging.WARNING))
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))

    # Configure root logger
    logging.basicConfig(
        level=logging.DEBUG,
        handlers=[file_handler, console_handler],
        force=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Compute layout, relationships and transformation warnings for a lineage graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Input (one required)
    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("--graph", type=Path, help="JSON graph document")
    input_group.add_argument("--mappings", type=Path, help="Mapping sheet (.xlsx, .xls or .csv)")
    parser.add_argument("--sheet", type=str, help="Pattern to match mapping sheet name")

    # View state
    expand_group = parser.add_mutually_exclusive_group()
    expand_group.add_argument("--expand", action="append", metavar="TABLE",
                              help="Expand a table (repeatable). Default: auto-expand connected tables")
    expand_group.add_argument("--expand-all", action="store_true", help="Expand every table")
    expand_group.add_argument("--collapse-all", action="store_true", help="Expand no table")
    parser.add_argument("--focus", metavar="FIELD", help="Field to compute related fields for")
    parser.add_argument("--direction", default=TraversalDirection.BOTH.value,
                        choices=[d.value for d in TraversalDirection],
                        help="Traversal direction for --focus (default: both)")
    parser.add_argument("--show-inferred", action="store_true",
                        help="Include inferred table edges among visible edges")

    # Layout options
    parser.add_argument("--options", type=Path, help="JSON file with layout options")
    parser.add_argument("--table-width", type=float)
    parser.add_argument("--table-height", type=float)
    parser.add_argument("--field-height", type=float)
    parser.add_argument("--field-spacing", type=float)
    parser.add_argument("--level-padding", type=float)
    parser.add_argument("--vertical-padding", type=float)

    # Validation
    parser.add_argument("--references", default="auto", choices=["auto", "pattern", "known", "sql"],
                        help="How transformations reference fields (default: pattern for "
                             "--graph, known field ids for --mappings)")
    parser.add_argument("--dialect", type=str, help="SQL dialect for --references sql")
    parser.add_argument("--strict", action="store_true",
                        help="Exit with status 2 when transformation warnings exist")

    # Output
    parser.add_argument("--output", type=Path, default=Path("output"),
                        help="Output directory (default: output/)")
    parser.add_argument("--format", default="json", choices=["json", "excel", "both"],
                        help="Output format (default: json)")

    # Logging
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    log_group.add_argument("--debug", action="store_true", help="Debug output")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(argv)


def build_options(args) -> LayoutOptions:
    """Defaults, then --options file, then explicit flags."""
    options = LayoutOptions()

    if args.options:
        with open(args.options, encoding="utf-8") as f:
            options = LayoutOptions.from_dict(json.load(f))

    return options.merged({
        "table_width": args.table_width,
        "table_height": args.table_height,
        "field_height": args.field_height,
        "field_spacing": args.field_spacing,
        "level_padding": args.level_padding,
        "vertical_padding": args.vertical_padding,
    })


def build_extractor(args, graph):
    """Reference extractor for transformation validation."""
    style = args.references
    if style == "auto":
        style = "known" if args.mappings else "pattern"

    if style == "sql":
        return SqlReferenceExtractor(dialect=args.dialect)
    if style == "known":
        return FieldReferenceExtractor(
            convention=KnownIdConvention((f.id for f in graph.fields()), ignore_case=True)
        )
    # Letters+digits ids, limited to the prefixes the graph uses
    return None


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    log_level = "normal"
    if args.debug:
        log_level = "debug"
    elif args.verbose:
        log_level = "verbose"

    setup_logging(log_level, args.output)

    logger.info(f"Lineage Layout v{__version__}")

    try:
        options = build_options(args)

        if args.graph:
            graph = GraphFileLoader().load_file(args.graph)
            name = args.graph.stem
        else:
            graph = MappingLoader().load(args.mappings, args.sheet)
            name = args.mappings.stem
    except (OSError, ValueError, GraphContractError) as e:
        logger.error(str(e))
        return EXIT_ERROR

    if args.expand_all:
        expanded = [t.id for t in graph.tables()]
    elif args.collapse_all:
        expanded = []
    elif args.expand:
        expanded = [t.upper() for t in args.expand] if args.mappings else list(args.expand)
    else:
        expanded = None

    focus = args.focus
    if focus and args.mappings:
        focus = focus.upper()

    engine = LayoutEngine(
        options=options,
        direction=args.direction,
        extractor=build_extractor(args, graph),
        include_inferred=args.show_inferred,
    )
    result = engine.layout(graph, expanded, focus)

    outputs = []
    if args.format in ("json", "both"):
        outputs.append(JsonWriter(args.output).write(result, name))
    if args.format in ("excel", "both"):
        outputs.append(ExcelWriter(args.output).write(result, graph, name))

    print(f"Tables: {len(graph.tables())}, levels: {result.levels.depth}, "
          f"inferred table edges: {len(result.inferred_edges)}")
    for cycle in result.levels.cycles:
        print(f"  Cycle: {cycle.message}")
    if focus:
        print(f"Related to {focus} ({args.direction}): {', '.join(sorted(result.related_fields))}")

    if result.validation_errors:
        print(f"\nTransformation warnings ({len(result.validation_errors)} fields):")
        for field_id, errors in result.validation_errors.items():
            for error in errors:
                print(f"  {field_id}: {error}")

    for path in outputs:
        print(f"\nOutput: {path}")

    if args.strict and result.validation_errors:
        return EXIT_INVALID
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
