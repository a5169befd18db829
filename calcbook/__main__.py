"""
Calcbook - CLI Entry Point

Commands:
    build    - Takeoff export to calculation workbook and proposal
    rules    - Print the aggregation rule table
    extract  - Show the dimensions parsed from a description
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import load_config
from .errors import CalcbookError


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def cmd_build(args):
    """Build workbook from a takeoff export."""
    from .formulas.aggregation import AggregationRuleTable
    from .ingest import read_takeoff
    from .pipeline import CalculationPipeline
    from .qc import WorkbookValidator
    from .workbook.export import WorkbookExporter, save_json

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Input not found: {input_path}")
        return 1

    config = load_config(args.config)
    try:
        records = read_takeoff(input_path, aliases=config.header_aliases)
        result = CalculationPipeline(config).run(records)
    except (CalcbookError, ValueError) as e:
        print(f"Build failed: {e}")
        return 1

    output_path = Path(args.output) if args.output else input_path.with_name(f"{input_path.stem}_calcbook.xlsx")
    WorkbookExporter(config.proposal_sheet).save(result.workbook, output_path, result.proposal)
    if args.json:
        save_json(result.workbook, args.json, result.proposal)

    rules = AggregationRuleTable.from_config(config.aggregation_overrides)
    qc = WorkbookValidator(rules).validate(result.workbook, result.proposal)

    summary = result.summary()
    print(f"\n{'='*60}")
    print(f"CALCULATION WORKBOOK: {output_path}")
    print(f"{'='*60}")
    print(f"Rows: {summary['rows']}")
    print(f"Cell writes: {summary['writes']}")
    print(f"Items: {summary['items']} ({summary['unused_records']} unused records)")
    print(f"Proposal lines: {summary['proposal_lines']} ({summary['unresolved_lines']} need input)")
    if result.skipped_writes:
        print(f"Skipped cells: {summary['skipped_writes']}")
    for warning in qc.warnings:
        print(f"  WARN: {warning}")
    for error in qc.errors:
        print(f"  ERROR: {error}")

    return 0 if qc.is_valid else 1


def cmd_rules(args):
    """Print the aggregation rule table."""
    from .formulas.aggregation import AggregationRuleTable

    config = load_config(args.config)
    table = AggregationRuleTable.from_config(config.aggregation_overrides)
    if args.json:
        print(json.dumps(table.to_dict(), indent=2))
        return 0

    for section, subsection, columns in table.entries():
        letters = ', '.join(sorted(c.value for c in columns)) or '-'
        deferred = [c.value for c in columns if table.is_deferred(section, c)]
        note = f"  (deferred: {', '.join(sorted(deferred))})" if deferred else ''
        print(f"{section.value:<16} {subsection:<40} {letters}{note}")
    return 0


def cmd_extract(args):
    """Show parsed dimensions for a description."""
    from .patterns import extract

    text = ' '.join(args.text)
    dims = extract(text)
    print(json.dumps(dims.to_dict(), indent=2))
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Calcbook - takeoff to calculation workbook and proposal',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Build command
    build_parser = subparsers.add_parser('build', help='Build calculation workbook')
    build_parser.add_argument('input', help='Takeoff export (.xlsx or .csv)')
    build_parser.add_argument('--output', '-o',
                              help='Output workbook (default: <input>_calcbook.xlsx)')
    build_parser.add_argument('--config', '-c',
                              help='Rules YAML (default: packaged rules/calcbook.yaml)')
    build_parser.add_argument('--json',
                              help='Also write the cell writes as JSON')
    build_parser.set_defaults(func=cmd_build)

    # Rules command
    rules_parser = subparsers.add_parser('rules', help='Print aggregation rules')
    rules_parser.add_argument('--config', '-c', help='Rules YAML')
    rules_parser.add_argument('--json', action='store_true', help='Print as JSON')
    rules_parser.set_defaults(func=cmd_rules)

    # Extract command
    extract_parser = subparsers.add_parser('extract', help='Parse a takeoff description')
    extract_parser.add_argument('text', nargs='+', help='Description text')
    extract_parser.set_defaults(func=cmd_extract)

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command:
        return args.func(args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
