#!/usr/bin/env python3
"""
CSS Module Class Checker
Reports CSS-module classes that are never used by the importing source, and
property accesses on style objects that match no class.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from comparator.report_builder import build_json_report, format_diagnostic
from core.css_module_analyzer import CSSModuleAnalyzer
from core.errors import ConfigurationError, StylesheetParseError
from core.lint_options import parse_options
from utils.file_utils import EXTENSION_GROUPS, get_all_files_by_extension

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def _camel_case_arg(value: str):
    # CLI spelling of the JSON option values
    return {'true': True, 'false': False}.get(value.lower(), value)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument('paths', nargs='+', help='Source files or directories to check')
    parser.add_argument('--config', type=Path, help='JSON file with options ({"camelCase": ..., "markAsUsed": [...]})')
    parser.add_argument('--camel-case', type=_camel_case_arg, dest='camel_case',
                        help="false, true, dashes, only or dashes-only")
    parser.add_argument('--mark-as-used', action='append', dest='mark_as_used', metavar='CLASS',
                        help='Class name never reported as unused (repeatable)')
    parser.add_argument('--base-path', dest='base_path', help='Directory non-relative imports resolve against')
    parser.add_argument('--no-undefined', action='store_true', help='Skip the undefined class check')
    parser.add_argument('--json', action='store_true', help='Print a JSON report instead of diagnostics')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def load_options(args: argparse.Namespace) -> dict:
    """Config file first, command-line flags override it."""
    options = {}
    if args.config:
        with open(args.config, 'r', encoding='utf-8') as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"{args.config} must contain a JSON object")
        options.update(loaded)
    if args.camel_case is not None:
        options['camelCase'] = args.camel_case
    if args.mark_as_used:
        options['markAsUsed'] = args.mark_as_used
    if args.base_path:
        options['basePath'] = args.base_path
    return options


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        options = parse_options(load_options(args))
    except (ConfigurationError, OSError, json.JSONDecodeError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_ERROR

    analyzer = CSSModuleAnalyzer(options, check_undefined=not args.no_undefined)
    results = {}
    had_error = False
    for path in args.paths:
        for source_file in get_all_files_by_extension(path, EXTENSION_GROUPS['source']):
            try:
                results[source_file] = analyzer.analyze_file(source_file)
            except StylesheetParseError as e:
                # only this file is skipped; the rest of the run goes on
                logger.error(f"{source_file}: cannot parse imported stylesheet: {e}", exc_info=args.verbose)
                had_error = True

    has_findings = any(result.unused or result.undefined for result in results.values())
    if args.json:
        print(build_json_report(results))
    else:
        for source_file, result in results.items():
            for finding in result.findings():
                print(format_diagnostic(source_file, finding))
    if had_error:
        return EXIT_ERROR
    return EXIT_FINDINGS if has_findings else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
