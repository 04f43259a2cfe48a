#!/usr/bin/env python3
"""
Command-line interface for critical-css.
"""

import argparse
import asyncio
import logging
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import orjson
from tqdm import tqdm

from .core.inliner import Inliner
from .utils.config import LOG_LEVELS, PRELOAD_MODES, KEYFRAMES_MODES, VERSION, Options
from .utils.error import ConfigurationError, CriticalCSSError
from .utils.file import read_text_file, write_text_file
from .utils.logging import setup_logging

logger = logging.getLogger('critical_css.cli')

# Options that map one to one onto Options fields
OPTION_FLAGS = (
    'path', 'public_path', 'preload', 'noscript_fallback', 'prune_source',
    'minimum_external_size', 'additional_stylesheets', 'external', 'remote',
    'inline_threshold', 'compress', 'merge_stylesheets', 'reduce_inline_styles',
    'keyframes', 'inline_fonts', 'preload_fonts', 'allow_rules', 'exclude_rules',
    'log_level', 'request_timeout',
)

def _preload_mode(value: str):
    if value == 'false':
        return False
    if value not in PRELOAD_MODES:
        raise argparse.ArgumentTypeError(f"invalid preload mode: {value}")
    return value

def _rule(value: str):
    # /pattern/ is a regular expression, anything else an exact selector
    if len(value) > 2 and value.startswith('/') and value.endswith('/'):
        try:
            return re.compile(value[1:-1])
        except re.error as e:
            raise argparse.ArgumentTypeError(f"invalid pattern {value}: {e}")
    return value

def _toggle(parser: argparse.ArgumentParser, name: str, help_text: str) -> None:
    dest = name.replace('-', '_')
    parser.add_argument(f'--{name}', dest=dest, action='store_true', default=None, help=help_text)
    parser.add_argument(f'--no-{name}', dest=dest, action='store_false', help=argparse.SUPPRESS)

def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='critical-css',
        description='Inline critical CSS into HTML files and defer the rest'
    )

    parser.add_argument('files', nargs='+', type=Path, help='HTML files to process')

    # Output options
    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument('-o', '--output', type=Path, help='Directory to write processed files to')
    output_group.add_argument('-i', '--in-place', action='store_true', help='Overwrite the input files')
    parser.add_argument('--report', type=Path, help='Write a JSON report of inlined and pruned stylesheets')
    parser.add_argument('--config', type=Path, help='JSON file with options')

    # Stylesheet resolution
    parser.add_argument('--path', help='Root directory stylesheets are resolved against')
    parser.add_argument('--public-path', help='URL prefix stripped from stylesheet hrefs')
    parser.add_argument('--additional-stylesheet', dest='additional_stylesheets', action='append',
                        help='Glob pattern of an extra stylesheet to inline (repeatable)')
    _toggle(parser, 'external', 'Process <link rel="stylesheet"> elements (default)')
    _toggle(parser, 'remote', 'Fetch stylesheets from absolute URLs')
    parser.add_argument('--request-timeout', type=float, help='Timeout for remote stylesheets in seconds')

    # Processing options
    parser.add_argument('--preload', type=_preload_mode,
                        help=f"Preload strategy: {', '.join(str(m).lower() for m in PRELOAD_MODES)}")
    _toggle(parser, 'noscript-fallback', 'Add <noscript> fallbacks for deferred stylesheets (default)')
    _toggle(parser, 'prune-source', 'Remove inlined rules from the stylesheet files')
    parser.add_argument('--minimum-external-size', type=int,
                        help='Inline everything when the remaining stylesheet is smaller (bytes)')
    parser.add_argument('--inline-threshold', type=int,
                        help='Inline whole stylesheets smaller than this (bytes)')
    _toggle(parser, 'compress', 'Compress inlined CSS (default)')
    _toggle(parser, 'merge-stylesheets', 'Merge inline <style> elements (default)')
    _toggle(parser, 'reduce-inline-styles', 'Also reduce existing <style> elements (default)')
    parser.add_argument('--keyframes', choices=KEYFRAMES_MODES, help='Which @keyframes to inline')
    _toggle(parser, 'inline-fonts', 'Inline @font-face rules used by critical CSS')
    _toggle(parser, 'preload-fonts', 'Preload fonts used by critical CSS')
    parser.add_argument('--allow', dest='allow_rules', action='append', type=_rule,
                        help='Selector or /regex/ to always inline (repeatable)')
    parser.add_argument('--exclude', dest='exclude_rules', action='append', type=_rule,
                        help='Selector or /regex/ to never inline (repeatable)')

    # Other options
    parser.add_argument('--log-level', choices=list(LOG_LEVELS), help='Log level (default: info)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')
    parser.add_argument('--no-color', action='store_true', help='Disable coloured log output')
    parser.add_argument('--version', action='version', version=f'%(prog)s {VERSION}')

    return parser

def build_options(args: argparse.Namespace) -> Options:
    """Combine the config file and command line flags into Options.

    Raises:
        ConfigurationError: If an option is invalid
    """
    values: Dict[str, Any] = {}
    if args.config:
        try:
            values.update(orjson.loads(args.config.read_bytes()))
        except (OSError, orjson.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read config file {args.config}: {e}")
    options = Options.from_mapping(values)
    overrides = {
        name: getattr(args, name) for name in OPTION_FLAGS
        if getattr(args, name, None) is not None
    }
    if args.verbose and 'log_level' not in overrides:
        overrides['log_level'] = 'debug'
    return Options(**{**{f: getattr(options, f) for f in OPTION_FLAGS}, **overrides})

def _destination(source: Path, args: argparse.Namespace) -> Optional[Path]:
    if args.in_place:
        return source
    if args.output:
        return args.output / source.name
    return None

async def process_files(inliner: Inliner, args: argparse.Namespace) -> List[Dict[str, Any]]:
    """Process every input file, collecting a report entry per file."""
    report = []
    files = tqdm(args.files, desc='Inlining', unit='file', disable=len(args.files) < 2)
    for source in files:
        entry: Dict[str, Any] = {'file': str(source)}
        try:
            html = await read_text_file(str(source))
            result = await inliner.process_document(html)
            destination = _destination(source, args)
            if destination is None:
                sys.stdout.write(result.html)
            else:
                await write_text_file(str(destination), result.html)
                logger.info(f"Wrote {destination}")
            entry.update({
                'output': str(destination) if destination else None,
                'deletable_assets': result.deletable_assets,
                'pruned_assets': result.pruned_assets,
                'stats': result.stats,
            })
        except (OSError, CriticalCSSError) as e:
            logger.error(f"Failed to process {source}: {e}")
            entry['error'] = str(e)
        report.append(entry)
    return report

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = build_options(args)
    except ConfigurationError as e:
        setup_logging(logging.ERROR, color=not args.no_color)
        logger.error(f"Error: {e}")
        return 1
    setup_logging(options.level, color=not args.no_color)

    if len(args.files) > 1 and not (args.output or args.in_place):
        logger.error("Use --output or --in-place when processing several files")
        return 1

    with Inliner(options) as inliner:
        report = asyncio.run(process_files(inliner, args))

    if args.report:
        args.report.write_bytes(orjson.dumps(report, option=orjson.OPT_INDENT_2))
        logger.info(f"Report saved to {args.report}")

    return 1 if any('error' in entry for entry in report) else 0

if __name__ == '__main__':
    sys.exit(main())
