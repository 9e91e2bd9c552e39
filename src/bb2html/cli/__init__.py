#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/cli/__init__.py
"""Command-line interface for the bb2html converter.

Examples
--------
Convert a file and print the HTML::

    $ bb2html post.bbcode

Read from stdin and write to a file::

    $ cat post.bbcode | bb2html - --out post.html

Use a smiley table and attachment data::

    $ bb2html post.bbcode --smilies smilies.toml --attachments attachments.json

Inspect the element tree::

    $ bb2html post.bbcode --format tree

Configuration files (``.bb2html.toml``, ``.bb2html.yaml``, ``.bb2html.json``
or ``[tool.bb2html]`` in ``pyproject.toml``) are discovered from the current
directory upwards. ``BB2HTML_CONFIG`` or ``--config`` names one explicitly.
Command line flags override configuration values.

"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from bb2html import __version__
from bb2html.ast.serialization import tree_to_json
from bb2html.cli.config import (
    CONFIG_ENV_VAR,
    ConversionSettings,
    build_conversion_settings,
    load_attachments_file,
    load_config_with_priority,
)
from bb2html.cli.output import format_tree_text, print_highlighted, print_tree, should_use_rich_output
from bb2html.constants import EXIT_ERROR, EXIT_FILE_ERROR, EXIT_SUCCESS, EXIT_VALIDATION_ERROR
from bb2html.exceptions import Bb2HtmlError
from bb2html.logging_utils import configure_logging
from bb2html.parsers.bbcode import BBCodeParser
from bb2html.renderers.html import HtmlRenderer

logger = logging.getLogger(__name__)

__all__ = ["main", "create_parser"]

# Command line flags that override option fields; None means "not given"
PARSER_FLAG_FIELDS = ("preserve_empty", "blank_line_paragraphs", "autolink")
RENDERER_FLAG_FIELDS = ("paragraphs", "pretty_print")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bb2html",
        description="Convert BBCode to safe HTML.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="?", help="BBCode file to convert, or '-' to read stdin")
    parser.add_argument("--out", "-o", metavar="FILE", help="Write output to FILE instead of stdout")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    config_group = parser.add_argument_group("configuration")
    config_group.add_argument("--config", metavar="FILE", help="Configuration file (TOML, YAML or JSON)")
    config_group.add_argument(
        "--no-config", action="store_true", help="Ignore discovered configuration files and BB2HTML_CONFIG"
    )
    config_group.add_argument("--smilies", metavar="FILE", help="Smiley table: mapping of code to HTML")
    config_group.add_argument("--attachments", metavar="FILE", help="Attachment records for [attach] tags")
    config_group.add_argument(
        "--sanitize-smilies",
        action="store_const",
        const=True,
        default=None,
        help="Clean smiley markup with bleach before use",
    )

    parsing_group = parser.add_argument_group("parsing")
    parsing_group.add_argument(
        "--preserve-empty", dest="preserve_empty", action="store_const", const=True, default=None,
        help="Keep elements that have no content",
    )
    parsing_group.add_argument(
        "--blank-line-paragraphs", dest="blank_line_paragraphs", action="store_const", const=True, default=None,
        help="Start a new paragraph at blank lines",
    )
    parsing_group.add_argument(
        "--no-autolink", dest="autolink", action="store_const", const=False, default=None,
        help="Do not link bare http(s) URLs",
    )

    rendering_group = parser.add_argument_group("rendering")
    rendering_group.add_argument(
        "--no-paragraphs", dest="paragraphs", action="store_const", const=False, default=None,
        help="Do not wrap paragraphs in <p> tags",
    )
    rendering_group.add_argument(
        "--pretty", dest="pretty_print", action="store_const", const=True, default=None,
        help="Hide the bracket syntax of invalid tags",
    )

    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "--format",
        choices=["html", "json", "tree"],
        default="html",
        help="Output HTML (default), the element tree as JSON, or a tree view",
    )
    output_group.add_argument("--rich", action="store_true", help="Syntax-highlight output on a terminal")

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        type=str.upper,
        help="Logging level (default: WARNING)",
    )
    logging_group.add_argument("--log-file", metavar="FILE", help="Also write log messages to FILE")
    logging_group.add_argument("--verbose", "-v", action="store_true", help="Shorthand for --log-level DEBUG")
    logging_group.add_argument("--trace", action="store_true", help="Debug logging with timestamps")
    return parser


def _setup_logging_level(parsed_args: argparse.Namespace) -> None:
    """Set up logging level based on command-line arguments."""
    # --trace takes highest precedence, then --verbose, then --log-level
    if parsed_args.trace:
        log_level = logging.DEBUG
    elif parsed_args.verbose and parsed_args.log_level == "WARNING":
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, parsed_args.log_level)

    configure_logging(log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def _load_settings(parsed_args: argparse.Namespace) -> ConversionSettings:
    if parsed_args.no_config:
        config = {}
        if parsed_args.config:
            config = load_config_with_priority(explicit_path=parsed_args.config)
    else:
        config = load_config_with_priority(
            explicit_path=parsed_args.config,
            env_var_path=os.environ.get(CONFIG_ENV_VAR),
        )

    return build_conversion_settings(
        config,
        parser_overrides={name: getattr(parsed_args, name) for name in PARSER_FLAG_FIELDS},
        renderer_overrides={name: getattr(parsed_args, name) for name in RENDERER_FLAG_FIELDS},
        smilies_path=parsed_args.smilies,
        sanitize_smilies=parsed_args.sanitize_smilies,
    )


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8", errors="replace")


def _write_output(content: str, out: str) -> None:
    path = Path(out)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def main(args: list[str] | None = None) -> int:
    """Execute the CLI and return the process exit code."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.input:
        print("Error: Input file is required (use '-' for stdin)", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    _setup_logging_level(parsed_args)

    try:
        settings = _load_settings(parsed_args)
        attachments = load_attachments_file(parsed_args.attachments) if parsed_args.attachments else {}
    except argparse.ArgumentTypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        source = _read_input(parsed_args.input)
    except OSError as e:
        print(f"Error: Cannot read input {parsed_args.input}: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    try:
        tree = BBCodeParser(settings.parser_options).parse(source)
        if parsed_args.format == "json":
            content = tree_to_json(tree, indent=2)
        elif parsed_args.format == "tree":
            content = format_tree_text(tree)
        else:
            renderer = HtmlRenderer(settings.renderer_options, smilies=settings.smilies, attachments=attachments)
            content = renderer.render_to_string(tree)
    except Bb2HtmlError as e:
        logger.debug("Conversion failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if parsed_args.out:
        try:
            _write_output(content, parsed_args.out)
        except OSError as e:
            print(f"Error: Cannot write output {parsed_args.out}: {e}", file=sys.stderr)
            return EXIT_FILE_ERROR
        logger.info("Wrote %s", parsed_args.out)
        return EXIT_SUCCESS

    if parsed_args.format == "tree" and should_use_rich_output(parsed_args):
        print_tree(tree)
    elif parsed_args.format in ("html", "json") and should_use_rich_output(parsed_args):
        print_highlighted(content, parsed_args.format)
    else:
        sys.stdout.write(content)
        if not content.endswith("\n"):
            sys.stdout.write("\n")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
