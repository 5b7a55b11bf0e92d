"""Main CLI entry point for the annotated-xml command-line tool.

Provides parse, validate and stream commands over XML files. Trees are
printed as JSON or as an indented outline with the source location of each
element.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from annotated_xml_tree import __version__
from annotated_xml_tree.api.parser import XMLTreeParser
from annotated_xml_tree.shared.config import (
    ConfigValidationError,
    Encoding,
    ParserOptions,
    TagForm,
)
from annotated_xml_tree.shared.logging import configure_cli_logging, get_logger
from annotated_xml_tree.shared.strings import gx_to_string
from annotated_xml_tree.tree.node import Element, Node, to_dict

OUTLINE_INDENT = "  "


def _label(name: Any) -> str:
    return gx_to_string(name) if isinstance(name, bytes) else str(name)


def build_options(args: argparse.Namespace) -> ParserOptions:
    """Translate command-line flags into parser options."""
    options = ParserOptions.hardened() if getattr(args, "hardened", False) else ParserOptions()
    overrides: Dict[str, Any] = {}
    if getattr(args, "encoding", None):
        overrides["encoding"] = Encoding.from_name(args.encoding)
    if getattr(args, "tag_form", None):
        overrides["tag_form"] = TagForm[args.tag_form.upper()]
    return options.override(**overrides) if overrides else options


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="annotated-xml",
        description="Parse XML into trees annotated with source locations"
    )

    parser.add_argument("--version", action="version", version=__version__)

    # Options shared by every command that reads XML
    input_options = argparse.ArgumentParser(add_help=False)
    input_options.add_argument(
        "--encoding", "-e",
        help="Force the input encoding (UTF-8, UTF-16, ISO-8859-1, US-ASCII)"
    )
    input_options.add_argument(
        "--tag-form", "-t",
        choices=[form.value for form in TagForm],
        default=TagForm.PLAIN.value,
        help="How element and attribute names are reported (default: plain)"
    )
    input_options.add_argument(
        "--hardened",
        action="store_true",
        help="Limit entity expansion"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser(
        "parse", parents=[input_options], help="Parse XML files into trees"
    )
    parse_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files to parse"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "outline"],
        default="json",
        help="Output format (default: json)"
    )
    parse_parser.add_argument(
        "--strict",
        action="store_true",
        help="Report only the error for files that fail, without a partial tree"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", parents=[input_options], help="Check XML files for well-formedness"
    )
    validate_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files to validate"
    )

    # Stream command
    stream_parser = subparsers.add_parser(
        "stream", parents=[input_options],
        help="Print completed nodes at a depth as JSON lines"
    )
    stream_parser.add_argument("path", type=Path, help="XML file to stream")
    stream_parser.add_argument(
        "--depth", "-d",
        type=int,
        default=1,
        help="Nesting depth of the nodes to print (default: 1)"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def format_outline(node: Node, indent: int = 0) -> List[str]:
    """Render a tree as indented lines, one per element or non-blank text."""
    prefix = OUTLINE_INDENT * indent
    if not isinstance(node, Element):
        text = gx_to_string(node.text).strip()
        return [f"{prefix}{text!r}"] if text else []

    attributes = " ".join(
        f"{_label(key)}={gx_to_string(value)!r}" for key, value in node.attributes
    )
    head = f"{prefix}<{_label(node.tag)}{' ' + attributes if attributes else ''}>"
    if node.annotation is not None:
        head += f"  @ {node.annotation}"
    lines = [head]
    for child in node.children:
        lines.extend(format_outline(child, indent + 1))
    return lines


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format parse results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    lines = []
    for result in results:
        status = "✓" if result["success"] else "✗"
        lines.append(f"{status} {result['file']}")
        if result.get("outline"):
            lines.extend(result["outline"])
        if result.get("error"):
            lines.append(f"   Error: {result['error']['message']}")
            location = result["error"].get("location")
            if location:
                lines.append(
                    f"   At line {location['line']}, column {location['column']}"
                )
        lines.append("")
    return "\n".join(lines)


def parse_one(
    parser: XMLTreeParser, path: Path, strict: bool, format_type: str
) -> Dict[str, Any]:
    """Parse one file and describe the outcome as a dictionary."""
    convention = "strict" if strict else "deferred"
    result = parser.parse_file(path, convention)
    root = result.root
    error = result.error

    entry: Dict[str, Any] = {"file": str(path), "success": error is None}
    if root is not None:
        if format_type == "outline":
            entry["outline"] = format_outline(root, 1)
        else:
            entry["root"] = to_dict(root)
    if error is not None:
        entry["error"] = error.to_dict()
    if not strict:
        entry["statistics"] = result.statistics.to_dict()
    return entry


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    parser = XMLTreeParser(build_options(args))
    results = []

    for path in args.paths:
        try:
            results.append(parse_one(parser, path, args.strict, args.format))
        except OSError as e:
            results.append({"file": str(path), "success": False,
                            "error": {"message": str(e), "location": None}})

    formatted_output = format_results(results, args.format)

    if args.output:
        try:
            args.output.write_text(formatted_output)
            print(f"Results written to {args.output}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(formatted_output)

    return 0 if all(result["success"] for result in results) else 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    parser = XMLTreeParser(build_options(args))
    valid_count = 0

    for path in args.paths:
        try:
            outcome = parser.parse_file(path, "strict")
        except OSError as e:
            print(f"✗ {path}: {e}")
            continue
        if outcome.success:
            valid_count += 1
            print(f"✓ {path}")
        else:
            print(f"✗ {path}: {outcome.error}")

    print(f"Validated {len(args.paths)} files, {valid_count} valid", file=sys.stderr)
    return 0 if valid_count == len(args.paths) else 1


def cmd_stream(args: argparse.Namespace) -> int:
    """Handle stream command."""
    parser = XMLTreeParser(build_options(args))
    with args.path.open("rb") as file:
        stream = parser.stream_nodes(file, args.depth)
        for node in stream:
            print(json.dumps(to_dict(node)))

    if stream.error is not None:
        print(f"Error: {stream.error}", file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_cli_logging(verbose=args.verbose, quiet=args.quiet)
    logger = get_logger(__name__, None, "cli")

    try:
        if args.command == "parse":
            return cmd_parse(args)
        elif args.command == "validate":
            return cmd_validate(args)
        elif args.command == "stream":
            return cmd_stream(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1

    except ConfigValidationError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        logger.error("Could not read input", extra={"error": str(e)}, exc_info=False)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
