"""
Command-line interface for the diagram engine.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from diagram_engine.config import EngineConfig
from diagram_engine.document import format_xml
from diagram_engine.errors import ConfigError, PatchNotFoundError, ToolCallValidationError
from diagram_engine.logging import setup_logging
from diagram_engine.patch import apply_edits_detailed
from diagram_engine.tools import create_registry, parse_edit_diagram

console = Console()

DEFAULT_CONFIG_FILE = "diagram-engine.yaml"


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Diagram patch and synchronization engine",
        prog="diagram-engine",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (debug logging)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    apply_parser = subparsers.add_parser("apply", help="Apply an edit batch to a document")
    apply_parser.add_argument("document", help="Diagram XML file")
    apply_parser.add_argument(
        "edits",
        help='JSON file with [{"search", "replace"}, ...] or {"edits": [...]}',
    )
    apply_parser.add_argument("-o", "--output", help="Write the result here instead of stdout")

    tools_parser = subparsers.add_parser("tools", help="Print tool definitions")
    tools_parser.add_argument(
        "-f",
        "--format",
        choices=["openai", "anthropic"],
        default="openai",
        help="Function calling format",
    )

    format_parser = subparsers.add_parser("format", help="Pretty-print diagram XML")
    format_parser.add_argument("document", help="Diagram XML file")

    serve_parser = subparsers.add_parser("serve", help="Run the web bridge server")
    serve_parser.add_argument("-c", "--config", help="YAML config file")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Bind port")

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")
    config_show_parser = config_subparsers.add_parser("show", help="Show effective configuration")
    config_show_parser.add_argument("-c", "--config", help="YAML config file")
    config_init_parser = config_subparsers.add_parser("init", help="Write a default config file")
    config_init_parser.add_argument(
        "-o",
        "--output",
        default=DEFAULT_CONFIG_FILE,
        help="Output file path",
    )

    args = parser.parse_args()

    setup_logging("DEBUG" if args.verbose else "WARNING", rich=True)

    if args.command == "apply":
        cmd_apply(args)
    elif args.command == "tools":
        cmd_tools(args)
    elif args.command == "format":
        cmd_format(args)
    elif args.command == "serve":
        cmd_serve(args)
    elif args.command == "config":
        cmd_config(args)
    else:
        parser.print_help()


def _load_config(path: str | None) -> EngineConfig:
    """Load config from a file, falling back to the environment."""
    try:
        if path:
            return EngineConfig.from_yaml(Path(path))
        default = Path.cwd() / DEFAULT_CONFIG_FILE
        if default.exists():
            return EngineConfig.from_yaml(default)
        return EngineConfig.from_env()
    except ConfigError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        sys.exit(2)


def cmd_apply(args: argparse.Namespace) -> None:
    """Apply an edit batch to a document file."""
    document = Path(args.document).read_text(encoding="utf-8")
    try:
        raw = json.loads(Path(args.edits).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Edits file is not valid JSON:[/red] {e}")
        sys.exit(2)
    if isinstance(raw, list):
        raw = {"edits": raw}

    try:
        batch = parse_edit_diagram(raw)
        result = apply_edits_detailed(document, batch.edits)
    except ToolCallValidationError as e:
        console.print(f"[red]Invalid edits:[/red] {escape(str(e))}")
        sys.exit(2)
    except PatchNotFoundError as e:
        console.print(f"[red]Edit failed:[/red] {escape(str(e))}")
        sys.exit(1)

    if args.output:
        Path(args.output).write_text(result.document, encoding="utf-8")
        console.print(
            f"[green]Applied {result.edits_applied} edit(s)[/green] -> {args.output}"
        )
    else:
        sys.stdout.write(result.document)


def cmd_tools(args: argparse.Namespace) -> None:
    """Print the tool definitions offered to the model."""
    registry = create_registry()
    if args.format == "anthropic":
        definitions = registry.get_anthropic_definitions()
    else:
        definitions = registry.get_definitions()
    console.print_json(json.dumps(definitions))


def cmd_format(args: argparse.Namespace) -> None:
    """Pretty-print a diagram document."""
    document = Path(args.document).read_text(encoding="utf-8")
    console.print(Syntax(format_xml(document), "xml", word_wrap=True))


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the web bridge."""
    from diagram_engine.web.server import run_server

    config = _load_config(args.config)
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if not getattr(args, "verbose", False):
        setup_logging(config.log_level, rich=True)
    console.print(f"Serving diagram engine on [bold]http://{config.host}:{config.port}[/bold]")
    run_server(config)


def cmd_config(args: argparse.Namespace) -> None:
    """Configuration management commands."""
    if args.config_command == "show":
        config = _load_config(args.config)
        console.print(yaml.safe_dump(config.to_dict(), sort_keys=False))
    elif args.config_command == "init":
        output = Path(args.output)
        if output.exists():
            console.print(f"[yellow]Config file already exists: {output}[/yellow]")
            sys.exit(1)
        output.write_text(yaml.safe_dump(EngineConfig().to_dict(), sort_keys=False))
        console.print(f"[green]Created config file: {output}[/green]")
    else:
        console.print("[yellow]Usage: diagram-engine config <show|init>[/yellow]")


if __name__ == "__main__":
    main()
