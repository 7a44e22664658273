"""Terminal output for the CLI."""

import json
from typing import Any

import click
from rich.console import Console
from rich.json import JSON
from rich.markup import escape


class OutputFormatter:
    """
    Prints documents to stdout and status lines to stderr.

    Documents are syntax-highlighted only when stdout is a terminal; piped
    output stays plain JSON so it can be consumed by other tools.
    """

    def __init__(self, force_color: bool = False):
        self.force_color = force_color
        self.console = Console(force_terminal=force_color or None)
        self.err_console = Console(stderr=True, force_terminal=force_color or None)

    def print_json(self, data: Any, indent: int = 2) -> None:
        """Print a document as JSON."""
        text = json.dumps(data, indent=indent, ensure_ascii=False)
        if self.force_color or click.get_text_stream("stdout").isatty():
            self.console.print(JSON(text))
        else:
            click.echo(text)

    def print_error_body(self, body: dict[str, Any]) -> None:
        """Print an error response: a headline, then the full body as JSON."""
        self.print_error(body.get("error", "Error"))
        click.echo(json.dumps(body, indent=2, ensure_ascii=False), err=True)

    def print_success(self, message: str) -> None:
        self.err_console.print(f"[green]✓[/green] {escape(message)}", soft_wrap=True)

    def print_error(self, message: str) -> None:
        self.err_console.print(f"[red]✗[/red] {escape(message)}", soft_wrap=True)

    def print_info(self, message: str) -> None:
        self.err_console.print(f"[blue]ℹ[/blue] {escape(message)}", soft_wrap=True)
