"""
Command-line interface for nanoget.

Provides ``nanoget get URL`` to print a response body and
``nanoget request URL`` to inspect the status line, headers and body.
"""

import logging
import sys
from typing import List, NoReturn, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from nanoget import __version__
from nanoget.clients.http1 import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT, HTTP1Client
from nanoget.errors import NanoGetError
from nanoget.request import METHODS, Request
from nanoget.response import Response
from nanoget.utils.logging import get_logger, setup_logging

console = Console()
error_console = Console(stderr=True)


def _fail(message: str) -> NoReturn:
    error_console.print(f"[bold red]Error:[/] {escape(message)}", markup=True, highlight=False)
    sys.exit(1)


def _parse_headers(header: Tuple[str, ...]) -> List[Tuple[str, str]]:
    """Parse ``Name: value`` option strings into pairs."""
    headers = []
    for h in header:
        if ":" not in h:
            raise click.BadParameter(f"Invalid header format: {h!r}", param_hint="--header")
        name, value = h.split(":", 1)
        headers.append((name.strip(), value.strip()))
    return headers


@click.group()
@click.version_option(__version__, prog_name="nanoget")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-file", help="Log file path")
def cli(debug: bool, log_file: Optional[str]):
    """nanoget: a minimal HTTP/1.1 GET client."""
    setup_logging(level=logging.WARNING, log_file=log_file, verbose=debug)


@cli.command()
@click.argument("url")
@click.option("--timeout", "-t", default=DEFAULT_TIMEOUT, help="Read timeout in seconds")
@click.option("--verify-ssl/--no-verify-ssl", default=True, help="Verify SSL certificates")
def get(url: str, timeout: float, verify_ssl: bool):
    """Fetch URL and print the response body."""
    client = HTTP1Client(timeout=timeout, verify_ssl=verify_ssl)
    try:
        response = client.execute(Request.default_get_request(url))
    except NanoGetError as e:
        _fail(str(e))
    click.echo(response.text, nl=False)


@cli.command()
@click.argument("url")
@click.option("--method", "-m", default="GET", type=click.Choice(METHODS, case_sensitive=False),
              help="HTTP method to use")
@click.option("--header", "-H", multiple=True, help="HTTP header (can be used multiple times)")
@click.option("--data", "-d", help="HTTP request body")
@click.option("--include", "-i", is_flag=True, help="Show the status line and headers")
@click.option("--timeout", "-t", default=DEFAULT_TIMEOUT, help="Read timeout in seconds")
@click.option("--connect-timeout", "-c", default=DEFAULT_CONNECT_TIMEOUT,
              help="Connection timeout in seconds")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True),
              help="Output file for the response body")
@click.option("--verify-ssl/--no-verify-ssl", default=True, help="Verify SSL certificates")
def request(
    url: str,
    method: str,
    header: Tuple[str, ...],
    data: Optional[str],
    include: bool,
    timeout: float,
    connect_timeout: float,
    output: Optional[str],
    verify_ssl: bool,
):
    """Send a request to URL and show the response.

    URL should be in the format http(s)://hostname[:port]/path
    """
    headers = _parse_headers(header)
    try:
        req = Request(url, method=method, headers=headers, body=data)
    except NanoGetError as e:
        _fail(str(e))

    client = HTTP1Client(
        timeout=timeout,
        connect_timeout=connect_timeout,
        verify_ssl=verify_ssl,
    )
    try:
        response = _run_request(client, req)
    except NanoGetError as e:
        get_logger().debug("Request failed", exc_info=True)
        _fail(str(e))

    if include:
        _print_head(response)

    if output:
        with open(output, "wb") as f:
            f.write(response.body)
        console.print(f"[bold green]Response saved to:[/] {escape(output)}")
    else:
        click.echo(response.text, nl=False)


def _run_request(client: HTTP1Client, req: Request) -> Response:
    """Execute a request behind a transient spinner."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        console=error_console,
        transient=True,
    ) as progress:
        progress.add_task(escape(f"{req.method} {req.locator.url}"), total=None)
        return client.execute(req)


def _print_head(response: Response) -> None:
    console.print(
        f"[bold green]{response.http_version} {response.status_code}[/] {escape(response.status_text)}",
        highlight=False,
    )
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Name", style="blue", no_wrap=True)
    table.add_column("Value", overflow="fold")
    for name, value in response.headers.items():
        table.add_row(escape(name), escape(value))
    console.print(table)
    if response.elapsed is not None:
        console.print(f"[dim]Response time: {response.elapsed:.6f} seconds[/]")
    console.print()


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
