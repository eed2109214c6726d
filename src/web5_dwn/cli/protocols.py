"""CLI: web5-dwn protocols configure|query"""

import json

import click
from rich.console import Console
from rich.table import Table

from web5_dwn.transport.http import HttpTransport

console = Console()


def _did(did=None) -> str:
    from web5_dwn.cli.main import _did
    return _did(did)


def _get_protocols(transport):
    from web5_dwn.cli.main import _get_protocols
    return _get_protocols(transport)


def _run(coro):
    from web5_dwn.cli.main import _run
    return _run(coro)


@click.group()
def protocols():
    """Protocol commands."""


@protocols.command("configure")
@click.argument("protocol")
@click.argument("definition_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--target", default=None)
@click.option("--author", default=None)
def protocols_configure(protocol, definition_file, target, author):
    """Install PROTOCOL from a JSON definition file."""
    author = _did(author)
    target = target or author
    with open(definition_file) as f:
        definition = json.load(f)

    async def _configure():
        async with HttpTransport() as transport:
            with console.status("Configuring protocol..."):
                reply = await _get_protocols(transport).configure(
                    target, author=author, message={"protocol": protocol, "definition": definition},
                )
        color = "green" if reply.status.ok else "red"
        console.print(f"[{color}]{reply.status.code} {reply.status.detail}[/{color}]")

    _run(_configure())


@protocols.command("query")
@click.option("--target", default=None)
@click.option("--author", default=None)
@click.option("--json-output", "--json", is_flag=True)
def protocols_query(target, author, json_output):
    """List installed protocols."""
    author = _did(author)
    target = target or author

    async def _query():
        async with HttpTransport() as transport:
            reply = await _get_protocols(transport).query(target, author=author)
        entries = reply.entries or []
        if json_output:
            click.echo(json.dumps(entries, indent=2))
            return
        table = Table(title=f"Protocols ({len(entries)})")
        table.add_column("Protocol", style="bold")
        table.add_column("Created")
        for entry in entries:
            descriptor = entry.get("descriptor", {})
            table.add_row(descriptor.get("protocol", ""), descriptor.get("dateCreated", ""))
        console.print(table)

    _run(_query())
