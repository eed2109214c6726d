"""CLI: web5-dwn records write|read|query|delete"""

import json
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from web5_dwn.transport.http import HttpTransport

console = Console()


def _did(did: Optional[str] = None) -> str:
    from web5_dwn.cli.main import _did
    return _did(did)


def _get_records(transport):
    from web5_dwn.cli.main import _get_records
    return _get_records(transport)


def _run(coro):
    from web5_dwn.cli.main import _run
    return _run(coro)


def _status_line(status) -> str:
    color = "green" if status.ok else "red"
    return f"[{color}]{status.code} {status.detail}[/{color}]"


@click.group()
def records():
    """Record commands."""


@records.command("write")
@click.argument("data")
@click.option("--target", default=None, help="Target DID (defaults to saved DID)")
@click.option("--author", default=None, help="Author DID (defaults to saved DID)")
@click.option("--data-format", default=None, help="e.g. text/plain, application/json")
@click.option("--schema", default=None)
@click.option("--protocol", default=None)
@click.option("--protocol-path", default=None)
@click.option("--json-data", is_flag=True, help="Parse DATA as JSON")
def records_write(data, target, author, data_format, schema, protocol, protocol_path, json_data):
    """Write a record holding DATA."""
    author = _did(author)
    target = target or author
    payload = json.loads(data) if json_data else data
    message = {k: v for k, v in {
        "dataFormat": data_format,
        "schema": schema,
        "protocol": protocol,
        "protocolPath": protocol_path,
    }.items() if v is not None}

    async def _write():
        async with HttpTransport() as transport:
            with console.status("Writing record..."):
                result = await _get_records(transport).write(target, author=author, data=payload, message=message)
        console.print(_status_line(result.status))
        if result.record:
            console.print(f"[bold]recordId:[/bold] {result.record.id}")

    _run(_write())


@records.command("read")
@click.argument("record_id")
@click.option("--target", default=None)
@click.option("--author", default=None)
@click.option("--json-output", "--json", is_flag=True, help="Print the payload as parsed JSON")
def records_read(record_id, target, author, json_output):
    """Read the payload of RECORD_ID."""
    author = _did(author)
    target = target or author

    async def _read():
        async with HttpTransport() as transport:
            result = await _get_records(transport).read(target, author=author, message={"recordId": record_id})
            if not result.record:
                console.print(_status_line(result.status))
                raise SystemExit(1)
            if json_output:
                click.echo(json.dumps(await result.record.data.json(), indent=2))
            else:
                click.echo(await result.record.data.text())

    _run(_read())


@records.command("query")
@click.option("--target", default=None)
@click.option("--author", default=None)
@click.option("--schema", default=None)
@click.option("--protocol", default=None)
@click.option("--json-output", "--json", is_flag=True)
def records_query(target, author, schema, protocol, json_output):
    """List records matching a filter."""
    author = _did(author)
    target = target or author
    filter_ = {k: v for k, v in {"schema": schema, "protocol": protocol}.items() if v is not None}

    async def _query():
        async with HttpTransport() as transport:
            result = await _get_records(transport).query(target, author=author, message={"filter": filter_})
        entries = result.entries or []
        if json_output:
            click.echo(json.dumps([r.to_json() for r in entries], indent=2))
            return
        table = Table(title=f"Records ({len(entries)})")
        table.add_column("Record ID", style="bold")
        table.add_column("Format")
        table.add_column("Size")
        table.add_column("Created")
        for r in entries:
            table.add_row(r.id, r.data_format or "", str(r.data_size or ""), r.date_created or "")
        console.print(table)

    _run(_query())


@records.command("delete")
@click.argument("record_id")
@click.option("--target", default=None)
@click.option("--author", default=None)
def records_delete(record_id, target, author):
    """Delete RECORD_ID."""
    author = _did(author)
    target = target or author

    async def _delete():
        async with HttpTransport() as transport:
            with console.status("Deleting..."):
                result = await _get_records(transport).delete(target, author=author, message={"recordId": record_id})
        console.print(_status_line(result.status))

    _run(_delete())
