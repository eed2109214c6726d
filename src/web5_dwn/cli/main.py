"""
web5-dwn CLI, the `web5-dwn` command.

Commands:
  web5-dwn config show|set      Saved endpoint and DID
  web5-dwn records <cmd>        write, read, query, delete
  web5-dwn protocols <cmd>      configure, query
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install web5-dwn[cli]")

from web5_dwn.protocols import ProtocolsAPI
from web5_dwn.records import RecordsAPI
from web5_dwn.transport.http import DEFAULT_ENDPOINT, HttpTransport

console = Console()
CONFIG_FILE = Path.home() / ".web5" / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _endpoint() -> str:
    ctx = click.get_current_context()
    return ctx.obj.get("endpoint") or _load_config().get("endpoint", DEFAULT_ENDPOINT)


def _did(did: Optional[str] = None) -> str:
    did = did or _load_config().get("did")
    if not did:
        console.print("[red]No DID given. Pass --author or run `web5-dwn config set --did ...`.[/red]")
        raise SystemExit(1)
    return did


def _get_records(transport: HttpTransport) -> RecordsAPI:
    return RecordsAPI(transport, _endpoint())


def _get_protocols(transport: HttpTransport) -> ProtocolsAPI:
    return ProtocolsAPI(transport, _endpoint())


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("--endpoint", default=None, help="DWN endpoint URL (overrides saved config)")
@click.option("-v", "--verbose", is_flag=True, help="Log transport activity")
@click.pass_context
def main(ctx, endpoint, verbose):
    """Decentralized Web Node client."""
    ctx.ensure_object(dict)
    ctx.obj["endpoint"] = endpoint
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(message)s",
                            handlers=[RichHandler(console=console, show_path=False)])


# Register subcommands from separate modules
from web5_dwn.cli.config import config
from web5_dwn.cli.protocols import protocols
from web5_dwn.cli.records import records

main.add_command(config)
main.add_command(records)
main.add_command(protocols)


if __name__ == "__main__":
    main()
