"""CLI: web5-dwn config show|set"""

from typing import Optional

import click
from rich.console import Console

console = Console()


def _load_config() -> dict:
    from web5_dwn.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from web5_dwn.cli.main import _save_config
    _save_config(cfg)


@click.group()
def config():
    """Saved CLI settings."""


@config.command("show")
def config_show():
    """Show the saved endpoint and DID."""
    cfg = _load_config()
    if not cfg:
        console.print("[yellow]Nothing saved. Run `web5-dwn config set`.[/yellow]")
        return
    console.print(f"endpoint: {cfg.get('endpoint', '[dim]unset[/dim]')}")
    console.print(f"did:      {cfg.get('did', '[dim]unset[/dim]')}")


@config.command("set")
@click.option("--endpoint", default=None, help="DWN endpoint URL")
@click.option("--did", default=None, help="Default author and target DID")
def config_set(endpoint: Optional[str], did: Optional[str]):
    """Save the endpoint and/or DID."""
    cfg = _load_config()
    if endpoint:
        cfg["endpoint"] = endpoint
    if did:
        cfg["did"] = did
    _save_config(cfg)
    console.print("[green]Saved to ~/.web5/config.json[/green]")
