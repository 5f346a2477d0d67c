"""CLI entry point for postsync."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich import print as rprint
from rich.panel import Panel
from rich.syntax import Syntax

from postsync.config import PostsyncConfig, load_config, resolve_secret
from postsync.config.loader import DEFAULT_CONFIG_TEMPLATE
from postsync.dispatcher import ChangeDispatcher
from postsync.errors import StoreError, Unauthorized
from postsync.posts import WebhookEvent
from postsync.store import create_store
from postsync.web import build_app, check_token
from postsync.web.app import describe

app = typer.Typer(
    name="postsync",
    help="Mirror Able blog posts into a GitHub repository.",
)

config_app = typer.Typer(help="Manage postsync configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: PostsyncConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; message and traceback are escaped by json.dumps."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _get_config() -> PostsyncConfig:
    if _config is None:
        return load_config()
    return _config


def configure_logging(cfg: PostsyncConfig) -> None:
    handler = logging.StreamHandler()
    if cfg.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logging.basicConfig(level=_LOG_LEVELS[cfg.log_level], handlers=[handler], force=True)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to postsync.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    configure_logging(_config)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", help="Bind port"),
) -> None:
    """Run the webhook listener."""
    import uvicorn

    cfg = _get_config()
    try:
        web_app = build_app(cfg)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    bind_host = host or cfg.server.host
    bind_port = port or cfg.server.port
    rprint(f"[bold]Listening[/bold] on {bind_host}:{bind_port} ({cfg.github.repo})")
    uvicorn.run(web_app, host=bind_host, port=bind_port, log_config=None)


@app.command()
def lookup(
    slug_id: str = typer.Argument(..., help="External id of the post"),
) -> None:
    """Find the post file for an external id."""
    cfg = _get_config()
    try:
        store = create_store(cfg.github)
        post = asyncio.run(store.find_by_external_id(slug_id))
    except (ValueError, StoreError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if post is None:
        rprint(f"[yellow]No post found for '{slug_id}'.[/yellow]")
        raise typer.Exit(0)

    panel_text = (
        f"[bold]name:[/bold] {post.name}\n"
        f"[bold]path:[/bold] {post.path}\n"
        f"[bold]sha:[/bold] {post.sha}"
    )
    rprint(Panel(panel_text, title=slug_id, border_style="blue"))


@app.command()
def replay(
    payload: Path = typer.Argument(..., help="Saved webhook body (JSON)"),
) -> None:
    """Dispatch a saved webhook body without going through HTTP."""
    cfg = _get_config()
    try:
        raw = json.loads(payload.read_text())
    except (OSError, json.JSONDecodeError) as e:
        rprint(f"[red]Error:[/red] Could not read {payload}: {e}")
        raise typer.Exit(1)

    try:
        check_token(raw, resolve_secret(cfg.webhook.token_env))
        event = WebhookEvent.model_validate(raw)
        store = create_store(cfg.github)
    except Unauthorized:
        rprint("[red]Error:[/red] webhook token does not match")
        raise typer.Exit(1)
    except ValidationError as e:
        rprint(f"[red]Invalid payload:[/red] {e}")
        raise typer.Exit(1)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    dispatcher = ChangeDispatcher(store, file_extension=cfg.github.file_extension)
    try:
        result = asyncio.run(dispatcher.dispatch(event))
    except StoreError as e:
        rprint(f"[red]Failed:[/red] {e}")
        raise typer.Exit(1)

    rprint(f"[green]{describe(result)}[/green]")


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))
    if not cfg.github.repo:
        rprint(
            "[yellow]github.repo is not set.[/yellow] "
            "Set it in postsync.yaml or export GITHUB_USER and GITHUB_REPO."
        )


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default postsync.yaml in current directory."""
    target = Path("postsync.yaml")
    if target.exists() and not force:
        rprint("[yellow]postsync.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
