# SPDX-License-Identifier: MPL-2.0
"""Main CLI entry point."""
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional, Tuple

import click
from pydantic import ValidationError

from moltbot.bot import Moltbot
from moltbot.config import Settings, configure_logging
from moltbot.core.crypto import export_public_key_pem, load_public_key
from moltbot.core.exceptions import MoltbotError
from moltbot.core.feed import format_feed, verify_post
from moltbot.core.models import Post


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _settings(ctx: click.Context) -> Settings:
    return ctx.ensure_object(Settings)


def _bot(settings: Settings) -> Moltbot:
    return Moltbot(settings.key_store(), embed_public_key=settings.embed_public_key)


def _known_key(settings: Settings, public_key_path: Optional[str]) -> Optional[str]:
    """Return the key to verify against: the given file or the local bot key."""
    if public_key_path:
        pem = Path(public_key_path).read_bytes()
        return export_public_key_pem(load_public_key(pem))
    pair = settings.key_store().load()
    return export_public_key_pem(pair.public_key) if pair else None


@click.group()  # type: ignore[misc]
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override MOLTBOT_LOG_LEVEL.",
)
@click.option("--key-dir", type=click.Path(file_okay=False), help="Override MOLTBOT_KEY_DIR.")
@click.option("--feed", "feed_path", type=click.Path(dir_okay=False), help="Override MOLTBOOK_FEED_PATH.")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], key_dir: Optional[str], feed_path: Optional[str]) -> None:
    """Moltbot CLI: attest bot outputs and verify Moltbook posts."""
    try:
        settings = Settings.from_env()
    except MoltbotError as e:
        _fail(e.message)
    if key_dir:
        settings.key_dir = Path(key_dir)
    if feed_path:
        settings.feed_path = Path(feed_path)
    configure_logging(settings.log_level if log_level is None else getattr(logging, log_level.upper()))
    ctx.obj = settings


@cli.command()  # type: ignore[misc]
@click.pass_context
def keys(ctx: click.Context) -> None:
    """Ensure the bot key pair exists and print its public key."""
    settings = _settings(ctx)
    try:
        pem = _bot(settings).public_key_pem()
    except MoltbotError as e:
        _fail(f"loading keys: {e.message}")
    click.echo("Moltbot keys ready.")
    click.echo(f"Public key (share with Moltbook): {settings.key_store().storage.public_key_path}")
    click.echo("Public key PEM:")
    click.echo(pem, nl=False)


@cli.command()  # type: ignore[misc]
@click.argument("prompt", nargs=-1)
@click.pass_context
def ask(ctx: click.Context, prompt: Tuple[str, ...]) -> None:
    """Run the bot on PROMPT and print the attested post as JSON."""
    text = " ".join(prompt) or "Hello, moltbot."
    try:
        post = _bot(_settings(ctx)).run(text)
    except MoltbotError as e:
        _fail(e.message)
    click.echo(json.dumps(post.to_wire(), indent=2, ensure_ascii=False))


@cli.command()  # type: ignore[misc]
@click.argument("prompt", nargs=-1)
@click.pass_context
def post(ctx: click.Context, prompt: Tuple[str, ...]) -> None:
    """Run the bot on PROMPT and append the attested post to the feed."""
    settings = _settings(ctx)
    text = " ".join(prompt) or "Hello from CLI."
    try:
        result = _bot(settings).run(text)
        settings.feed().append(result)
    except MoltbotError as e:
        _fail(e.message)
    click.echo("Posted to Moltbook.")
    click.echo(f"Prompt: {result.prompt}")
    click.echo(f"Output: {result.output}")


@cli.command()  # type: ignore[misc]
@click.option("--public-key", "-k", "public_key_path", type=click.Path(exists=True, dir_okay=False),
              help="Bot public key (PEM) to verify against. Defaults to the local bot key.")
@click.option("--require-known-key", is_flag=True,
              help="Reject posts whose embedded key is not the bot key.")
@click.pass_context
def feed(ctx: click.Context, public_key_path: Optional[str], require_known_key: bool) -> None:
    """List feed posts with their verification badge."""
    settings = _settings(ctx)
    try:
        known_key = _known_key(settings, public_key_path)
    except MoltbotError as e:
        _fail(e.message)
    except OSError as e:
        _fail(f"reading public key: {e}")
    posts = settings.feed().load_and_verify(known_key, require_known_key=require_known_key)
    click.echo(format_feed(posts))


@cli.command()  # type: ignore[misc]
@click.argument("post_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--public-key", "-k", "public_key_path", type=click.Path(exists=True, dir_okay=False),
              help="Bot public key (PEM) to verify against. Defaults to the local bot key.")
@click.option("--require-known-key", is_flag=True,
              help="Reject the post if its embedded key is not the bot key.")
@click.option("--output", "-o", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.pass_context
def verify(
    ctx: click.Context,
    post_file: str,
    public_key_path: Optional[str],
    require_known_key: bool,
    output: str,
) -> None:
    """Verify a single post stored as JSON in POST_FILE."""
    settings = _settings(ctx)
    try:
        known_key = _known_key(settings, public_key_path)
    except MoltbotError as e:
        _fail(e.message)
    except OSError as e:
        _fail(f"reading public key: {e}")

    try:
        with open(post_file, "r", encoding="utf-8") as f:
            candidate = Post.model_validate(json.load(f))
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        click.echo(f"Warning: malformed post: {e}", err=True)
        verified = False
    else:
        verified = verify_post(candidate, known_key, require_known_key=require_known_key)

    if output == "json":
        click.echo(json.dumps({"verified": verified}))
    else:
        click.echo("VALID" if verified else "INVALID")
    sys.exit(0 if verified else 1)


@cli.command()  # type: ignore[misc]
def version() -> None:
    """Show version information."""
    from moltbot import __version__

    click.echo(f"Moltbot v{__version__}")


if __name__ == "__main__":
    cli()
