#!/usr/bin/env python3
"""
Topic Digest CLI - one-off digests and the web server
"""

import asyncio
import json
import logging

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from topic_digest import __version__
from topic_digest.models import DigestResponse
from topic_digest.pipeline import DigestPipeline
from topic_digest.settings import DigestSettings
from topic_digest.text import collapse_whitespace

console = Console()
err_console = Console(stderr=True)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def get_pipeline(settings: DigestSettings) -> DigestPipeline:
    """Pipeline for one-off runs (no response cache)"""
    return DigestPipeline.from_settings(settings)


async def _run_once(pipeline: DigestPipeline, topic: str) -> DigestResponse:
    try:
        return await pipeline.generate(topic)
    finally:
        await pipeline.aclose()


def _print_digest(result: DigestResponse) -> None:
    console.print(f"Fetched {len(result.tweets)} tweets from unique authors.\n")

    for i, post in enumerate(result.tweets, start=1):
        when = post.created_at.astimezone().strftime("%Y-%m-%d %H:%M") if post.created_at else ""
        header = f"{i}. {post.author_name} (@{post.author_username})" + (f" - {when}" if when else "")
        console.print(escape(header))
        console.print("   " + escape(collapse_whitespace(post.text)))
        console.print()

    console.print(Panel(escape(result.summary.summary), title="Summary"))
    if result.summary.keywords:
        console.print("[bold]Keywords:[/bold] " + escape(", ".join(result.summary.keywords)))
    console.print(Panel(escape(result.summary.suggested_post), title="Suggested Post"))


@click.group()
def cli():
    """Topic Digest - summarize what people are posting about a topic"""
    pass


@cli.command()
@click.argument("topic", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Print the response payload as JSON")
def run(topic, as_json):
    """Fetch, summarize and moderate a digest for TOPIC"""
    settings = DigestSettings()
    _configure_logging(settings.log_level if not as_json else "WARNING")
    text = " ".join(topic).strip()

    try:
        pipeline = get_pipeline(settings)
        result = asyncio.run(_run_once(pipeline, text))
    except Exception as e:
        err_console.print(f"Error: {escape(str(e) or e.__class__.__name__)}")
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_json_dict(), indent=2))
    else:
        _print_digest(result)


@cli.command()
def serve():
    """Start the web server"""
    from topic_digest.server.server import main as serve_main

    serve_main()


@cli.command()
def version():
    """Print the package version"""
    click.echo(__version__)


if __name__ == "__main__":
    cli()
