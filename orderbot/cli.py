"""Click CLI for exercising the bot's routing without WhatsApp."""

from __future__ import annotations

import asyncio
import json

import click

from orderbot.config import BotSettings
from orderbot.models import InboundMessage, LookupStatus
from orderbot.routing.classifier import classify
from orderbot.routing.formatter import format_order
from orderbot.server.app import build_router, configure_logging
from orderbot.upstream.catalog import CatalogSearchClient
from orderbot.upstream.orders import OrderLookupClient


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """WhatsApp order bot tools. Upstreams are read from the environment."""
    ctx.ensure_object(dict)
    settings = BotSettings.from_env()
    configure_logging(log_level or settings.log_level)
    ctx.obj["settings"] = settings


@cli.command("classify")
@click.argument("text")
def classify_command(text: str) -> None:
    """Show the intent a message would be routed to."""
    click.echo(classify(text).model_dump_json(indent=2))


@cli.command()
@click.argument("order_number")
@click.pass_context
def lookup(ctx: click.Context, order_number: str) -> None:
    """Look up an order and print the formatted reply."""
    settings: BotSettings = ctx.obj["settings"]
    client = OrderLookupClient(settings.order_api_url, timeout=settings.order_api_timeout)
    envelope = asyncio.run(client.lookup(order_number.strip().upper()))
    if envelope.status == LookupStatus.SUCCESS:
        click.echo(format_order(envelope.record))
    elif envelope.status == LookupStatus.NOT_FOUND:
        click.echo(f"Order {order_number} not found")
    else:
        click.echo(f"Order lookup failed: {envelope.message}", err=True)
        ctx.exit(1)


@cli.command()
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, query: str) -> None:
    """Search the product catalog and print matches as JSON."""
    settings: BotSettings = ctx.obj["settings"]
    client = CatalogSearchClient(settings.catalog, timeout=settings.catalog_timeout)
    products = asyncio.run(client.search(query))
    if products is None:
        click.echo("Catalog unavailable (not configured or request failed)", err=True)
        ctx.exit(1)
    click.echo(json.dumps([p.model_dump(mode="json") for p in products], indent=2, ensure_ascii=False))


@cli.command()
@click.argument("text")
@click.option("--sender", default="cli", help="Origin id recorded for the message.")
@click.pass_context
def reply(ctx: click.Context, text: str, sender: str) -> None:
    """Route a message end to end and print the reply."""
    router = build_router(ctx.obj["settings"])
    click.echo(asyncio.run(router.handle(InboundMessage(text=text, origin_id=sender))))
