from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from typing import Annotated

import typer

from newsdigest.api.handler import build_gateway
from newsdigest.api.response import create_response
from newsdigest.core.clock import utc_now
from newsdigest.core.config import CACHE_BUCKET, get_settings
from newsdigest.core.exceptions import AllSourcesFailedError, CacheReadError
from newsdigest.core.logging import configure_logging
from newsdigest.news.aggregator import aggregate
from newsdigest.news.feeds import FEEDS, get_feed
from newsdigest.news.models import digest_to_payload
from newsdigest.storage.cache import DigestCache, build_s3_client, cache_key, cache_key_for

app = typer.Typer(help="Daily news digest command-line interface")
LOGGER = logging.getLogger(__name__)


@app.command("run-once")
def run_once_command() -> None:
    """Serve one request exactly as the serverless runtime would."""
    gateway = build_gateway()
    result = asyncio.run(gateway.handle())
    typer.echo(json.dumps(create_response(result.status_code, result.body), indent=2, ensure_ascii=False))
    if not result.ok:
        raise typer.Exit(code=1)


@app.command("aggregate")
def aggregate_command(
    feed: Annotated[list[str] | None, typer.Option(help="Feed name; repeat to select several")] = None,
) -> None:
    """Fetch and merge feeds without touching the cache."""
    settings = get_settings()
    configure_logging(settings)

    try:
        feeds = [get_feed(name) for name in feed] if feed else list(FEEDS)
    except KeyError as exc:
        known = ", ".join(f.name for f in FEEDS)
        typer.echo(f"Unknown feed {exc}; known feeds: {known}")
        raise typer.Exit(code=1) from None

    try:
        items = asyncio.run(
            aggregate(
                feeds,
                timeout_seconds=settings.feed_timeout_seconds,
                max_items=settings.max_items_per_feed,
            )
        )
    except AllSourcesFailedError as exc:
        typer.echo(f"Aggregation failed: {exc}")
        raise typer.Exit(code=1) from None

    typer.echo(json.dumps(digest_to_payload(items), indent=2, ensure_ascii=False))


@app.command("cache-key")
def cache_key_command(
    day: Annotated[datetime | None, typer.Option("--date", formats=["%Y-%m-%d"])] = None,
) -> None:
    """Print the cache key for a UTC date (default: today)."""
    prefix = get_settings().cache_prefix
    key = cache_key(day.date(), prefix=prefix) if day else cache_key_for(utc_now(), prefix=prefix)
    typer.echo(key)


@app.command("healthcheck")
def healthcheck_command() -> None:
    settings = get_settings()
    configure_logging(settings)
    failed = False

    typer.echo(f"[INFO] ENV={settings.digest_env} REGION={settings.aws_region}")

    cache = DigestCache(build_s3_client(settings))
    try:
        asyncio.run(cache.check_access())
        typer.echo(f"[OK]  bucket {CACHE_BUCKET} reachable")
    except CacheReadError as exc:
        typer.echo(f"[FAIL] bucket {CACHE_BUCKET} ({exc})")
        failed = True

    if FEEDS:
        typer.echo(f"[OK]  {len(FEEDS)} feeds configured")
    else:
        typer.echo("[FAIL] no feeds configured")
        failed = True

    if failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
