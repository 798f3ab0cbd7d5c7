"""
CLI command for checking several channels for live streams.

Channels are looked up one after another with a pause between network
lookups. By default the metadata API is used and the direct scraper takes
over when the API cannot be reached.
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from streamscout.config.settings import settings
from streamscout.exceptions import EXIT_CODE_INTERRUPTED, EXIT_CODE_INVALID_ARGS
from streamscout.models.stream import StreamMetadata
from streamscout.services.batch import BatchOrchestrator
from streamscout.services.cache import CachedMetadataService, MetadataCache
from streamscout.services.live.scraper import LiveStreamScraper
from streamscout.services.metadata_client import MetadataAPIClient
from streamscout.services.sources import (
    FallbackMetadataSource,
    MetadataSource,
    ScrapeMetadataSource,
)
from streamscout.services.stream_cards import format_viewers, to_stream_card

logger = logging.getLogger(__name__)

console = Console()


class SourceChoice(str, Enum):
    """Where channel metadata comes from."""

    AUTO = "auto"
    API = "api"
    SCRAPE = "scrape"


def build_source(choice: SourceChoice) -> MetadataSource:
    """Build the metadata source for ``choice``."""
    if choice == SourceChoice.API:
        return MetadataAPIClient(settings)
    scrape = ScrapeMetadataSource(LiveStreamScraper(settings))
    if choice == SourceChoice.SCRAPE:
        return scrape
    return FallbackMetadataSource(MetadataAPIClient(settings), scrape)


def live_command(
    channel_ids: List[str] = typer.Argument(..., help="YouTube channel IDs (UC...)"),
    show_all: bool = typer.Option(
        False, "--all", "-a", help="Also list channels that are not live"
    ),
    source: SourceChoice = typer.Option(
        SourceChoice.AUTO, "--source", "-s", help="Metadata source"
    ),
    delay: Optional[float] = typer.Option(
        None,
        "--delay",
        "-d",
        help="Seconds to wait between network lookups (default: from settings)",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print stream cards as JSON"),
) -> None:
    """
    Check channels for live streams.

    Examples:
        streamscout live UCSJ4gkVC6NrvII8umztf0Ow
        streamscout live UCSJ4gkVC6NrvII8umztf0Ow UC4R8DWoMoI7CAwX8_LjQHig --all
        streamscout live UCSJ4gkVC6NrvII8umztf0Ow --source scrape --delay 1.0
    """
    if delay is not None and delay < 0:
        console.print("[red]Error: --delay must be non-negative[/red]")
        raise typer.Exit(code=EXIT_CODE_INVALID_ARGS)

    try:
        streams = asyncio.run(
            _live_async(
                channel_ids,
                source,
                settings.batch_delay_seconds if delay is None else delay,
                live_only=not show_all,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(code=EXIT_CODE_INTERRUPTED)

    if as_json:
        cards = [to_stream_card(s).to_wire() for s in streams if s.is_live_now]
        typer.echo(json.dumps(cards, indent=2))
        return

    _display_streams(streams, total=len(channel_ids))


async def _live_async(
    channel_ids: list[str],
    source: SourceChoice,
    delay: float,
    live_only: bool,
) -> list[StreamMetadata]:
    service = CachedMetadataService(
        build_source(source),
        cache=MetadataCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
        ),
    )
    orchestrator = BatchOrchestrator(service, delay_seconds=delay)
    return await orchestrator.batch_resolve_channels(channel_ids, live_only=live_only)


def _display_streams(streams: list[StreamMetadata], total: int) -> None:
    """
    Display live streams as a table.

    Parameters
    ----------
    streams : list[StreamMetadata]
        Resolved channels, live or not.
    total : int
        Number of channels that were requested.
    """
    live = [s for s in streams if s.is_live_now]
    if not streams:
        console.print(f"[yellow]No live streams found ({total} channels checked)[/yellow]")
        return

    table = Table(title=f"Live Streams ({len(live)} of {total} channels)")
    table.add_column("Status")
    table.add_column("Channel", style="cyan")
    table.add_column("Title")
    table.add_column("Viewers", justify="right", style="green")
    table.add_column("Duration", justify="right")
    table.add_column("Category", style="magenta")
    table.add_column("Video ID", style="dim")

    for stream in streams:
        if not stream.is_live_now:
            table.add_row(
                "[dim]offline[/dim]",
                stream.channel_name or stream.channel_id or "",
                "", "", "", "", "",
            )
            continue
        card = to_stream_card(stream)
        table.add_row(
            "[red]● LIVE[/red]",
            card.channel_name,
            card.title,
            format_viewers(stream.concurrent_viewers),
            card.duration,
            card.category,
            card.video_id,
        )

    console.print(table)
