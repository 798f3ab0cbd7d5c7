"""
CLI command for a channel's concurrent live viewers.

Prints ``{channelId, videoId, liveViewers}`` as JSON on stdout and reports
the outcome through the exit code:

- 0: the channel is live
- 1: the argument is not a channel ID
- 2: the lookup failed
- 3: the channel is not live
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import typer
from rich.console import Console

from streamscout.exceptions import (
    EXIT_CODE_ERROR,
    EXIT_CODE_INTERRUPTED,
    EXIT_CODE_INVALID_ARGS,
    EXIT_CODE_LIVE,
    EXIT_CODE_NOT_LIVE,
    StreamScoutError,
)
from streamscout.models.stream import ChannelViewers
from streamscout.models.youtube_types import is_channel_id
from streamscout.services.live.scraper import LiveStreamScraper

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)


def viewers_command(
    channel_id: Optional[str] = typer.Argument(
        None, help="YouTube channel ID (UC...)", show_default=False
    ),
) -> None:
    """
    Show the live video and concurrent viewers of a channel.

    Examples:
        streamscout viewers UCSJ4gkVC6NrvII8umztf0Ow
        streamscout viewers UCSJ4gkVC6NrvII8umztf0Ow > viewers.json
    """
    if not channel_id or not is_channel_id(channel_id):
        err_console.print("Usage: streamscout viewers <CHANNEL_ID_UC...>")
        raise typer.Exit(code=EXIT_CODE_INVALID_ARGS)

    try:
        result = asyncio.run(_viewers_async(channel_id))
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(code=EXIT_CODE_INTERRUPTED)
    except StreamScoutError as e:
        err_console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(code=EXIT_CODE_ERROR)
    except Exception as e:
        logger.debug("Unexpected error for channel %s", channel_id, exc_info=True)
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=EXIT_CODE_ERROR)

    typer.echo(json.dumps(result.to_wire(), indent=2))
    raise typer.Exit(code=EXIT_CODE_LIVE if result.video_id else EXIT_CODE_NOT_LIVE)


async def _viewers_async(channel_id: str) -> ChannelViewers:
    scraper = LiveStreamScraper()
    result = await scraper.get_concurrent_viewers_from_channel(channel_id)
    logger.debug(
        "Channel %s resolved to %s with %s viewers",
        channel_id,
        result.video_id,
        result.live_viewers,
    )
    return result
