"""Process entrypoint keeping every game of the configured account in sync."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from pride_sync.account import Account
from pride_sync.client import SessionClient
from pride_sync.game import FileSnapshotStore, UniverseDumpSink
from pride_sync.settings import ClientSettings, get_settings

logger = logging.getLogger(__name__)


def build_account(config: ClientSettings) -> Account:
    """Wire the session, cache and optional debug dumps from *config*."""
    diagnostics = (
        UniverseDumpSink(config.debug_dump_dir)
        if config.debug_dump_dir is not None
        else None
    )
    return Account(
        SessionClient(base_url=config.base_url),
        store=FileSnapshotStore(config.cache_dir),
        diagnostics=diagnostics,
        order_delay_seconds=config.order_delay_seconds,
        refresh_interval_seconds=config.refresh_interval_seconds,
    )


async def serve(config: ClientSettings, *, stop: asyncio.Event | None = None) -> None:
    """Log in, load every game and refresh them until *stop* is set."""
    account = build_account(config)
    try:
        profile = await account.login(config.username, config.password)
        if profile.games_in == 0:
            logger.warning("Account %s is in no games", profile.alias or config.username)
        await account.sync_games(profile)
        for game in account.games.values():
            universe = await game.load_or_refresh()
            logger.info("Universe ready: %s", universe.describe())
            game.start_refresh()
        await (stop or asyncio.Event()).wait()
    finally:
        await account.close()


def run() -> None:
    """Run the client with settings from the environment."""
    config = get_settings()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(serve(config))


__all__ = ["build_account", "run", "serve"]
