"""
Sentinel Discord Bot - Main Bot Class
=====================================

Discord client hosting the moderation service for discord.gg/syria.

DESIGN:
    The bot owns the process lifecycle and nothing else:
    - setup_hook loads the event cogs (message routing)
    - the first on_ready checks each guild's permissions and roles,
      then starts the moderation service (mute restore, cleanup loop)
    - close() stops the service before the gateway and closes the
      database last

    Reconnects fire on_ready again, possibly while the first start is
    still restoring mutes; the service is only built and started once.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime
from typing import Optional

import discord
from discord.ext import commands

from src.core.logger import logger
from src.core.config import NY_TZ, get_config
from src.core.database import get_db
from src.events import EVENT_COGS
from src.services.moderation import ModerationService
from src.services.moderation.actions import check_guild_setup


class SentinelBot(commands.Bot):
    """
    Moderation bot.

    Attributes:
        config: Loaded configuration.
        db: Moderation database (mutes and ledgers).
        moderation: Running moderation service, None until ready.
    """

    def __init__(self) -> None:
        self.config = get_config()

        # Message content for filtering, members for mute restore lookups
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            allowed_mentions=discord.AllowedMentions(everyone=False, users=False, roles=True),
        )

        self.db = get_db()
        self.started_at: datetime = datetime.now(NY_TZ)
        self.moderation: Optional[ModerationService] = None
        self._moderation_starting = False
        self._closing = False

    # =========================================================================
    # Startup
    # =========================================================================

    async def setup_hook(self) -> None:
        loaded = 0
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                loaded += 1
            except commands.ExtensionError as e:
                logger.error("Event Cog Failed To Load", [
                    ("Cog", cog),
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:200]),
                ])
        logger.info("Event Cogs Loaded", [("Loaded", f"{loaded}/{len(EVENT_COGS)}")])

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)

    async def on_ready(self) -> None:
        if self.moderation is not None or self._moderation_starting:
            logger.info("Gateway Reconnected", [("Guilds", str(len(self.guilds)))])
            return
        # Set before the first await so a reconnect during start() sees it
        self._moderation_starting = True

        logger.tree("SENTINEL ONLINE", [
            ("Name", str(self.user)),
            ("ID", str(self.user.id) if self.user else "?"),
            ("Guilds", str(len(self.guilds))),
        ], emoji="🛡️")

        for guild in self.guilds:
            self._log_guild_setup(guild)

        try:
            service = ModerationService(self, self.config, self.db)
            await service.start()
        except Exception as e:
            logger.error("Moderation Service Failed To Start", [
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])
            return
        finally:
            self._moderation_starting = False
        self.moderation = service

    def _log_guild_setup(self, guild: discord.Guild) -> None:
        problems = check_guild_setup(guild, self.config)
        if not problems:
            logger.info("Guild Ready For Moderation", [("Guild", f"{guild.name} ({guild.id})")])
            return
        logger.warning("Guild Setup Incomplete", [
            ("Guild", f"{guild.name} ({guild.id})"),
            *[("Problem", p) for p in problems],
        ])

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def close(self) -> None:
        if self._closing:
            return
        self._closing = True

        if self.moderation is not None:
            await self.moderation.stop()
            self.moderation = None

        await super().close()
        self.db.close()

        logger.tree("SENTINEL STOPPED", [
            ("Uptime", str(datetime.now(NY_TZ) - self.started_at).split(".")[0]),
        ], emoji="🛑")


__all__ = ["SentinelBot"]
