import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands


log = logging.getLogger(__name__)

AUTO_ARCHIVE_MINUTES = 60


class Threads(commands.Cog):
    """Create plain discussion threads in a text channel."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @app_commands.command(name="thread", description="Create a thread in a channel.")
    @app_commands.describe(
        channel="The channel to create the thread in",
        name="The name of the thread",
        message="Optional message to send in the thread",
    )
    @app_commands.guild_only()
    async def create_thread(
        self,
        interaction: discord.Interaction,
        channel: discord.TextChannel,
        name: app_commands.Range[str, 1, 100],
        message: Optional[str] = None,
    ) -> None:
        """Open a public thread that archives after an hour of inactivity."""
        try:
            thread = await channel.create_thread(
                name=name,
                type=discord.ChannelType.public_thread,
                auto_archive_duration=AUTO_ARCHIVE_MINUTES,
            )
            if message:
                await thread.send(message)
        except discord.HTTPException as exc:
            log.warning("Error creating thread in %s: %s", channel.id, exc)
            await interaction.response.send_message(
                "There was an error creating the thread.", ephemeral=True
            )
            return

        await interaction.response.send_message(
            f'Thread "{name}" created successfully in {channel.mention}!'
        )


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Threads(bot))
