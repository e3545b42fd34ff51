"""Slash commands and event routing for battle threads."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from battle import (
    CUSTOM_ID_NAMESPACE,
    BattleRegistry,
    BattleRules,
    BattleSession,
    Participant,
    RulesError,
    load_rules,
)


log = logging.getLogger(__name__)

THREAD_NAME_LIMIT = 100


def _load_rules_or_default(path: Optional[Path]) -> BattleRules:
    if path is None:
        return BattleRules()
    try:
        return load_rules(path)
    except RulesError as exc:
        log.warning("Falling back to default battle rules: %s", exc)
        return BattleRules()


class BattleCog(commands.Cog):
    """Create battle threads and route their events to the owning session."""

    def __init__(
        self,
        bot: commands.Bot,
        registry: BattleRegistry[BattleSession],
        *,
        rules: Optional[BattleRules] = None,
    ) -> None:
        self.bot = bot
        self.registry = registry
        self.rules = rules or BattleRules()

    async def _send_ephemeral_message(
        self, interaction: discord.Interaction, message: str
    ) -> None:
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)

    async def cog_unload(self) -> None:
        sessions = await self.registry.values()
        for session in sessions:
            session.stop_controls()
        if sessions:
            log.info("Battle cog unloaded with %d active battle(s)", len(sessions))

    async def _on_battle_finished(self, session: BattleSession) -> None:
        session.stop_controls()
        removed = await self.registry.pop(session.thread_id)
        if removed is not None:
            log.info("Battle in thread %s finished; session released", session.thread_id)

    async def _invite_members(
        self, thread: discord.Thread, members: list[discord.abc.User]
    ) -> None:
        seen: set[int] = set()
        for member in members:
            if member.id in seen:
                continue
            seen.add(member.id)
            try:
                await thread.add_user(member)
            except discord.HTTPException as exc:
                log.warning("Could not add member %s to thread %s: %s", member.id, thread.id, exc)

    # ---- Event routing ---------------------------------------------------
    @commands.Cog.listener()
    async def on_interaction(self, interaction: discord.Interaction) -> None:
        if interaction.type is not discord.InteractionType.component:
            return
        try:
            session = await self.registry.get(interaction.channel_id)
            if session is not None:
                await session.handle_interaction(interaction)
                return
            custom_id = str((interaction.data or {}).get("custom_id", ""))
            if custom_id.partition(":")[0] != CUSTOM_ID_NAMESPACE:
                return
            if not interaction.response.is_done():
                await interaction.response.send_message(
                    "This battle is no longer active.", ephemeral=True
                )
        except Exception:
            log.exception("Error routing component interaction in %s", interaction.channel_id)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return
        try:
            session = await self.registry.get(message.channel.id)
            if session is not None:
                await session.handle_message(message)
        except Exception:
            log.exception("Error routing message in %s", message.channel.id)

    @commands.Cog.listener()
    async def on_raw_thread_delete(self, payload: discord.RawThreadDeleteEvent) -> None:
        removed = await self.registry.pop(payload.thread_id)
        if removed is not None:
            removed.stop_controls()
            log.info("Battle thread %s deleted; session released", payload.thread_id)

    # ---- Slash commands --------------------------------------------------
    @app_commands.command(name="battlethread", description="Create a private battle thread")
    @app_commands.describe(attacker="The attacking member", defender="The defending member")
    @app_commands.guild_only()
    async def battle_thread(
        self,
        interaction: discord.Interaction,
        attacker: discord.Member,
        defender: discord.Member,
    ) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)

        if attacker.id == defender.id:
            await interaction.followup.send(
                "Pick two different members for the battle.", ephemeral=True
            )
            return

        channel = interaction.channel
        if not isinstance(channel, discord.TextChannel):
            await interaction.followup.send(
                "Battle threads can only be created in a text channel.", ephemeral=True
            )
            return

        thread_name = f"Battle: {attacker.display_name} vs {defender.display_name}"
        thread_name = thread_name[:THREAD_NAME_LIMIT]
        try:
            thread = await channel.create_thread(
                name=thread_name,
                type=discord.ChannelType.private_thread,
            )
        except discord.HTTPException as exc:
            log.warning("Failed to create battle thread in %s: %s", channel.id, exc)
            await interaction.followup.send(
                "There was an error creating the private battle thread.", ephemeral=True
            )
            return

        await self._invite_members(thread, [attacker, defender, interaction.user])

        try:
            await thread.send(f"Private battle thread created: {thread_name}")
        except discord.HTTPException as exc:
            log.warning("Failed to announce battle thread %s: %s", thread.id, exc)

        session = BattleSession(
            self.bot,
            thread.id,
            [Participant.from_user(attacker), Participant.from_user(defender)],
            admin_id=interaction.user.id,
            rules=self.rules,
            on_finished=self._on_battle_finished,
        )
        await self.registry.register(thread.id, session)
        await session.start()

        await interaction.followup.send(
            f'Thread "{thread_name}" created and members invited.', ephemeral=True
        )

    @app_commands.command(name="battlestatus", description="Show the state of this thread's battle")
    async def battle_status(self, interaction: discord.Interaction) -> None:
        session = await self.registry.get(interaction.channel_id)
        if session is None:
            await self._send_ephemeral_message(
                interaction, "There is no active battle in this channel."
            )
            return
        await self._send_ephemeral_message(interaction, "\n".join(session.status_lines()))


async def setup(bot: commands.Bot) -> None:
    registry = getattr(bot, "battles", None)
    if registry is None:
        registry = BattleRegistry()
        bot.battles = registry  # type: ignore[attr-defined]
    rules = _load_rules_or_default(getattr(bot, "rules_path", None))
    await bot.add_cog(BattleCog(bot, registry, rules=rules))
