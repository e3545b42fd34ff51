"""Turn-based battle between two members inside a Discord thread."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Literal, Optional, Sequence

import discord

from .armies import (
    SETUP_EXAMPLE,
    SETUP_FORMAT,
    ArmiesConfiguration,
    SetupParseError,
    is_setup_command,
    parse_setup_command,
)
from .rules import BattleRules

__all__ = [
    "ACTION_ATTACK",
    "ACTION_RETREAT",
    "CUSTOM_ID_NAMESPACE",
    "BattleSession",
    "Participant",
    "SessionState",
    "build_battle_controls",
]

log = logging.getLogger(__name__)

CUSTOM_ID_NAMESPACE = "battle"
ACTION_ATTACK = "attack"
ACTION_RETREAT = "retreat"
STATUS_LOG_ENTRIES = 5

SessionState = Literal["awaiting_setup", "awaiting_turn", "resolving", "ended"]
FinishCallback = Callable[["BattleSession"], Awaitable[None]]


@dataclass
class Participant:
    """One side of a battle."""

    user_id: int
    name: str
    hp: int = 100

    @classmethod
    def from_user(cls, user: discord.abc.User) -> "Participant":
        return cls(user_id=user.id, name=user.display_name)


def build_battle_controls() -> discord.ui.View:
    """Return the Attack/Retreat buttons attached to the turn announcement."""

    view = discord.ui.View(timeout=None)
    view.add_item(
        discord.ui.Button(
            label="Attack",
            style=discord.ButtonStyle.danger,
            custom_id=f"{CUSTOM_ID_NAMESPACE}:{ACTION_ATTACK}",
        )
    )
    view.add_item(
        discord.ui.Button(
            label="Retreat",
            style=discord.ButtonStyle.secondary,
            custom_id=f"{CUSTOM_ID_NAMESPACE}:{ACTION_RETREAT}",
        )
    )
    return view


class BattleSession:
    """State machine for a single battle thread.

    The session accepts actions only from the participant whose index equals
    :attr:`turn`. A resolution holds an :class:`asyncio.Lock` while it talks
    to Discord; actions arriving in the meantime (for example a double click
    on the same button) are dropped. Once a participant reaches 0 HP the
    session is ended and rejects further actions.
    """

    def __init__(
        self,
        client: discord.Client,
        thread_id: int,
        participants: Sequence[Participant],
        admin_id: Optional[int],
        *,
        armies: Optional[ArmiesConfiguration] = None,
        rules: Optional[BattleRules] = None,
        rng: random.Random | None = None,
        on_finished: Optional[FinishCallback] = None,
    ) -> None:
        if len(participants) != 2:
            raise ValueError("A battle needs exactly two participants")
        if participants[0].user_id == participants[1].user_id:
            raise ValueError("A member cannot battle themselves")
        self.client = client
        self.thread_id = thread_id
        self.admin_id = admin_id
        self.rules = rules or BattleRules()
        self.participants: List[Participant] = [
            Participant(user_id=p.user_id, name=p.name, hp=self.rules.starting_hp)
            for p in participants
        ]
        self.turn = 0
        self.log: List[str] = []
        self.armies = armies
        self.winner_index: Optional[int] = None
        self._rng = rng
        self._on_finished = on_finished
        self._resolution_lock = asyncio.Lock()
        self._controls: Optional[discord.ui.View] = None

    # -- state -----------------------------------------------------------
    @property
    def busy(self) -> bool:
        return self._resolution_lock.locked()

    @property
    def ended(self) -> bool:
        return self.winner_index is not None

    @property
    def state(self) -> SessionState:
        if self.ended:
            return "ended"
        if self.busy:
            return "resolving"
        if self.armies is None:
            return "awaiting_setup"
        return "awaiting_turn"

    @property
    def current(self) -> Participant:
        return self.participants[self.turn]

    def opponent_index(self, index: int) -> int:
        return (index + 1) % len(self.participants)

    def can_act(self, actor_index: int) -> bool:
        return not self.ended and self.armies is not None and actor_index == self.turn

    def find_participant_index(self, user_id: int) -> Optional[int]:
        for index, participant in enumerate(self.participants):
            if participant.user_id == user_id:
                return index
        return None

    def status_lines(self) -> List[str]:
        """Summarise health, whose turn it is and the latest log entries."""

        lines = [
            f"{participant.name}: {participant.hp}/{self.rules.max_hp} HP"
            for participant in self.participants
        ]
        if self.ended:
            lines.append(f"Winner: {self.participants[self.winner_index].name}")
        elif self.armies is None:
            lines.append("Waiting for the admin to configure the armies.")
        else:
            lines.append(f"Turn: {self.current.name}")
        if self.armies is not None:
            lines.append(f"Armies: {self.armies.describe()}")
        recent = self.log[-STATUS_LOG_ENTRIES:]
        if recent:
            lines.append("Recent actions:")
            lines.extend(f"- {entry}" for entry in recent)
        return lines

    # -- outbound --------------------------------------------------------
    async def _get_channel(self) -> Optional[discord.abc.Messageable]:
        channel = self.client.get_channel(self.thread_id)
        if channel is not None:
            return channel  # type: ignore[return-value]
        try:
            return await self.client.fetch_channel(self.thread_id)  # type: ignore[return-value]
        except discord.HTTPException as exc:
            log.warning("Unable to fetch battle thread %s: %s", self.thread_id, exc)
            return None

    async def send_update(
        self, content: str, *, view: Optional[discord.ui.View] = None
    ) -> Optional[discord.Message]:
        """Post ``content`` to the battle thread, dropping it on failure."""

        channel = await self._get_channel()
        if channel is None:
            return None
        try:
            if view is None:
                return await channel.send(content)
            return await channel.send(content, view=view)
        except discord.HTTPException as exc:
            log.warning("Failed to send battle update in %s: %s", self.thread_id, exc)
            return None

    async def start(self) -> None:
        if self.armies is None:
            mention = f"<@{self.admin_id}>" if self.admin_id is not None else "Admin"
            await self.send_update(
                f"{mention}, please set up the armies by replying in this thread "
                "with the following format:\n"
                f"{SETUP_FORMAT}\n"
                f"Example: {SETUP_EXAMPLE}"
            )
            return

        names = " and ".join(participant.name for participant in self.participants)
        self.stop_controls()
        self._controls = build_battle_controls()
        await self.send_update(
            f"Battle started between {names}. It's {self.current.name}'s turn.",
            view=self._controls,
        )

    def stop_controls(self) -> None:
        """Release the persistent Attack/Retreat view from the client's view store."""

        if self._controls is not None and not self._controls.is_finished():
            self._controls.stop()

    # -- inbound ---------------------------------------------------------
    async def handle_interaction(self, interaction: discord.Interaction) -> None:
        try:
            if interaction.type is not discord.InteractionType.component:
                return
            data = interaction.data or {}
            if data.get("component_type") != discord.ComponentType.button.value:
                return
            namespace, _, action = str(data.get("custom_id", "")).partition(":")
            if namespace != CUSTOM_ID_NAMESPACE:
                return

            actor_index = self.find_participant_index(interaction.user.id)
            if actor_index is None:
                await interaction.response.send_message(
                    "You are not a participant in this battle.", ephemeral=True
                )
                return
            if self.ended:
                await interaction.response.send_message(
                    "This battle has already ended.", ephemeral=True
                )
                return
            if self.armies is None:
                await interaction.response.send_message(
                    "The battle admin still needs to configure the armies.", ephemeral=True
                )
                return
            if actor_index != self.turn:
                await interaction.response.send_message(
                    f"It's not your turn. It's {self.current.name}'s turn.", ephemeral=True
                )
                return

            await interaction.response.defer()

            if action == ACTION_ATTACK:
                await self._action_attack(actor_index)
            elif action == ACTION_RETREAT:
                await self._action_retreat(actor_index)
        except Exception:
            log.exception("Battle interaction failed in thread %s", self.thread_id)

    async def handle_message(self, message: discord.Message) -> None:
        content = message.content.strip()
        if not is_setup_command(content):
            return

        if self.admin_id is not None and message.author.id != self.admin_id:
            await message.reply("Only the battle admin can configure the armies setup.")
            return
        if self.armies is not None:
            await message.reply(f"The armies are already configured. {self.armies.describe()}")
            return

        try:
            armies = parse_setup_command(content)
        except SetupParseError as exc:
            await message.reply(f"Failed to parse setup ({exc}). Use format: {SETUP_EXAMPLE}")
            return

        self.armies = armies
        await self.send_update(f"Armies configured. {armies.describe()}")
        await self.start()

    # -- resolution ------------------------------------------------------
    async def _action_attack(self, actor_index: int) -> None:
        if self._resolution_lock.locked():
            log.debug("Dropping attack in %s; a resolution is in flight", self.thread_id)
            return
        async with self._resolution_lock:
            # Turn or outcome may have moved while the interaction was deferred.
            if not self.can_act(actor_index):
                log.debug("Dropping stale attack in %s", self.thread_id)
                return
            target_index = self.opponent_index(actor_index)
            actor = self.participants[actor_index]
            target = self.participants[target_index]
            damage = self.rules.roll_damage(self._rng)
            target.hp = max(0, target.hp - damage)
            self.log.append(f"{actor.name} attacked {target.name} for {damage} damage.")
            await self.send_update(f"{actor.name} attacks {target.name} for {damage} damage.")

            if target.hp <= 0:
                self.winner_index = actor_index
                self.stop_controls()
                await self.send_update(f"{target.name} has been defeated! {actor.name} wins!")
                if self._on_finished is not None:
                    await self._on_finished(self)
                return

            self.turn = target_index
            await self.send_update(f"It's now {self.current.name}'s turn.")

    async def _action_retreat(self, actor_index: int) -> None:
        if self._resolution_lock.locked():
            log.debug("Dropping retreat in %s; a resolution is in flight", self.thread_id)
            return
        async with self._resolution_lock:
            if not self.can_act(actor_index):
                log.debug("Dropping stale retreat in %s", self.thread_id)
                return
            actor = self.participants[actor_index]
            heal = self.rules.roll_heal(self._rng)
            actor.hp = min(self.rules.max_hp, actor.hp + heal)
            self.log.append(f"{actor.name} defended and recovered {heal} HP.")
            await self.send_update(f"{actor.name} defends and recovers {heal} HP.")
            self.turn = self.opponent_index(actor_index)
            await self.send_update(f"It's now {self.current.name}'s turn.")
