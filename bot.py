import logging
import os
from pathlib import Path

import discord
from discord import app_commands
from discord.ext import commands
from dotenv import load_dotenv

from battle import BattleRegistry, BattleSession

DEFAULT_RULES_PATH = Path(__file__).parent / "data" / "battle_rules.yaml"
COMMAND_ERROR_MESSAGE = "There was an error while executing this command!"


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def get_cog_module_names(cogs_path: Path) -> list[str]:
    module_names: list[str] = []
    for path in sorted(cogs_path.glob("*.py")):
        if path.name.startswith("__"):
            continue
        module_names.append(f"cogs.{path.stem}")
    return module_names


def load_environment() -> str:
    load_dotenv()
    token = os.getenv("DISCORD_TOKEN")
    if not token:
        raise RuntimeError(
            "DISCORD_TOKEN environment variable is required. "
            "Set it in the .env file before starting the bot."
        )
    return token


def resolve_rules_path() -> Path:
    configured = os.getenv("BATTLE_RULES_PATH")
    return Path(configured) if configured else DEFAULT_RULES_PATH


async def load_cogs(bot: commands.Bot, cogs_path: Path) -> None:
    module_names = get_cog_module_names(cogs_path)
    for module_name in module_names:
        await bot.load_extension(module_name)
        logging.info("Loaded cog: %s", module_name)


class SlashCommandBot(commands.Bot):
    """Bot subclass that only supports slash (application) commands."""

    def __init__(self, *, rules_path: Path | None = None) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )
        self._cogs_path = Path(__file__).parent / "cogs"
        self.rules_path = rules_path or DEFAULT_RULES_PATH
        self.battles: BattleRegistry[BattleSession] = BattleRegistry()

    async def setup_hook(self) -> None:  # type: ignore[override]
        self.tree.error(on_app_command_error)
        await load_cogs(self, self._cogs_path)
        logging.info("All cogs loaded")
        synced_commands = await self.tree.sync()
        logging.info("Synced %s application commands", len(synced_commands))

    def add_command(  # type: ignore[override]
        self, command: commands.Command, *args, **kwargs
    ) -> None:
        raise TypeError("SlashCommandBot does not support prefixed commands.")

    async def process_commands(self, message: discord.Message) -> None:  # type: ignore[override]
        """Override to disable prefix command processing entirely."""
        return


async def on_app_command_error(
    interaction: discord.Interaction, error: app_commands.AppCommandError
) -> None:
    command_name = interaction.command.qualified_name if interaction.command else "unknown"
    logging.error("Error while executing /%s", command_name, exc_info=error)
    try:
        if interaction.response.is_done():
            await interaction.followup.send(COMMAND_ERROR_MESSAGE, ephemeral=True)
        else:
            await interaction.response.send_message(COMMAND_ERROR_MESSAGE, ephemeral=True)
    except discord.HTTPException:
        logging.debug("Unable to report command failure for /%s", command_name)


def create_bot() -> commands.Bot:
    return SlashCommandBot(rules_path=resolve_rules_path())


def main() -> None:
    configure_logging()
    token = load_environment()
    bot = create_bot()

    try:
        bot.run(token)
    except KeyboardInterrupt:
        logging.info("Shutting down bot")


if __name__ == "__main__":
    main()
