import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import bot as bot_module


def test_cog_discovery_skips_private_modules(tmp_path: Path) -> None:
    (tmp_path / "battle.py").write_text("", encoding="utf-8")
    (tmp_path / "threads.py").write_text("", encoding="utf-8")
    (tmp_path / "__init__.py").write_text("", encoding="utf-8")

    assert bot_module.get_cog_module_names(tmp_path) == ["cogs.battle", "cogs.threads"]


def test_bundled_cogs_are_discovered() -> None:
    names = bot_module.get_cog_module_names(ROOT / "cogs")
    assert names == ["cogs.battle", "cogs.threads"]


def test_load_environment_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(bot_module, "load_dotenv", lambda: None)
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)

    with pytest.raises(RuntimeError):
        bot_module.load_environment()

    monkeypatch.setenv("DISCORD_TOKEN", "secret")
    assert bot_module.load_environment() == "secret"


def test_rules_path_can_be_overridden(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("BATTLE_RULES_PATH", raising=False)
    assert bot_module.resolve_rules_path() == bot_module.DEFAULT_RULES_PATH

    custom = tmp_path / "rules.yaml"
    monkeypatch.setenv("BATTLE_RULES_PATH", str(custom))
    assert bot_module.resolve_rules_path() == custom


def test_command_errors_are_reported_to_the_user() -> None:
    class DummyResponse:
        def __init__(self, done: bool) -> None:
            self.done = done
            self.messages: list[tuple[str, bool]] = []

        def is_done(self) -> bool:
            return self.done

        async def send_message(self, content: str, *, ephemeral: bool = False) -> None:
            self.messages.append((content, ephemeral))

    fresh = SimpleNamespace(
        command=SimpleNamespace(qualified_name="battlethread"),
        response=DummyResponse(done=False),
        followup=SimpleNamespace(send=AsyncMock()),
    )
    deferred = SimpleNamespace(
        command=None,
        response=DummyResponse(done=True),
        followup=SimpleNamespace(send=AsyncMock()),
    )
    error = RuntimeError("boom")

    async def runner() -> None:
        await bot_module.on_app_command_error(fresh, error)  # type: ignore[arg-type]
        await bot_module.on_app_command_error(deferred, error)  # type: ignore[arg-type]

    asyncio.run(runner())

    assert fresh.response.messages == [(bot_module.COMMAND_ERROR_MESSAGE, True)]
    deferred.followup.send.assert_awaited_once_with(bot_module.COMMAND_ERROR_MESSAGE, ephemeral=True)
