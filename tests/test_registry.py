import asyncio

from battle.registry import BattleRegistry


def test_registry_routes_by_thread_id() -> None:
    registry: BattleRegistry[dict[str, object]] = BattleRegistry()

    async def runner() -> None:
        first = {"thread": 1001}
        second = {"thread": 1002}

        await registry.register(1001, first)
        await registry.register(1002, second)

        assert await registry.get(1001) is first
        assert await registry.get(1002) is second
        assert await registry.get(1003) is None
        assert await registry.get(None) is None
        assert await registry.values() == (first, second)

    asyncio.run(runner())


def test_registry_pop_releases_session() -> None:
    registry: BattleRegistry[str] = BattleRegistry()

    async def runner() -> None:
        await registry.register(42, "battle")

        assert await registry.pop(42) == "battle"
        assert await registry.pop(42) is None
        assert await registry.get(42) is None
        assert await registry.values() == ()

    asyncio.run(runner())
