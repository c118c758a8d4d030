import asyncio

from synthetics.infra.nonce import NonceCoordinator


def test_shared_lock_for_account():
    async def inner():
        coord = NonceCoordinator()
        lock_a1 = await coord.get_lock("0xAbC")
        lock_a2 = await coord.get_lock("0xabc")
        lock_b = await coord.get_lock("0xdef")
        assert lock_a1 is lock_a2
        assert lock_a1 is not lock_b

    asyncio.run(inner())


def test_lock_serialization():
    async def inner():
        coord = NonceCoordinator()
        lock = await coord.get_lock("acctX")
        order = []

        async def task(name: str):
            async with lock:
                order.append((name, "start"))
                await asyncio.sleep(0.01)
                order.append((name, "end"))

        await asyncio.gather(*(task(str(i)) for i in range(3)))
        assert len(order) == 6
        # no interleaving: every start is immediately followed by its end
        for i in range(0, 6, 2):
            assert order[i][0] == order[i + 1][0]

    asyncio.run(inner())
