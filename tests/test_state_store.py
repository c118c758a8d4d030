"""
Persisted key-value stores.
"""

import asyncio

from synthetics.state.state import MemoryStore, StateStore
from synthetics.state.state_atomic import AtomicStateStore
from synthetics.state.trade_config import TradeConfig, TradeType
from synthetics.state.trade_options import TradeConfigStateMachine, trade_options_key

from conftest import ACCOUNT


def test_round_trip(tmp_path):
    store = StateStore(42161, ACCOUNT, str(tmp_path))
    store.set("a", {"big": 10**30, "list": [1, 2]})
    reopened = StateStore(42161, ACCOUNT, str(tmp_path))
    # integers beyond 64 bits are persisted as decimal strings
    assert reopened.get("a") == {"big": str(10**30), "list": [1, 2]}


def test_path_is_scoped_per_chain_and_account(tmp_path):
    a = StateStore(42161, ACCOUNT, str(tmp_path))
    b = StateStore(43114, ACCOUNT, str(tmp_path))
    assert a.path != b.path
    assert a.path.name == f"state_42161_{ACCOUNT.lower()}.json"
    assert not a.tmp.exists()


def test_corrupt_file_reads_as_empty(tmp_path):
    store = StateStore(42161, None, str(tmp_path))
    store.path.write_text("{not json")
    assert store.load() == {}
    store.set("k", 1)
    assert store.get("k") == 1


def test_delete(tmp_path):
    store = StateStore(42161, ACCOUNT, str(tmp_path))
    store.set("k", 1)
    store.delete("k")
    assert store.get("k") is None


def test_memory_store_counts_writes():
    store = MemoryStore({"x": 1})
    store.set("y", 2)
    assert store.get("x") == 1
    assert store.writes == 1


def test_trade_options_survive_restart(tmp_path):
    store = StateStore(42161, ACCOUNT, str(tmp_path))
    TradeConfigStateMachine(store, 42161).set_trade_type(TradeType.SHORT)
    again = TradeConfigStateMachine(StateStore(42161, ACCOUNT, str(tmp_path)), 42161)
    assert again.config.trade_type == TradeType.SHORT


def test_atomic_store(tmp_path):
    async def inner():
        store = AtomicStateStore(42161, ACCOUNT, str(tmp_path))
        await asyncio.gather(*(store.set(f"k{i}", i) for i in range(5)))
        data = await store.load()
        assert data == {f"k{i}": i for i in range(5)}
        assert await store.get("k3") == 3
        await store.set(trade_options_key(42161), TradeConfig(trade_type=TradeType.SWAP).to_dict())
        assert store.store.get(trade_options_key(42161))["tradeType"] == "Swap"

    asyncio.run(inner())
