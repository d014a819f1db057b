import threading

import pytest

from agent_core.exceptions import ProviderNotAvailableError
from agent_core.providers import ProviderChain, ProviderStrategy

from conftest import ScriptedProvider


def _providers(n):
    return [ScriptedProvider(["ok"], name=f"p{i}") for i in range(n)]


def test_empty_chain_has_no_provider():
    chain = ProviderChain([], ProviderStrategy.ROUND_ROBIN)
    assert chain.next_provider() is None
    with pytest.raises(ProviderNotAvailableError):
        chain.require_provider()


def test_single_always_returns_first():
    providers = _providers(3)
    chain = ProviderChain(providers)
    chain.advance()
    assert [chain.next_provider() for _ in range(3)] == [providers[0]] * 3


def test_round_robin_cycles_in_order():
    providers = _providers(3)
    chain = ProviderChain(providers, ProviderStrategy.ROUND_ROBIN)
    picked = [chain.next_provider() for _ in range(4)]
    assert picked == [providers[0], providers[1], providers[2], providers[0]]


@pytest.mark.parametrize("strategy", [ProviderStrategy.FAILOVER, ProviderStrategy.MODEL_ROUTED])
def test_failover_stays_until_advanced(strategy):
    providers = _providers(2)
    chain = ProviderChain(providers, strategy)
    assert chain.next_provider() is providers[0]
    assert chain.next_provider() is providers[0]
    chain.advance()
    assert chain.next_provider() is providers[1]
    chain.advance()
    assert chain.next_provider() is providers[0]


def test_strategy_accepts_plain_string():
    chain = ProviderChain(_providers(1), "failover")
    assert chain.strategy is ProviderStrategy.FAILOVER
    assert len(chain) == 1
    assert isinstance(chain.providers, tuple)


def test_round_robin_is_balanced_under_threads():
    providers = _providers(4)
    chain = ProviderChain(providers, ProviderStrategy.ROUND_ROBIN)
    counts = {p.name: 0 for p in providers}
    lock = threading.Lock()

    def worker():
        for _ in range(250):
            provider = chain.next_provider()
            with lock:
                counts[provider.name] += 1

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert set(counts.values()) == {500}
