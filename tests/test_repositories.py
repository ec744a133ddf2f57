from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from app.domain.models import ClientState
from app.domain.repositories import InMemoryClientStateRepository, SupabaseClientStateRepository
from app.domain.services.admission_service import AdmissionController

T0 = 1_700_000_000.0


def test_idle_records_expire_on_read() -> None:
    repo = InMemoryClientStateRepository(idle_ttl_seconds=600)
    asyncio.run(repo.save("a", ClientState(attempts=3, last_attempt=T0), T0))

    assert asyncio.run(repo.get("a", T0 + 599)) is not None
    assert asyncio.run(repo.get("a", T0 + 600)) is None
    assert len(repo) == 0


def test_active_block_never_expires() -> None:
    repo = InMemoryClientStateRepository(idle_ttl_seconds=10)
    asyncio.run(repo.save("a", ClientState(attempts=3, last_attempt=T0, blocked_until=T0 + 60), T0))

    state = asyncio.run(repo.get("a", T0 + 30))

    assert state is not None and state.is_blocked(T0 + 30)


def test_idle_window_counts_from_end_of_block() -> None:
    repo = InMemoryClientStateRepository(idle_ttl_seconds=10)
    asyncio.run(repo.save("a", ClientState(attempts=3, last_attempt=T0, blocked_until=T0 + 60), T0))

    assert asyncio.run(repo.get("a", T0 + 65)) is not None
    assert asyncio.run(repo.get("a", T0 + 70)) is None


def test_save_sweeps_stale_records() -> None:
    repo = InMemoryClientStateRepository(idle_ttl_seconds=100)
    asyncio.run(repo.save("old", ClientState(attempts=1, last_attempt=T0), T0))
    asyncio.run(repo.save("new", ClientState(attempts=1, last_attempt=T0 + 150), T0 + 150))

    assert len(repo) == 1
    assert asyncio.run(repo.get("new", T0 + 150)) is not None


def test_capacity_evicts_least_recently_seen() -> None:
    repo = InMemoryClientStateRepository(max_clients=2)
    for i, key in enumerate(["a", "b"]):
        asyncio.run(repo.save(key, ClientState(attempts=1, last_attempt=T0 + i), T0 + i))
    asyncio.run(repo.save("a", ClientState(attempts=2, last_attempt=T0 + 2), T0 + 2))
    asyncio.run(repo.save("c", ClientState(attempts=1, last_attempt=T0 + 3), T0 + 3))

    assert len(repo) == 2
    assert asyncio.run(repo.get("b", T0 + 3)) is None
    assert asyncio.run(repo.get("a", T0 + 3)).attempts == 2


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        InMemoryClientStateRepository(max_clients=0)


class _FakeQuery:
    def __init__(self, table: "_FakeTable", action: str, payload: Any = None) -> None:
        self.table = table
        self.action = action
        self.payload = payload
        self.filters: Dict[str, Any] = {}

    def eq(self, column: str, value: Any) -> "_FakeQuery":
        self.filters[column] = value
        return self

    def execute(self) -> SimpleNamespace:
        rows = self.table.rows
        if self.action == "select":
            return SimpleNamespace(data=[dict(r) for r in rows.values() if r["client_key"] == self.filters["client_key"]])
        if self.action == "delete":
            rows.pop(self.filters["client_key"], None)
            return SimpleNamespace(data=[])
        rows[self.payload["client_key"]] = dict(self.payload)
        return SimpleNamespace(data=[self.payload])


class _FakeTable:
    def __init__(self) -> None:
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.upserts: List[Dict[str, Any]] = []

    def select(self, _columns: str) -> _FakeQuery:
        return _FakeQuery(self, "select")

    def delete(self) -> _FakeQuery:
        return _FakeQuery(self, "delete")

    def upsert(self, payload: Dict[str, Any], on_conflict: str = "") -> _FakeQuery:
        self.upserts.append(payload)
        return _FakeQuery(self, "upsert", payload)


class _FakeSupabase:
    def __init__(self) -> None:
        self.rate_limits = _FakeTable()

    def table(self, name: str) -> _FakeTable:
        assert name == "rate_limits"
        return self.rate_limits


def test_supabase_repository_round_trips_rows() -> None:
    client = _FakeSupabase()
    repo = SupabaseClientStateRepository(client)

    assert asyncio.run(repo.get("1.2.3.4", T0)) is None
    asyncio.run(repo.save("1.2.3.4", ClientState(attempts=3, last_attempt=T0, blocked_until=T0 + 60), T0))

    assert client.rate_limits.upserts[-1] == {
        "client_key": "1.2.3.4",
        "attempts": 3,
        "last_attempt": T0,
        "blocked_until": T0 + 60,
    }
    assert asyncio.run(repo.get("1.2.3.4", T0 + 1)) == ClientState(
        attempts=3, last_attempt=T0, blocked_until=T0 + 60
    )


def test_supabase_repository_drops_idle_rows() -> None:
    client = _FakeSupabase()
    repo = SupabaseClientStateRepository(client, idle_ttl_seconds=100)
    asyncio.run(repo.save("k", ClientState(attempts=2, last_attempt=T0), T0))

    assert asyncio.run(repo.get("k", T0 + 100)) is None
    assert client.rate_limits.rows == {}


def test_supabase_repository_requires_client() -> None:
    with pytest.raises(ValueError):
        SupabaseClientStateRepository(None)


def test_capacity_eviction_keeps_active_lockouts() -> None:
    repo = InMemoryClientStateRepository(max_clients=2)
    controller = AdmissionController(repo)
    for i in range(4):
        decision = asyncio.run(controller.check("attacker", now=T0 + i))
    assert not decision.allowed

    asyncio.run(controller.check("b", now=T0 + 5))
    asyncio.run(controller.check("c", now=T0 + 6))
    during_block = asyncio.run(controller.check("attacker", now=T0 + 8))

    assert not during_block.allowed
    assert during_block.retry_after_seconds == 55
    assert asyncio.run(repo.get("b", T0 + 8)) is None
    assert asyncio.run(repo.get("c", T0 + 8)) is not None


def test_capacity_can_be_exceeded_only_by_blocked_records() -> None:
    repo = InMemoryClientStateRepository(max_clients=1)
    asyncio.run(repo.save("x", ClientState(attempts=3, last_attempt=T0, blocked_until=T0 + 60), T0))
    asyncio.run(repo.save("y", ClientState(attempts=3, last_attempt=T0, blocked_until=T0 + 60), T0))
    assert len(repo) == 2

    asyncio.run(repo.save("z", ClientState(attempts=1, last_attempt=T0 + 61), T0 + 61))

    assert len(repo) == 1
    assert asyncio.run(repo.get("z", T0 + 61)) is not None
