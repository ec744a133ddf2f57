from abc import ABC, abstractmethod
import asyncio
from collections import OrderedDict
import logging
from typing import Any, Dict, Optional

from .models import ClientState

logger = logging.getLogger(__name__)


class ClientStateRepository(ABC):
    @abstractmethod
    async def get(self, client_key: str, now: float) -> Optional[ClientState]:
        raise NotImplementedError

    @abstractmethod
    async def save(self, client_key: str, state: ClientState, now: float) -> ClientState:
        raise NotImplementedError


class InMemoryClientStateRepository(ClientStateRepository):
    """
    Process-local store kept in least-recently-seen order.
    Records idle longer than `idle_ttl_seconds` (and not actively blocked) expire lazily,
    and the oldest unblocked record is evicted once `max_clients` is exceeded.
    """

    def __init__(self, max_clients: int = 10_000, idle_ttl_seconds: float = 24 * 60 * 60):
        if max_clients < 1:
            raise ValueError("max_clients must be at least 1")
        self.max_clients = max_clients
        self.idle_ttl_seconds = idle_ttl_seconds
        self._store: "OrderedDict[str, ClientState]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._store)

    async def get(self, client_key: str, now: float) -> Optional[ClientState]:
        state = self._store.get(client_key)
        if state is None:
            return None
        if self._is_stale(state, now):
            del self._store[client_key]
            return None
        return state

    async def save(self, client_key: str, state: ClientState, now: float) -> ClientState:
        self._store[client_key] = state
        self._store.move_to_end(client_key)
        self._sweep(now)
        return state

    def _is_stale(self, state: ClientState, now: float) -> bool:
        if state.is_blocked(now):
            return False
        return now - state.last_seen() >= self.idle_ttl_seconds

    def _sweep(self, now: float) -> None:
        # Oldest entries sit at the front, so stop at the first live one.
        while self._store:
            key, state = next(iter(self._store.items()))
            if not self._is_stale(state, now):
                break
            del self._store[key]
        overflow = len(self._store) - self.max_clients
        if overflow <= 0:
            return
        # Active lockouts are kept past capacity; they lapse within the block window.
        evictable = [key for key, state in self._store.items() if not state.is_blocked(now)][:overflow]
        for key in evictable:
            del self._store[key]
            logger.debug("Evicted rate-limit record for %s (capacity %s)", key, self.max_clients)


class SupabaseClientStateRepository(ClientStateRepository):
    """
    Supabase-backed store keeping one row per client key in the `rate_limits` table.
    Per-key serialization still happens in-process; rows are shared between workers.
    """

    def __init__(self, client, idle_ttl_seconds: float = 24 * 60 * 60):
        if client is None:
            raise ValueError("Supabase client is required for SupabaseClientStateRepository")
        self.client = client
        self.table_name = "rate_limits"
        self.idle_ttl_seconds = idle_ttl_seconds

    async def get(self, client_key: str, now: float) -> Optional[ClientState]:
        response = await asyncio.to_thread(
            lambda: self.client.table(self.table_name).select("*").eq("client_key", client_key).execute()
        )
        rows = getattr(response, "data", None) or []
        if not rows:
            return None
        state = self._row_to_state(rows[0])
        if not state.is_blocked(now) and now - state.last_seen() >= self.idle_ttl_seconds:
            await asyncio.to_thread(
                lambda: self.client.table(self.table_name).delete().eq("client_key", client_key).execute()
            )
            return None
        return state

    async def save(self, client_key: str, state: ClientState, now: float) -> ClientState:
        payload = {
            "client_key": client_key,
            "attempts": state.attempts,
            "last_attempt": state.last_attempt,
            "blocked_until": state.blocked_until,
        }
        await asyncio.to_thread(
            lambda: self.client.table(self.table_name).upsert(payload, on_conflict="client_key").execute()
        )
        return state

    def _row_to_state(self, row: Dict[str, Any]) -> ClientState:
        blocked_until = row.get("blocked_until")
        return ClientState(
            attempts=int(row.get("attempts") or 0),
            last_attempt=float(row.get("last_attempt") or 0.0),
            blocked_until=float(blocked_until) if blocked_until is not None else None,
        )
