from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
import logging
import math
import time
from typing import AsyncIterator, Callable, Dict, Optional

from app.domain.models import AdmissionDecision, ClientState
from app.domain.repositories import ClientStateRepository

logger = logging.getLogger(__name__)


@dataclass
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class AdmissionController:
    """
    Three-strikes admission policy per client key.
    A client gets `max_attempts` allowed requests; the next one starts a `block_seconds` lockout,
    and only an elapsed lockout resets the counter.
    """

    def __init__(
        self,
        repo: ClientStateRepository,
        max_attempts: int = 3,
        block_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ):
        self.repo = repo
        self.max_attempts = max_attempts
        self.block_seconds = block_seconds
        self.clock = clock
        self._locks: Dict[str, _KeyLock] = {}

    async def check(self, client_key: str, now: Optional[float] = None) -> AdmissionDecision:
        async with self._serialized(client_key):
            current = self.clock() if now is None else now
            decision = await self._decide(client_key, current)
        if decision.allowed:
            logger.info("Admission granted for %s (%s attempts left)", client_key, decision.attempts_remaining)
        else:
            logger.warning("Admission denied for %s (retry in %ss)", client_key, decision.retry_after_seconds)
        return decision

    async def _decide(self, client_key: str, now: float) -> AdmissionDecision:
        state = await self.repo.get(client_key, now)

        if state is None:
            await self.repo.save(client_key, ClientState(attempts=1, last_attempt=now), now)
            return AdmissionDecision.allow(self.max_attempts - 1)

        if state.blocked_until is not None:
            if now < state.blocked_until:
                return AdmissionDecision.deny(math.ceil(state.blocked_until - now))
            await self.repo.save(client_key, ClientState(attempts=1, last_attempt=now), now)
            return AdmissionDecision.allow(self.max_attempts - 1)

        if state.attempts >= self.max_attempts:
            # attempts and last_attempt stay as they were when the block starts
            blocked = ClientState(
                attempts=state.attempts,
                last_attempt=state.last_attempt,
                blocked_until=now + self.block_seconds,
            )
            await self.repo.save(client_key, blocked, now)
            return AdmissionDecision.deny(self.block_seconds)

        attempts = state.attempts + 1
        await self.repo.save(client_key, ClientState(attempts=attempts, last_attempt=now), now)
        return AdmissionDecision.allow(self.max_attempts - attempts)

    @asynccontextmanager
    async def _serialized(self, client_key: str) -> AsyncIterator[None]:
        entry = self._locks.get(client_key)
        if entry is None:
            entry = self._locks[client_key] = _KeyLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._locks.pop(client_key, None)

    def pending_keys(self) -> int:
        return len(self._locks)
