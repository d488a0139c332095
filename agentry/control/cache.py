"""Agent cache keyed by agent id."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence

from loguru import logger

from agentry.agent.general import GeneralAgent
from agentry.utils.helpers import normalize_id


class AgentCache:
    """
    Process-lifetime cache of built agents.

    Entries change only through ``get_or_create``, ``update_context`` and
    ``invalidate``/``clear``. Construction runs under a per-id lock, so
    concurrent requests for the same agent build it once.
    """

    def __init__(self) -> None:
        self._agents: dict[str, GeneralAgent] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, agent_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(agent_id, threading.Lock())

    def get(self, agent_id: str) -> GeneralAgent | None:
        """Get a cached agent without building one."""
        return self._agents.get(normalize_id(agent_id))

    def get_or_create(self, agent_id: str, build: Callable[[], GeneralAgent]) -> GeneralAgent:
        """
        Return the cached agent for ``agent_id``, building and storing it on a miss.

        A failing ``build`` propagates and leaves nothing cached.
        """
        key = normalize_id(agent_id)
        agent = self._agents.get(key)
        if agent is not None:
            return agent

        with self._lock_for(key):
            agent = self._agents.get(key)
            if agent is not None:
                return agent
            logger.info(f"Agent cache miss: building {key}")
            try:
                agent = build()
            except Exception as e:
                logger.error(f"Failed to build agent {key}: {e}")
                raise
            self._agents[key] = agent
            return agent

    def update_context(self, agent_id: str, context: Sequence[str]) -> bool:
        """Push new context into a cached agent; False when the agent is not cached or unchanged."""
        agent = self.get(agent_id)
        if agent is None:
            return False
        return agent.update_context(context)

    def invalidate(self, agent_id: str) -> None:
        """Drop a cached agent so the next request rebuilds it."""
        key = normalize_id(agent_id)
        with self._lock_for(key):
            if self._agents.pop(key, None) is not None:
                logger.info(f"Agent cache entry invalidated: {key}")

    def clear(self) -> None:
        with self._guard:
            self._agents.clear()
            self._locks.clear()

    @property
    def agent_ids(self) -> list[str]:
        """Get list of cached agent ids."""
        return list(self._agents.keys())

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, agent_id: object) -> bool:
        return isinstance(agent_id, str) and normalize_id(agent_id) in self._agents
