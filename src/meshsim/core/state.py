"""
Per-user state for the routing engine.

Users own no data themselves. Everything the engine tracks about a
user lives in a UserState, created empty on first access through
UserStateStore.get.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterator

from meshsim.core.messages import CarryEntry


@dataclass
class UserState:
    """Mutable routing state of a single user."""

    # Carry-set: messages currently held, by id
    messages: dict[Hashable, CarryEntry] = field(default_factory=dict)

    # Relayed entries staged during a tick, admitted on the next flush
    pending: dict[Hashable, CarryEntry] = field(default_factory=dict)

    # Every id ever admitted here (never shrinks)
    seen: set = field(default_factory=set)

    # Ids already originated here or folded into a batch here
    batched: set = field(default_factory=set)

    # Large messages already unwrapped here as their target
    received: set = field(default_factory=set)

    # Users this one may batch messages for
    sessions: set = field(default_factory=set)


class UserStateStore:
    """Maps user -> UserState, creating empty state on first access."""

    def __init__(self):
        self._states: dict[Any, UserState] = {}

    def get(self, user: Any) -> UserState:
        """Return the state of `user`, inserting an empty one if absent."""
        state = self._states.get(user)
        if state is None:
            state = UserState()
            self._states[user] = state
        return state

    def users(self) -> list[Any]:
        """Snapshot of all users with state (safe to mutate the store after)."""
        return list(self._states)

    def __contains__(self, user: Any) -> bool:
        return user in self._states

    def __iter__(self) -> Iterator[Any]:
        return iter(self.users())

    def __len__(self) -> int:
        return len(self._states)
