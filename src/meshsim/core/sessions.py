"""
Session policies decide how "in-session" knowledge spreads on contact.

A user B in A's session set means A may wrap messages for B into a
batch (one "encryption" for many messages). Policies only ever mutate
the session set of the contacted user (`link`).

Three policies:
- NullSessionPolicy: sessions never form, batching never happens
- LocalSessionPolicy: `link` learns about `user` only (one hop of freshness)
- GlobalSessionPolicy: `link` also inherits everything `user` knows,
  so session views converge network-wide over repeated contacts

With contacts_only, a user is adopted only if it appears among `link`'s
contacts in the social graph.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Collection, Hashable, Mapping, Protocol

from meshsim.core.messages import user_key

if TYPE_CHECKING:
    from meshsim.core.state import UserStateStore


ContactGraph = Mapping[Hashable, Collection[Hashable]]


class SessionPolicy(Protocol):
    """Protocol for session propagation strategies."""

    name: str

    def on_session(
        self,
        users: "UserStateStore",
        user: Any,
        link: Any,
        graph: ContactGraph,
        contacts_only: bool,
    ) -> None:
        """
        Update `link`'s session set after it contacted `user`.

        Args:
            users: Per-user state of the engine
            user: The contacting user
            link: The contacted user (only its sessions change)
            graph: Social contacts, user key -> contact keys
            contacts_only: Restrict adoption to `link`'s social contacts
        """
        ...


def _is_contact(graph: ContactGraph, link: Any, other: Any) -> bool:
    return user_key(other) in graph.get(user_key(link), ())


@dataclass
class NullSessionPolicy:
    """No session ever forms."""

    name: str = "none"

    def on_session(self, users, user, link, graph, contacts_only) -> None:
        return None


@dataclass
class LocalSessionPolicy:
    """Direct contacts only: `link` adds `user`, nothing transitive."""

    name: str = "session"

    def on_session(self, users, user, link, graph, contacts_only) -> None:
        if contacts_only and not _is_contact(graph, link, user):
            return
        users.get(link).sessions.add(user)


@dataclass
class GlobalSessionPolicy:
    """Epidemic spread: `link` adopts `user` and all of `user`'s sessions."""

    name: str = "global"

    def on_session(self, users, user, link, graph, contacts_only) -> None:
        sessions = users.get(link).sessions
        # Snapshot: user and link may share members, or be the same user
        for session in list(users.get(user).sessions):
            if contacts_only and not _is_contact(graph, link, session):
                continue
            sessions.add(session)
        if contacts_only and not _is_contact(graph, link, user):
            return
        sessions.add(user)


SESSION_POLICIES = {
    "none": NullSessionPolicy,
    "session": LocalSessionPolicy,
    "global": GlobalSessionPolicy,
}


def create_session_policy(name: str = "none") -> SessionPolicy:
    """
    Factory for session policies.

    Args:
        name: "none", "session" (local) or "global"

    Raises:
        ValueError: for an unknown policy name
    """
    try:
        return SESSION_POLICIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown session policy: {name!r} (expected one of {sorted(SESSION_POLICIES)})"
        ) from None
