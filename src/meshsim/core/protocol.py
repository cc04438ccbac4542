"""
Protocol: store-carry-forward routing with session batching.

The engine is stepped by an external simulator, once per tick:

1. before_link(t): admit entries relayed during the previous tick, then
   let every carrier fold messages for its session partners into batches
2. on_session(user, link, graph): once per realized contact, update
   session knowledge according to the session policy
3. on_link(t, user, links): try to forward every carried message across
   every current link

Budgets per message and carrier:
- replication (n_rep): forward attempts from one carrier. The attempt
  that would exceed it evicts the entry, but is still carried out.
- hops (n_hop): relays on the path. A forward that would exceed it
  evicts the entry and logs a drop.

Carry-sets are mutated while they are traversed (evictions, admissions),
so every traversal snapshots its keys first.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Sequence

from meshsim.core.chunking import split
from meshsim.core.delivery_log import DeliveryLog
from meshsim.core.messages import (
    BatchMember,
    BatchMessage,
    CarryEntry,
    Message,
    PlainMessage,
    make_batch,
)
from meshsim.core.reducers import ReducerName, get_reducer, round_half_up
from meshsim.core.sessions import (
    ContactGraph,
    NullSessionPolicy,
    SessionPolicy,
    create_session_policy,
)
from meshsim.core.state import UserStateStore

logger = logging.getLogger(__name__)


# Messages larger than this are remembered per target once unwrapped.
# Smaller ones are cheap to unwrap again and are deduplicated by log.recv.
RECV_FILTER_MIN_SIZE = 100


@dataclass
class ProtocolConfig:
    """Configuration for the routing engine."""

    n_hop: int = 10                  # Max relays on a path
    n_rep: int = 20                  # Max forward attempts per carrier
    use_batch: bool = True           # Unbounded batches (True) or one message per batch
    enc_hop: ReducerName = "mean"    # Reducer for a batch's hop count
    enc_rep: ReducerName = "max"     # Reducer for a batch's replication count
    contacts_only: bool = True       # Sessions only between social contacts
    duplicate_fitting_chunks: bool = False  # Replay the historical double batch count

    def __post_init__(self):
        if self.n_hop < 0:
            raise ValueError(f"n_hop must be >= 0, got {self.n_hop}")
        if self.n_rep < 0:
            raise ValueError(f"n_rep must be >= 0, got {self.n_rep}")
        get_reducer(self.enc_hop)
        get_reducer(self.enc_rep)

    @property
    def max_batch(self) -> float:
        """Largest number of messages folded into one batch."""
        return float("inf") if self.use_batch else 1


@dataclass
class _BatchGroup:
    """Parallel lists collected per session target during batch assembly."""

    members: list[BatchMember] = field(default_factory=list)
    came_from: list[frozenset] = field(default_factory=list)
    hop_counts: list[int] = field(default_factory=list)
    reps: list[float] = field(default_factory=list)


@dataclass
class Protocol:
    """
    Routing engine: admission, forwarding, batching and delivery.

    All state is per user (see UserStateStore) plus the shared log.
    """

    config: ProtocolConfig = field(default_factory=ProtocolConfig)
    session_policy: SessionPolicy = field(default_factory=NullSessionPolicy)

    users: UserStateStore = field(default_factory=UserStateStore, init=False)
    log: DeliveryLog = field(default_factory=DeliveryLog, init=False)
    _hop_reducer: Any = field(default=None, init=False, repr=False)
    _rep_reducer: Any = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self._hop_reducer = get_reducer(self.config.enc_hop)
        self._rep_reducer = get_reducer(self.config.enc_rep)

    # ═══════════════════════════════════════════════════════════════
    # ADMISSION
    # ═══════════════════════════════════════════════════════════════

    def store(self, user: Any, message_id: Hashable, entry: CarryEntry) -> bool:
        """
        Admit `entry` into `user`'s carry-set.

        Ids already carried, or ever admitted before, are ignored.

        Returns:
            True if admitted
        """
        state = self.users.get(user)
        if message_id in state.messages or message_id in state.seen:
            return False
        state.messages[message_id] = entry
        state.seen.add(message_id)
        return True

    def on_send(
        self,
        t: float,
        user: Any,
        target: Any,
        message_id: Hashable,
        size: int | None = None,
    ) -> PlainMessage:
        """Originate a plain message at `user` for `target`."""
        message = PlainMessage(
            id=message_id, source=user, target=target, timestamp=t, size=size
        )
        self.store(user, message_id, CarryEntry(message))
        # The originator never wraps its own messages
        self.users.get(user).batched.add(message_id)
        return message

    # ═══════════════════════════════════════════════════════════════
    # FORWARDING
    # ═══════════════════════════════════════════════════════════════

    def cast(
        self,
        t: float,
        user: Any,
        link: Any,
        message_id: Hashable,
        messages: dict[Hashable, CarryEntry] | None = None,
        deferred: bool = False,
    ) -> None:
        """
        Try to forward one carried message from `user` to `link`.

        Args:
            t: Current tick
            user: The carrier
            link: The neighbor to forward to
            message_id: Id of the carried message
            messages: The carrier's carry-set (looked up if None)
            deferred: Stage the relayed entry at `link` until the next
                      flush instead of admitting it right away
        """
        if messages is None:
            messages = self.users.get(user).messages
        entry = messages.get(message_id)
        if entry is None:
            return
        if link in entry.came_from:
            # No ping-pong, and no replication budget spent on it
            return

        if entry.rep + 1 > self.config.n_rep:
            messages.pop(message_id, None)
        else:
            entry.rep += 1

        message = entry.message
        if link == message.target:
            self.deliver(t, message, entry.hops)
            return

        if entry.hop_count + 1 > self.config.n_hop:
            messages.pop(message_id, None)
            self.log.record_drop(message_id)
            logger.debug("t=%s drop %s at %s: hop limit %d", t, message_id, user, self.config.n_hop)
            return

        relayed = entry.relay(user, link)
        if deferred:
            self.users.get(link).pending.setdefault(message_id, relayed)
            return
        self.store(link, message_id, relayed)

    # ═══════════════════════════════════════════════════════════════
    # DELIVERY
    # ═══════════════════════════════════════════════════════════════

    def deliver(
        self,
        t: float,
        message: Message,
        hops: Sequence,
        encs: Sequence[BatchMessage] = (),
    ) -> None:
        """
        Deliver `message` at its target, unwrapping batches recursively.

        Args:
            t: Receive tick
            message: Plain message or batch
            hops: Relays traversed by `message` itself
            encs: Enclosing batches already unwrapped, innermost first
        """
        received = self.users.get(message.target).received
        if message.id in received:
            return
        if (message.size or 0) > RECV_FILTER_MIN_SIZE:
            received.add(message.id)

        if isinstance(message, BatchMessage):
            trail = [message, *encs]
            for member in message.batch:
                self.deliver(t, member.message, [*member.hops, *hops], trail)
            return

        if self.log.record_delivery(message, t, hops, encs):
            logger.debug("t=%s deliver %s to %s after %d hops", t, message.id, message.target, len(hops))

    # ═══════════════════════════════════════════════════════════════
    # BATCHING
    # ═══════════════════════════════════════════════════════════════

    def before_link_user(self, t: float, user: Any) -> None:
        """
        Fold messages for session partners into batches.

        Messages whose target is in `user`'s session set and that were
        never originated or batched here are grouped by target. Each group
        is cut into chunks of at most `max_batch`, one batch per chunk.
        """
        state = self.users.get(user)
        carried: dict[Hashable, CarryEntry] = {}
        groups: dict[Any, _BatchGroup] = {}

        for message_id, entry in list(state.messages.items()):
            target = entry.message.target
            if target in state.sessions and message_id not in state.batched:
                group = groups.get(target)
                if group is None:
                    group = groups[target] = _BatchGroup()
                group.members.append(BatchMember(entry.message, tuple(entry.hops)))
                group.came_from.append(entry.came_from)
                group.hop_counts.append(entry.hop_count)
                group.reps.append(entry.rep)
                state.batched.add(message_id)
            else:
                carried[message_id] = entry

        if not groups:
            return

        for target, group in groups.items():
            chunks = split(
                self.config.max_batch,
                group.members,
                group.came_from,
                group.hop_counts,
                group.reps,
                duplicate_fitting=self.config.duplicate_fitting_chunks,
            )
            for members, came_from, hop_counts, reps in chunks:
                batch = make_batch(t, user, target, members)
                carried[batch.id] = CarryEntry(
                    message=batch,
                    came_from=frozenset().union(*came_from),
                    hops=[],
                    rep=self._rep_reducer(reps),
                    padding=round_half_up(self._hop_reducer(hop_counts)),
                )
                state.seen.add(batch.id)
                state.batched.add(batch.id)
                self.log.record_batch(batch)
                logger.debug("t=%s batch %s at %s (%d messages)", t, batch.id, user, len(members))

        state.messages = carried

    # ═══════════════════════════════════════════════════════════════
    # TICK ORCHESTRATION
    # ═══════════════════════════════════════════════════════════════

    def on_session(self, user: Any, link: Any, graph: ContactGraph) -> None:
        """Update session knowledge after `user` contacted `link`."""
        self.session_policy.on_session(
            self.users, user, link, graph, self.config.contacts_only
        )

    def before_link(self, t: float) -> None:
        """Start a tick: flush staged relays, then assemble batches."""
        self.after_link()
        for user in self.users.users():
            if self.users.get(user).messages:
                self.before_link_user(t, user)

    def on_link(
        self,
        t: float,
        user: Any,
        links: Iterable[Any],
        deferred: bool = False,
    ) -> None:
        """Try to forward everything `user` carries across each link."""
        messages = self.users.get(user).messages
        for link in links:
            for message_id in list(messages):
                self.cast(t, user, link, message_id, messages, deferred)

    def after_link(self) -> None:
        """Admit every staged relay into its receiver's carry-set."""
        for user in self.users.users():
            state = self.users.get(user)
            if not state.pending:
                continue
            pending, state.pending = state.pending, {}
            for message_id, entry in pending.items():
                self.store(user, message_id, entry)


def create_protocol(
    n_hop: int = 10,
    n_rep: int = 20,
    use_batch: bool = True,
    enc_hop: ReducerName = "mean",
    enc_rep: ReducerName = "max",
    contacts_only: bool = True,
    policy: str = "none",
    **kwargs,
) -> Protocol:
    """
    Factory for a configured engine.

    Args:
        n_hop: Hop limit
        n_rep: Replication limit
        use_batch: Unbounded batches if True, no aggregation if False
        enc_hop: Reducer for batch hop counts ("min", "mean", "max")
        enc_rep: Reducer for batch replication counts
        contacts_only: Restrict session spread to social contacts
        policy: Session policy, "none", "session" or "global"
        **kwargs: Further ProtocolConfig fields
    """
    config = ProtocolConfig(
        n_hop=n_hop,
        n_rep=n_rep,
        use_batch=use_batch,
        enc_hop=enc_hop,
        enc_rep=enc_rep,
        contacts_only=contacts_only,
        **kwargs,
    )
    return Protocol(config=config, session_policy=create_session_policy(policy))
