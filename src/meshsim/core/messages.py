"""
Messages and carry entries for the routing engine.

A message is either PLAIN (one payload from a source to a target) or a
BATCH (several messages to the same target, wrapped by a relay so they
travel as one opaque unit and are unwrapped only at the target).

A carry entry is a user's private bookkeeping for one message it holds:
- came_from: links the message must not be sent back across
- hops: relays traversed so far
- rep: forward attempts already made from this carrier
- padding: reduced hop count inherited from batch assembly

Users are opaque. When a user object has an `id` attribute, that id is
its key in contact graphs and batch ids; otherwise the user is its own key.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, ClassVar, Hashable, Union


def user_key(user: Any) -> Hashable:
    """Key of a user in contact graphs and batch ids."""
    return getattr(user, "id", user)


@dataclass(frozen=True)
class PlainMessage:
    """A single payload originated by `source` for `target`."""

    id: Hashable
    source: Any
    target: Any
    timestamp: float  # Tick when originated
    size: int | None = None  # None counts as 1 in batch sizes

    kind: ClassVar[str] = "plain"


@dataclass(frozen=True)
class BatchMember:
    """One wrapped message with the relay path it had when wrapped."""

    message: "Message"
    hops: tuple = ()


@dataclass(frozen=True)
class BatchMessage:
    """
    Several messages to one target, wrapped by `creator`.

    The id is derived from the creator and the sorted member ids, so the
    same creator wrapping the same members always yields the same id.
    """

    id: str
    batch: tuple[BatchMember, ...]
    size: int
    creator: Any
    target: Any
    timestamp: float

    kind: ClassVar[str] = "batch"

    @property
    def member_ids(self) -> list[Hashable]:
        return [member.message.id for member in self.batch]


Message = Union[PlainMessage, BatchMessage]


def message_size(message: Message) -> int:
    """Size used when summing batch sizes (unset sizes count as 1)."""
    return 1 if message.size is None else message.size


def make_batch_id(creator: Any, members: list[BatchMember]) -> str:
    """Deterministic batch id: `<creator>:[<sorted member ids>]`."""
    ids = sorted(str(member.message.id) for member in members)
    return f"{user_key(creator)}:[{','.join(ids)}]"


def make_batch(
    timestamp: float,
    creator: Any,
    target: Any,
    members: list[BatchMember],
) -> BatchMessage:
    """Wrap `members` into a batch created by `creator` at `timestamp`."""
    return BatchMessage(
        id=make_batch_id(creator, members),
        batch=tuple(members),
        size=sum(message_size(member.message) for member in members),
        creator=creator,
        target=target,
        timestamp=timestamp,
    )


@dataclass
class CarryEntry:
    """
    A user's record for one carried message.

    `hops` only holds real relays. Batches start with an empty path and
    a `padding` equal to the reduced hop count of their members, so hop
    limits still see the budget those members had already consumed.
    """

    message: Message
    came_from: frozenset = field(default_factory=frozenset)
    hops: list = field(default_factory=list)
    rep: float = 0
    padding: int = 0

    @property
    def hop_count(self) -> int:
        """Hop budget consumed so far (padding + real relays)."""
        return self.padding + len(self.hops)

    def relay(self, sender: Any, link: Any) -> CarryEntry:
        """Fresh entry for `link` after `sender` forwards this message."""
        return CarryEntry(
            message=self.message,
            came_from=frozenset([sender]),
            hops=self.hops + [link],
            rep=0,
            padding=self.padding,
        )
