"""
Delivery log: what happened to messages during a run.

- recv: ids of plain messages delivered at least once
- recv_detail: one DeliveryRecord per delivered id, in delivery order
- drop: ids that ran out of hop budget somewhere
- encs: every batch created, in creation order

A message in neither `recv` nor `drop` at the end of a run was still
in flight. That is a valid outcome, not an error.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable

from meshsim.core.messages import BatchMessage, PlainMessage


@dataclass
class DeliveryRecord:
    """A plain message as it arrived at its target."""

    message: PlainMessage
    t_send: float
    t_recv: float
    hops: list  # Relays traversed, target excluded
    encs: list[BatchMessage]  # Enclosing batches, innermost first

    @property
    def id(self) -> Hashable:
        return self.message.id

    @property
    def source(self) -> Any:
        return self.message.source

    @property
    def target(self) -> Any:
        return self.message.target

    @property
    def latency(self) -> float:
        return self.t_recv - self.t_send


@dataclass
class DeliveryLog:
    """Write-once record of deliveries and drops, plus a batch audit trail."""

    recv: set = field(default_factory=set)
    recv_detail: list[DeliveryRecord] = field(default_factory=list)
    drop: set = field(default_factory=set)
    encs: list[BatchMessage] = field(default_factory=list)

    def record_delivery(
        self,
        message: PlainMessage,
        t_recv: float,
        hops: list,
        encs: Iterable[BatchMessage] = (),
    ) -> bool:
        """
        Record the first delivery of `message`.

        Returns:
            True if recorded, False if the id was already delivered
        """
        if message.id in self.recv:
            return False
        self.recv.add(message.id)
        self.recv_detail.append(
            DeliveryRecord(
                message=message,
                t_send=message.timestamp,
                t_recv=t_recv,
                hops=list(hops),
                encs=list(encs),
            )
        )
        return True

    def record_drop(self, message_id: Hashable) -> None:
        self.drop.add(message_id)

    def record_batch(self, batch: BatchMessage) -> None:
        self.encs.append(batch)

    def is_delivered(self, message_id: Hashable) -> bool:
        return message_id in self.recv

    def in_flight(self, message_ids: Iterable[Hashable]) -> list[Hashable]:
        """Ids neither delivered nor dropped, in the given order."""
        return [
            message_id for message_id in message_ids
            if message_id not in self.recv and message_id not in self.drop
        ]
