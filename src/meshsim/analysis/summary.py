"""
Summarize a run from its delivery log.

Reduces the log plus the list of originated ids into the figures an
experiment reports: delivery rate, where undelivered messages ended up,
hop and latency distributions, and how many batches ("re-encryptions")
were paid for.

IMPORTANT: This is NOT seen by the engine. One-way derivation only.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Hashable, Sequence

import numpy as np

if TYPE_CHECKING:
    from meshsim.core.delivery_log import DeliveryLog


@dataclass
class Sketch:
    """Mean, standard deviation, min and max of a sample."""

    mean: float
    stddev: float
    min: float
    max: float

    def as_list(self) -> list[float]:
        return [self.mean, self.stddev, self.min, self.max]


def sketch(values: Sequence[float], decimals: int = 3) -> Sketch:
    """
    Describe a sample, rounded to `decimals`.

    Uses the population standard deviation. An empty sample gives NaN
    everywhere.
    """
    if len(values) == 0:
        nan = float("nan")
        return Sketch(nan, nan, nan, nan)
    arr = np.asarray(values, dtype=np.float64)
    return Sketch(
        mean=round(float(arr.mean()), decimals),
        stddev=round(float(arr.std()), decimals),
        min=round(float(arr.min()), decimals),
        max=round(float(arr.max()), decimals),
    )


@dataclass
class RunSummary:
    """Figures describing one run."""

    sent: int
    received: int
    delivery_rate: float
    reaching_hop_limit: int  # Dropped somewhere and never delivered
    still_on_the_way: int    # Neither delivered nor dropped
    hop_number: Sketch
    latency: Sketch
    reencryptions: int       # Batches created
    reencryptions_for_received: int  # Distinct batches enclosing a delivery
    reencryptions_per_received: Sketch

    def as_dict(self) -> dict:
        """Labelled figures, in report order."""
        return {
            "Sent": self.sent,
            "- Received": self.received,
            "- Delivery rate": self.delivery_rate,
            "- Reaching hop limit": self.reaching_hop_limit,
            "- Still on the way": self.still_on_the_way,
            "Hop number": self.hop_number.as_list(),
            "Latency": self.latency.as_list(),
            "Re-encryption number": self.reencryptions,
            "- Number for received": self.reencryptions_for_received,
            "- Number per received": self.reencryptions_per_received.as_list(),
        }


def summarize(log: "DeliveryLog", sent_ids: Sequence[Hashable]) -> RunSummary:
    """
    Summarize a delivery log.

    Args:
        log: Log of the run
        sent_ids: Ids of every message originated during the run

    Returns:
        RunSummary
    """
    sent = len(sent_ids)
    undelivered = [i for i in sent_ids if i not in log.recv]
    dropped = sum(1 for i in undelivered if i in log.drop)

    encs_per_record = [record.encs for record in log.recv_detail]
    enclosing = {batch.id for encs in encs_per_record for batch in encs}

    return RunSummary(
        sent=sent,
        received=len(log.recv),
        delivery_rate=round(len(log.recv) / sent, 3) if sent else float("nan"),
        reaching_hop_limit=dropped,
        still_on_the_way=len(undelivered) - dropped,
        hop_number=sketch([len(record.hops) for record in log.recv_detail]),
        latency=sketch([record.latency for record in log.recv_detail]),
        reencryptions=len(log.encs),
        reencryptions_for_received=len(enclosing),
        reencryptions_per_received=sketch([len(encs) for encs in encs_per_record]),
    )
