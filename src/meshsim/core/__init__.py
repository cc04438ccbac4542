"""
Core routing engine.

This layer knows NOTHING about mobility, social graph generation, or
summary statistics. It only knows:
- Users with private carry-sets and filters
- Messages (plain or batch) and carry entries
- Per-link forward decisions under hop and replication budgets
- Batching for session partners
- Delivery, with batch unwrapping at the target

Three session policies are available:
- NullSessionPolicy: no sessions, no batching
- LocalSessionPolicy: session knowledge one hop fresh
- GlobalSessionPolicy: session knowledge spreads epidemically
"""

from meshsim.core.chunking import split
from meshsim.core.delivery_log import DeliveryLog, DeliveryRecord
from meshsim.core.messages import (
    BatchMember,
    BatchMessage,
    CarryEntry,
    Message,
    PlainMessage,
    make_batch,
    make_batch_id,
    user_key,
)
from meshsim.core.protocol import Protocol, ProtocolConfig, create_protocol
from meshsim.core.reducers import REDUCERS, get_reducer
from meshsim.core.sessions import (
    GlobalSessionPolicy,
    LocalSessionPolicy,
    NullSessionPolicy,
    SessionPolicy,
    create_session_policy,
)
from meshsim.core.state import UserState, UserStateStore

__all__ = [
    "split",
    "DeliveryLog",
    "DeliveryRecord",
    "BatchMember",
    "BatchMessage",
    "CarryEntry",
    "Message",
    "PlainMessage",
    "make_batch",
    "make_batch_id",
    "user_key",
    "Protocol",
    "ProtocolConfig",
    "create_protocol",
    "REDUCERS",
    "get_reducer",
    "GlobalSessionPolicy",
    "LocalSessionPolicy",
    "NullSessionPolicy",
    "SessionPolicy",
    "create_session_policy",
    "UserState",
    "UserStateStore",
]
