"""
meshsim: delay-tolerant mesh routing simulator

A store-carry-forward routing engine for opportunistic networks, where
users exchange messages only while in range.

Core concepts:
- Messages are replicated and relayed hop by hop until they reach their
  target or run out of hop/replication budget
- Relays fold messages sharing a session target into one batch, paying
  one "encryption" for many messages
- Session policies decide how session knowledge spreads on contact
- A delivery log records deliveries, drops and batch creations

See DESIGN.md for full details.
"""

__version__ = "0.1.0"
