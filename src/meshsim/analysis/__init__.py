"""
Analysis layer: summary figures for a finished run.

IMPORTANT: This is NOT seen by the engine. One-way derivation only.

- sketch: mean / stddev / min / max of a sample
- summarize: delivery rate, drop and in-flight counts, hop and latency
  distributions, batch counts
"""

from meshsim.analysis.summary import RunSummary, Sketch, sketch, summarize

__all__ = [
    "RunSummary",
    "Sketch",
    "sketch",
    "summarize",
]
