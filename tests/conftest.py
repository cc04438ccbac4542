"""
Pytest configuration and shared fixtures.
"""

from dataclasses import dataclass

import matplotlib
import pytest
import numpy as np

matplotlib.use("Agg")


@dataclass(frozen=True)
class Node:
    """A user object with an `id`, as a mobility simulator would hand out."""

    id: int


@pytest.fixture
def protocol():
    """Engine with roomy budgets, no sessions."""
    from meshsim.core import create_protocol
    return create_protocol(n_hop=5, n_rep=5, contacts_only=False)


@pytest.fixture
def make_protocol():
    """Factory for engines with custom settings."""
    from meshsim.core import create_protocol

    def _make(**kwargs):
        kwargs.setdefault("contacts_only", False)
        return create_protocol(**kwargs)

    return _make


@pytest.fixture
def node_cls():
    return Node


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)
