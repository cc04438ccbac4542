"""
Toy contact generator: users random-walking on a torus.

Stands in for a real mobility simulator. Each tick, users move on a
`size x size` periodic grid and every pair within `d_link` (Chebyshev
distance, with wrapping) is linked for that tick.

Also builds the social contact graph used by contacts-only sessions.
"""

from __future__ import annotations
from dataclasses import dataclass, field

import numpy as np


def random_social_graph(
    n_users: int,
    p_deg: float,
    rng: np.random.Generator,
) -> dict[int, list[int]]:
    """
    Symmetric random contact graph (each pair linked with probability p_deg).

    Args:
        n_users: Number of users, keyed 0..n_users-1
        p_deg: Probability that two users are social contacts
        rng: Random generator

    Returns:
        Mapping user -> sorted list of contacts
    """
    upper = np.triu(rng.random((n_users, n_users)) < p_deg, k=1)
    adjacency = upper | upper.T
    return {
        i: [int(j) for j in np.flatnonzero(adjacency[i])]
        for i in range(n_users)
    }


@dataclass
class RandomWalkNetwork:
    """Users with integer positions on a periodic grid."""

    size: int
    n_users: int
    rng: np.random.Generator

    positions: np.ndarray = field(default=None, init=False)

    def __post_init__(self):
        self.positions = self.rng.integers(0, self.size, size=(self.n_users, 2))

    @property
    def users(self) -> list[int]:
        return list(range(self.n_users))

    def step(self, p_move: float = 1.0, d_move: int = 1) -> None:
        """Move each user with probability p_move by up to d_move per axis."""
        moving = self.rng.random(self.n_users) < p_move
        delta = self.rng.integers(-d_move, d_move + 1, size=(self.n_users, 2))
        self.positions = (self.positions + delta * moving[:, None]) % self.size

    def links(self, d_link: int = 1) -> list[tuple[int, int]]:
        """Pairs (i, j), i < j, within Chebyshev distance d_link."""
        diff = np.abs(self.positions[:, None, :] - self.positions[None, :, :])
        diff = np.minimum(diff, self.size - diff)  # Periodic wrap
        within = np.triu(diff.max(axis=2) <= d_link, k=1)
        rows, cols = np.nonzero(within)
        return [(int(i), int(j)) for i, j in zip(rows, cols)]
