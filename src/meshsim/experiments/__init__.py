"""
Experiment harness: setup and run standard experiments.

- RandomWalkNetwork: toy mobility model producing per-tick contacts
- random_social_graph: contact graph for contacts-only sessions
- run_ticks: drive the engine over an explicit tick schedule
- run_scenario: seeded random-walk run, returns sent ids and a summary
"""

from meshsim.experiments.network import RandomWalkNetwork, random_social_graph
from meshsim.experiments.runner import (
    ScenarioConfig,
    Tick,
    generate_ticks,
    run_scenario,
    run_ticks,
)

__all__ = [
    "RandomWalkNetwork",
    "random_social_graph",
    "ScenarioConfig",
    "Tick",
    "generate_ticks",
    "run_scenario",
    "run_ticks",
]
