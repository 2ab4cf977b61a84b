"""
Deterministic Roster Generator.

Produces valid, replayable employee batches for the Org Chart Kernel v1.0.
"""

from .roster import generate_roster, mutate_roster, GeneratorInvariantError
from .deterministic_rng import DeterministicRNG
from .exporter import export_roster
from .roster_spec import RosterSpec

__all__ = [
    "generate_roster",
    "mutate_roster",
    "GeneratorInvariantError",
    "DeterministicRNG",
    "export_roster",
    "RosterSpec",
]
