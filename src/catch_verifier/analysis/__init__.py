"""Movement classification and pattern scanning for catch difficulties."""

from catch_verifier.analysis.cache import MovementCache
from catch_verifier.analysis.geometry import CatcherGeometry
from catch_verifier.analysis.movement import (
    EMPTY_SEQUENCE,
    MovementKind,
    MovementNode,
    MovementSequence,
    build_movement_sequence,
    classify_objects,
    classify_transition,
    max_reachable,
    strength_multiplier,
)
from catch_verifier.analysis.patterns import (
    Tier,
    antiflow_leniency,
    is_antiflow,
    is_higher_snapped,
    movement_between,
    node_is_higher_snapped,
    node_strength,
    parse_tier,
    scan_runs,
    snap_ms,
    transition_is_higher_snapped,
)

__all__ = [
    # Cache
    "MovementCache",
    # Geometry
    "CatcherGeometry",
    # Movement
    "EMPTY_SEQUENCE",
    "MovementKind",
    "MovementNode",
    "MovementSequence",
    "build_movement_sequence",
    "classify_objects",
    "classify_transition",
    "max_reachable",
    "strength_multiplier",
    # Patterns
    "Tier",
    "antiflow_leniency",
    "is_antiflow",
    "is_higher_snapped",
    "movement_between",
    "node_is_higher_snapped",
    "node_strength",
    "parse_tier",
    "scan_runs",
    "snap_ms",
    "transition_is_higher_snapped",
]
