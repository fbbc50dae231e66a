"""Pattern-scanning primitives shared by every difficulty check.

Checks must use these helpers instead of re-deriving snap cutoffs or
leniency radii, so that all of them agree on what counts as higher-snapped,
antiflow or strong.

Primitives:
    - scan_runs: run-length fold over a movement kind
    - is_higher_snapped: tier-specific snap density cutoffs
    - is_antiflow: direction reversal right after a hyperdash
    - movement_between: kind of the movement from one node straight to another
    - node_strength: strength multiplier of the movement into a node
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import IntEnum

from catch_verifier.analysis.geometry import CatcherGeometry
from catch_verifier.analysis.movement import (
    MovementKind,
    MovementNode,
    MovementSequence,
    classify_transition,
)

# Gap cutoffs in ms. 250 ms is a 1/2 beat at 120 BPM, 124 ms a 1/4 beat.
BASIC_SNAP_MS = 250
HIGHER_SNAP_MS = 124


class Tier(IntEnum):
    """Catch difficulty tiers, easiest first."""

    CUP = 0
    SALAD = 1
    PLATTER = 2
    RAIN = 3
    OVERDOSE = 4


TIER_NAMES: dict[str, Tier] = {
    "cup": Tier.CUP,
    "salad": Tier.SALAD,
    "platter": Tier.PLATTER,
    "rain": Tier.RAIN,
    "overdose": Tier.OVERDOSE,
}


def parse_tier(name: str) -> Tier:
    """Look up a tier by its (case-insensitive) name."""
    try:
        return TIER_NAMES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown tier: {name}. Must be one of: {', '.join(TIER_NAMES)}"
        ) from None


def snap_ms(later: MovementNode, earlier: MovementNode) -> int:
    """Whole-millisecond gap between two nodes, as the snap cutoffs expect."""
    return int(later.time - earlier.time)


def is_higher_snapped(
    elapsed: float,
    tier: Tier,
    predecessor_kind: MovementKind = MovementKind.WALK,
) -> bool:
    """Whether a gap is denser than the tier's basic snap.

    Args:
        elapsed: Gap in ms.
        tier: Difficulty tier the cutoff applies to.
        predecessor_kind: Kind of the movement leaving the predecessor across
            this gap. Only Platter distinguishes hyperdashes.

    Returns:
        True if the gap is higher-snapped for the tier. Cup and Overdose have
        no snap restrictions and always return False.
    """
    if tier == Tier.SALAD:
        return elapsed < BASIC_SNAP_MS
    if tier == Tier.PLATTER:
        cutoff = BASIC_SNAP_MS if predecessor_kind == MovementKind.HYPERDASH else HIGHER_SNAP_MS
        return elapsed < cutoff
    if tier == Tier.RAIN:
        return elapsed < HIGHER_SNAP_MS
    return False


def node_is_higher_snapped(node: MovementNode, tier: Tier) -> bool:
    """``is_higher_snapped`` for the movement leading into ``node``."""
    if not node.has_predecessor:
        return False
    return is_higher_snapped(node.elapsed, tier, node.kind)


def movement_between(
    sequence: MovementSequence, origin: MovementNode, target: MovementNode
) -> MovementKind:
    """Kind of the movement from ``origin`` straight to ``target``.

    Adjacent nodes reuse the stored kind. A slider head and its terminal
    anchor are classified as one movement across the whole body.
    """
    if target.prev_index == origin.index or sequence.geometry is None:
        return target.kind
    return classify_transition(abs(target.x - origin.x), target.time - origin.time, sequence.geometry)


def transition_is_higher_snapped(
    sequence: MovementSequence, origin: MovementNode, target: MovementNode, tier: Tier
) -> bool:
    """``is_higher_snapped`` for the movement from ``origin`` to ``target``."""
    return is_higher_snapped(
        snap_ms(target, origin), tier, movement_between(sequence, origin, target)
    )


def scan_runs(
    nodes: Iterable[MovementNode], kind: MovementKind
) -> Iterator[tuple[int, MovementNode]]:
    """Yield ``(run_length, last_node_in_run)`` for every run of ``kind``.

    A run is emitted on the first node that breaks it; a run still open when
    the nodes are exhausted is emitted at the end.
    """
    count = 0
    last: MovementNode | None = None
    for node in nodes:
        if node.has_predecessor and node.kind == kind:
            count += 1
            last = node
            continue
        if count:
            yield count, last
        count = 0
    if count:
        yield count, last


def antiflow_leniency(elapsed: float, geometry: CatcherGeometry) -> float:
    """Reversal distance tolerated as noise for near-stacked or fast objects."""
    return min(elapsed / 8.0, geometry.quarter_catch_width)


def is_antiflow(sequence: MovementSequence, node: MovementNode) -> bool:
    """Whether the movement after a hyperdash into ``node`` reverses direction.

    The successor of a slider head is its terminal anchor. Returns False
    unless ``node`` is reached by a hyperdash and has both a predecessor and
    a successor.
    """
    if node.kind != MovementKind.HYPERDASH:
        return False
    prev = sequence.prev(node)
    following = sequence.next(node)
    if prev is None or following is None or sequence.geometry is None:
        return False

    incoming = prev.x - node.x
    outgoing = node.x - following.x
    leniency = antiflow_leniency(snap_ms(node, prev), sequence.geometry)
    return incoming * outgoing < 0 and abs(outgoing) > leniency


def node_strength(node: MovementNode) -> float:
    """Strength multiplier of the movement into ``node`` (0.0 for the first node)."""
    if node.strength is None:
        return 0.0
    return node.strength

