"""Movement classification engine.

Turns the ordered anchors of a catch difficulty into an arena of immutable
MovementNode records. Each node carries the kind of the movement *into* it
from its predecessor and the signed margins against the walk and dash reach
budgets for that gap.

Anchors are flattened in time order: a slider head is followed by its
nested anchors (repeats, ticks, tail), and the next object is reached from
the slider's terminal anchor.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from catch_verifier.analysis.geometry import CatcherGeometry
from catch_verifier.data.hitobjects import DifficultyMap, HitObject, HitObjectType

logger = logging.getLogger(__name__)

# Catcher speeds in playfield pixels per millisecond
BASE_WALK_SPEED = 0.5
BASE_DASH_SPEED = 1.0

# A quarter of a 60 fps frame is shaved off every gap (osu!stable behaviour)
FRAME_GRACE_MS = 1000.0 / 60.0 / 4.0


class MovementKind(IntEnum):
    """Horizontal movement class, ordered by required speed."""

    WALK = 0
    DASH = 1
    HYPERDASH = 2


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MovementNode:
    """One hittable anchor and the movement that leads into it.

    ``dash_margin``, ``hyperdash_margin`` and ``strength`` are None for the
    first node of a sequence, which has no predecessor.
    """

    index: int  # position in the flattened arena
    time: float  # ms
    x: float
    object_index: int  # index of the owning hit object
    object_type: HitObjectType
    kind: MovementKind
    distance: float  # |dx| from predecessor
    elapsed: float  # ms since predecessor
    dash_margin: float | None  # walk reach - distance
    hyperdash_margin: float | None  # dash reach - distance
    strength: float | None  # strength_multiplier(distance, hyperdash_margin)
    prev_index: int | None
    next_index: int | None  # slider heads link to their terminal anchor
    parent_index: int | None = None  # owning slider head, None for top-level nodes
    children: range = range(0)  # arena indices of slider body anchors

    @property
    def is_child(self) -> bool:
        return self.parent_index is not None

    @property
    def has_predecessor(self) -> bool:
        return self.prev_index is not None


@dataclass(frozen=True, slots=True)
class MovementSequence:
    """Flattened, read-only arena of MovementNode records for one difficulty."""

    nodes: tuple[MovementNode, ...] = ()
    objects: tuple[int, ...] = ()  # arena indices of top-level nodes
    geometry: CatcherGeometry | None = None

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[MovementNode]:
        return iter(self.nodes)

    def __getitem__(self, index: int) -> MovementNode:
        return self.nodes[index]

    def next(self, node: MovementNode) -> MovementNode | None:
        """Following node; a slider head resolves to its terminal anchor."""
        return None if node.next_index is None else self.nodes[node.next_index]

    def step(self, node: MovementNode) -> MovementNode | None:
        """Flattened successor, walking slider bodies anchor by anchor."""
        following = node.index + 1
        return self.nodes[following] if following < len(self.nodes) else None

    def prev(self, node: MovementNode) -> MovementNode | None:
        return None if node.prev_index is None else self.nodes[node.prev_index]

    def children(self, node: MovementNode) -> tuple[MovementNode, ...]:
        return tuple(self.nodes[i] for i in node.children)

    def exit(self, node: MovementNode) -> MovementNode:
        """Terminal anchor of the node's object; the following object is reached from here."""
        head = node if node.parent_index is None else self.nodes[node.parent_index]
        return self.nodes[head.children[-1]] if head.children else head

    def object_nodes(self) -> Iterator[MovementNode]:
        """Top-level nodes only, skipping slider bodies."""
        for i in self.objects:
            yield self.nodes[i]

    def kinds(self) -> list[MovementKind]:
        return [n.kind for n in self.nodes]


EMPTY_SEQUENCE = MovementSequence()


# ---------------------------------------------------------------------------
# Reach budgets
# ---------------------------------------------------------------------------


def max_reachable(elapsed, geometry: CatcherGeometry, dash: bool):
    """Maximum horizontal distance coverable within ``elapsed`` ms.

    Accepts a scalar or a numpy array of gaps.
    """
    speed = BASE_DASH_SPEED if dash else BASE_WALK_SPEED
    return (np.asarray(elapsed, dtype=np.float64) - FRAME_GRACE_MS) * speed + geometry.trigger_leniency


def strength_multiplier(distance: float, margin: float) -> float:
    """Share of the trigger distance a movement uses.

    Below 1 for dashes; for hyperdashes the margin is negative and the
    result reads as "times the trigger distance".
    """
    total = distance + margin
    if total == 0:
        return 0.0
    return distance / total


def classify_transition(
    distance: float, elapsed: float, geometry: CatcherGeometry
) -> MovementKind:
    """Classify a single movement of ``distance`` px over ``elapsed`` ms."""
    if distance <= float(max_reachable(elapsed, geometry, dash=False)):
        return MovementKind.WALK
    if distance <= float(max_reachable(elapsed, geometry, dash=True)):
        return MovementKind.DASH
    return MovementKind.HYPERDASH


# ---------------------------------------------------------------------------
# Sequence construction
# ---------------------------------------------------------------------------


def build_movement_sequence(beatmap: DifficultyMap) -> MovementSequence:
    """Classify every movement of a difficulty.

    Args:
        beatmap: Difficulty with ordered hit objects and its circle size.

    Returns:
        MovementSequence, empty when the input is empty or not time-ordered.
    """
    geometry = CatcherGeometry(beatmap.circle_size)
    sequence = classify_objects(beatmap.hit_objects, geometry)
    if sequence:
        counts = np.bincount([n.kind for n in sequence], minlength=len(MovementKind))
        logger.debug(
            "Classified %s: %d anchors, %d walks, %d dashes, %d hyperdashes",
            beatmap.version or "<unnamed>",
            len(sequence),
            counts[MovementKind.WALK],
            counts[MovementKind.DASH],
            counts[MovementKind.HYPERDASH],
        )
    return sequence


def classify_objects(
    hit_objects: Sequence[HitObject], geometry: CatcherGeometry
) -> MovementSequence:
    """Build the flattened movement arena for ``hit_objects``.

    Args:
        hit_objects: Hit objects in chronological order.
        geometry: Catcher geometry for the difficulty.

    Returns:
        MovementSequence with prev/next/children links resolved.
    """
    anchors = _flatten_anchors(hit_objects)
    if not anchors:
        logger.warning("No hittable anchors — returning empty movement sequence")
        return EMPTY_SEQUENCE

    times = np.array([a[0] for a in anchors], dtype=np.float64)
    xs = np.array([a[1] for a in anchors], dtype=np.float64)
    if not (np.all(np.isfinite(times)) and np.all(np.isfinite(xs))):
        logger.warning("Non-finite anchor time or position — returning empty movement sequence")
        return EMPTY_SEQUENCE

    elapsed = np.diff(times)
    if np.any(elapsed < 0):
        bad = int(np.argmax(elapsed < 0)) + 1
        logger.warning(
            "Anchor times go backwards at %.0f ms — returning empty movement sequence",
            times[bad],
        )
        return EMPTY_SEQUENCE

    distance = np.abs(np.diff(xs))
    walk_reach = max_reachable(elapsed, geometry, dash=False)
    dash_reach = max_reachable(elapsed, geometry, dash=True)
    kinds = np.where(
        distance <= walk_reach,
        MovementKind.WALK,
        np.where(distance <= dash_reach, MovementKind.DASH, MovementKind.HYPERDASH),
    )
    dash_margin = walk_reach - distance
    hyperdash_margin = dash_reach - distance

    # Slider heads own the contiguous run of anchors that follow them
    child_ranges: dict[int, range] = {}
    for i, (_, _, _, _, parent) in enumerate(anchors):
        if parent is not None:
            start = child_ranges.get(parent, range(i, i)).start
            child_ranges[parent] = range(start, i + 1)

    last = len(anchors) - 1
    nodes: list[MovementNode] = []
    objects: list[int] = []
    for i, (time, x, object_index, object_type, parent) in enumerate(anchors):
        if parent is None:
            objects.append(i)
        if i == 0:
            kind, dist, gap = MovementKind.WALK, 0.0, 0.0
            margins: tuple[float | None, float | None, float | None] = (None, None, None)
        else:
            j = i - 1
            kind = MovementKind(int(kinds[j]))
            dist, gap = float(distance[j]), float(elapsed[j])
            hyper = float(hyperdash_margin[j])
            margins = (float(dash_margin[j]), hyper, strength_multiplier(dist, hyper))

        nodes.append(
            MovementNode(
                index=i,
                time=time,
                x=x,
                object_index=object_index,
                object_type=object_type,
                kind=kind,
                distance=dist,
                elapsed=gap,
                dash_margin=margins[0],
                hyperdash_margin=margins[1],
                strength=margins[2],
                prev_index=i - 1 if i > 0 else None,
                next_index=_next_index(i, last, child_ranges),
                parent_index=parent,
                children=child_ranges.get(i, range(0)),
            )
        )

    return MovementSequence(nodes=tuple(nodes), objects=tuple(objects), geometry=geometry)


def _flatten_anchors(
    hit_objects: Sequence[HitObject],
) -> list[tuple[float, float, int, HitObjectType, int | None]]:
    """Flatten hit objects to (time, x, object_index, type, parent_arena_index) rows."""
    rows: list[tuple[float, float, int, HitObjectType, int | None]] = []
    for object_index, obj in enumerate(hit_objects):
        if obj.is_spinner:
            # Zero-width anchor at the spinner's end edge: the catcher is free to
            # stay wherever it was, so the anchor holds the previous x
            x = rows[-1][1] if rows else obj.x
            end = obj.end_time if obj.end_time is not None else obj.time
            rows.append((end, x, object_index, obj.object_type, None))
            continue

        head = len(rows)
        rows.append((obj.time, obj.x, object_index, obj.object_type, None))
        if obj.is_slider:
            for time, x in obj.nested:
                rows.append((time, x, object_index, obj.object_type, head))
    return rows


def _next_index(i: int, last: int, child_ranges: dict[int, range]) -> int | None:
    """Forward link: slider heads skip to their terminal anchor, everything else steps by one."""
    if i in child_ranges:
        return child_ranges[i][-1]
    return i + 1 if i < last else None
