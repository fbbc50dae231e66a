"""Hyperdash checks.

Checks:
    1. Hyperdash salad — no hyperdashes at all in Salads
    2. Consecutive hyperdash — cap runs of hyperdashes in Platters and Rains
    3. Strong hyperdash — hyperdashes far beyond their trigger distance
    4. Antiflow hyperdash — direction reversals straight after a hyperdash
    5. Hyperdash conjunction — higher-snapped hyperdashes next to other dashes
    6. Different snap hyperdash — consecutive hyperdashes with unequal gaps

Strength values read as "times the trigger distance": a hyperdash that
travels 1.5x the distance that would have triggered it has strength 1.5.
"""

from __future__ import annotations

import logging

from catch_verifier.analysis.movement import MovementKind, MovementNode, MovementSequence
from catch_verifier.analysis.patterns import (
    Tier,
    is_antiflow,
    movement_between,
    node_is_higher_snapped,
    node_strength,
    scan_runs,
    snap_ms,
    transition_is_higher_snapped,
)
from catch_verifier.checks.issues import Issue, IssueLevel
from catch_verifier.data.hitobjects import DifficultyMap

logger = logging.getLogger(__name__)

# Maximum hyperdashes between consecutive fruits
CONSECUTIVE_HYPERDASH_LIMITS: dict[Tier, int] = {
    Tier.PLATTER: 2,
    Tier.RAIN: 4,
}

# Platter strength limits, in times the trigger distance
STRONG_BASIC_LIMIT = 1.5
STRONG_HIGHER_SNAP_LIMIT = 1.3

# Platter antiflow strength limits
ANTIFLOW_WALK_AFTER_BASIC = 1.3
ANTIFLOW_DASH_AFTER_BASIC = 1.2
ANTIFLOW_AFTER_HIGHER_SNAP = 1.1

# Hyperdash gap bands in whole ms: [125, 250) is higher-snapped, >= 250 basic
HIGHER_SNAP_HYPER_MIN_MS = 125
BASIC_HYPER_MIN_MS = 250
# Dash gap band counted as higher-snapped after a basic hyperdash
HIGHER_SNAP_DASH_MS = (64, 125)

# Snap differences up to this many ms are treated as mis-snapping noise
SNAP_TOLERANCE_MS = 5


def _top_level(movements: MovementSequence) -> list[MovementNode]:
    return list(movements.object_nodes())


def check_hyperdash_salad(beatmap: DifficultyMap, movements: MovementSequence) -> list[Issue]:
    """Flag every hyperdash, reported at the movement's origin."""
    return [
        Issue(
            check="hyperdash_salad",
            template="HyperDash",
            level=IssueLevel.PROBLEM,
            time=movements.prev(node).time,
            message="Hyperdash is used.",
            tiers=(Tier.SALAD,),
            version=beatmap.version,
        )
        for node in movements
        if node.has_predecessor and node.kind == MovementKind.HYPERDASH
    ]


def check_consecutive_hyperdash(
    beatmap: DifficultyMap, movements: MovementSequence
) -> list[Issue]:
    """Flag runs of hyperdashes longer than the tier allows."""
    issues: list[Issue] = []
    for count, last in scan_runs(movements, MovementKind.HYPERDASH):
        origin = movements.prev(last)
        for tier, limit in CONSECUTIVE_HYPERDASH_LIMITS.items():
            if count > limit:
                issues.append(
                    Issue(
                        check="consecutive_hyperdash",
                        template="Consecutive",
                        level=IssueLevel.PROBLEM,
                        time=origin.time,
                        message=(
                            "Too many consecutive hyperdashes were used and should be at most "
                            f"{limit}, currently {count}."
                        ),
                        tiers=(tier,),
                        version=beatmap.version,
                    )
                )
    return issues


def check_strong_hyperdash(beatmap: DifficultyMap, movements: MovementSequence) -> list[Issue]:
    """Flag hyperdashes between objects that overshoot the Platter limits.

    Slider-body hyperdashes are not allowed in Platters at all, so only
    movements between objects are measured here.
    """
    issues: list[Issue] = []
    objects = _top_level(movements)
    for node in objects[1:]:
        if node.kind != MovementKind.HYPERDASH:
            continue
        snap = snap_ms(node, movements.prev(node))
        strength = node_strength(node)

        if HIGHER_SNAP_HYPER_MIN_MS <= snap < BASIC_HYPER_MIN_MS and strength > STRONG_HIGHER_SNAP_LIMIT:
            issues.append(
                Issue(
                    "strong_hyperdash", "StrongHigherSnap", IssueLevel.WARNING, node.time,
                    "Higher snapped hyper should not be longer than "
                    f"{STRONG_HIGHER_SNAP_LIMIT} times the trigger distance, currently {strength:.2f}.",
                    (Tier.PLATTER,), beatmap.version,
                )
            )
        if snap >= BASIC_HYPER_MIN_MS and strength > STRONG_BASIC_LIMIT:
            issues.append(
                Issue(
                    "strong_hyperdash", "Strong", IssueLevel.WARNING, node.time,
                    "Basic hyper should not be longer than "
                    f"{STRONG_BASIC_LIMIT} times the trigger distance, currently {strength:.2f}.",
                    (Tier.PLATTER,), beatmap.version,
                )
            )
    return issues


def check_antiflow_hyperdash(beatmap: DifficultyMap, movements: MovementSequence) -> list[Issue]:
    """Flag hyperdashes followed by antiflow movement in Platters."""
    issues: list[Issue] = []
    objects = _top_level(movements)
    for node in objects[1:-1]:
        if not is_antiflow(movements, node):
            continue
        origin = movements.prev(node)
        following = movements.next(node)
        snap = snap_ms(node, origin)
        strength = node_strength(node)
        after = movement_between(movements, node, following)

        template: str | None = None
        message = ""
        if HIGHER_SNAP_HYPER_MIN_MS <= snap < BASIC_HYPER_MIN_MS:
            if after == MovementKind.WALK:
                if strength > ANTIFLOW_AFTER_HIGHER_SNAP:
                    template = "AntiflowWalkHigh"
                    message = (
                        "Higher snapped hyper should not be longer than "
                        f"{ANTIFLOW_AFTER_HIGHER_SNAP} times the trigger distance if it's "
                        f"followed by an antiflow pattern, currently {strength:.2f} times."
                    )
            else:
                template = "AntiflowDashHigh"
                message = "Higher snapped hyper should not be followed by an antiflow dash."
        elif snap >= BASIC_HYPER_MIN_MS:
            if after == MovementKind.WALK:
                if strength > ANTIFLOW_WALK_AFTER_BASIC:
                    template = "AntiflowWalk"
                    message = (
                        "Basic hyper should not be longer than "
                        f"{ANTIFLOW_WALK_AFTER_BASIC} times the trigger distance if it's "
                        f"followed by an antiflow walk, currently {strength:.2f} times."
                    )
            else:
                next_snap = snap_ms(following, node)
                low, high = HIGHER_SNAP_DASH_MS
                if low <= next_snap < high:
                    template = "AntiflowHighDash"
                    message = "Basic hyper should not be followed by an antiflow higher-snapped dash."
                elif strength > ANTIFLOW_DASH_AFTER_BASIC:
                    template = "AntiflowDash"
                    message = (
                        "Basic hyper should not be longer than "
                        f"{ANTIFLOW_DASH_AFTER_BASIC} times the trigger distance if it's "
                        f"followed by an antiflow dash, currently {strength:.2f} times."
                    )

        if template is not None:
            issues.append(
                Issue("antiflow_hyperdash", template, IssueLevel.WARNING, origin.time, message,
                      (Tier.PLATTER,), beatmap.version)
            )
    return issues


def check_hyperdash_conjunction(
    beatmap: DifficultyMap, movements: MovementSequence
) -> list[Issue]:
    """Flag higher-snapped hyperdashes used next to other dashes or hyperdashes.

    Platter: a higher-snapped hyperdash must not touch any other dash.
    Rain: it must not touch a higher-snapped dash or any other hyperdash.
    """
    platter_message = "Higher-snapped hyperdash is used in conjunction with other dash or hyperdash."
    rain_message = (
        "Higher-snapped hyperdash is used in conjunction with higher-snapped dash "
        "or any other hyperdash."
    )

    issues: list[Issue] = []
    objects = _top_level(movements)
    for node in objects[1:-1]:
        following = movements.next(node)
        if following is None:
            continue
        after = movement_between(movements, node, following)
        after_higher_rain = transition_is_higher_snapped(movements, node, following, Tier.RAIN)
        marked_platter = False
        marked_rain = False

        # Hyperdash into this object, anything but a walk out of it
        if node.kind == MovementKind.HYPERDASH and after != MovementKind.WALK:
            if node_is_higher_snapped(node, Tier.PLATTER):
                issues.append(
                    Issue("hyperdash_conjunction", "ConsecutiveHigherSnapPlatter",
                          IssueLevel.PROBLEM, node.time, platter_message,
                          (Tier.PLATTER,), beatmap.version)
                )
                marked_platter = True
            if node_is_higher_snapped(node, Tier.RAIN) and (
                after == MovementKind.HYPERDASH or after_higher_rain
            ):
                issues.append(
                    Issue("hyperdash_conjunction", "ConsecutiveHigherSnapRain",
                          IssueLevel.PROBLEM, node.time, rain_message,
                          (Tier.RAIN,), beatmap.version)
                )
                marked_rain = True

        # Hyperdash out of this object, anything but a walk into it
        if after == MovementKind.HYPERDASH and node.kind != MovementKind.WALK:
            if after_higher_rain and not marked_platter:
                issues.append(
                    Issue("hyperdash_conjunction", "ConsecutiveHigherSnapPlatter",
                          IssueLevel.PROBLEM, node.time, platter_message,
                          (Tier.PLATTER,), beatmap.version)
                )
            if (
                after_higher_rain
                and not marked_rain
                and (node.kind == MovementKind.HYPERDASH or node_is_higher_snapped(node, Tier.RAIN))
            ):
                issues.append(
                    Issue("hyperdash_conjunction", "ConsecutiveHigherSnapRain",
                          IssueLevel.PROBLEM, node.time, rain_message,
                          (Tier.RAIN,), beatmap.version)
                )
    return issues


def check_different_snap_hyperdash(
    beatmap: DifficultyMap, movements: MovementSequence
) -> list[Issue]:
    """Flag basic hyperdashes followed by a hyperdash of a different snap.

    Slider bodies are walked anchor by anchor.
    """
    message = "Basic hyperdash followed by a different snapped hyperdash."
    issues: list[Issue] = []
    objects = _top_level(movements)
    for head in objects[1:-1]:
        for node in (head, *movements.children(head)):
            origin = movements.prev(node)
            following = movements.step(node)
            if origin is None or following is None:
                continue
            if node.kind != MovementKind.HYPERDASH or following.kind != MovementKind.HYPERDASH:
                continue
            if abs(snap_ms(node, origin) - snap_ms(following, node)) <= SNAP_TOLERANCE_MS:
                continue

            # Higher-snapped hyperdashes are already banned from touching any
            # other hyperdash, so only basic pairs are compared
            for tier, level in ((Tier.PLATTER, IssueLevel.PROBLEM), (Tier.RAIN, IssueLevel.WARNING)):
                if not node_is_higher_snapped(node, tier) and not node_is_higher_snapped(following, tier):
                    issues.append(
                        Issue("different_snap_hyperdash", "ConsecutiveDifferentSnap",
                              level, node.time, message, (tier,), beatmap.version)
                    )
    return issues
