"""Dash and walk checks.

Checks:
    1. Dash cup — no dashes or hyperdashes at all in Cups
    2. Consecutive dash — cap runs of basic dashes in Salads and Platters
    3. Edge walk — walks that come within a few pixels of needing a dash
"""

from __future__ import annotations

import logging

from catch_verifier.analysis.movement import MovementKind, MovementSequence
from catch_verifier.analysis.patterns import Tier, scan_runs
from catch_verifier.checks.issues import Issue, IssueLevel
from catch_verifier.data.hitobjects import DifficultyMap, HitObjectType

logger = logging.getLogger(__name__)

# Maximum basic dashes between consecutive fruits
CONSECUTIVE_DASH_LIMITS: dict[Tier, int] = {
    Tier.SALAD: 2,
    Tier.PLATTER: 4,
}

# Walks closer than this to a dash are ambiguous: max(px, gap / divisor)
EDGE_WALK_MIN_MARGIN = 15.0
EDGE_WALK_GAP_DIVISOR = 15.0
# Gaps this long leave enough time to react, 1.5 beats at 180 BPM
EDGE_WALK_MAX_GAP_MS = 500
# Above max(count, ratio * non-dash movements) edge walks are reported as one general issue
EDGE_WALK_GENERAL_COUNT = 10
EDGE_WALK_GENERAL_RATIO = 0.02
EDGE_WALK_GENERAL_STAMPS = 10


def check_dash_cup(beatmap: DifficultyMap, movements: MovementSequence) -> list[Issue]:
    """Flag every dash and hyperdash, reported at the movement's origin."""
    issues: list[Issue] = []
    for node in movements:
        if not node.has_predecessor or node.kind == MovementKind.WALK:
            continue
        origin = movements.prev(node)
        if node.kind == MovementKind.DASH:
            template, message = "Dash", "Dash is used."
        else:
            template, message = "HyperDash", "Hyperdash is used."
        issues.append(
            Issue(
                check="dash_cup",
                template=template,
                level=IssueLevel.PROBLEM,
                time=origin.time,
                message=message,
                tiers=(Tier.CUP,),
                version=beatmap.version,
            )
        )
    return issues


def check_consecutive_dash(beatmap: DifficultyMap, movements: MovementSequence) -> list[Issue]:
    """Flag runs of basic dashes longer than the tier allows."""
    issues: list[Issue] = []
    for count, last in scan_runs(movements, MovementKind.DASH):
        origin = movements.prev(last)
        for tier, limit in CONSECUTIVE_DASH_LIMITS.items():
            if count > limit:
                issues.append(
                    Issue(
                        check="consecutive_dash",
                        template="Consecutive",
                        level=IssueLevel.PROBLEM,
                        time=origin.time,
                        message=(
                            "Too many consecutive dashes were used and should be at most "
                            f"{limit}, currently {count}."
                        ),
                        tiers=(tier,),
                        version=beatmap.version,
                    )
                )
    return issues


def check_edge_walk(beatmap: DifficultyMap, movements: MovementSequence) -> list[Issue]:
    """Flag walks that are only a few pixels short of requiring a dash.

    A handful of edge walks are reported one by one; when a difficulty uses
    many of them, a single general issue lists the first few instead.
    """
    # Walks and hyperdashes both count towards the size of the difficulty
    movement_count = 0
    raised: list[float] = []
    for node in movements:
        if not node.has_predecessor or node.kind == MovementKind.DASH:
            continue
        origin = movements.prev(node)
        if origin.object_type == HitObjectType.SPINNER or node.object_type == HitObjectType.SPINNER:
            continue
        movement_count += 1
        if node.kind != MovementKind.WALK:
            continue

        limit = max(EDGE_WALK_MIN_MARGIN, node.elapsed / EDGE_WALK_GAP_DIVISOR)
        if 0 < node.dash_margin < limit and node.elapsed < EDGE_WALK_MAX_GAP_MS:
            raised.append(origin.time)

    if not raised:
        return []

    message = "This object is a harsh walk and might be seen as ambiguous, consider reducing it."
    general_limit = max(EDGE_WALK_GENERAL_COUNT, EDGE_WALK_GENERAL_RATIO * movement_count)
    if len(raised) < general_limit:
        issues: list[Issue] = []
        for time in raised:
            issues.append(
                Issue("edge_walk", "EdgeWalk", IssueLevel.MINOR, time, message,
                      (Tier.PLATTER,), beatmap.version)
            )
            issues.append(
                Issue("edge_walk", "EdgeWalkWarning", IssueLevel.WARNING, time, message,
                      (Tier.SALAD,), beatmap.version)
            )
        return issues

    logger.debug("%s: %d edge walks, reporting as general issue", beatmap.version, len(raised))
    message = (
        "This difficulty is using many harsh walks that might be seen as ambiguous, "
        "consider checking it overall."
    )
    first, *rest = raised[:EDGE_WALK_GENERAL_STAMPS]
    return [
        Issue("edge_walk", "EdgeWalkGeneral", IssueLevel.MINOR, first, message,
              (Tier.PLATTER,), beatmap.version, list(rest)),
        Issue("edge_walk", "EdgeWalkWarningGeneral", IssueLevel.WARNING, first, message,
              (Tier.SALAD,), beatmap.version, list(rest)),
    ]
