"""Check registry and the per-run driver.

A run classifies each difficulty once through a shared MovementCache and
then runs every check on every difficulty, optionally on a thread pool.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from catch_verifier.analysis.cache import MovementCache
from catch_verifier.analysis.movement import MovementSequence
from catch_verifier.analysis.patterns import Tier
from catch_verifier.checks.dashes import check_consecutive_dash, check_dash_cup, check_edge_walk
from catch_verifier.checks.hyperdashes import (
    check_antiflow_hyperdash,
    check_consecutive_hyperdash,
    check_different_snap_hyperdash,
    check_hyperdash_conjunction,
    check_hyperdash_salad,
    check_strong_hyperdash,
)
from catch_verifier.checks.issues import Issue, IssueLevel
from catch_verifier.data.hitobjects import DifficultyMap

logger = logging.getLogger(__name__)

CheckFn = Callable[[DifficultyMap, MovementSequence], list[Issue]]


@dataclass(frozen=True, slots=True)
class Check:
    """A registered difficulty check."""

    name: str
    message: str
    tiers: tuple[Tier, ...]
    run: CheckFn


ALL_CHECKS: tuple[Check, ...] = (
    Check("dash_cup", "Dash pattern is used.", (Tier.CUP,), check_dash_cup),
    Check("hyperdash_salad", "Hyperdash pattern is used.", (Tier.SALAD,), check_hyperdash_salad),
    Check(
        "consecutive_dash",
        "Too many consecutive dashes.",
        (Tier.SALAD, Tier.PLATTER),
        check_consecutive_dash,
    ),
    Check(
        "consecutive_hyperdash",
        "Too many consecutive hyperdashes.",
        (Tier.PLATTER, Tier.RAIN),
        check_consecutive_hyperdash,
    ),
    Check("edge_walk", "Too strong walks.", (Tier.SALAD, Tier.PLATTER), check_edge_walk),
    Check(
        "strong_hyperdash",
        "Too strong hyperdash patterns.",
        (Tier.PLATTER,),
        check_strong_hyperdash,
    ),
    Check(
        "antiflow_hyperdash",
        "Hyperdash followed by antiflow patterns.",
        (Tier.PLATTER,),
        check_antiflow_hyperdash,
    ),
    Check(
        "hyperdash_conjunction",
        "Higher-snapped hyperdashes used in conjunction with other dashes or hyperdashes.",
        (Tier.PLATTER, Tier.RAIN),
        check_hyperdash_conjunction,
    ),
    Check(
        "different_snap_hyperdash",
        "Hyperdashes of different beat snap are used between consecutive fruits.",
        (Tier.PLATTER, Tier.RAIN),
        check_different_snap_hyperdash,
    ),
)

CHECKS_BY_NAME: dict[str, Check] = {c.name: c for c in ALL_CHECKS}


def get_checks(names: Iterable[str] | None = None) -> tuple[Check, ...]:
    """Resolve check names to registered checks; None selects all of them."""
    if names is None:
        return ALL_CHECKS
    selected = []
    for name in names:
        if name not in CHECKS_BY_NAME:
            raise ValueError(
                f"Unknown check: {name}. Must be one of: {', '.join(CHECKS_BY_NAME)}"
            )
        selected.append(CHECKS_BY_NAME[name])
    return tuple(selected)


def run_check(
    check: Check, beatmap: DifficultyMap, cache: MovementCache
) -> list[Issue]:
    """Run a single check on a difficulty, classifying it through ``cache``."""
    movements = cache.get_or_compute(beatmap.version, beatmap)
    if not movements:
        return []
    return check.run(beatmap, movements)


def run_checks(
    difficulties: Sequence[DifficultyMap],
    checks: Sequence[Check] = ALL_CHECKS,
    cache: MovementCache | None = None,
    max_workers: int = 1,
    tiers: Iterable[Tier] | None = None,
    min_level: IssueLevel = IssueLevel.MINOR,
) -> list[Issue]:
    """Run checks on every difficulty of a beatmap set.

    Args:
        difficulties: Difficulties of the set; versions must be unique.
        checks: Checks to run.
        cache: Movement cache for this run. A fresh one is used if None.
        max_workers: Thread pool size; 1 runs everything inline.
        tiers: Only keep issues that apply to one of these tiers.
        min_level: Drop issues below this severity.

    Returns:
        Issues sorted by (version, time, check).

    Raises:
        ValueError: If two difficulties share a version.
    """
    versions = [d.version for d in difficulties]
    if len(set(versions)) != len(versions):
        raise ValueError(f"Difficulty versions must be unique, got: {versions}")

    cache = cache if cache is not None else MovementCache()
    jobs = [(check, beatmap) for beatmap in difficulties for check in checks]

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(lambda job: run_check(job[0], job[1], cache), jobs))
    else:
        results = [run_check(check, beatmap, cache) for check, beatmap in jobs]

    wanted = set(tiers) if tiers is not None else None
    issues = [
        issue
        for batch in results
        for issue in batch
        if issue.level >= min_level
        and (wanted is None or any(issue.applies_to(t) for t in wanted))
    ]
    issues.sort(key=lambda i: (i.version, i.time, i.check))

    logger.info(
        "Ran %d checks on %d difficulties: %d issues",
        len(checks), len(difficulties), len(issues),
    )
    return issues
