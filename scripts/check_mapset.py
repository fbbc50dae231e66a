"""CLI: Run difficulty checks on the difficulties of a catch beatmap set.

Usage:
    python scripts/check_mapset.py inputs=[maps/salad.json,maps/platter.json]
    python scripts/check_mapset.py inputs=[maps/platter.json] tiers=[platter] min_level=warning
    python scripts/check_mapset.py inputs=[maps/rain.json] checks=[strong_hyperdash] output=report.json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import hydra
from omegaconf import DictConfig
from tqdm import tqdm

from catch_verifier.analysis.cache import MovementCache
from catch_verifier.analysis.patterns import parse_tier
from catch_verifier.checks.issues import LEVEL_NAMES
from catch_verifier.checks.runner import get_checks, run_checks
from catch_verifier.data.hitobjects import DifficultyMap, load_difficulty

logger = logging.getLogger(__name__)


def _load_inputs(paths: list[str]) -> list[DifficultyMap]:
    """Load every input difficulty, skipping unreadable files."""
    difficulties: list[DifficultyMap] = []
    for raw in tqdm(paths, desc="Loading difficulties", unit="diff"):
        path = Path(hydra.utils.to_absolute_path(raw))
        if not path.exists():
            logger.error("Difficulty file not found: %s", path)
            continue
        beatmap = load_difficulty(path)
        if beatmap is None:
            logger.warning("Skipping %s: not a difficulty document", path.name)
            continue
        difficulties.append(beatmap)
    return difficulties


@hydra.main(config_path="../configs", config_name="check", version_base=None)
def main(cfg: DictConfig) -> None:
    """Entry point for the batch checking CLI."""
    logging.basicConfig(
        level=logging.DEBUG if cfg.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if not cfg.inputs:
        raise ValueError("No inputs given. Pass inputs=[path/to/difficulty.json,...]")

    min_level = cfg.min_level.lower()
    if min_level not in LEVEL_NAMES:
        raise ValueError(f"Unknown min_level: {cfg.min_level}. Must be one of: {', '.join(LEVEL_NAMES)}")

    checks = get_checks(list(cfg.checks) if cfg.checks is not None else None)
    tiers = [parse_tier(t) for t in cfg.tiers] if cfg.tiers is not None else None

    difficulties = _load_inputs(list(cfg.inputs))
    versions = [d.version for d in difficulties]
    if len(set(versions)) != len(versions):
        raise ValueError(f"Difficulty versions must be unique, got: {versions}")

    cache = MovementCache()
    issues = run_checks(
        difficulties,
        checks=checks,
        cache=cache,
        max_workers=cfg.max_workers,
        tiers=tiers,
        min_level=LEVEL_NAMES[min_level],
    )
    cache.clear()

    for issue in issues:
        print(f"{issue.version}: {issue}")

    if cfg.output:
        output_path = Path(hydra.utils.to_absolute_path(cfg.output))
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump([i.to_dict() for i in issues], f, indent=2)
        logger.info("Wrote %d issues to %s", len(issues), output_path)


if __name__ == "__main__":
    main()
