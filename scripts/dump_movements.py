"""Print the classified movement table of a difficulty.

Usage:
    python scripts/dump_movements.py maps/platter.json
    python scripts/dump_movements.py maps/platter.json --kind hyperdash
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from catch_verifier.analysis.movement import MovementKind, build_movement_sequence
from catch_verifier.checks.issues import format_timestamp
from catch_verifier.data.hitobjects import load_difficulty

logger = logging.getLogger(__name__)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Print the movement classification of a catch difficulty",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("difficulty", type=Path, help="Difficulty JSON file")
    parser.add_argument(
        "--kind",
        default=None,
        choices=[k.name.lower() for k in MovementKind],
        help="Only show movements of this kind",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s: %(message)s",
    )

    if not args.difficulty.exists():
        parser.error(f"Difficulty file not found: {args.difficulty}")

    beatmap = load_difficulty(args.difficulty)
    if beatmap is None:
        parser.error(f"Not a difficulty document: {args.difficulty}")

    movements = build_movement_sequence(beatmap)
    if not movements:
        logger.warning("No movements classified for %s", beatmap.version)
        return

    wanted = MovementKind[args.kind.upper()] if args.kind else None
    print(f"{'time':>10} {'x':>7} {'kind':<9} {'dist':>7} {'gap':>6} {'dash_m':>8} {'hyper_m':>8} {'str':>5}")
    for node in movements:
        if not node.has_predecessor or (wanted is not None and node.kind != wanted):
            continue
        indent = "  " if node.is_child else ""
        print(
            f"{format_timestamp(node.time):>10} {node.x:7.1f} {indent + node.kind.name.lower():<9} "
            f"{node.distance:7.1f} {node.elapsed:6.0f} {node.dash_margin:8.1f} "
            f"{node.hyperdash_margin:8.1f} {node.strength:5.2f}"
        )


if __name__ == "__main__":
    main()
