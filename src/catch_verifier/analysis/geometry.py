"""Catcher geometry derived from a difficulty's circle size.

The catcher hitbox width has to match the game exactly; every reach budget
and leniency radius downstream is measured against it.
"""

from __future__ import annotations

from dataclasses import dataclass

# Fraction of the catcher plate that can actually catch fruit.
ALLOWED_CATCH_RANGE = 0.8


@dataclass(frozen=True, slots=True)
class CatcherGeometry:
    """Catcher dimensions for one circle size."""

    circle_size: float

    @property
    def normalized(self) -> float:
        return (self.circle_size - 5.0) / 5.0

    @property
    def fruit_width(self) -> float:
        return (64.0 * (1.0 - 0.7 * self.normalized)) / 128.0

    @property
    def catch_width(self) -> float:
        """Full catcher width in playfield pixels (106.75 at CS 5)."""
        return 305.0 * self.fruit_width * 0.7

    @property
    def half_catch_width(self) -> float:
        return self.catch_width / 2

    @property
    def quarter_catch_width(self) -> float:
        """Near-stack leniency radius."""
        return self.catch_width / 4

    @property
    def trigger_leniency(self) -> float:
        """Distance the catcher covers for free when measuring dash/hyperdash triggers."""
        return self.half_catch_width / ALLOWED_CATCH_RANGE
