"""Issue records produced by difficulty checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from catch_verifier.analysis.patterns import Tier


class IssueLevel(IntEnum):
    """Issue severity, least severe first."""

    MINOR = 0
    WARNING = 1
    PROBLEM = 2


LEVEL_NAMES: dict[str, IssueLevel] = {
    "minor": IssueLevel.MINOR,
    "warning": IssueLevel.WARNING,
    "problem": IssueLevel.PROBLEM,
}


def format_timestamp(time_ms: float) -> str:
    """Editor timestamp ``mm:ss:mmm`` for a time in ms."""
    total = max(0, int(time_ms))
    minutes, rest = divmod(total, 60_000)
    seconds, millis = divmod(rest, 1000)
    return f"{minutes:02d}:{seconds:02d}:{millis:03d}"


@dataclass(slots=True)
class Issue:
    """A single finding of a check on one difficulty."""

    check: str  # registered check name
    template: str  # e.g. "Consecutive", "AntiflowWalk"
    level: IssueLevel
    time: float  # ms
    message: str
    tiers: tuple[Tier, ...] = ()
    version: str = ""
    extra_times: list[float] = field(default_factory=list)

    @property
    def timestamp(self) -> str:
        stamps = [format_timestamp(t) for t in (self.time, *self.extra_times)]
        return " ".join(stamps)

    def applies_to(self, tier: Tier) -> bool:
        return not self.tiers or tier in self.tiers

    def to_dict(self) -> dict[str, Any]:
        return {
            "check": self.check,
            "template": self.template,
            "level": self.level.name.lower(),
            "time": self.time,
            "timestamp": self.timestamp,
            "message": self.message,
            "tiers": [t.name.lower() for t in self.tiers],
            "version": self.version,
        }

    def __str__(self) -> str:
        return f"[{self.level.name}] {self.timestamp} - {self.message}"
