"""Catch difficulty input model and JSON interchange loader.

The parsing layer that reads raw ``.osu`` files is external; it hands over one
JSON document per difficulty in the shape below:

    {
        "version": "Platter",
        "circle_size": 4.0,
        "hit_objects": [
            {"time": 1000, "x": 256, "type": "circle"},
            {"time": 1500, "x": 100, "type": "slider", "end_time": 2000,
             "nested": [[1750, 150], [2000, 200]]},
            {"time": 2500, "x": 256, "type": "spinner", "end_time": 4000}
        ]
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class HitObjectType(IntEnum):
    """Hit object discriminator, valued as the osu! type bits."""

    CIRCLE = 1
    SLIDER = 2
    SPINNER = 8


_TYPE_NAMES = {
    "circle": HitObjectType.CIRCLE,
    "slider": HitObjectType.SLIDER,
    "spinner": HitObjectType.SPINNER,
}


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class HitObject:
    """A single catch hit object.

    ``nested`` holds the slider body anchors (repeats, ticks, tail) in time
    order as ``(time, x)`` pairs; it is empty for circles and spinners.
    """

    time: float  # ms
    x: float  # playfield x, 0-512
    object_type: HitObjectType = HitObjectType.CIRCLE
    end_time: float | None = None
    nested: list[tuple[float, float]] = field(default_factory=list)

    @property
    def is_slider(self) -> bool:
        return self.object_type == HitObjectType.SLIDER

    @property
    def is_spinner(self) -> bool:
        return self.object_type == HitObjectType.SPINNER

    def anchors(self) -> list[tuple[float, float]]:
        """Head anchor followed by every nested anchor."""
        return [(self.time, self.x), *self.nested]

    def x_at(self, time: float) -> float:
        """Horizontal position at ``time``, linear between slider anchors."""
        points = self.anchors()
        if time <= points[0][0]:
            return points[0][1]
        for (t0, x0), (t1, x1) in zip(points, points[1:]):
            if time <= t1:
                if t1 == t0:
                    return x1
                return x0 + (x1 - x0) * (time - t0) / (t1 - t0)
        return points[-1][1]


@dataclass(slots=True)
class DifficultyMap:
    """All hit objects of one difficulty variant."""

    version: str  # variant identifier, e.g. "Platter"
    circle_size: float
    hit_objects: list[HitObject] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def load_difficulty(path: Path | str) -> DifficultyMap | None:
    """Load a difficulty from a JSON interchange file.

    Args:
        path: Path to the ``.json`` file.

    Returns:
        DifficultyMap, or None if the document is not recognised.
    """
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    beatmap = parse_difficulty_json(data)
    if beatmap is not None and not beatmap.version:
        beatmap.version = path.stem
    return beatmap


def parse_difficulty_json(data: dict[str, Any]) -> DifficultyMap | None:
    """Parse a difficulty from an already-loaded JSON dict.

    Args:
        data: Parsed JSON dictionary.

    Returns:
        DifficultyMap, or None when ``circle_size`` or ``hit_objects`` is
        missing or a hit object cannot be read.
    """
    if "circle_size" not in data or "hit_objects" not in data:
        logger.warning("Difficulty document has no circle_size/hit_objects — skipping")
        return None

    try:
        circle_size = float(data["circle_size"])
        hit_objects = [_parse_hit_object(o) for o in data["hit_objects"]]
    except (KeyError, ValueError, TypeError) as e:
        logger.warning("Unreadable hit object in difficulty %r (%s) — skipping", data.get("version", ""), e)
        return None

    return DifficultyMap(
        version=str(data.get("version", "")),
        circle_size=circle_size,
        hit_objects=hit_objects,
    )


def _parse_hit_object(d: dict[str, Any]) -> HitObject:
    raw_type = d.get("type", "circle")
    if isinstance(raw_type, str):
        object_type = _TYPE_NAMES[raw_type.lower()]
    else:
        # Raw osu! type field: keep only the object bits
        object_type = HitObjectType(int(raw_type) & 0b1011)

    end_time = d.get("end_time")
    return HitObject(
        time=float(d.get("time", 0)),
        x=float(d.get("x", 256)),
        object_type=object_type,
        end_time=float(end_time) if end_time is not None else None,
        nested=[(float(t), float(x)) for t, x in d.get("nested", [])],
    )
