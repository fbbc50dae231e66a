"""Input model and loaders for catch difficulties."""

from catch_verifier.data.hitobjects import (
    DifficultyMap,
    HitObject,
    HitObjectType,
    load_difficulty,
    parse_difficulty_json,
)

__all__ = [
    "DifficultyMap",
    "HitObject",
    "HitObjectType",
    "load_difficulty",
    "parse_difficulty_json",
]
