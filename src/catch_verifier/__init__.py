"""Movement classification and difficulty checks for osu!catch beatmaps."""

__version__ = "0.1.0"
