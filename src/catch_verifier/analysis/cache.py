"""Per-run cache of classified movement sequences.

Every check reads the same MovementSequence for a difficulty, possibly from
several worker threads at once. The first requester for a variant computes
it; everyone else asking for that variant waits on the same future.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future

from catch_verifier.analysis.movement import MovementSequence, build_movement_sequence
from catch_verifier.data.hitobjects import DifficultyMap

logger = logging.getLogger(__name__)


class MovementCache:
    """Compute-once store of MovementSequence keyed by difficulty variant.

    Entries are never invalidated while a run is in progress; call ``clear``
    at the run boundary.
    """

    def __init__(
        self,
        compute: Callable[[DifficultyMap], MovementSequence] = build_movement_sequence,
    ):
        """
        Args:
            compute: Function building the sequence for a difficulty.
        """
        self._compute = compute
        self._lock = threading.Lock()
        self._entries: dict[str, Future[MovementSequence]] = {}

    def get_or_compute(self, variant_id: str, beatmap: DifficultyMap) -> MovementSequence:
        """Return the sequence for ``variant_id``, computing it at most once.

        Args:
            variant_id: Difficulty variant identifier (the version name).
            beatmap: Difficulty to classify if the variant is not cached yet.

        Returns:
            The shared, read-only MovementSequence for the variant.
        """
        with self._lock:
            future = self._entries.get(variant_id)
            owner = future is None
            if owner:
                future = Future()
                self._entries[variant_id] = future

        if not owner:
            return future.result()

        logger.debug("Computing movements for %s", variant_id)
        try:
            sequence = self._compute(beatmap)
        except BaseException as exc:
            future.set_exception(exc)
            raise
        future.set_result(sequence)
        return sequence

    def get(self, variant_id: str) -> MovementSequence | None:
        """Completed sequence for ``variant_id``, or None if absent or still computing."""
        with self._lock:
            future = self._entries.get(variant_id)
        if future is None or not future.done() or future.exception() is not None:
            return None
        return future.result()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, variant_id: object) -> bool:
        with self._lock:
            return variant_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
