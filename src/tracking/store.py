"""
Track store: the set of people currently believed present.

Owns identity allocation. Iteration order is insertion order, which the
associator relies on for tie-breaking.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Iterator, List

from models.detection import BoundingBox
from models.track import Track
from .errors import NotFoundError


class TrackStore:
    """
    Insertion-ordered collection of active tracks.

    Ids start at ``next_id`` (1 by default) and are post-incremented on
    every allocation, so they stay unique and strictly increasing for the
    lifetime of the store even after removals.
    """

    def __init__(self, next_id: int = 1):
        if next_id < 1:
            raise ValueError("next_id must be >= 1")
        self._tracks: "OrderedDict[int, Track]" = OrderedDict()
        self._next_id = next_id

    @property
    def next_id(self) -> int:
        return self._next_id

    def allocate(self, bbox: BoundingBox, confidence: float, now: float) -> Track:
        track = Track(
            track_id=self._next_id,
            bbox=bbox,
            first_seen_at=now,
            last_seen_at=now,
            confidence=confidence,
        )
        self._next_id += 1
        self._tracks[track.track_id] = track
        return track

    def get(self, track_id: int) -> Track:
        try:
            return self._tracks[track_id]
        except KeyError:
            raise NotFoundError(track_id) from None

    def all(self) -> List[Track]:
        return list(self._tracks.values())

    def update(self, track_id: int, bbox: BoundingBox, confidence: float, now: float) -> Track:
        track = self.get(track_id)
        track.bbox = bbox
        track.confidence = confidence
        # last_seen_at never moves backwards, even if the clock does
        track.last_seen_at = max(track.last_seen_at, now)
        return track

    def remove(self, track_id: int) -> bool:
        """Delete a track. Returns False if it was already gone."""
        if self._tracks.pop(track_id, None) is None:
            logging.debug(f"remove: track {track_id} already absent")
            return False
        return True

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._tracks

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self.all())
