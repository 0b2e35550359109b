"""
Demo detector that simulates people walking in and out of the room.

Runs without a camera or model. Every 3-8 seconds (simulated) it may add a
person (40%, while fewer than ``max_people`` are present), remove one (30%)
or leave the room unchanged. Present people jitter slightly between calls
so the tracker keeps their identity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from models.detection import Detection, detections_from_numpy
from runtime.clock import Clock, MonotonicClock


@dataclass
class DemoConfig:
    frame_size: Tuple[int, int] = (1280, 720)
    max_people: int = 5
    min_interval_ms: float = 3000.0
    max_interval_ms: float = 8000.0
    first_event_ms: float = 1000.0
    jitter_px: float = 4.0
    seed: Optional[int] = None


class DemoPersonDetector:
    """Synthetic PersonDetector driven by a seeded numpy Generator."""

    def __init__(self, cfg: Optional[DemoConfig] = None, clock: Optional[Clock] = None):
        self.cfg = cfg or DemoConfig()
        self.clock = clock or MonotonicClock()
        self._rng = np.random.default_rng(self.cfg.seed)
        self._people: Dict[int, np.ndarray] = {}  # sim id -> [x, y, w, h]
        self._next_sim_id = 0
        self._next_event_at = self.clock.now_ms() + self.cfg.first_event_ms

    @property
    def people_present(self) -> int:
        return len(self._people)

    def detect(self, frame: Optional[np.ndarray] = None) -> List[Detection]:
        now = self.clock.now_ms()
        while now >= self._next_event_at:
            self._step_population()
            self._next_event_at += self._rng.uniform(
                self.cfg.min_interval_ms, self.cfg.max_interval_ms
            )

        rows = []
        for box in self._people.values():
            box[:2] += self._rng.uniform(-self.cfg.jitter_px, self.cfg.jitter_px, size=2)
            self._clip(box)
            rows.append([*box, self._rng.uniform(0.8, 1.0)])
        return detections_from_numpy(np.array(rows, dtype=float))

    def _step_population(self) -> None:
        action = self._rng.random()
        if action < 0.4 and len(self._people) < self.cfg.max_people:
            self._people[self._next_sim_id] = self._random_box()
            logging.debug(f"[DEMO] person {self._next_sim_id} walks in")
            self._next_sim_id += 1
        elif action < 0.7 and self._people:
            ids = list(self._people.keys())
            leaving = ids[int(self._rng.integers(len(ids)))]
            del self._people[leaving]
            logging.debug(f"[DEMO] person {leaving} walks out")

    def _random_box(self) -> np.ndarray:
        width, height = self.cfg.frame_size
        w = self._rng.uniform(120, 200)
        h = self._rng.uniform(160, 280)
        x = self._rng.uniform(50, max(51, width - 200))
        y = self._rng.uniform(50, max(51, height - 300))
        return np.array([x, y, w, h], dtype=float)

    def _clip(self, box: np.ndarray) -> None:
        width, height = self.cfg.frame_size
        box[0] = np.clip(box[0], 0, max(0, width - box[2]))
        box[1] = np.clip(box[1], 0, max(0, height - box[3]))
