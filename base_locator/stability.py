# stability.py
"""Rolling position window and the "base has stopped" decision."""
from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from base_locator.common import Point2, StabilityReport
from base_locator.config import LocatorConfig


class PositionHistory:
    """Fixed-capacity ring buffer of 2-D positions; the oldest entry is overwritten."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.buffer = np.zeros((capacity, 2), dtype=np.float32)
        self.cursor = 0
        self.inserted = 0

    @property
    def full(self) -> bool:
        return self.inserted >= self.capacity

    def __len__(self) -> int:
        return min(self.inserted, self.capacity)

    def push(self, point: Point2) -> None:
        self.buffer[self.cursor] = point
        self.cursor = (self.cursor + 1) % self.capacity
        self.inserted += 1

    def points(self) -> np.ndarray:
        """Stored points, oldest first."""
        if not self.full:
            return self.buffer[: self.inserted].copy()
        return np.roll(self.buffer, -self.cursor, axis=0)


class StabilityDetector:
    def __init__(self, cfg: LocatorConfig):
        self.cfg = cfg
        self.history = PositionHistory(cfg.history_window_size)

    def push(self, point: Point2) -> Optional[StabilityReport]:
        """
        Record one position.  Until the window is full the decision is
        withheld and None is returned.
        """
        self.history.push(point)
        if not self.history.full:
            return None
        (cx, cy), radius = cv2.minEnclosingCircle(self.history.points())
        return StabilityReport(
            center=(float(cx), float(cy)),
            radius=float(radius),
            stationary=radius <= self.cfg.stationary_radius_threshold,
        )
