# tracker.py
"""Two-anchor armor tracker that survives losing one of the two armors."""
from __future__ import annotations

import math
from enum import Enum, auto
from typing import Sequence

from base_locator.common import ArmorTrack, Point2
from base_locator.config import LocatorConfig


class TrackState(Enum):
    UNLOCKED = auto()
    LOCKED = auto()


class ArmorTracker:
    """
    The base carries two armors.  Seeing both locks the tracker and stores
    them as anchors; while locked, a single sighting is matched to the
    nearer anchor and both anchors are shifted by the same offset, so the
    base centre (midpoint of the anchors) stays available.
    """

    def __init__(self, cfg: LocatorConfig):
        self.cfg = cfg
        self.state = TrackState.UNLOCKED
        self.anchor1: Point2 = (0.0, 0.0)
        self.anchor2: Point2 = (0.0, 0.0)

    @property
    def locked(self) -> bool:
        return self.state is TrackState.LOCKED

    @property
    def center(self) -> Point2:
        return ((self.anchor1[0] + self.anchor2[0]) / 2.0,
                (self.anchor1[1] + self.anchor2[1]) / 2.0)

    def reset(self) -> None:
        self.state = TrackState.UNLOCKED
        self.anchor1 = (0.0, 0.0)
        self.anchor2 = (0.0, 0.0)

    # ------------------------------------------------------------------ #
    #   S I N G L E   S I G H T I N G
    # ------------------------------------------------------------------ #
    def _follow_one(self, seen: Point2) -> bool:
        """Move the nearer anchor onto ``seen``; returns False if none is close."""
        max_d = self.cfg.anchor_update_max_distance_px
        d1 = math.dist(seen, self.anchor1)
        d2 = math.dist(seen, self.anchor2)

        if d1 < d2 and d1 < max_d:
            dx, dy = seen[0] - self.anchor1[0], seen[1] - self.anchor1[1]
            self.anchor2 = (self.anchor2[0] + dx, self.anchor2[1] + dy)
            self.anchor1 = seen
            return True
        if d2 < max_d:
            dx, dy = seen[0] - self.anchor2[0], seen[1] - self.anchor2[1]
            self.anchor1 = (self.anchor1[0] + dx, self.anchor1[1] + dy)
            self.anchor2 = seen
            return True
        # too far from both: keep the last anchors
        return False

    # ------------------------------------------------------------------ #
    #   P E R - F R A M E   U P D A T E
    # ------------------------------------------------------------------ #
    def update(self, armors: Sequence[Point2]) -> ArmorTrack:
        count = len(armors)
        if count >= 2 and not self.locked:
            self.state = TrackState.LOCKED

        if not self.locked:
            return ArmorTrack(found=False)

        if count == 2:
            self.anchor1 = (float(armors[0][0]), float(armors[0][1]))
            self.anchor2 = (float(armors[1][0]), float(armors[1][1]))
            return ArmorTrack(found=True, center=self.center, anchors_refreshed=True)

        if count == 1:
            seen = (float(armors[0][0]), float(armors[0][1]))
            refreshed = self._follow_one(seen)
            return ArmorTrack(found=True, center=self.center, anchors_refreshed=refreshed)

        self.state = TrackState.UNLOCKED
        return ArmorTrack(found=False)
