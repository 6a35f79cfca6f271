# locator.py
"""Single-frame pipeline: lights → armor → tags → pose → ground → stop decision."""
from __future__ import annotations

from typing import List, Optional, Protocol

import numpy as np

from base_locator.common import FiducialMarker, FrameReport
from base_locator.config import LocatorConfig, PoseConfig
from base_locator.lights import LightBlobFilter, LightPairer
from base_locator.pose import GroundProjector, PoseEstimator
from base_locator.stability import StabilityDetector
from base_locator.tags import ArucoTagDetector, filter_markers
from base_locator.tracker import ArmorTracker


class TagSource(Protocol):
    def detect(self, frame: np.ndarray) -> List[FiducialMarker]: ...


class BaseLocator:
    """
    Owns the per-run state (armor tracker, position history) and runs every
    stage once per frame.  Not thread-safe: feed it from a single loop.
    """

    def __init__(
        self,
        locator_cfg: LocatorConfig,
        pose_cfg: PoseConfig,
        tag_source: Optional[TagSource] = None,
    ):
        self.locator_cfg = locator_cfg
        self.pose_cfg = pose_cfg

        self.light_filter = LightBlobFilter(locator_cfg)
        self.pairer = LightPairer(locator_cfg)
        self.tracker = ArmorTracker(locator_cfg)
        self.tags = tag_source if tag_source is not None else ArucoTagDetector(pose_cfg)
        self.pose_estimator = PoseEstimator(pose_cfg)
        self.projector = GroundProjector(pose_cfg, locator_cfg)
        self.stability = StabilityDetector(locator_cfg)

    def process(self, frame: np.ndarray) -> FrameReport:
        rpt = FrameReport()

        # -------- Armor (pixel space) --------
        rpt.blobs = self.light_filter.detect(frame)
        rpt.armors = self.pairer.pair(rpt.blobs)
        rpt.track = self.tracker.update(rpt.armors)

        # -------- Camera pose --------
        if frame is not None:
            rpt.markers = filter_markers(self.tags.detect(frame), self.pose_cfg)
        rpt.pose = self.pose_estimator.estimate(rpt.markers)

        # -------- Ground position + stop decision --------
        if rpt.track.found and rpt.pose is not None:
            rpt.ground_position = self.projector.project(rpt.track.center, rpt.pose)
            rpt.stability = self.stability.push(
                self.projector.to_plane(rpt.ground_position)
            )
        return rpt
