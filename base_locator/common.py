# common.py
"""Objects that are shared across multiple modules."""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import numpy as np

Point2 = Tuple[float, float]


@dataclass(frozen=True)
class LightBlob:
    """
    One candidate light bar, described by its rotated rectangle
    (OpenCV ``RotatedRect`` convention: the width edge points along ``angle``).
    """
    center: Point2
    size: Tuple[float, float]
    angle: float
    area: float

    @property
    def long_side(self) -> float:
        return max(self.size)

    @property
    def short_side(self) -> float:
        return min(self.size)

    @property
    def aspect_ratio(self) -> float:
        short = self.short_side
        return self.long_side / short if short > 0 else float("inf")

    @property
    def long_axis_deg(self) -> float:
        """Direction of the long edge in image degrees."""
        w, h = self.size
        return self.angle + 90.0 if w < h else self.angle

    def box_points(self) -> np.ndarray:
        return cv2.boxPoints((self.center, self.size, self.angle))


@dataclass(frozen=True)
class FiducialMarker:
    """A decoded tag: id, four ordered image corners and its decode error."""
    tag_id: int
    corners: Tuple[Point2, Point2, Point2, Point2]
    decode_error: int = 0


@dataclass(frozen=True)
class CameraPose:
    """
    Tag-frame → camera-frame transform for one frame:
    ``X_cam = rotation @ X_world + translation``.
    """
    rotation: np.ndarray       # (3, 3)
    translation: np.ndarray    # (3,)
    reprojection_error: float = 0.0
    tag_ids: Tuple[int, ...] = ()

    @property
    def camera_position(self) -> np.ndarray:
        """Camera centre expressed in the tag frame."""
        return -self.rotation.T @ self.translation


@dataclass(frozen=True)
class ArmorTrack:
    found: bool
    center: Optional[Point2] = None
    anchors_refreshed: bool = False


@dataclass(frozen=True)
class StabilityReport:
    center: Point2
    radius: float
    stationary: bool


@dataclass
class FrameReport:
    """Everything one frame produced, for drawing and console output."""
    blobs: List[LightBlob] = field(default_factory=list)
    armors: List[Point2] = field(default_factory=list)
    track: ArmorTrack = field(default_factory=lambda: ArmorTrack(found=False))
    markers: List[FiducialMarker] = field(default_factory=list)
    pose: Optional[CameraPose] = None
    ground_position: Optional[np.ndarray] = None
    stability: Optional[StabilityReport] = None
