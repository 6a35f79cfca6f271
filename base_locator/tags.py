# tags.py
"""OpenCV ArUco adapter for the AprilTag field markers, plus id filtering."""
from __future__ import annotations

from typing import List, Optional, Sequence

import cv2
import numpy as np

from base_locator.common import FiducialMarker
from base_locator.config import PoseConfig


class ArucoTagDetector:
    """
    Decodes the tag family named in ``PoseConfig.tag_family``.

    ArUco does not report per-marker bit errors; with ``max_decode_error``
    at 0 the detector is built without error correction, so everything it
    returns decoded exactly and carries ``decode_error == 0``.
    """

    def __init__(self, cfg: PoseConfig):
        self.cfg = cfg
        if not hasattr(cv2.aruco, cfg.tag_family):
            raise ValueError(f"Unknown ArUco dictionary: {cfg.tag_family}")
        self.dictionary = cv2.aruco.getPredefinedDictionary(
            getattr(cv2.aruco, cfg.tag_family)
        )
        self.params = cv2.aruco.DetectorParameters()
        if cfg.max_decode_error == 0:
            self.params.errorCorrectionRate = 0.0
        self.detector = cv2.aruco.ArucoDetector(self.dictionary, self.params)

    def _to_gray(self, frame: np.ndarray) -> Optional[np.ndarray]:
        if frame.ndim == 2:
            return frame
        if frame.ndim != 3:
            return None
        if frame.shape[2] == 1:
            return np.ascontiguousarray(frame[..., 0])
        if frame.shape[2] == 3:
            return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        if frame.shape[2] == 4:
            return cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
        return None

    def detect(self, frame: np.ndarray) -> List[FiducialMarker]:
        gray = self._to_gray(frame)
        if gray is None:
            return []
        corners, ids, _ = self.detector.detectMarkers(gray)
        if ids is None:
            return []

        markers: List[FiducialMarker] = []
        for quad, tag_id in zip(corners, ids.flatten()):
            pts = quad.reshape(4, 2)
            markers.append(
                FiducialMarker(
                    tag_id=int(tag_id),
                    corners=tuple((float(x), float(y)) for x, y in pts),
                    decode_error=0,
                )
            )
        return markers


def filter_markers(markers: Sequence[FiducialMarker], cfg: PoseConfig) -> List[FiducialMarker]:
    """
    Remap reserved ids, then keep only exact decodes whose id is in the
    world-position table.  Returns a new list; the input is not touched.
    """
    kept: List[FiducialMarker] = []
    for marker in markers:
        tag_id = cfg.id_remap.get(marker.tag_id, marker.tag_id)
        if tag_id not in cfg.tag_world_positions:
            continue
        if marker.decode_error > cfg.max_decode_error:
            continue
        if tag_id != marker.tag_id:
            marker = FiducialMarker(tag_id, marker.corners, marker.decode_error)
        kept.append(marker)
    return kept


def draw_markers(img: np.ndarray, markers: Sequence[FiducialMarker]) -> None:
    for marker in markers:
        pts = np.array(marker.corners, dtype=np.int32).reshape(-1, 1, 2)
        cv2.polylines(img, [pts], True, (255, 0, 255), 2)
        x, y = pts[0, 0]
        cv2.putText(img, str(marker.tag_id), (int(x), int(y) - 6),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 0, 255), 2)
