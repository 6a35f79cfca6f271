# lights.py
"""Light-bar detection: bright blob filter and armor pairing."""
from __future__ import annotations

import math
from itertools import combinations
from typing import List, Optional, Sequence

import cv2
import numpy as np

from base_locator.common import LightBlob, Point2
from base_locator.config import LocatorConfig


class LightBlobFilter:
    """
    Finds thin, bright, blue-dominant blobs in a BGR frame.

    The binarisation threshold is the intensity of the ``threshold_rank``-th
    brightest pixel, so it follows the overall scene brightness.
    """

    def __init__(self, cfg: LocatorConfig):
        self.cfg = cfg
        self.kernel = cv2.getStructuringElement(cv2.MORPH_CROSS, (2, 2))

    # ------------------------------------------------------------------ #
    #   B I N A R I S E
    # ------------------------------------------------------------------ #
    def rank_threshold(self, gray: np.ndarray) -> int:
        flat = gray.reshape(-1)
        rank = min(self.cfg.threshold_rank, flat.size - 1)
        # k-th largest == (size-1-k)-th smallest
        kth = flat.size - 1 - rank
        return int(np.partition(flat, kth)[kth])

    def binarize(self, gray: np.ndarray) -> np.ndarray:
        thresh = self.rank_threshold(gray)
        _, binary = cv2.threshold(gray, thresh, 255, cv2.THRESH_BINARY)
        binary = cv2.erode(binary, self.kernel, iterations=1)
        binary = cv2.dilate(binary, self.kernel, iterations=1)
        return binary

    # ------------------------------------------------------------------ #
    #   G A T E S
    # ------------------------------------------------------------------ #
    def _color_ok(self, frame: np.ndarray, center: Point2) -> bool:
        half = self.cfg.color_window_px // 2
        ih, iw = frame.shape[:2]
        x0 = max(0, int(center[0]) - half)
        y0 = max(0, int(center[1]) - half)
        x1 = min(iw, x0 + self.cfg.color_window_px)
        y1 = min(ih, y0 + self.cfg.color_window_px)
        roi = frame[y0:y1, x0:x1]
        if roi.size == 0:
            return False
        blue, _, red = roi.reshape(-1, 3).mean(axis=0)
        return blue - red > self.cfg.color_delta_min

    def classify_contour(
        self, contour: np.ndarray, frame: np.ndarray
    ) -> Optional[LightBlob]:
        """Return a ``LightBlob`` if the contour passes every gate, else None."""
        area = float(cv2.contourArea(contour))
        lo, hi = self.cfg.blob_area_range
        if area <= lo or area >= hi:
            return None

        (cx, cy), (w, h), angle = cv2.minAreaRect(contour)
        ih, iw = frame.shape[:2]
        m = self.cfg.border_margin_px
        if cx < m or cx > iw - m or cy < m or cy > ih - m:
            return None

        blob = LightBlob(center=(float(cx), float(cy)), size=(float(w), float(h)),
                         angle=float(angle), area=area)
        lo, hi = self.cfg.aspect_ratio_range
        if not lo <= blob.aspect_ratio <= hi:
            return None

        if not self._color_ok(frame, blob.center):
            return None
        return blob

    # ------------------------------------------------------------------ #
    #   P U B L I C   A P I
    # ------------------------------------------------------------------ #
    def detect(self, frame: np.ndarray) -> List[LightBlob]:
        """Light-bar candidates in a 3-channel frame; [] for anything else."""
        if frame is None or frame.ndim != 3 or frame.shape[2] != 3:
            return []

        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        binary = self.binarize(gray)
        contours, _ = cv2.findContours(
            binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE
        )

        blobs: List[LightBlob] = []
        for contour in contours:
            blob = self.classify_contour(contour, frame)
            if blob is not None:
                blobs.append(blob)
        return blobs


class LightPairer:
    """Pairs light bars that sit side by side, upright, at armor spacing."""

    def __init__(self, cfg: LocatorConfig):
        self.cfg = cfg

    def _spacing_ok(self, light: LightBlob, distance: float) -> bool:
        lo, hi = self.cfg.pair_distance_ratio_range
        a = light.long_side
        return lo * a <= distance <= hi * a

    def _alignment(self, light: LightBlob, dx: float, dy: float, distance: float) -> float:
        theta = math.radians(light.long_axis_deg)
        return abs(math.cos(theta) * dx + math.sin(theta) * dy) / distance

    def match(self, li: LightBlob, lj: LightBlob) -> Optional[Point2]:
        """
        Armor centre for the pair, or None if they don't belong together.

        Spacing is checked against both lights' long sides so the result
        does not depend on argument order.
        """
        dx = li.center[0] - lj.center[0]
        dy = li.center[1] - lj.center[1]
        distance = math.hypot(dx, dy)
        if distance == 0.0:
            return None

        # each light must see its partner at armor spacing
        if not (self._spacing_ok(li, distance) and self._spacing_ok(lj, distance)):
            return None

        limit = self.cfg.axis_alignment_max
        if (self._alignment(li, dx, dy, distance) > limit
                or self._alignment(lj, dx, dy, distance) > limit):
            return None

        return ((li.center[0] + lj.center[0]) / 2.0,
                (li.center[1] + lj.center[1]) / 2.0)

    def pair(self, blobs: Sequence[LightBlob]) -> List[Point2]:
        armors: List[Point2] = []
        for li, lj in combinations(blobs, 2):
            mid = self.match(li, lj)
            if mid is not None:
                armors.append(mid)
        return armors
