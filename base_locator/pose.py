# pose.py
"""Camera pose from field tags, and back-projection onto the ground."""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from base_locator.common import CameraPose, FiducialMarker, Point2
from base_locator.config import LocatorConfig, PoseConfig


class PoseSolveError(RuntimeError):
    """Raised when the correspondences cannot give a usable pose."""


def camera_matrix(cfg: PoseConfig) -> np.ndarray:
    return np.array(
        [
            [cfg.fx, 0.0, cfg.cx],
            [0.0, cfg.fy, cfg.cy],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


def _spans_plane(points: np.ndarray) -> bool:
    centred = points - points.mean(axis=0)
    return np.linalg.matrix_rank(centred, tol=1e-9) >= 2


class PoseEstimator:
    def __init__(self, cfg: PoseConfig):
        self.cfg = cfg
        self.K = camera_matrix(cfg)
        self.dist = np.zeros(4, dtype=np.float64)

    # ------------------------------------------------------------------ #
    #   C O R R E S P O N D E N C E S
    # ------------------------------------------------------------------ #
    def tag_object_points(self, tag_id: int) -> np.ndarray:
        """Four tag corners in the field frame, in detector corner order."""
        s = self.cfg.tag_size_m / 2.0
        dx, dy, dz = self.cfg.tag_world_positions[tag_id]
        return np.array(
            [
                [-s + dx, -s + dy, dz],
                [s + dx, -s + dy, dz],
                [s + dx, s + dy, dz],
                [-s + dx, s + dy, dz],
            ],
            dtype=np.float64,
        )

    def correspondences(
        self, markers: Sequence[FiducialMarker]
    ) -> Tuple[np.ndarray, np.ndarray]:
        obj: List[np.ndarray] = []
        img: List[np.ndarray] = []
        for marker in markers:
            obj.append(self.tag_object_points(marker.tag_id))
            img.append(np.asarray(marker.corners, dtype=np.float64).reshape(4, 2))
        if not obj:
            return np.empty((0, 3)), np.empty((0, 2))
        return np.vstack(obj), np.vstack(img)

    # ------------------------------------------------------------------ #
    #   S O L V E
    # ------------------------------------------------------------------ #
    def solve(self, obj_pts: np.ndarray, img_pts: np.ndarray) -> CameraPose:
        if len(obj_pts) < 4 or len(obj_pts) != len(img_pts):
            raise PoseSolveError(f"need at least 4 matched points, got {len(obj_pts)}")
        if not (_spans_plane(obj_pts) and _spans_plane(img_pts)):
            raise PoseSolveError("correspondences are collinear")

        try:
            ok, rvec, tvec = cv2.solvePnP(obj_pts, img_pts, self.K, self.dist)
        except cv2.error as exc:
            raise PoseSolveError(f"solvePnP failed: {exc}") from exc
        if not ok:
            raise PoseSolveError("solvePnP did not converge")
        if not (np.all(np.isfinite(rvec)) and np.all(np.isfinite(tvec))):
            raise PoseSolveError("solvePnP returned non-finite values")

        rotation, _ = cv2.Rodrigues(rvec)
        projected, _ = cv2.projectPoints(obj_pts, rvec, tvec, self.K, self.dist)
        residual = projected.reshape(-1, 2) - img_pts
        rms = float(np.sqrt(np.mean(np.sum(residual**2, axis=1))))
        return CameraPose(
            rotation=rotation,
            translation=tvec.reshape(3),
            reprojection_error=rms,
        )

    def estimate(self, markers: Sequence[FiducialMarker]) -> Optional[CameraPose]:
        """Pose for this frame, or None when there is nothing usable to solve."""
        if not markers:
            return None
        obj_pts, img_pts = self.correspondences(markers)
        try:
            pose = self.solve(obj_pts, img_pts)
        except PoseSolveError:
            return None
        return CameraPose(
            rotation=pose.rotation,
            translation=pose.translation,
            reprojection_error=pose.reprojection_error,
            tag_ids=tuple(m.tag_id for m in markers),
        )


class GroundProjector:
    """
    Back-projects a pixel at a fixed optical-axis depth ``ground_depth_m``
    and maps it into the tag frame:
    ``X = Rᵀ (Zc · K⁻¹ [u, v, 1]ᵀ − t)``.
    """

    def __init__(self, pose_cfg: PoseConfig, locator_cfg: LocatorConfig):
        self.locator_cfg = locator_cfg
        self.K_inv = np.linalg.inv(camera_matrix(pose_cfg))

    def project(self, pixel: Point2, pose: CameraPose) -> np.ndarray:
        uv1 = np.array([pixel[0], pixel[1], 1.0], dtype=np.float64)
        in_camera = self.K_inv @ (uv1 * self.locator_cfg.ground_depth_m)
        return pose.rotation.T @ (in_camera - pose.translation)

    def to_plane(self, position: np.ndarray) -> Point2:
        """x, y of a ground position in decision units."""
        scale = self.locator_cfg.position_scale
        return (float(position[0]) * scale, float(position[1]) * scale)
