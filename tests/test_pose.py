"""
Tests for camera pose recovery and ground back-projection.
"""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import cv2
import numpy as np
import pytest

from base_locator.common import CameraPose, FiducialMarker
from base_locator.config import LocatorConfig, PoseConfig
from base_locator.pose import (
    GroundProjector,
    PoseEstimator,
    PoseSolveError,
    camera_matrix,
)

TRUE_RVEC = np.array([0.05, -0.03, 0.02])
TRUE_TVEC = np.array([-1.0, -1.0, 2.5])


def synthetic_markers(estimator, tag_ids, rvec=TRUE_RVEC, tvec=TRUE_TVEC):
    """Project tag corners through a known pose, as the decoder would report them."""
    markers = []
    for tag_id in tag_ids:
        obj = estimator.tag_object_points(tag_id)
        img, _ = cv2.projectPoints(obj, rvec, tvec, estimator.K, estimator.dist)
        corners = tuple((float(x), float(y)) for x, y in img.reshape(4, 2))
        markers.append(FiducialMarker(tag_id=tag_id, corners=corners))
    return markers


class TestPoseEstimator:
    """Test suite for PoseEstimator."""

    @pytest.fixture
    def estimator(self):
        return PoseEstimator(PoseConfig())

    def test_camera_matrix(self):
        K = camera_matrix(PoseConfig())
        assert K[0, 0] == pytest.approx(508.013)
        assert K[1, 1] == pytest.approx(507.49)
        assert K[0, 2] == pytest.approx(322.632)
        assert K[1, 2] == pytest.approx(231.39)
        assert K[2, 2] == 1.0

    def test_tag_object_points(self, estimator):
        pts = estimator.tag_object_points(0)
        s = 0.2286 / 2
        assert pts.shape == (4, 3)
        assert pts[0] == pytest.approx(np.array([0.1524 - s, 0.1524 - s, 0.0]))
        assert pts[2] == pytest.approx(np.array([0.1524 + s, 0.1524 + s, 0.0]))

    def test_no_markers_no_pose(self, estimator):
        assert estimator.estimate([]) is None

    def test_recovers_pose_from_all_tags(self, estimator):
        markers = synthetic_markers(estimator, range(8))
        pose = estimator.estimate(markers)

        assert pose is not None
        true_R, _ = cv2.Rodrigues(TRUE_RVEC)
        assert pose.rotation == pytest.approx(true_R, abs=1e-4)
        assert pose.translation == pytest.approx(TRUE_TVEC, abs=1e-4)
        assert pose.reprojection_error < 1e-3
        assert pose.tag_ids == tuple(range(8))

    def test_recovers_pose_from_one_tag(self, estimator):
        pose = estimator.estimate(synthetic_markers(estimator, [4]))
        assert pose is not None
        assert pose.translation == pytest.approx(TRUE_TVEC, abs=1e-3)

    def test_rotation_is_orthonormal(self, estimator):
        pose = estimator.estimate(synthetic_markers(estimator, [0, 2, 5, 7]))
        assert pose.rotation @ pose.rotation.T == pytest.approx(np.eye(3), abs=1e-9)

    def test_camera_position(self, estimator):
        pose = estimator.estimate(synthetic_markers(estimator, range(8)))
        true_R, _ = cv2.Rodrigues(TRUE_RVEC)
        expected = -true_R.T @ TRUE_TVEC
        assert pose.camera_position == pytest.approx(expected, abs=1e-3)

    def test_collinear_corners_give_no_pose(self, estimator):
        line = ((10.0, 10.0), (20.0, 20.0), (30.0, 30.0), (40.0, 40.0))
        assert estimator.estimate([FiducialMarker(0, line)]) is None

    def test_solve_needs_four_points(self, estimator):
        obj = estimator.tag_object_points(0)[:3]
        img = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0]])
        with pytest.raises(PoseSolveError):
            estimator.solve(obj, img)

    def test_solve_rejects_mismatched_lists(self, estimator):
        obj = estimator.tag_object_points(0)
        img = np.zeros((3, 2))
        with pytest.raises(PoseSolveError):
            estimator.solve(obj, img)


class TestGroundProjector:
    """Test suite for GroundProjector."""

    @pytest.fixture
    def pose_cfg(self):
        return PoseConfig()

    @pytest.fixture
    def projector(self, pose_cfg):
        return GroundProjector(pose_cfg, LocatorConfig())

    @pytest.fixture
    def identity_pose(self):
        return CameraPose(rotation=np.eye(3), translation=np.zeros(3))

    def test_principal_point_maps_to_axis(self, projector, pose_cfg, identity_pose):
        ground = projector.project((pose_cfg.cx, pose_cfg.cy), identity_pose)
        assert ground == pytest.approx(np.array([0.0, 0.0, 2.0]), abs=1e-9)
        assert projector.to_plane(ground) == pytest.approx((0.0, 0.0), abs=1e-7)

    def test_recovers_world_point_at_known_depth(self, projector, pose_cfg):
        pose = CameraPose(rotation=np.eye(3), translation=np.array([0.0, 0.0, 2.0]))
        world = np.array([0.3, -0.2, 0.0])
        cam = pose.rotation @ world + pose.translation
        u = pose_cfg.fx * cam[0] / cam[2] + pose_cfg.cx
        v = pose_cfg.fy * cam[1] / cam[2] + pose_cfg.cy

        assert projector.project((u, v), pose) == pytest.approx(world, abs=1e-9)

    def test_uses_rotation_transpose(self, projector, pose_cfg):
        R, _ = cv2.Rodrigues(np.array([0.0, 0.0, np.pi / 2]))
        pose = CameraPose(rotation=R, translation=np.zeros(3))
        # camera-frame point (0.5, 0, 2) lies along world -y after R^T
        u = pose_cfg.fx * 0.5 / 2.0 + pose_cfg.cx
        ground = projector.project((u, pose_cfg.cy), pose)
        assert ground == pytest.approx(np.array([0.0, -0.5, 2.0]), abs=1e-9)

    def test_to_plane_scales_to_centimetres(self, projector):
        assert projector.to_plane(np.array([0.5, 0.25, 2.0])) == pytest.approx((50.0, 25.0))

    def test_deterministic(self, projector, identity_pose):
        a = projector.project((100.0, 200.0), identity_pose)
        b = projector.project((100.0, 200.0), identity_pose)
        assert np.array_equal(a, b)
