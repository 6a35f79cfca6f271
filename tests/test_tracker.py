"""
Tests for the two-anchor armor tracker.
"""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from base_locator.config import LocatorConfig
from base_locator.tracker import ArmorTracker, TrackState


class TestArmorTracker:
    """Test suite for ArmorTracker."""

    @pytest.fixture
    def tracker(self):
        return ArmorTracker(LocatorConfig())

    def test_initial_state(self, tracker):
        assert tracker.state is TrackState.UNLOCKED
        assert not tracker.locked

    def test_single_armor_does_not_lock(self, tracker):
        track = tracker.update([(100.0, 100.0)])
        assert not track.found
        assert tracker.state is TrackState.UNLOCKED

    def test_scripted_sequence(self, tracker):
        frames = [
            [(100.0, 100.0), (200.0, 100.0)],
            [(102.0, 100.0), (202.0, 100.0)],
            [(105.0, 101.0)],
            [(208.0, 101.0)],
            [],
            [(300.0, 50.0), (400.0, 50.0)],
        ]
        tracks = [tracker.update(f) for f in frames]
        states = []
        tracker2 = ArmorTracker(LocatorConfig())
        for f in frames:
            tracker2.update(f)
            states.append(tracker2.state)

        assert states == [
            TrackState.LOCKED,
            TrackState.LOCKED,
            TrackState.LOCKED,
            TrackState.LOCKED,
            TrackState.UNLOCKED,
            TrackState.LOCKED,
        ]
        assert [t.found for t in tracks] == [True, True, True, True, False, True]

        assert tracks[0].center == pytest.approx((150.0, 100.0))
        assert tracks[1].center == pytest.approx((152.0, 100.0))
        # frame 3: nearest anchor is the first, second shifted by (3, 1)
        assert tracks[2].center == pytest.approx((155.0, 101.0))
        # frame 4: nearest anchor is the second, first shifted by (3, 0)
        assert tracks[3].center == pytest.approx((158.0, 101.0))
        assert tracks[4].center is None
        assert tracks[5].center == pytest.approx((350.0, 50.0))

    def test_one_sighting_shifts_other_anchor(self, tracker):
        tracker.update([(100.0, 100.0), (200.0, 100.0)])
        tracker.update([(104.0, 97.0)])
        assert tracker.anchor1 == pytest.approx((104.0, 97.0))
        assert tracker.anchor2 == pytest.approx((204.0, 97.0))

        tracker.update([(201.0, 99.0)])
        assert tracker.anchor2 == pytest.approx((201.0, 99.0))
        assert tracker.anchor1 == pytest.approx((101.0, 99.0))

    def test_far_sighting_keeps_stale_anchors(self, tracker):
        tracker.update([(100.0, 100.0), (200.0, 100.0)])
        track = tracker.update([(150.0, 300.0)])

        assert track.found
        assert not track.anchors_refreshed
        assert track.center == pytest.approx((150.0, 100.0))
        assert tracker.anchor1 == pytest.approx((100.0, 100.0))
        assert tracker.anchor2 == pytest.approx((200.0, 100.0))
        assert tracker.locked

    def test_anchor_distance_limit_is_strict(self, tracker):
        tracker.update([(100.0, 100.0), (200.0, 100.0)])
        track = tracker.update([(110.0, 100.0)])
        assert not track.anchors_refreshed

    def test_three_armors_unlock(self, tracker):
        tracker.update([(100.0, 100.0), (200.0, 100.0)])
        track = tracker.update([(1.0, 1.0), (2.0, 2.0), (3.0, 3.0)])
        assert not track.found
        assert tracker.state is TrackState.UNLOCKED

    def test_three_armors_while_unlocked(self, tracker):
        track = tracker.update([(1.0, 1.0), (2.0, 2.0), (3.0, 3.0)])
        assert not track.found
        assert tracker.state is TrackState.UNLOCKED

    def test_two_armors_refresh_anchors_in_order(self, tracker):
        track = tracker.update([(300.0, 10.0), (100.0, 20.0)])
        assert track.anchors_refreshed
        assert tracker.anchor1 == (300.0, 10.0)
        assert tracker.anchor2 == (100.0, 20.0)

    def test_reset(self, tracker):
        tracker.update([(100.0, 100.0), (200.0, 100.0)])
        tracker.reset()
        assert tracker.state is TrackState.UNLOCKED
        assert not tracker.update([(100.0, 100.0)]).found

    def test_instances_are_independent(self):
        a = ArmorTracker(LocatorConfig())
        b = ArmorTracker(LocatorConfig())
        a.update([(100.0, 100.0), (200.0, 100.0)])
        assert a.locked
        assert not b.locked
