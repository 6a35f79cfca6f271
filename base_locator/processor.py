# processor.py
"""Glue logic that wires camera → locator → overlay / console."""
import time
import traceback
from typing import Optional

import cv2
import numpy as np

from base_locator.camera import Camera
from base_locator.common import FrameReport
from base_locator.config import CameraConfig, DisplayConfig, LocatorConfig, PoseConfig
from base_locator.live_tuning import RuntimeParamWatcher
from base_locator.locator import BaseLocator
from base_locator.tags import draw_markers


class LocatorProcessor:
    """The main high-level orchestrator."""

    def __init__(
        self,
        camera_cfg: CameraConfig,
        locator_cfg: LocatorConfig,
        pose_cfg: PoseConfig,
        display_cfg: DisplayConfig,
    ):
        self.camera_cfg = camera_cfg
        self.locator_cfg = locator_cfg
        self.pose_cfg = pose_cfg
        self.display_cfg = display_cfg

        self.camera = Camera(camera_cfg)
        self.locator = BaseLocator(locator_cfg, pose_cfg)
        self.watcher: Optional[RuntimeParamWatcher] = None
        if display_cfg.runtime_params_path:
            self.watcher = RuntimeParamWatcher(display_cfg.runtime_params_path)
            self.watcher.apply_to(locator_cfg)

        # Runtime metrics
        self.total_frames = 0
        self.stats_timer_start = time.time()
        self.disp_fps = 0.0
        self.last_stopped = False

    # ---------------------------------------------------------------------
    #                         Setup / teardown
    # ---------------------------------------------------------------------
    def setup(self) -> bool:
        if not self.camera.open():
            return False
        if self.display_cfg.draw:
            cv2.namedWindow(self.display_cfg.window_name, cv2.WINDOW_NORMAL)
        print("[Locator] Setup complete – press 'q' to quit.")
        return True

    def cleanup(self) -> None:
        print("[Locator] Cleaning up...")
        self.camera.release()
        if self.display_cfg.draw:
            cv2.destroyAllWindows()
        print(f"[Locator] Exited. Total frames: {self.total_frames}")

    # ---------------------------------------------------------------------
    #                        Drawing / console output
    # ---------------------------------------------------------------------
    def _draw_overlay(self, img: np.ndarray, rpt: FrameReport) -> None:
        h, w = img.shape[:2]
        cv2.line(img, (w // 2, 0), (w // 2, h), (0, 255, 0), 1)
        cv2.line(img, (0, h // 2), (w, h // 2), (0, 255, 0), 1)

        draw_markers(img, rpt.markers)
        for blob in rpt.blobs:
            box = np.intp(blob.box_points())
            cv2.drawContours(img, [box], 0, (0, 255, 0), 2)

        if rpt.track.found:
            cx, cy = map(int, rpt.track.center)
            cv2.circle(img, (cx, cy), 4, (0, 0, 255), -1)

        cv2.putText(img, f"FPS:{self.disp_fps:.1f}", (10, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 255, 0), 2)
        if rpt.pose is None:
            cv2.putText(img, "NO POSE", (10, 60),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 255), 2)
        if rpt.stability is not None:
            label = "STOPPED" if rpt.stability.stationary else "MOVING"
            colour = (0, 0, 255) if rpt.stability.stationary else (0, 255, 255)
            cv2.putText(img, f"{label} r={rpt.stability.radius:.1f}", (10, 90),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.7, colour, 2)

    def _print_report(self, rpt: FrameReport) -> None:
        if rpt.pose is not None:
            xc, yc, zc = rpt.pose.camera_position
            print(
                f"[Locator] {len(rpt.markers)} tags {list(rpt.pose.tag_ids)}  "
                f"camera=({xc:.3f}, {yc:.3f}, {zc:.3f})  "
                f"reproj={rpt.pose.reprojection_error:.2f}px"
            )
        if rpt.ground_position is not None:
            xb, yb, zb = rpt.ground_position
            print(f"[Locator] base at ({xb:.3f}, {yb:.3f}, {zb:.3f})")
        if rpt.stability is not None:
            (sx, sy), r = rpt.stability.center, rpt.stability.radius
            print(f"[Locator] window centre=({sx:.1f}, {sy:.1f}) radius={r:.2f}")
            if rpt.stability.stationary and not self.last_stopped:
                print("[Locator] BASE STOPPED")
            self.last_stopped = rpt.stability.stationary

    # ---------------------------------------------------------------------
    #                          Main per-frame loop
    # ---------------------------------------------------------------------
    def _process_frame(self) -> bool:
        """Returns False if the caller should exit the main loop."""
        if self.watcher is not None and self.watcher.maybe_reload():
            changed = self.watcher.apply_to(self.locator_cfg)
            if changed:
                print(f"[Runtime] Applied: {', '.join(changed)}")

        _, frame = self.camera.read()
        if frame is None:
            if self.camera.is_file:
                print("[Locator] End of video")
                return False
            time.sleep(0.05)
            return self.camera.is_opened()

        self.total_frames += 1
        rpt = self.locator.process(frame)
        self._print_report(rpt)

        n = self.display_cfg.stats_every_n_frames
        if n > 0 and self.total_frames % n == 0:
            now = time.time()
            self.disp_fps = n / max(now - self.stats_timer_start, 1e-6)
            self.stats_timer_start = now
            print(f"[Locator] {self.disp_fps:.1f} fps")

        if self.display_cfg.draw:
            out = frame.copy()
            self._draw_overlay(out, rpt)
            cv2.imshow(self.display_cfg.window_name, out)
        return True

    # ---------------------------------------------------------------------
    #                             Public run()
    # ---------------------------------------------------------------------
    def run(self) -> None:
        if not self.setup():
            self.cleanup()
            return

        try:
            while self._process_frame():
                if self.display_cfg.draw and (cv2.waitKey(1) & 0xFF) == ord("q"):
                    break
        except KeyboardInterrupt:
            print("\n[Locator] Stopped by user.")
        except Exception as exc:
            print(f"[Locator] Main loop error: {exc}")
            traceback.print_exc()
        finally:
            self.cleanup()
