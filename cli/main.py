# main.py
"""
Entry-point for the base-locator system.

``python cli/main.py``                   locate the base from camera 0
``python cli/main.py --source run.avi``  locate the base in a recorded video
``python cli/main.py record NAME``       record camera footage to recordings/NAME.avi

Live-tuning
-----------
While the locator is running you can edit ``runtime_params.json`` (any
``LocatorConfig`` field, e.g. ``{"threshold_rank": 1800}``) and the new
values take effect on the next frame.  See ``base_locator/live_tuning.py``.
"""
from __future__ import annotations

import argparse
from typing import List, Optional

from base_locator.config import (
    CameraConfig,
    DisplayConfig,
    LocatorConfig,
    PoseConfig,
    RecorderConfig,
)
from base_locator.processor import LocatorProcessor
from base_locator.recorder import RecorderError, record


def _source(value: str) -> int | str:
    return int(value) if value.isdigit() else value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Locate the base from field tags and armor lights.")
    parser.add_argument("--source", type=_source, default=0,
                        help="camera index or video file (default: 0)")
    parser.add_argument("--no-draw", action="store_true", help="run without a preview window")
    sub = parser.add_subparsers(dest="command")
    rec = sub.add_parser("record", help="record camera footage to a video file")
    rec.add_argument("name", help="file name inside the recordings directory")
    rec.add_argument("--output-dir", default=RecorderConfig.output_dir)
    return parser


# ────────────────────────────────────────────────────────────────────────────
#   M A I N
# ────────────────────────────────────────────────────────────────────────────
def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    cam_cfg = CameraConfig(source=args.source)

    if args.command == "record":
        rec_cfg = RecorderConfig(output_dir=args.output_dir,
                                 frame_size=(cam_cfg.width, cam_cfg.height))
        try:
            frames = record(cam_cfg, rec_cfg, args.name)
        except RecorderError as exc:
            print(f"[Recorder] {exc}")
            raise SystemExit(1)
        print(f"Recorded {frames} frames.")
        return

    print("Initializing Base Locator…")
    print("Hint: edit 'runtime_params.json' at any time to tweak thresholds.\n")

    # -------------------- Config blobs --------------------
    loc_cfg  = LocatorConfig()
    pose_cfg = PoseConfig()
    disp_cfg = DisplayConfig(draw=not args.no_draw)

    # ------------------------ Banner ----------------------
    print(
        f"Camera: source={cam_cfg.source!r}, "
        f"{cam_cfg.width}x{cam_cfg.height}@{cam_cfg.fps_request} FPS"
    )
    print(
        f"Intrinsics: f=({pose_cfg.fx}, {pose_cfg.fy}) c=({pose_cfg.cx}, {pose_cfg.cy}), "
        f"tags={pose_cfg.tag_family} size={pose_cfg.tag_size_m} m"
    )
    print(
        f"Decision: window={loc_cfg.history_window_size}, "
        f"stop radius<={loc_cfg.stationary_radius_threshold}, Zc={loc_cfg.ground_depth_m} m"
    )

    # ------------------------ Run -------------------------
    LocatorProcessor(cam_cfg, loc_cfg, pose_cfg, disp_cfg).run()
    print("Main program finished.")


if __name__ == "__main__":
    main()
