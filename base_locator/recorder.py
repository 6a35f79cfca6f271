# recorder.py
"""Capture camera frames to a video file (field footage for offline tuning)."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from base_locator.camera import Camera
from base_locator.config import CameraConfig, RecorderConfig


class RecorderError(RuntimeError):
    """Raised when the output video cannot be created."""


class VideoRecorder:
    def __init__(self, cfg: RecorderConfig):
        self.cfg = cfg
        self.writer: Optional[cv2.VideoWriter] = None
        self.path: Optional[Path] = None
        self.frames_written = 0

    def output_path(self, name: str) -> Path:
        name = name.strip()
        if not name or Path(name).name != name:
            raise RecorderError(f"Invalid recording name {name!r}")
        if not name.endswith(".avi"):
            name += ".avi"
        return Path(self.cfg.output_dir).expanduser() / name

    def open(self, name: str) -> Path:
        path = self.output_path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        writer = cv2.VideoWriter(
            str(path),
            cv2.VideoWriter_fourcc(*self.cfg.fourcc_str),
            self.cfg.fps,
            tuple(self.cfg.frame_size),
        )
        if not writer.isOpened():
            raise RecorderError(f"Could not open {path} for writing")
        self.writer = writer
        self.path = path
        print(f"[Recorder] Writing {path} ({self.cfg.fourcc_str}, {self.cfg.fps:.0f} FPS)")
        return path

    def write(self, frame: np.ndarray) -> None:
        if self.writer is None:
            raise RecorderError("Recorder is not open")
        w, h = self.cfg.frame_size
        if frame.shape[1] != w or frame.shape[0] != h:
            frame = cv2.resize(frame, (w, h))
        self.writer.write(frame)
        self.frames_written += 1

    def release(self) -> None:
        if self.writer is not None:
            self.writer.release()
            print(f"[Recorder] Closed {self.path} after {self.frames_written} frames")
            self.writer = None

    def __enter__(self) -> "VideoRecorder":
        return self

    def __exit__(self, *exc) -> None:
        self.release()


def record(camera_cfg: CameraConfig, rec_cfg: RecorderConfig, name: str) -> int:
    """Show and record camera frames until 'q' or Ctrl-C.  Returns frames written."""
    camera = Camera(camera_cfg)
    if not camera.open():
        return 0

    recorder = VideoRecorder(rec_cfg)
    try:
        with recorder:
            recorder.open(name)
            while True:
                _, frame = camera.read()
                if frame is None:
                    print("[Recorder] Source returned no frame, stopping")
                    break
                cv2.imshow("Recording", frame)
                recorder.write(frame)
                if (cv2.waitKey(1) & 0xFF) == ord("q"):
                    break
    except KeyboardInterrupt:
        print("\n[Recorder] Stopped by user.")
    finally:
        camera.release()
        cv2.destroyAllWindows()
    return recorder.frames_written
