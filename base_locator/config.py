# config.py
"""Typed configuration blobs for the whole system."""
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# Tag field layout: eight tags around a 2 m square, offsets of their centres (m)
_COR_A = 0.1524
_COR_B = 1.8476


def _default_tag_world_positions() -> Dict[int, Tuple[float, float, float]]:
    return {
        0: (_COR_A, _COR_A, 0.0),
        1: (1.0, _COR_A, 0.0),
        2: (_COR_B, _COR_A, 0.0),
        3: (_COR_A, 1.0, 0.0),
        4: (_COR_B, 1.0, 0.0),
        5: (_COR_A, _COR_B, 0.0),
        6: (1.0, _COR_B, 0.0),
        7: (_COR_B, _COR_B, 0.0),
    }


# ---------------------- Camera ----------------------
@dataclass
class CameraConfig:
    source: int | str = 0              # device index or path to a recorded video
    width: int = 640
    height: int = 480
    fps_request: int = 30
    fourcc_str: str = ""
    auto_exposure: int | None = None   # 1=manual, 3=auto (V4L2)
    exposure_time_absolute: int | None = None  # light bars read best at low exposure


# --------------------- Locator ----------------------
@dataclass
class LocatorConfig:
    """
    Every threshold used by light detection, pairing, tracking and the
    stop decision.  Ranges are ``(low, high)``.
    """
    # Blob filter
    threshold_rank: int = 2500                  # binarise at the N-th brightest pixel
    blob_area_range: Tuple[float, float] = (20.0, 100.0)    # exclusive, px²
    aspect_ratio_range: Tuple[float, float] = (1.3, 5.0)    # inclusive, long/short
    border_margin_px: float = 10.0
    color_window_px: int = 15
    color_delta_min: float = 10.0               # mean(B) - mean(R) must exceed this

    # Pairer
    pair_distance_ratio_range: Tuple[float, float] = (3.0, 4.5)  # × light length
    axis_alignment_max: float = 0.3

    # Tracker
    anchor_update_max_distance_px: float = 10.0

    # Projection
    ground_depth_m: float = 2.0                 # Zc along the optical axis
    position_scale: float = 100.0               # m → cm for the stop decision

    # Stop decision
    history_window_size: int = 10
    stationary_radius_threshold: float = 2.0


# ----------------------- Pose -----------------------
@dataclass
class PoseConfig:
    fx: float = 508.013
    fy: float = 507.49
    cx: float = 322.632
    cy: float = 231.39
    tag_size_m: float = 0.2286
    tag_family: str = "DICT_APRILTAG_16h5"
    tag_world_positions: Dict[int, Tuple[float, float, float]] = field(
        default_factory=_default_tag_world_positions
    )
    id_remap: Dict[int, int] = field(default_factory=lambda: {10: 7})
    max_decode_error: int = 0


# ---------------------- Display ---------------------
@dataclass
class DisplayConfig:
    draw: bool = True
    window_name: str = "Base Locator"
    stats_every_n_frames: int = 10
    runtime_params_path: Optional[str] = "runtime_params.json"


# ---------------------- Recorder --------------------
@dataclass
class RecorderConfig:
    output_dir: str = "recordings"
    fourcc_str: str = "MJPG"
    fps: float = 30.0
    frame_size: Tuple[int, int] = (640, 480)
