# base_locator/__init__.py
"""Base-locator package – re-export high-level API."""
from .config import (                            # noqa: F401
    CameraConfig, DisplayConfig, LocatorConfig, PoseConfig, RecorderConfig,
)
from .locator import BaseLocator                 # noqa: F401
from .processor import LocatorProcessor          # noqa: F401
