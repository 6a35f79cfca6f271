# live_tuning.py
"""Hot-reload ``LocatorConfig`` thresholds from a JSON file while running."""
from __future__ import annotations

import json
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Tuple

from base_locator.config import LocatorConfig

# Read once at construction; changing them at runtime has no effect.
_FIXED_KEYS = frozenset({"history_window_size"})


def apply_params(cfg: LocatorConfig, params: Dict[str, Any]) -> List[str]:
    """
    Copy recognised keys from ``params`` onto ``cfg``, coercing to the type of
    the current value.  Returns the names that changed.
    """
    known = {f.name for f in fields(cfg)} - _FIXED_KEYS
    changed: List[str] = []
    for key, raw in params.items():
        if key not in known:
            print(f"[Runtime] Ignoring unknown/fixed key {key!r}")
            continue
        current = getattr(cfg, key)
        try:
            if isinstance(current, tuple):
                value = tuple(type(c)(v) for c, v in zip(current, raw, strict=True))
            else:
                value = type(current)(raw)
        except (TypeError, ValueError) as exc:
            print(f"[Runtime] Bad value for {key!r}: {raw!r} ({exc})")
            continue
        if value != current:
            setattr(cfg, key, value)
            changed.append(key)
    return changed


class RuntimeParamWatcher:
    """Watch a JSON file and re-read it whenever its size or mtime changes."""

    def __init__(self, path: str | Path = "runtime_params.json") -> None:
        self.path = Path(path).expanduser().resolve()
        self._stamp: Tuple[float, int] = (0.0, -1)  # (mtime, size)
        self.params: Dict[str, Any] = {}

        print(f"[Runtime] Watching: {self.path}")
        self._load(initial=True)

    def _load(self, *, initial: bool = False) -> bool:
        try:
            stat = self.path.stat()
            with self.path.open("r", encoding="utf-8") as fp:
                text = fp.read()
        except FileNotFoundError:
            if initial:
                print(f"[Runtime] {self.path} not found, live tuning idle until it exists.")
            return False

        # stamp broken files too; they are reported once
        self._stamp = (stat.st_mtime, stat.st_size)
        try:
            params = json.loads(text)
        except json.JSONDecodeError as exc:
            print(f"[Runtime] JSON error in {self.path}: {exc}")
            return False
        if not isinstance(params, dict):
            print(f"[Runtime] {self.path} must hold a JSON object, keeping old params.")
            return False
        self.params = params
        if not initial:
            print(f"[Runtime] Reloaded parameters from {self.path}")
        return True

    def maybe_reload(self) -> bool:
        """True when the file changed and was re-read successfully."""
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return False

        mtime, fsize = self._stamp
        if stat.st_size != fsize or stat.st_mtime != mtime:
            return self._load()
        return False

    def apply_to(self, cfg: LocatorConfig) -> List[str]:
        return apply_params(cfg, self.params)
