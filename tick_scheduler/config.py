"""Simple configuration loader for tick_scheduler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

from .core.tick_scheduler import ELAPSED_POLICIES

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).resolve().parents[1] / "config.yaml"


@dataclass
class SchedulerConfig:
    """Configuration values for the scheduler core."""

    negative_elapsed: str = "clamp"


@dataclass
class FrameLoopConfig:
    """Configuration for the host frame loop."""

    target_fps: float = 60.0


@dataclass
class LoggingConfig:
    """Log levels applied by the entry point."""

    global_level: str = "INFO"
    module_levels: Dict[str, str] = field(default_factory=dict)


@dataclass
class Config:
    """Top level configuration dataclass."""

    scheduler: SchedulerConfig
    frame_loop: FrameLoopConfig
    logging: LoggingConfig


def _parse_config(data: dict[str, Any]) -> Config:
    """Convert raw ``data`` into :class:`Config`."""

    scheduler_data = data.get("scheduler") or {}
    policy = str(scheduler_data.get("negative_elapsed", "clamp")).lower()
    if policy not in ELAPSED_POLICIES:
        logger.warning("Invalid negative_elapsed policy '%s' in config; using 'clamp'.", policy)
        policy = "clamp"
    scheduler = SchedulerConfig(negative_elapsed=policy)

    loop_data = data.get("frame_loop") or {}
    frame_loop = FrameLoopConfig(target_fps=float(loop_data.get("target_fps", 60.0)))

    logging_data = data.get("logging") or {}
    log_cfg = LoggingConfig(
        global_level=str(logging_data.get("global_level", "INFO")).upper(),
        module_levels=dict(logging_data.get("module_levels") or {}),
    )

    return Config(scheduler=scheduler, frame_loop=frame_loop, logging=log_cfg)


def load_config(path: Path = CONFIG_PATH) -> Config:
    """Load configuration from ``path`` and return a :class:`Config`."""

    path = Path(path)
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
    else:
        raw = {}
    return _parse_config(raw)


# Load configuration at module import time.
CONFIG = load_config()


__all__ = [
    "CONFIG",
    "Config",
    "SchedulerConfig",
    "FrameLoopConfig",
    "LoggingConfig",
    "load_config",
]
