"""Scheduler bootstrap and demo frame loop."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

from .config import CONFIG, Config, load_config
from .core.tick_scheduler import TickScheduler
from .host.frame_loop import FrameLoop
from .utils.observer import install_drive_observer

logger = logging.getLogger(__name__)

DEMO_FRAMES = 120


def configure_logging(cfg: Config = CONFIG) -> None:
    """Apply the configured global and per-module log levels."""

    level_str = os.getenv("TICK_SCHEDULER_LOG_LEVEL", cfg.logging.global_level).upper()
    numeric_level = getattr(logging, level_str, logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )
    for module_name, module_level in cfg.logging.module_levels.items():
        module_numeric_level = getattr(logging, module_level.upper(), None)
        if module_numeric_level is not None:
            logging.getLogger(module_name).setLevel(module_numeric_level)
        else:
            logger.warning("Invalid log level '%s' for module '%s' in config.", module_level, module_name)


def bootstrap(config_path: str | Path = Path("config.yaml")) -> FrameLoop:
    """Build a scheduler and the frame loop that drives it."""

    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    cfg = load_config(Path(config_path))
    configure_logging(cfg)

    scheduler = TickScheduler(negative_elapsed=cfg.scheduler.negative_elapsed)
    install_drive_observer(scheduler)
    loop = FrameLoop(scheduler, target_fps=cfg.frame_loop.target_fps)
    logger.info(
        "[Bootstrap] Frame loop at %.1f FPS, elapsed policy '%s'",
        cfg.frame_loop.target_fps,
        cfg.scheduler.negative_elapsed,
    )
    return loop


def register_demo_workload(scheduler: TickScheduler) -> Dict[str, int]:
    """Register a few counters at different rates; returns the live counts."""

    counts: Dict[str, int] = {}

    def make_counter(name: str):
        counts[name] = 0

        def action() -> None:
            counts[name] += 1

        action.__qualname__ = f"demo.{name}"
        return action

    for rate, names in ((1, ("heartbeat",)), (10, ("ai_a", "ai_b", "ai_c")), (30, ("physics",))):
        for name in names:
            scheduler.register(rate, make_counter(name))
    return counts


def main(frames: int = DEMO_FRAMES, config_path: str | Path = Path("config.yaml")) -> Dict[str, int]:
    """Run the demo workload for ``frames`` frames and log what ran."""

    loop = bootstrap(config_path)
    counts = register_demo_workload(loop.scheduler)
    loop.run(max_frames=frames)

    stats = getattr(loop.scheduler, "_drive_stats", None)
    if stats is not None:
        logger.info("[Main] Drive stats: %s", stats.summary())
    logger.info("[Main] Action counts: %s", counts)
    loop.stop()
    return counts


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
