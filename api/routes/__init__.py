"""Route registration helpers."""

from . import (  # noqa: F401
    config,
    health,
    jobs,
    league,
    predictions,
    simulation,
    teams,
)

__all__ = [
    "config",
    "health",
    "jobs",
    "league",
    "predictions",
    "simulation",
    "teams",
]
