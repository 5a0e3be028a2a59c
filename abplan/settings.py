from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Tuple

import yaml


@dataclass(frozen=True)
class PlannerSettings:
    feasibility_ceiling_days: int = 28
    exact_z_scores: bool = False
    sweep_durations: Tuple[int, ...] = (7, 14, 21, 30)
    default_power: float = 0.8
    default_significance: float = 0.05
    default_variants: int = 2


DEFAULT_SETTINGS = PlannerSettings()


def _get(data: dict, key: str, default=None):
    cur: Any = data
    for part in key.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return default
    return cur


def load_settings(path: str) -> PlannerSettings:
    """Load planner settings from the ``planner`` section of a YAML file.

    Relative paths resolve against the repo root. Missing keys keep defaults.
    """
    p = Path(path)
    if not p.is_absolute():
        p = Path(__file__).resolve().parents[1] / p

    data = yaml.safe_load(p.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {p} must contain a mapping")

    known = {f.name for f in fields(PlannerSettings)}
    section = _get(data, "planner", {}) or {}
    unknown = set(section) - known
    if unknown:
        raise ValueError(f"Unknown planner settings: {', '.join(sorted(unknown))}")

    values = dict(section)
    if "sweep_durations" in values:
        values["sweep_durations"] = tuple(int(d) for d in values["sweep_durations"])
    if int(values.get("feasibility_ceiling_days", 1)) <= 0:
        raise ValueError("feasibility_ceiling_days must be > 0")

    return PlannerSettings(**values)
