from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from . import diagnostics
from .calculator import compute_mde_or_sample_size
from .formulas import variance_for_binary
from .models import (
    CalculationMode,
    CalculationRequest,
    DurationSweepRow,
    MetricObservation,
    MetricType,
    ResolutionSource,
    RowStatus,
)
from .resolver import resolve_inputs
from .settings import DEFAULT_SETTINGS, PlannerSettings

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_DURATIONS = DEFAULT_SETTINGS.sweep_durations
ERROR_MARKER = RowStatus.ERROR.value


def _invalid_duration_row(duration: float, reason: str) -> DurationSweepRow:
    warnings: List[str] = []
    diagnostics.calculation_failed(warnings, "result", duration)
    warnings.append(reason)
    return DurationSweepRow(
        duration_days=duration,
        mean_used=None,
        variance_used=None,
        total_users_available=None,
        source=ResolutionSource.BASELINE,
        result=None,
        warnings=warnings,
        status=RowStatus.ERROR,
    )


def _whole_days(duration: float) -> float:
    # 14.0 is the same duration as 14; 7.5 stays as requested.
    if isinstance(duration, float) and duration.is_integer():
        return int(duration)
    return duration


def compute_duration_row(
    catalog: Optional[Sequence[MetricObservation]],
    baseline: CalculationRequest,
    duration: int,
    settings: Optional[PlannerSettings] = None,
) -> DurationSweepRow:
    """Resolve and compute a single duration.

    The catalog observation for ``duration`` wins when one matches exactly,
    including its daily traffic for the feasibility check; otherwise the
    baseline request is projected. Resolution notices lead the row's warnings.
    """
    settings = settings or DEFAULT_SETTINGS
    duration = _whole_days(duration)
    if duration <= 0:
        return _invalid_duration_row(duration, "Duration must be a positive number of days.")
    if isinstance(duration, float):
        return _invalid_duration_row(duration, "Duration must be a whole number of days.")

    resolution = resolve_inputs(catalog, baseline, duration)
    warnings = list(resolution.warnings)

    variance = resolution.variance
    if variance is None and resolution.mean is not None and baseline.metric_type is MetricType.BINARY:
        variance = variance_for_binary(resolution.mean)

    request = replace(
        baseline,
        mean=resolution.mean,
        variance=variance,
        target_duration_days=duration,
        total_users_in_selected_duration=resolution.total_users,
        daily_traffic=(
            resolution.observation.daily_traffic
            if resolution.observation is not None
            else baseline.daily_traffic
        ),
    )

    try:
        result = compute_mde_or_sample_size(request, settings)
    except (ArithmeticError, ValueError, TypeError) as e:
        logger.exception("Sweep calculation failed for %s-day duration", duration)
        warnings.append(f"Calculation error for duration {duration} days: {e}")
        return DurationSweepRow(
            duration_days=duration,
            mean_used=resolution.mean,
            variance_used=request.variance,
            total_users_available=resolution.total_users,
            source=resolution.source,
            result=None,
            warnings=warnings,
            status=RowStatus.ERROR,
        )

    warnings.extend(result.warnings)
    status = RowStatus.OK
    if not result.is_resolved:
        diagnostics.calculation_failed(warnings, "result", duration)
        status = RowStatus.ERROR

    return DurationSweepRow(
        duration_days=duration,
        mean_used=resolution.mean,
        variance_used=request.variance,
        total_users_available=resolution.total_users,
        source=resolution.source,
        result=result,
        warnings=warnings,
        status=status,
    )


def compute_duration_sweep(
    catalog: Optional[Sequence[MetricObservation]],
    baseline: CalculationRequest,
    durations: Iterable[int],
    settings: Optional[PlannerSettings] = None,
    max_workers: Optional[int] = None,
) -> List[DurationSweepRow]:
    """Project one calculation across several candidate durations.

    Each duration is resolved and computed independently of the others: a
    historical observation when one matches exactly, the baseline request
    otherwise. Every requested duration yields a row (failed rows carry the
    ``Error`` status), and rows come back sorted by duration ascending.

    With ``max_workers`` > 1 the rows are computed on a thread pool.
    """
    settings = settings or DEFAULT_SETTINGS
    unique = list(dict.fromkeys(_whole_days(d) for d in durations))

    if max_workers is not None and max_workers > 1 and len(unique) > 1:
        logger.info("Sweeping %d durations with %d workers", len(unique), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            rows = list(
                executor.map(lambda d: compute_duration_row(catalog, baseline, d, settings), unique)
            )
    else:
        rows = [compute_duration_row(catalog, baseline, d, settings) for d in unique]

    rows.sort(key=lambda r: r.duration_days)
    return rows


def _cell(row: DurationSweepRow, value: Any) -> Any:
    if row.is_error:
        return ERROR_MARKER
    return value


def sweep_to_frame(rows: Sequence[DurationSweepRow]) -> pd.DataFrame:
    """Tabular view of a sweep, one row per duration.

    Numeric output columns hold the ``Error`` marker for failed rows.
    """
    records: List[Dict[str, Any]] = []
    for row in rows:
        res = row.result
        records.append(
            {
                "duration_days": row.duration_days,
                "source": row.source.value,
                "mean_used": row.mean_used,
                "variance_used": row.variance_used,
                "total_users_available": row.total_users_available,
                "mode": res.mode.value if res else None,
                "sample_size_per_variant": _cell(row, res.sample_size_per_variant if res else None),
                "total_sample_size": _cell(row, res.total_sample_size_for_experiment if res else None),
                "mde_%": _cell(row, res.minimum_detectable_effect_percent if res else None),
                "exposure_needed_%": _cell(row, res.exposure_needed_percent if res else None),
                "status": row.status.value,
                "warnings": list(row.warnings),
            }
        )

    columns = [
        "duration_days",
        "source",
        "mean_used",
        "variance_used",
        "total_users_available",
        "mode",
        "sample_size_per_variant",
        "total_sample_size",
        "mde_%",
        "exposure_needed_%",
        "status",
        "warnings",
    ]
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(records, columns=columns).sort_values("duration_days").reset_index(drop=True)


def sweep_output_column(mode: CalculationMode) -> str:
    """Column of ``sweep_to_frame`` that holds the computed side for ``mode``."""
    if mode is CalculationMode.MDE_TO_SAMPLE_SIZE:
        return "total_sample_size"
    return "mde_%"
