from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from . import diagnostics
from .models import CalculationRequest, MetricObservation, Resolution, ResolutionSource

logger = logging.getLogger(__name__)


def resolve(
    catalog: Optional[Sequence[MetricObservation]],
    metric: str,
    real_estate: str,
    target_duration_days: int,
) -> Optional[MetricObservation]:
    """Find the observation matching metric, surface and lookback exactly.

    Returns None when nothing matches; there is no nearest-duration fallback.
    The catalog is only read.
    """
    if not catalog:
        return None
    for obs in catalog:
        if (
            obs.metric == metric
            and obs.real_estate == real_estate
            and obs.lookback_days == target_duration_days
        ):
            return obs
    return None


def resolve_inputs(
    catalog: Optional[Sequence[MetricObservation]],
    request: CalculationRequest,
    duration_days: int,
) -> Resolution:
    """Pick mean, variance and total users for ``duration_days``.

    A historical match is used verbatim. Otherwise the request's own baseline
    is projected: mean and variance as given, total users as
    ``daily_traffic * duration_days`` when daily traffic is known.
    """
    warnings: List[str] = []
    obs = resolve(catalog, request.metric, request.real_estate, duration_days)

    if obs is not None:
        logger.debug(
            "Historical match for %s/%s over %d days", request.metric, request.real_estate, duration_days
        )
        diagnostics.historical_match(warnings, duration_days)
        return Resolution(
            source=ResolutionSource.HISTORICAL,
            mean=obs.mean,
            variance=obs.variance,
            total_users=obs.total_users,
            observation=obs,
            warnings=warnings,
        )

    logger.debug(
        "No historical match for %s/%s over %d days; projecting baseline",
        request.metric,
        request.real_estate,
        duration_days,
    )
    diagnostics.baseline_projection(warnings, duration_days, request.metric, request.real_estate)

    total_users: Optional[int] = None
    if request.daily_traffic is not None and request.daily_traffic > 0:
        total_users = int(round(request.daily_traffic * duration_days))
    elif request.daily_traffic is not None:
        diagnostics.invalid_daily_traffic(warnings, duration_days)
    else:
        diagnostics.missing_daily_traffic(warnings, duration_days)

    return Resolution(
        source=ResolutionSource.BASELINE,
        mean=request.mean,
        variance=request.variance,
        total_users=total_users,
        warnings=warnings,
    )
