from __future__ import annotations

import logging
from typing import List, Optional

from . import diagnostics
from .critical_values import lookup_z_scores
from .formulas import (
    exposure_needed,
    mde_absolute_for_z,
    mde_for_z,
    required_duration_days,
    sample_size_for_z,
    variance_for_binary,
)
from .models import (
    BySampleSize,
    CalculationMode,
    CalculationRequest,
    CalculationResult,
    MetricType,
)
from .settings import DEFAULT_SETTINGS, PlannerSettings

logger = logging.getLogger(__name__)


def _daily_traffic(request: CalculationRequest) -> Optional[float]:
    if request.daily_traffic is not None and request.daily_traffic > 0:
        return request.daily_traffic
    total = request.total_users_in_selected_duration
    if total is not None and total > 0 and request.target_duration_days > 0:
        return total / request.target_duration_days
    return None


def compute_mde_or_sample_size(
    request: CalculationRequest,
    settings: Optional[PlannerSettings] = None,
) -> CalculationResult:
    """Solve for whichever of sample size / MDE the request does not supply.

    Never raises for domain input: degenerate values leave the output side
    empty and explain why in ``warnings``.
    """
    settings = settings or DEFAULT_SETTINGS
    mode = request.mode
    warnings: List[str] = []

    sample_size: Optional[int] = None
    mde: Optional[float] = None
    if isinstance(request.target, BySampleSize):
        sample_size = request.target.value
    else:
        mde = request.target.value

    valid = diagnostics.check_probabilities(
        warnings, request.statistical_power, request.significance_level
    )
    valid = diagnostics.check_variants(warnings, request.number_of_variants) and valid

    z_a = z_b = None
    if valid:
        z_a, z_b, z_warnings = lookup_z_scores(
            request.significance_level, request.statistical_power, exact=settings.exact_z_scores
        )
        warnings.extend(z_warnings)

    mean = request.mean
    variance = request.variance
    if mean is not None:
        if variance is None and request.metric_type is MetricType.BINARY:
            variance = variance_for_binary(mean)
        diagnostics.check_metric_type(warnings, request.metric_type, mean, request.variance)
    valid = diagnostics.check_baseline_present(warnings, mean, variance) and valid

    if mean is not None and variance is not None:
        diagnostics.check_variance_scale(warnings, request.metric_type, mean, variance)

    if mode is CalculationMode.MDE_TO_SAMPLE_SIZE:
        diagnostics.check_mde(warnings, mde)
        if valid:
            sample_size = sample_size_for_z(mean, variance, mde, z_a, z_b)
            if sample_size is None:
                diagnostics.calculation_failed(warnings, "required sample size per variant")
    else:
        diagnostics.check_sample_size(warnings, sample_size)
        if valid:
            mde = mde_for_z(mean, variance, sample_size, z_a, z_b)
            if mde is None:
                if mean <= 0:
                    absolute = mde_absolute_for_z(variance, sample_size, z_a, z_b)
                    if absolute is not None:
                        warnings.append(
                            "Mean is zero or negative, cannot calculate relative MDE. "
                            f"Absolute MDE calculated: {absolute:.4f}"
                        )
                diagnostics.calculation_failed(warnings, "relative MDE")

    total: Optional[int] = None
    exposure: Optional[float] = None
    if sample_size is not None and sample_size > 0 and request.number_of_variants >= 2:
        total = sample_size * request.number_of_variants
        total_users = request.total_users_in_selected_duration
        exposure = exposure_needed(total, total_users)
        diagnostics.check_exposure(warnings, total_users, exposure)
        diagnostics.check_duration_ceiling(
            warnings,
            required_duration_days(total, _daily_traffic(request)),
            settings.feasibility_ceiling_days,
        )

    result = CalculationResult(
        mode=mode,
        sample_size_per_variant=sample_size if (sample_size is not None and sample_size > 0) else None,
        minimum_detectable_effect=mde if (mde is not None and mde > 0) else None,
        total_sample_size_for_experiment=total,
        exposure_needed=exposure,
        confidence_level=1 - request.significance_level,
        power_level=request.statistical_power,
        warnings=warnings,
    )
    logger.debug(
        "%s %s/%s: n=%s mde=%s (%d warnings)",
        mode.value,
        request.metric,
        request.real_estate,
        result.sample_size_per_variant,
        result.minimum_detectable_effect,
        len(warnings),
    )
    return result
