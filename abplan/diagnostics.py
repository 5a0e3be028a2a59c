"""Warning policy shared by the calculator, resolver and sweep.

Warnings are plain, human-readable strings. Every helper takes the caller's
list and appends to it; nothing here replaces or de-duplicates a list, so
insertion order is preserved and the same notice may appear more than once.

Informal categories:
  - input:        values that make a calculation impossible or suspicious
  - data quality: variance far from what the mean suggests
  - feasibility:  the plan needs more users or days than are available
  - resolution:   whether historical data was found for a duration
"""

from __future__ import annotations

from typing import List, Optional

from .formulas import variance_for_binary
from .models import MetricType

BINARY_VARIANCE_TOLERANCE = 1e-9
HIGH_VARIANCE_RATIO = 2.0
LOW_VARIANCE_RATIO = 0.01
MIN_MEAN_FOR_LOW_VARIANCE = 1e-6
SMALL_MDE = 0.0001
LARGE_MDE = 0.5


# --- input -----------------------------------------------------------------


def check_probabilities(
    warnings: List[str], statistical_power: float, significance_level: float
) -> bool:
    ok = True
    if not (0 < statistical_power < 1):
        warnings.append("Statistical power must be between 0 and 1 (exclusive).")
        ok = False
    if not (0 < significance_level < 1):
        warnings.append("Significance level must be between 0 and 1 (exclusive).")
        ok = False
    return ok


def check_variants(warnings: List[str], number_of_variants: int) -> bool:
    if number_of_variants < 2:
        warnings.append("Number of variants must be at least 2.")
        return False
    return True


def check_baseline_present(
    warnings: List[str], mean: Optional[float], variance: Optional[float]
) -> bool:
    if mean is None:
        warnings.append("Baseline mean not provided; cannot calculate.")
        return False
    if variance is None:
        warnings.append("Baseline variance not provided; cannot calculate.")
        return False
    return True


def check_metric_type(
    warnings: List[str],
    metric_type: MetricType,
    mean: float,
    variance: Optional[float],
) -> None:
    if metric_type is MetricType.BINARY:
        if mean < 0 or mean > 1:
            warnings.append("For a Binary metric, the mean (proportion) should be between 0 and 1.")
        if variance is not None:
            expected = variance_for_binary(mean)
            if abs(variance - expected) > BINARY_VARIANCE_TOLERANCE:
                warnings.append(
                    f"Provided variance ({variance:.6f}) for Binary metric differs from "
                    f"calculated p*(1-p) = {expected:.6f}; using provided variance."
                )
    elif mean <= 0:
        warnings.append("For a Continuous metric, the mean should be positive.")


def check_mde(warnings: List[str], mde_relative: float) -> None:
    if mde_relative <= 0:
        warnings.append("MDE must be greater than 0%.")
        return
    if mde_relative < SMALL_MDE:
        warnings.append(
            "The MDE is very small (<0.01%), which may lead to an extremely large required sample size."
        )
    if mde_relative > LARGE_MDE:
        warnings.append("The MDE is very large (>50%). Ensure this is the intended sensitivity.")


def check_sample_size(warnings: List[str], sample_size_per_variant: int) -> None:
    if sample_size_per_variant <= 0:
        warnings.append("Sample size per variant must be a positive number.")


# --- data quality ----------------------------------------------------------


def check_variance_scale(
    warnings: List[str], metric_type: MetricType, mean: float, variance: float
) -> None:
    if mean > 0:
        if variance > mean * HIGH_VARIANCE_RATIO:
            warnings.append("The provided variance is relatively high compared to the mean.")
        if variance < mean * LOW_VARIANCE_RATIO and mean > MIN_MEAN_FOR_LOW_VARIANCE:
            warnings.append("The provided variance is very low compared to the mean.")
    elif metric_type is MetricType.CONTINUOUS and variance > 1000:
        warnings.append(
            "The provided variance is high, and the mean is zero or negative for a continuous metric."
        )
    if variance < 0:
        warnings.append("Variance is negative.")
    elif variance == 0:
        warnings.append("Variance is zero; the metric has no spread to test an effect against.")


# --- feasibility -----------------------------------------------------------


def check_exposure(
    warnings: List[str],
    total_users: Optional[float],
    exposure: Optional[float],
) -> None:
    if total_users is not None and total_users <= 0:
        warnings.append("Cannot calculate exposure with zero total users.")
    elif exposure is not None and exposure > 1:
        warnings.append(
            f"The experiment needs {exposure * 100:.1f}% of available users; "
            "the total sample exceeds the users available in the selected duration."
        )


def check_duration_ceiling(
    warnings: List[str], required_days: Optional[int], ceiling_days: int
) -> None:
    if required_days is not None and required_days > ceiling_days:
        warnings.append(
            f"Estimated duration of {required_days} days exceeds the {ceiling_days}-day ceiling."
        )


# --- resolution ------------------------------------------------------------


def historical_match(warnings: List[str], duration_days: int) -> None:
    warnings.append(f"Used specific historical data for duration {duration_days} days.")


def baseline_projection(
    warnings: List[str], duration_days: int, metric: str, real_estate: str
) -> None:
    warnings.append(
        f"Used baseline projection for duration {duration_days} days "
        f"(no historical data for '{metric}' on '{real_estate}')."
    )


def missing_daily_traffic(warnings: List[str], duration_days: int) -> None:
    warnings.append(
        f"Cannot estimate exposure for duration {duration_days} days: "
        "baseline daily traffic not provided."
    )


def invalid_daily_traffic(warnings: List[str], duration_days: int) -> None:
    warnings.append(
        f"Cannot estimate exposure for duration {duration_days} days: "
        "baseline daily traffic must be positive."
    )


def calculation_failed(warnings: List[str], what: str, duration_days: Optional[int] = None) -> None:
    suffix = f" for duration {duration_days} days" if duration_days is not None else ""
    warnings.append(f"Could not calculate a valid {what}{suffix}. Check inputs.")
