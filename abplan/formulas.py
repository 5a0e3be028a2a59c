from __future__ import annotations

import math
from typing import Optional

from .critical_values import lookup_z_scores


def _finite(*values: float) -> bool:
    return all(v is not None and math.isfinite(v) for v in values)


def _ceil(value: float) -> int:
    # Absorb float noise so an exact integer like 29792.000000000004 stays 29792.
    return int(math.ceil(round(value, 9)))


def variance_for_binary(mean: float) -> float:
    """Bernoulli variance p * (1 - p)."""
    return mean * (1.0 - mean)


def _z_scores(statistical_power: float, significance_level: float, exact: bool):
    if not _finite(statistical_power, significance_level):
        return None
    if not (0 < statistical_power < 1 and 0 < significance_level < 1):
        return None
    z_a, z_b, _ = lookup_z_scores(significance_level, statistical_power, exact=exact)
    return z_a, z_b


def sample_size_from_mde(
    mean: float,
    variance: float,
    mde_relative: float,
    statistical_power: float,
    significance_level: float,
    exact: bool = False,
) -> Optional[int]:
    """Users per variant needed to detect a relative effect of ``mde_relative``.

    Resolves the z-scores for ``statistical_power`` and ``significance_level``
    (table lookup, or the inverse normal CDF when ``exact``) and delegates to
    :func:`sample_size_for_z`. Returns None for degenerate or non-finite inputs.
    """
    z = _z_scores(statistical_power, significance_level, exact)
    if z is None:
        return None
    return sample_size_for_z(mean, variance, mde_relative, *z)


def mde_from_sample_size(
    mean: float,
    variance: float,
    sample_size_per_variant: float,
    statistical_power: float,
    significance_level: float,
    exact: bool = False,
) -> Optional[float]:
    """Relative MDE (as a fraction) reachable with ``sample_size_per_variant`` users per arm."""
    z = _z_scores(statistical_power, significance_level, exact)
    if z is None:
        return None
    return mde_for_z(mean, variance, sample_size_per_variant, *z)


def sample_size_for_z(
    mean: float,
    variance: float,
    mde_relative: float,
    z_alpha: float,
    z_beta: float,
) -> Optional[int]:
    """n = 2 * variance * ((z_alpha + z_beta) / (mde_relative * mean)) ** 2, rounded up."""
    if not _finite(mean, variance, mde_relative, z_alpha, z_beta):
        return None
    if mean <= 0 or variance <= 0 or mde_relative <= 0:
        return None

    mde_absolute = mde_relative * mean
    if mde_absolute == 0:
        return None

    ratio = (z_alpha + z_beta) / mde_absolute
    # Multiplication overflows to inf instead of raising like ** does.
    n = 2.0 * variance * ratio * ratio
    if not math.isfinite(n) or n <= 0:
        return None
    return _ceil(n)


def mde_for_z(
    mean: float,
    variance: float,
    sample_size_per_variant: float,
    z_alpha: float,
    z_beta: float,
) -> Optional[float]:
    """(z_alpha + z_beta) * sqrt(2 * variance / n) / mean."""
    if not _finite(mean, variance, sample_size_per_variant, z_alpha, z_beta):
        return None
    if mean <= 0 or variance <= 0 or sample_size_per_variant <= 0:
        return None

    mde_relative = mde_absolute_for_z(variance, sample_size_per_variant, z_alpha, z_beta) / mean
    if not math.isfinite(mde_relative) or mde_relative <= 0:
        return None
    return mde_relative


def mde_absolute_for_z(
    variance: float,
    sample_size_per_variant: float,
    z_alpha: float,
    z_beta: float,
) -> Optional[float]:
    """Absolute MDE, usable when the mean is not positive and a relative MDE is meaningless."""
    if not _finite(variance, sample_size_per_variant, z_alpha, z_beta):
        return None
    if variance < 0 or sample_size_per_variant <= 0:
        return None
    return (z_alpha + z_beta) * math.sqrt(2.0 * variance / sample_size_per_variant)


def exposure_needed(
    total_sample_size_for_experiment: Optional[int],
    total_users_available: Optional[float],
) -> Optional[float]:
    """Fraction of available users the experiment would consume."""
    if total_sample_size_for_experiment is None or total_users_available is None:
        return None
    if not _finite(total_sample_size_for_experiment, total_users_available):
        return None
    if total_users_available <= 0:
        return None
    return total_sample_size_for_experiment / total_users_available


def required_duration_days(
    total_sample_size_for_experiment: Optional[int],
    daily_traffic: Optional[float],
) -> Optional[int]:
    """Whole days needed to accrue the total sample at ``daily_traffic`` users/day."""
    if total_sample_size_for_experiment is None or daily_traffic is None:
        return None
    if not _finite(total_sample_size_for_experiment, daily_traffic) or daily_traffic <= 0:
        return None
    return _ceil(total_sample_size_for_experiment / daily_traffic)
