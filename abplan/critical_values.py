from __future__ import annotations

from typing import Dict, List, Tuple

from scipy.stats import norm


# Two-tailed z-scores keyed by significance level (alpha).
Z_ALPHA_DIV_2: Dict[str, float] = {
    "0.01": 2.576,  # 99% confidence
    "0.05": 1.96,   # 95% confidence
    "0.10": 1.645,  # 90% confidence
}

# z-scores keyed by statistical power (1 - beta).
Z_BETA: Dict[str, float] = {
    "0.80": 0.84,
    "0.90": 1.28,
    "0.95": 1.645,
}

DEFAULT_ALPHA_KEY = "0.05"
DEFAULT_POWER_KEY = "0.80"


def _key(value: float) -> str:
    return f"{value:.2f}"


def z_alpha_over_2(significance_level: float) -> float:
    """Table z-score for alpha/2, falling back to alpha=0.05 for unknown levels."""
    return Z_ALPHA_DIV_2.get(_key(significance_level), Z_ALPHA_DIV_2[DEFAULT_ALPHA_KEY])


def z_beta(statistical_power: float) -> float:
    """Table z-score for power, falling back to power=0.80 for unknown levels."""
    return Z_BETA.get(_key(statistical_power), Z_BETA[DEFAULT_POWER_KEY])


def lookup_z_scores(
    significance_level: float,
    statistical_power: float,
    exact: bool = False,
) -> Tuple[float, float, List[str]]:
    """Return (z_alpha/2, z_beta, warnings).

    Table mode reports each fallback to the default key as a warning instead of
    substituting silently. Exact mode evaluates the inverse normal CDF and never
    falls back; it expects both inputs strictly inside (0, 1).
    """
    warnings: List[str] = []

    if exact:
        z_a = float(norm.ppf(1 - significance_level / 2))
        z_b = float(norm.ppf(statistical_power))
        return z_a, z_b, warnings

    alpha_key = _key(significance_level)
    if alpha_key not in Z_ALPHA_DIV_2:
        warnings.append(
            f"Z-score for significance level {alpha_key} not found; "
            f"using default for {DEFAULT_ALPHA_KEY}."
        )
    power_key = _key(statistical_power)
    if power_key not in Z_BETA:
        warnings.append(
            f"Z-score for statistical power {power_key} not found; "
            f"using default for {DEFAULT_POWER_KEY}."
        )

    return z_alpha_over_2(significance_level), z_beta(statistical_power), warnings
