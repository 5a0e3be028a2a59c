"""Tests for the sample-size / MDE formulas"""

import math

import pytest

from abplan.critical_values import lookup_z_scores, z_alpha_over_2, z_beta
from abplan.formulas import (
    exposure_needed,
    mde_for_z,
    mde_from_sample_size,
    required_duration_days,
    sample_size_for_z,
    sample_size_from_mde,
    variance_for_binary,
)

Z_A = 1.96
Z_B = 0.84


# ============================================================================
# Critical Value Tests
# ============================================================================


def test_z_alpha_known_levels():
    """Test table values for recognized significance levels"""
    assert z_alpha_over_2(0.01) == 2.576
    assert z_alpha_over_2(0.05) == 1.96
    assert z_alpha_over_2(0.10) == 1.645


def test_z_beta_known_levels():
    """Test table values for recognized power levels"""
    assert z_beta(0.80) == 0.84
    assert z_beta(0.90) == 1.28
    assert z_beta(0.95) == 1.645


def test_z_scores_round_to_two_decimals():
    """Test lookup keys are rounded to two decimals"""
    assert z_alpha_over_2(0.0501) == 1.96
    assert z_beta(0.899) == 1.28


def test_z_scores_fall_back_to_defaults():
    """Test unknown levels fall back to alpha=0.05 / power=0.80"""
    assert z_alpha_over_2(0.2) == 1.96
    assert z_beta(0.85) == 0.84


def test_lookup_z_scores_reports_fallbacks():
    """Test fallbacks surface as warnings instead of silent substitution"""
    z_a, z_b, warnings = lookup_z_scores(0.2, 0.85)

    assert (z_a, z_b) == (1.96, 0.84)
    assert len(warnings) == 2
    assert "0.20" in warnings[0]
    assert "0.85" in warnings[1]


def test_lookup_z_scores_known_levels_no_warnings():
    """Test recognized levels produce no warnings"""
    _, _, warnings = lookup_z_scores(0.05, 0.8)
    assert warnings == []


def test_lookup_z_scores_exact():
    """Test exact mode uses the inverse normal CDF"""
    z_a, z_b, warnings = lookup_z_scores(0.05, 0.8, exact=True)

    assert z_a == pytest.approx(1.959964, abs=1e-5)
    assert z_b == pytest.approx(0.841621, abs=1e-5)
    assert warnings == []


# ============================================================================
# Sample Size / MDE Tests
# ============================================================================


def test_sample_size_concrete_scenario():
    """Test ceil(2 * 0.0475 * (2.8 / (0.10 * 0.05))^2) at power 0.8, alpha 0.05"""
    n = sample_size_from_mde(0.05, 0.0475, 0.10, 0.8, 0.05)
    assert n == 29792


def test_sample_size_is_ceiling():
    """Test fractional sample sizes round up, never to nearest"""
    # 2 * 2500 * (2.8 / 3)^2 = 4355.55...
    n = sample_size_from_mde(150, 2500, 0.02, 0.8, 0.05)
    assert n == 4356


def test_sample_size_uses_power_and_significance():
    """Test stricter levels pick larger table z-scores and a larger sample"""
    baseline = sample_size_from_mde(0.05, 0.0475, 0.10, 0.8, 0.05)
    strict = sample_size_from_mde(0.05, 0.0475, 0.10, 0.9, 0.01)

    assert strict == math.ceil(2 * 0.0475 * ((2.576 + 1.28) / 0.005) ** 2)
    assert strict > baseline


def test_sample_size_exact_z_scores():
    """Test exact mode resolves z-scores from the normal distribution"""
    n = sample_size_from_mde(0.05, 0.0475, 0.10, 0.8, 0.05, exact=True)
    assert n == pytest.approx(29826, abs=1)


def test_sample_size_invalid_levels_return_none():
    """Test power and significance outside (0, 1) give no result"""
    assert sample_size_from_mde(0.05, 0.0475, 0.10, 1.5, 0.05) is None
    assert sample_size_from_mde(0.05, 0.0475, 0.10, 0.8, 0.0) is None
    assert mde_from_sample_size(0.05, 0.0475, 1000, 0.8, math.nan) is None


def test_z_score_forms_match_public_operations():
    """Test the z-score forms agree with the power/significance forms"""
    assert sample_size_for_z(0.05, 0.0475, 0.10, Z_A, Z_B) == sample_size_from_mde(
        0.05, 0.0475, 0.10, 0.8, 0.05
    )
    assert mde_for_z(0.05, 0.0475, 29792, Z_A, Z_B) == mde_from_sample_size(
        0.05, 0.0475, 29792, 0.8, 0.05
    )


def test_mde_from_sample_size_value():
    """Test direct evaluation of the MDE formula"""
    mde = mde_from_sample_size(0.05, 0.0475, 29792, 0.8, 0.05)
    assert mde == pytest.approx(0.10, rel=1e-9)


@pytest.mark.parametrize(
    "mean,variance,mde",
    [
        (0.05, 0.0475, 0.10),
        (150, 2500, 0.02),
        (5.3, 10.8, 0.05),
        (0.11, 0.11 * 0.89, 0.01),
    ],
)
def test_round_trip_never_exceeds_original(mean, variance, mde):
    """Test MDE recovered from the rounded-up sample size is <= the original"""
    n = sample_size_from_mde(mean, variance, mde, 0.8, 0.05)
    recovered = mde_from_sample_size(mean, variance, n, 0.8, 0.05)

    assert recovered <= mde + 1e-12
    assert recovered == pytest.approx(mde, rel=0.01)


def test_sample_size_decreases_as_mde_increases():
    """Test monotonicity in MDE"""
    sizes = [sample_size_from_mde(0.05, 0.0475, m, 0.8, 0.05) for m in (0.01, 0.02, 0.05, 0.10)]
    assert all(a > b for a, b in zip(sizes, sizes[1:]))


def test_sample_size_increases_with_variance():
    """Test monotonicity in variance"""
    # 2 * v * 560^2 = 627200 * v
    sizes = [sample_size_from_mde(0.05, v, 0.10, 0.8, 0.05) for v in (0.01, 0.02, 0.04, 0.10)]
    assert sizes == [6272, 12544, 25088, 62720]


@pytest.mark.parametrize(
    "mean,variance,mde",
    [
        (0.0, 0.0475, 0.10),
        (-1.0, 0.0475, 0.10),
        (0.05, -0.1, 0.10),
        (0.05, 0.0475, 0.0),
        (0.05, 0.0, 0.10),
        (math.nan, 0.0475, 0.10),
        (0.05, math.inf, 0.10),
        (0.05, 1e308, 0.10),
    ],
)
def test_sample_size_degenerate_inputs_return_none(mean, variance, mde):
    """Test degenerate or non-finite inputs give no result instead of raising"""
    assert sample_size_from_mde(mean, variance, mde, 0.8, 0.05) is None


@pytest.mark.parametrize(
    "mean,variance,n",
    [
        (0.0, 0.0475, 1000),
        (0.05, -0.1, 1000),
        (0.05, 0.0, 1000),
        (1e-7, 0.0, 1000),
        (0.05, 0.0475, 0),
        (0.05, 0.0475, -5),
        (math.nan, 0.0475, 1000),
    ],
)
def test_mde_degenerate_inputs_return_none(mean, variance, n):
    """Test degenerate MDE inputs, including zero variance, give no result"""
    assert mde_from_sample_size(mean, variance, n, 0.8, 0.05) is None


# ============================================================================
# Binary Variance / Exposure Tests
# ============================================================================


def test_variance_for_binary_identity():
    """Test p * (1 - p) and its zeros at the ends of [0, 1]"""
    assert variance_for_binary(0.0) == 0.0
    assert variance_for_binary(1.0) == 0.0
    assert variance_for_binary(0.5) == 0.25
    assert variance_for_binary(0.3) == pytest.approx(0.3 * 0.7)


def test_exposure_needed():
    """Test exposure as a fraction of available users"""
    assert exposure_needed(100, 400) == 0.25
    assert exposure_needed(500, 400) == 1.25


def test_exposure_needed_undefined():
    """Test exposure is undefined for unknown or non-positive users"""
    assert exposure_needed(100, None) is None
    assert exposure_needed(100, 0) is None
    assert exposure_needed(100, -10) is None
    assert exposure_needed(None, 100) is None


def test_required_duration_days():
    """Test whole days needed to accrue a sample"""
    assert required_duration_days(1000, 100) == 10
    assert required_duration_days(1001, 100) == 11
    assert required_duration_days(1000, 0) is None
    assert required_duration_days(None, 100) is None
